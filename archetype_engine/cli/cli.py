import json
from datetime import date
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from archetype_engine.config import get_settings
from archetype_engine.errors import ArchetypeError, GeneratorError, PersistenceError
from archetype_engine.gen_logging import configure_gen_logging
from archetype_engine.ir import compile_manifest
from archetype_engine.manifest import load_manifest
from archetype_engine.template import get_template, list_templates, run_template
from archetype_engine.validation import validate_manifest

console = Console()
err_console = Console(stderr=True)


def _stamp() -> str:
    return f"[{date.today().strftime('%Y-%m-%d')}]"


def _print_issues(title: str, issues, style: str):
    table = Table(title=title, title_style=style, show_lines=False)
    table.add_column("Code", style=style, no_wrap=True)
    table.add_column("Path")
    table.add_column("Message")
    table.add_column("Suggestion", style="dim")
    for issue in issues:
        table.add_row(issue.code.value, issue.path, issue.message, issue.suggestion or "")
    console.print(table)


@click.group()
@click.pass_context
def cli(context):
    context.ensure_object(dict)


@cli.command("validate", help="Validate a manifest and report every error in one pass.")
@click.pass_context
@click.argument("manifest_path")
@click.option("--json", "as_json", is_flag=True, help="Print the validation result as JSON.")
def validate(context, manifest_path, as_json):
    try:
        manifest = load_manifest(manifest_path)
    except ArchetypeError as e:
        err_console.print(f"{_stamp()} {e}", style="red")
        context.exit(1)

    result = validate_manifest(manifest)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        context.exit(0 if result.valid else 1)

    if result.errors:
        _print_issues("Errors", result.errors, "red")
    if result.warnings:
        _print_issues("Warnings", result.warnings, "yellow")

    if result.valid:
        console.print(f"{_stamp()} Manifest validation success!", style="green")
        context.exit(0)
    console.print(f"{_stamp()} Validation failed with {len(result.errors)} error(s).", style="red")
    context.exit(1)


@cli.command("generate", help="Compile a manifest and run a template against it.")
@click.pass_context
@click.argument("manifest_path")
@click.option("--template", "-t", "template_id", default=None, help="Template id (default: manifest 'template' or ARCHETYPE_DEFAULT_TEMPLATE).")
@click.option("--out", "out_dir", default=None, help="Output directory (default: the template's output dir).")
@click.option("--dry-run", is_flag=True, help="Run every generator but write nothing.")
@click.option("--verbose", "-v", is_flag=True, help="Log every generator and file.")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors.")
def generate(context, manifest_path, template_id, out_dir, dry_run, verbose, quiet):
    configure_gen_logging(verbose=verbose, quiet=quiet)
    settings = get_settings()

    try:
        manifest = load_manifest(manifest_path)
        result = validate_manifest(manifest)
        if not result.valid:
            _print_issues("Errors", result.errors, "red")
            console.print(f"{_stamp()} Validation failed with {len(result.errors)} error(s).", style="red")
            context.exit(1)

        ir = compile_manifest(manifest)
        template = get_template(template_id or ir.template or settings.DEFAULT_TEMPLATE)
        out_path = Path(out_dir or settings.OUTPUT_DIR or template.default_config.output_dir).resolve()
        run = run_template(template, ir, output_dir=out_path, dry_run=dry_run)
    except GeneratorError as e:
        err_console.print(f"{_stamp()} {e}", style="red")
        if e.partial_files:
            err_console.print(f"  {len(e.partial_files)} file(s) were produced before the failure; nothing was written.")
        context.exit(1)
    except PersistenceError as e:
        err_console.print(f"{_stamp()} {e}", style="red")
        for path in e.written:
            err_console.print(f"  written: {path}", style="dim")
        context.exit(1)
    except ArchetypeError as e:
        err_console.print(f"{_stamp()} {e}", style="red")
        context.exit(1)

    if dry_run:
        for f in run.files:
            console.print(f"  {f.path} ({len(f.content)} bytes)")
        console.print(f"{_stamp()} Dry run: {len(run.files)} file(s) generated, nothing written.", style="yellow")
    else:
        console.print(f"{_stamp()} Generated {len(run.written)} file(s) in {out_path}", style="green")
    if run.skipped:
        console.print(f"  Skipped by mode '{ir.mode.kind.value}': {', '.join(run.skipped)}", style="dim")
    context.exit(0)


@cli.command("templates", help="List registered templates.")
def templates():
    table = Table(title="Templates")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Framework")
    table.add_column("Description")
    for metadata in list_templates():
        table.add_row(metadata.id, metadata.name, metadata.framework, metadata.description)
    console.print(table)


def main():
    cli(prog_name="archetype")
