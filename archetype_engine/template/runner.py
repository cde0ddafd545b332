"""
Template runner.

Runs the generators of a Template against a ManifestIR:

    1. build the shared GeneratorContext
    2. filter generators by the IR's mode (declared order is kept)
    3. run every remaining generator in order, buffering its files
    4. call the template's post_generate hook with the full file set
    5. persist every file through a FileWriter (skipped on dry-run)

Nothing is written until every generator has succeeded. A failing generator
raises GeneratorError carrying the files produced before it; a failing write
raises PersistenceError listing the files already on disk.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from archetype_engine.errors import GeneratorError
from archetype_engine.gen_logging import generator_scope, get_logger
from archetype_engine.ir import ManifestIR, compile_manifest
from archetype_engine.ir.mode import ResolvedMode
from archetype_engine.template.context import GeneratorContext, create_context
from archetype_engine.template.registry import get_default_template_id, get_template
from archetype_engine.template.types import GeneratedFile, Template
from archetype_engine.template.writer import FileSystemWriter

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunResult:
    """
    Attributes:
        files: Every generated file in production order
        skipped: Names of generators excluded by the mode
        written: Paths persisted by the writer (empty on dry-run)
    """

    files: Tuple[GeneratedFile, ...]
    skipped: Tuple[str, ...] = ()
    written: Tuple[str, ...] = ()

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(f.path for f in self.files)

    def file(self, path: str) -> Optional[GeneratedFile]:
        for f in self.files:
            if f.path == path:
                return f
        return None


def select_generators(template: Template, mode: ResolvedMode) -> tuple:
    """Split a template's generators into (selected, skipped), both in declared order."""
    selected, skipped = [], []
    for generator in template.generators:
        (selected if mode.allows(generator.category) else skipped).append(generator)
    return tuple(selected), tuple(skipped)


def _collect(files: list, seen: dict, produced: list, owner: str) -> None:
    for f in produced:
        if not isinstance(f, GeneratedFile):
            raise GeneratorError(owner, f"returned {type(f).__name__} instead of GeneratedFile", files)
        if f.path in seen:
            raise GeneratorError(
                owner,
                f"output path '{f.path}' was already produced by '{seen[f.path]}'",
                files,
            )
        seen[f.path] = owner
        files.append(f)


def _run_generators(template: Template, ir: ManifestIR, ctx: GeneratorContext, generators) -> list:
    files, seen = [], {}
    total = len(generators)
    for index, generator in enumerate(generators, 1):
        logger.info(f"[{index}/{total}] {generator.name} ({generator.category or 'uncategorized'})")
        try:
            with generator_scope(generator.name):
                produced = generator.run(ir, ctx)
        except GeneratorError:
            raise
        except Exception as e:
            raise GeneratorError(generator.name, str(e), files) from e
        _collect(files, seen, produced, generator.name)
        logger.debug(f"    {len(produced)} file(s)")

    if template.post_generate is not None:
        try:
            with generator_scope("post_generate"):
                extra = template.post_generate(ir, ctx, tuple(files)) or []
        except Exception as e:
            raise GeneratorError("post_generate", str(e), files) from e
        _collect(files, seen, list(extra), "post_generate")
    return files


def run_template(
    template: Template,
    ir: ManifestIR,
    output_dir=None,
    dry_run: bool = False,
    writer=None,
) -> RunResult:
    """
    Run a template against an IR.

    Args:
        template: Template to run
        ir: Compiled manifest; never mutated
        output_dir: Base directory for FileSystemWriter; defaults to the
            template's configured output_dir
        dry_run: Run every generator but persist nothing
        writer: Custom FileWriter; overrides output_dir

    Returns:
        RunResult

    Raises:
        GeneratorError: a generator raised or produced a conflicting path
        PersistenceError: writing a file failed
    """
    ctx = create_context(ir, template.default_config, template.metadata)
    selected, skipped = select_generators(template, ir.mode)

    logger.info(f"Template '{template.id}', mode '{ir.mode.kind.value}'")
    for generator in skipped:
        logger.debug(f"  skipping {generator.name} (category '{generator.category}' not in mode)")

    files = _run_generators(template, ir, ctx, selected)

    written = ()
    if dry_run:
        logger.info(f"Dry run: {len(files)} file(s) generated, nothing written")
    else:
        if writer is None:
            writer = FileSystemWriter(Path(output_dir or template.default_config.output_dir))
        for f in files:
            writer.write(f.path, f.content)
        written = tuple(f.path for f in files)
        logger.info(f"Wrote {len(written)} file(s)")

    return RunResult(
        files=tuple(files),
        skipped=tuple(g.name for g in skipped),
        written=written,
    )


def generate(
    manifest: dict,
    template_id: str = None,
    output_dir=None,
    dry_run: bool = False,
    writer=None,
    naming_config=None,
) -> RunResult:
    """
    Compile `manifest` and run a registered template against it.

    The template id is taken from the argument, then the manifest's
    `template` key, then the configured default.

    Raises:
        ManifestCompileError: the manifest does not validate
        TemplateNotFoundError: the template id is not registered
    """
    ir = compile_manifest(manifest, naming_config)
    template = get_template(template_id or ir.template or get_default_template_id())
    return run_template(template, ir, output_dir=output_dir, dry_run=dry_run, writer=writer)
