"""
Integration tests for the archetype command-line interface.
"""

import json
import logging

import pytest
from click.testing import CliRunner

from archetype_engine.cli.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_gen_logging():
    """Drop handlers bound to the runner's captured streams after each test."""
    yield
    logger = logging.getLogger("archetype.gen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True


class TestValidateCommand:
    """Test `archetype validate`."""

    def test_valid_manifest(self, runner, write_manifest, blog_manifest):
        """Test a valid manifest exits 0."""
        result = runner.invoke(cli, ["validate", str(write_manifest(blog_manifest))])
        assert result.exit_code == 0
        assert "Manifest validation success!" in result.output

    def test_invalid_manifest(self, runner, write_manifest):
        """Test an invalid manifest exits 1 and reports the failure count."""
        manifest = {
            "entities": [{"name": "user", "fields": {"Email": {"type": "text"}}, "relations": {"org": {"type": "hasOne", "entity": "Org"}}}],
            "database": {"type": "sqlite", "file": "./app.db"},
        }
        result = runner.invoke(cli, ["validate", str(write_manifest(manifest))])
        assert result.exit_code == 1
        assert "Validation failed with 3 error(s)." in result.output

    def test_json_output(self, runner, write_manifest):
        """Test --json prints the structured result."""
        manifest = {"entities": [{"name": "Post", "fields": {"title": {"type": "text"}}, "protected": "all"}], "database": {"type": "sqlite", "file": "./app.db"}}
        result = runner.invoke(cli, ["validate", str(write_manifest(manifest)), "--json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["valid"] is False
        assert [e["code"] for e in data["errors"]] == ["AUTH_REQUIRED_FOR_PROTECTED"]
        assert data["errors"][0]["path"] == "Post.protected"

    def test_yaml_manifest(self, runner, write_manifest, store_manifest):
        """Test YAML manifests are accepted."""
        result = runner.invoke(cli, ["validate", str(write_manifest(store_manifest, suffix=".yaml")), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["valid"] is True

    def test_missing_file(self, runner, temp_output_dir):
        """Test an unreadable manifest exits 1."""
        result = runner.invoke(cli, ["validate", str(temp_output_dir / "missing.json")])
        assert result.exit_code == 1
        assert "Cannot load manifest" in result.output


class TestGenerateCommand:
    """Test `archetype generate`."""

    def test_dry_run(self, runner, write_manifest, blog_manifest, temp_output_dir):
        """Test --dry-run lists files and writes nothing."""
        out = temp_output_dir / "app"
        result = runner.invoke(cli, ["generate", str(write_manifest(blog_manifest)), "--out", str(out), "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "db/models.py" in result.output
        assert "Dry run:" in result.output
        assert not out.exists()

    def test_writes_files(self, runner, write_manifest, blog_manifest, temp_output_dir):
        """Test generation writes the application package."""
        out = temp_output_dir / "app"
        result = runner.invoke(cli, ["generate", str(write_manifest(blog_manifest)), "--out", str(out), "-q"])
        assert result.exit_code == 0, result.output
        assert (out / "db" / "models.py").exists()
        assert (out / "main.py").exists()
        assert (out / "__init__.py").exists()

    def test_invalid_manifest_is_not_generated(self, runner, write_manifest, temp_output_dir):
        """Test generation stops on validation errors."""
        out = temp_output_dir / "app"
        result = runner.invoke(cli, ["generate", str(write_manifest({"entities": []})), "--out", str(out)])
        assert result.exit_code == 1
        assert not out.exists()

    def test_unknown_template(self, runner, write_manifest, blog_manifest, temp_output_dir):
        """Test an unknown template id exits 1."""
        result = runner.invoke(cli, [
            "generate", str(write_manifest(blog_manifest)),
            "--template", "django-orm",
            "--out", str(temp_output_dir / "app"),
        ])
        assert result.exit_code == 1
        assert "django-orm" in result.output

    def test_skipped_generators_reported(self, runner, write_manifest, temp_output_dir):
        """Test generators excluded by the mode are listed."""
        manifest = {"mode": "headless", "entities": [{"name": "Item", "fields": {"title": {"type": "text"}}}]}
        result = runner.invoke(cli, ["generate", str(write_manifest(manifest)), "--out", str(temp_output_dir / "app"), "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "sqlalchemy-models" in result.output


class TestTemplatesCommand:
    """Test `archetype templates`."""

    def test_lists_builtin_template(self, runner):
        """Test the built-in template is listed."""
        result = runner.invoke(cli, ["templates"])
        assert result.exit_code == 0
        assert "fastapi-sqlalchemy" in result.output
