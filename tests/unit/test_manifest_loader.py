"""
Unit tests for loading manifests from disk.
"""

import pytest

from archetype_engine.errors import ManifestLoadError
from archetype_engine.manifest import load_manifest


class TestLoadManifest:
    """Test JSON and YAML manifest loading."""

    def test_json(self, write_manifest, blog_manifest):
        """Test a JSON manifest round-trips to the same descriptor."""
        assert load_manifest(write_manifest(blog_manifest)) == blog_manifest

    @pytest.mark.parametrize("suffix", [".yaml", ".yml"])
    def test_yaml(self, write_manifest, blog_manifest, suffix):
        """Test both YAML suffixes are accepted."""
        assert load_manifest(write_manifest(blog_manifest, suffix=suffix)) == blog_manifest

    def test_missing_file(self, temp_output_dir):
        """Test a missing file raises ManifestLoadError."""
        with pytest.raises(ManifestLoadError) as exc_info:
            load_manifest(temp_output_dir / "nope.json")
        assert exc_info.value.path.endswith("nope.json")

    def test_unsupported_suffix(self, temp_output_dir):
        """Test only .json, .yaml and .yml are read."""
        path = temp_output_dir / "manifest.toml"
        path.write_text("entities = []")
        with pytest.raises(ManifestLoadError, match="unsupported file type"):
            load_manifest(path)

    def test_parse_error(self, temp_output_dir):
        """Test malformed JSON is reported with the parser message."""
        path = temp_output_dir / "manifest.json"
        path.write_text("{\"entities\": [")
        with pytest.raises(ManifestLoadError, match="parse error"):
            load_manifest(path)

    def test_top_level_must_be_object(self, temp_output_dir):
        """Test a YAML list at the top level is rejected."""
        path = temp_output_dir / "manifest.yaml"
        path.write_text("- name: User\n")
        with pytest.raises(ManifestLoadError, match="top-level value must be an object"):
            load_manifest(path)
