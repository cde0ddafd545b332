"""Load manifest descriptors from JSON or YAML files."""

import json
from pathlib import Path

import yaml

from archetype_engine.errors import ManifestLoadError

_YAML_SUFFIXES = (".yaml", ".yml")


def load_manifest(path) -> dict:
    """
    Read a manifest descriptor from `path`.

    `.json` files are parsed as JSON, `.yaml`/`.yml` files with PyYAML. The
    result is the raw descriptor; it has not been validated.

    Raises:
        ManifestLoadError: the file is missing, unreadable, malformed or does
            not contain an object at the top level
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestLoadError(path, e.strerror or str(e)) from e

    suffix = path.suffix.lower()
    try:
        if suffix in _YAML_SUFFIXES:
            data = yaml.safe_load(text)
        elif suffix == ".json":
            data = json.loads(text)
        else:
            raise ManifestLoadError(path, f"unsupported file type '{suffix}' (use .json, .yaml or .yml)")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ManifestLoadError(path, f"parse error: {e}") from e

    if not isinstance(data, dict):
        raise ManifestLoadError(path, "top-level value must be an object")
    return data
