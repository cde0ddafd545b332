"""
Pytest configuration and shared fixtures for the archetype engine test suite.
"""

import copy
import json
import shutil
import tempfile
from pathlib import Path

import pytest
import yaml

from archetype_engine.ir import compile_manifest
from archetype_engine.template import get_template, run_template


BLOG_MANIFEST = {
    "entities": [
        {
            "name": "Post",
            "fields": {"title": {"type": "text", "required": True}},
            "relations": {"author": {"type": "hasOne", "entity": "User"}},
        },
        {
            "name": "User",
            "fields": {"email": {"type": "text", "required": True, "unique": True}},
        },
    ],
    "database": {"type": "sqlite", "file": "./app.db"},
}


STORE_MANIFEST = {
    "auth": {"enabled": True, "providers": ["credentials"]},
    "database": {"type": "postgres", "url": "env:DATABASE_URL"},
    "defaults": {"timestamps": True},
    "entities": [
        {
            "name": "Customer",
            "fields": {
                "email": {"type": "text", "email": True, "unique": True, "lowercase": True},
                "fullName": {"type": "text", "min": 2, "max": 80, "trim": True, "label": "Full name"},
                "website": {"type": "text", "url": True, "optional": True},
            },
            "relations": {"orders": {"type": "hasMany", "entity": "Order"}},
            "protected": "write",
        },
        {
            "name": "Order",
            "fields": {
                "status": {"type": "text", "oneOf": ["pending", "paid", "shipped"], "default": "pending"},
                "total": {"type": "number", "positive": True},
                "quantity": {"type": "number", "integer": True, "min": 1, "max": 50},
                "gift": {"type": "boolean", "default": False},
            },
            "relations": {
                "customer": {"type": "hasOne", "entity": "Customer"},
                "tags": {"type": "belongsToMany", "entity": "Tag", "through": {"fields": {"note": {"type": "text", "optional": True}}}},
            },
            "behaviors": {"softDelete": True, "audit": True},
            "hooks": {"beforeCreate": True, "afterRemove": True},
        },
        {
            "name": "Tag",
            "fields": {"label": {"type": "text", "unique": True}},
            "relations": {"orders": {"type": "belongsToMany", "entity": "Order"}},
            "protected": False,
        },
        {
            "name": "Product",
            "fields": {
                "sku": {"type": "text", "primaryKey": True},
                "price": {"type": "number"},
            },
            "source": {
                "baseUrl": "env:CATALOG_API_URL",
                "pathPrefix": "/v1",
                "auth": {"type": "bearer"},
                "override": {"get": "GET /items/:sku"},
            },
            "protected": {"create": True},
        },
    ],
}


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def examples_dir(project_root):
    """Return the examples directory."""
    return project_root / "examples"


@pytest.fixture
def temp_output_dir():
    """Create a temporary directory for generated code output."""
    temp_dir = tempfile.mkdtemp(prefix="archetype_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def blog_manifest():
    """Return the minimal Post/User manifest (fresh copy per test)."""
    return copy.deepcopy(BLOG_MANIFEST)


@pytest.fixture
def store_manifest():
    """Return a manifest exercising auth, every relation kind, behaviors, hooks and an external source."""
    return copy.deepcopy(STORE_MANIFEST)


@pytest.fixture
def blog_ir(blog_manifest):
    """Return the compiled Post/User IR."""
    return compile_manifest(blog_manifest)


@pytest.fixture
def store_ir(store_manifest):
    """Return the compiled store IR."""
    return compile_manifest(store_manifest)


@pytest.fixture(scope="session")
def fastapi_template():
    """Return the built-in fastapi-sqlalchemy template."""
    return get_template("fastapi-sqlalchemy")


@pytest.fixture
def dry_run(fastapi_template):
    """Factory fixture: compile a manifest and dry-run the built-in template on it."""

    def _dry_run(manifest):
        return run_template(fastapi_template, compile_manifest(manifest), dry_run=True)

    return _dry_run


@pytest.fixture
def write_manifest(temp_output_dir):
    """Factory fixture: write a manifest to disk as .json or .yaml and return its path."""

    def _write(manifest, suffix=".json"):
        path = temp_output_dir / f"manifest{suffix}"
        if suffix == ".json":
            path.write_text(json.dumps(manifest), encoding="utf-8")
        else:
            path.write_text(yaml.safe_dump(manifest), encoding="utf-8")
        return path

    return _write
