"""
Integration tests that import and exercise the generated application.

These need the generated app's own stack (FastAPI, SQLAlchemy, httpx and
PyJWT, all in the `test` extra) and are skipped without it.
"""

import importlib
import subprocess
import sys

import pytest

from archetype_engine.ir import compile_manifest
from archetype_engine.template import run_template

pytest.importorskip("fastapi")
pytest.importorskip("sqlalchemy")
pytest.importorskip("httpx")
pytest.importorskip("jwt")


def _purge_app_modules():
    for name in list(sys.modules):
        if name == "app" or name.startswith("app."):
            del sys.modules[name]


@pytest.fixture
def generated_app(temp_output_dir, fastapi_template, monkeypatch):
    """Factory fixture: generate a manifest under <tmp>/app and make `app` importable."""

    def _generate(manifest):
        run_template(fastapi_template, compile_manifest(manifest), output_dir=temp_output_dir / "app")
        return temp_output_dir

    _purge_app_modules()
    monkeypatch.syspath_prepend(str(temp_output_dir))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{temp_output_dir / 'test.db'}")
    yield _generate
    _purge_app_modules()


def _run_generated_suite(root):
    completed = subprocess.run(
        [sys.executable, "-m", "pytest", "-q", "-p", "no:cacheprovider", str(root / "app" / "tests")],
        cwd=root,
        capture_output=True,
        text=True,
    )
    assert completed.returncode == 0, completed.stdout + completed.stderr


class TestGeneratedApplication:
    """Test the generated blog application imports, maps and serves requests."""

    def test_models_map(self, generated_app, blog_manifest):
        """Test every generated model module imports and its mappers configure."""
        from sqlalchemy.orm import configure_mappers

        generated_app(blog_manifest)
        models = importlib.import_module("app.db.models")
        configure_mappers()
        assert set(models.Base.metadata.tables) == {"posts", "users"}

    def test_crud_round_trip(self, generated_app, blog_manifest):
        """Test seeding and CRUD requests through the generated routers."""
        from fastapi.testclient import TestClient

        generated_app(blog_manifest)
        main = importlib.import_module("app.main")
        seed = importlib.import_module("app.db.seed")
        session = importlib.import_module("app.db.session")

        with TestClient(main.app) as client:
            with session.SessionLocal() as s:
                seed.seed(s)
            assert len(client.get("/users").json()) == seed.SEED_COUNT

            user = client.post("/users", json={"email": "ada@example.com"})
            assert user.status_code == 201, user.text
            post = client.post("/posts", json={"title": "Hello", "authorId": user.json()["id"]})
            assert post.status_code == 201, post.text
            post_id = post.json()["id"]

            assert client.get(f"/posts/{post_id}").json()["title"] == "Hello"
            updated = client.put(f"/posts/{post_id}", json={"title": "Hello again"})
            assert updated.json()["title"] == "Hello again"
            assert client.delete(f"/posts/{post_id}").status_code == 204
            assert client.get(f"/posts/{post_id}").status_code == 404

    def test_validation_errors(self, generated_app, blog_manifest):
        """Test a payload missing a required field is rejected."""
        from fastapi.testclient import TestClient

        generated_app(blog_manifest)
        main = importlib.import_module("app.main")
        with TestClient(main.app) as client:
            assert client.post("/posts", json={"title": "Orphan"}).status_code == 422


class TestGeneratedSuite:
    """Test the emitted pytest suite passes against the application it was generated with."""

    def test_blog_suite(self, generated_app, blog_manifest):
        """Test the blog suite."""
        _run_generated_suite(generated_app(blog_manifest))

    def test_store_suite(self, generated_app, store_manifest, monkeypatch):
        """Test the store suite with auth, rules, hooks and an external entity."""
        monkeypatch.delenv("DATABASE_URL")
        _run_generated_suite(generated_app(store_manifest))

    def test_headless_suite(self, generated_app):
        """Test the suite against in-memory services."""
        manifest = {
            "mode": "headless",
            "auth": {"enabled": True, "providers": ["credentials"]},
            "entities": [
                {
                    "name": "Item",
                    "fields": {
                        "title": {"type": "text", "max": 40},
                        "price": {"type": "number", "integer": True, "min": 0},
                    },
                    "behaviors": {"softDelete": True},
                    "protected": "write",
                    "hooks": True,
                },
            ],
        }
        _run_generated_suite(generated_app(manifest))
