"""
fastapi-sqlalchemy template.

Targets a FastAPI application with SQLAlchemy 2.0 models, Pydantic v2
schemas and an httpx client. Generators run in this order; later ones rely
on the module layout of earlier ones (routers import services and schemas,
services import models).

Hook stubs and auth dependencies carry the category of the modules that
import them, so a mode never keeps an importer and drops its import.
"""

from pathlib import PurePosixPath

from archetype_engine.template.types import (
    GeneratedFile,
    Generator,
    Template,
    TemplateConfig,
    TemplateMetadata,
)
from archetype_engine.templates.fastapi_sqlalchemy.builders import HEADER
from archetype_engine.templates.fastapi_sqlalchemy.generators import (
    generate_auth,
    generate_client,
    generate_hooks,
    generate_models,
    generate_openapi,
    generate_routers,
    generate_schemas,
    generate_seed,
    generate_services,
    generate_test_suite,
)
from archetype_engine.templates.fastapi_sqlalchemy.rendering import render

PACKAGE = "app"

METADATA = TemplateMetadata(
    id="fastapi-sqlalchemy",
    name="FastAPI + SQLAlchemy",
    description="SQLAlchemy models, Pydantic schemas, services, FastAPI routers and an httpx client",
    framework="fastapi",
    stack={"orm": "sqlalchemy", "validation": "pydantic", "api": "fastapi", "client": "httpx"},
)

CONFIG = TemplateConfig(
    output_dir=PACKAGE,
    package=PACKAGE,
    import_aliases={
        "@models": f"{PACKAGE}.db.models",
        "@database": f"{PACKAGE}.db.session",
        "@schemas": f"{PACKAGE}.schemas",
        "@services": f"{PACKAGE}.services",
        "@hooks": f"{PACKAGE}.hooks",
        "@auth": f"{PACKAGE}.api.auth",
        "@routers": f"{PACKAGE}.api.routers",
        "@client": f"{PACKAGE}.client",
    },
)

GENERATORS = (
    Generator("sqlalchemy-models", "schema", "SQLAlchemy models and database session", generate_models),
    Generator("auth-dependencies", "api", "FastAPI authentication dependencies", generate_auth),
    Generator("pydantic-schemas", "validation", "Pydantic Create/Update/Read schemas", generate_schemas),
    Generator("service-layer", "services", "Entity services (database, external or in-memory)", generate_services),
    Generator("crud-hooks", "services", "CRUD hook stubs", generate_hooks),
    Generator("fastapi-routers", "api", "FastAPI routers and application entry point", generate_routers),
    Generator("openapi-spec", "api", "OpenAPI 3 specification", generate_openapi),
    Generator("http-client", "client", "httpx API client", generate_client),
    Generator("seed-data", "seed", "Deterministic seed data", generate_seed),
    Generator("pytest-suite", "api", "pytest suite exercising the generated API", generate_test_suite),
)


def _package_dirs(files) -> list:
    """Every directory holding generated Python modules, plus their parents, root first."""
    dirs = {""}
    for f in files:
        path = PurePosixPath(f.path)
        if path.suffix != ".py":
            continue
        for parent in path.parents:
            dirs.add("" if str(parent) == "." else str(parent))
    return sorted(dirs, key=lambda d: (d.count("/") if d else -1, d))


def _parent(directory: str) -> str:
    return directory.rsplit("/", 1)[0] if "/" in directory else ""


def post_generate(ir, ctx, files) -> list:
    """Assemble `__init__.py` index files for every generated package directory."""
    existing = {f.path for f in files}
    dirs = _package_dirs(files)
    extra = []
    for directory in dirs:
        init_path = f"{directory}/__init__.py" if directory else "__init__.py"
        if init_path in existing:
            continue
        prefix = f"{directory}/" if directory else ""
        modules = sorted(
            PurePosixPath(f.path).stem
            for f in files
            if f.path.startswith(prefix)
            and f.path.endswith(".py")
            and "/" not in f.path[len(prefix):]
        )
        subpackages = sorted(
            d.rsplit("/", 1)[-1]
            for d in dirs
            if d and _parent(d) == directory
        )
        package = ".".join([ctx.package] + ([directory.replace("/", ".")] if directory else []))
        content = render(
            "package_init.py.jinja",
            header=HEADER,
            package=package,
            modules=modules,
            subpackages=subpackages,
        )
        extra.append(GeneratedFile(path=init_path, content=content))
    return extra


TEMPLATE = Template(
    metadata=METADATA,
    default_config=CONFIG,
    generators=GENERATORS,
    post_generate=post_generate,
)
