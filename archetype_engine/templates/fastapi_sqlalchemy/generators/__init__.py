"""Generators of the fastapi-sqlalchemy template, one module per artifact."""

from .auth import generate_auth
from .client import generate_client
from .hooks import generate_hooks
from .models import generate_models
from .openapi import generate_openapi
from .routers import generate_routers
from .schemas import generate_schemas
from .seed import generate_seed
from .services import generate_services
from .suite import generate_test_suite

__all__ = [
    "generate_auth",
    "generate_client",
    "generate_hooks",
    "generate_models",
    "generate_openapi",
    "generate_routers",
    "generate_schemas",
    "generate_seed",
    "generate_services",
    "generate_test_suite",
]
