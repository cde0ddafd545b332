"""
SQLAlchemy model generation (category: schema).

Emits `db/models.py` (declarative models, association tables for join
entities) and `db/session.py` (engine and session dependency). External
entities get no table; keys pointing at them are plain columns.
"""

from archetype_engine.gen_logging import get_logger
from archetype_engine.ir.models import FieldOrigin
from archetype_engine.kinds import FieldKind, RelationKind
from archetype_engine.template.types import GeneratedFile
from archetype_engine.templates.fastapi_sqlalchemy.builders import HEADER, database_entity_names
from archetype_engine.templates.fastapi_sqlalchemy.rendering import py_type, render, sql_type

logger = get_logger(__name__)

_DEFAULT_URLS = {
    "sqlite": "sqlite:///./app.db",
    "postgres": "postgresql+psycopg://localhost/app",
    "mysql": "mysql+pymysql://localhost/app",
}


def _column_default(field):
    if field.primary_key and field.kind is FieldKind.TEXT and field.default is None:
        return "_new_id"
    if field.origin is FieldOrigin.BEHAVIOR and field.name in ("createdAt", "updatedAt"):
        return "_utcnow"
    if field.default is not None and field.kind is not FieldKind.DATE:
        return repr(field.default)
    return None


def _column_config(field, db_names: set, dialect: str) -> dict:
    fk = None
    if field.references is not None and field.references.entity in db_names:
        fk = f"{field.references.table}.{field.references.column}"
    return {
        "attr": field.name,
        "column": field.column,
        "sql_type": sql_type(field, dialect),
        "py_type": py_type(field),
        "nullable": field.nullable,
        "unique": field.unique and not field.primary_key,
        "primary_key": field.primary_key,
        "fk": fk,
        "default": _column_default(field),
        "onupdate": "_utcnow" if field.origin is FieldOrigin.BEHAVIOR and field.name == "updatedAt" else None,
    }


def _join_var(join) -> str:
    return f"{join.module}_table"


def _relationship_configs(ir, entity, db_names: set, claimed_joins: set) -> list:
    configs = []
    for relation in entity.relations:
        if relation.target not in db_names:
            continue

        if relation.kind is RelationKind.BELONGS_TO_MANY:
            join = ir.join_entity(relation.join_entity)
            if entity.name not in db_names or join.left not in db_names or join.right not in db_names:
                continue
            args = [f"secondary={_join_var(join)}"]
            if join.self_referential:
                pk = entity.primary_key
                args.append(f"primaryjoin=lambda: {entity.name}.{pk.name} == {_join_var(join)}.c.{join.left_key.column}")
                args.append(f"secondaryjoin=lambda: {entity.name}.{pk.name} == {_join_var(join)}.c.{join.right_key.column}")
            if join.name in claimed_joins:
                args.append("viewonly=True")
            claimed_joins.add(join.name)
            configs.append({"attr": relation.accessor, "target": relation.target, "many": True, "args": args})
            continue

        args = [f'foreign_keys="{relation.key_owner}.{relation.key_field}"']
        if not relation.is_many:
            args.append("uselist=False")
            if relation.target == entity.name and relation.key_owner == entity.name:
                args.append(f'remote_side="{entity.name}.{entity.primary_key.name}"')
        if relation.is_many or relation.inverse:
            args.append("viewonly=True")
        configs.append({"attr": relation.accessor, "target": relation.target, "many": relation.is_many, "args": args})
    return configs


def _join_configs(ir, db_names: set, dialect: str) -> list:
    joins = []
    for join in ir.join_entities:
        if join.left not in db_names or join.right not in db_names:
            continue
        columns = []
        for key in (join.left_key, join.right_key):
            column = _column_config(key, db_names, dialect)
            column["primary_key"] = True
            columns.append(column)
        columns += [_column_config(f, db_names, dialect) for f in join.pivot_fields]
        joins.append({"name": join.name, "var": _join_var(join), "table": join.table, "columns": columns})
    return joins


def _database_url(ctx) -> dict:
    database = ctx.database
    if database is None:
        logger.warning(f"No database configured; session defaults to {_DEFAULT_URLS['sqlite']} (override with DATABASE_URL)")
        return {"env": "DATABASE_URL", "default": _DEFAULT_URLS["sqlite"], "sqlite": True}
    if database.is_sqlite:
        return {"env": "DATABASE_URL", "default": f"sqlite:///{database.file}", "sqlite": True}
    if database.url_env:
        return {"env": database.url_env, "default": None, "sqlite": False}
    return {"env": "DATABASE_URL", "default": database.url or _DEFAULT_URLS[database.kind.value], "sqlite": False}


def generate_models(ir, ctx) -> list:
    """Generate db/models.py and db/session.py."""
    db_names = database_entity_names(ir)
    dialect = ctx.database.kind.value if ctx.database else "sqlite"
    claimed_joins = set()

    entities = []
    for entity in ir.database_entities:
        entities.append({
            "name": entity.name,
            "table": entity.table,
            "columns": [_column_config(f, db_names, dialect) for f in entity.fields],
            "relationships": _relationship_configs(ir, entity, db_names, claimed_joins),
            "audit": entity.behaviors.audit,
        })
        logger.debug(f"    model {entity.name} -> {entity.table}")

    models = render(
        "models.py.jinja",
        header=HEADER,
        entities=entities,
        joins=_join_configs(ir, db_names, dialect),
    )
    session = render(
        "session.py.jinja",
        header=HEADER,
        url=_database_url(ctx),
        models_module=ctx.resolve_path("@models"),
    )
    return [
        GeneratedFile(path="db/models.py", content=models),
        GeneratedFile(path="db/session.py", content=session),
    ]
