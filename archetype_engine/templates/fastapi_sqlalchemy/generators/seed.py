"""
Seed data generation (category: seed).

Emits `db/seed.py` with one row builder per stored entity and, when the run
has a storage schema, a `seed(session)` that inserts the rows parents-first.
Insert order comes from a topological sort of the foreign-key graph; a key
cycle falls back to declaration order.

Values are deterministic expressions of the row index `i`, chosen from the
field's kind, rules and name.
"""

import networkx as nx

from archetype_engine.gen_logging import get_logger
from archetype_engine.ir.models import FieldOrigin
from archetype_engine.kinds import FieldKind
from archetype_engine.template.types import GeneratedFile
from archetype_engine.templates.fastapi_sqlalchemy.builders import HEADER, has_storage_schema
from archetype_engine.templates.fastapi_sqlalchemy.rendering import render

logger = get_logger(__name__)

SEED_COUNT = 5


def _text_value(field) -> str:
    name = field.name.lower()
    one_of = field.rule("oneOf")
    if one_of is not None:
        values = list(one_of.value)
        return f"{values!r}[(i - 1) % {len(values)}]"
    if field.has_rule("email"):
        expr = 'f"user{i}@example.com"'
    elif field.has_rule("url"):
        expr = 'f"https://example.com/{i}"'
    elif name == "title":
        expr = 'f"Sample Title {i}"'
    elif "name" in name:
        expr = 'f"Sample Name {i}"'
    elif any(word in name for word in ("content", "description", "bio", "body")):
        expr = f'f"Sample {field.name} content for record {{i}}"'
    elif "slug" in name:
        expr = 'f"slug-{i}"'
    elif "phone" in name:
        expr = 'f"+1-555-{1000 + i}"'
    else:
        min_length = field.rule("minLength")
        if min_length is not None and min_length.value > len(field.name) + 3:
            expr = f'f"{"x" * min_length.value}{{i}}"'
        else:
            expr = f'f"Sample {field.name} {{i}}"'

    if field.has_rule("lowercase"):
        expr = f"{expr}.lower()"
    elif field.has_rule("uppercase"):
        expr = f"{expr}.upper()"
    max_length = field.rule("maxLength")
    if max_length is not None:
        expr = f"{expr}[:{max_length.value}]"
    return expr


def _number_value(field) -> str:
    low = field.rule("min").value if field.has_rule("min") else 0
    high = field.rule("max").value if field.has_rule("max") else 1000
    if field.has_rule("positive"):
        low = max(low, 1)
    if field.has_rule("integer"):
        span = int(high - low)
        return f"{int(low)} + (i % {span})" if span > 0 else f"{int(low)}"
    return f"min({float(high)}, {float(low)} + i * 0.5)"


def _key_value(field, ir) -> str:
    target = ir.entity(field.references.entity)
    if target.primary_key.kind is FieldKind.TEXT:
        return f'f"{target.module}-{{(i - 1) % count + 1}}"'
    return "(i - 1) % count + 1"


def mock_value(field, ir, owner_name: str, owner_module: str) -> str:
    """Python expression (in terms of row index `i`) producing a value for `field`."""
    if field.primary_key:
        return f'f"{owner_module}-{{i}}"' if field.kind is FieldKind.TEXT else "i"
    if field.references is not None:
        if field.references.entity == owner_name and field.nullable:
            return "None"
        return _key_value(field, ir)
    if field.default is not None:
        return repr(field.default)
    if field.kind is FieldKind.TEXT:
        return _text_value(field)
    if field.kind is FieldKind.NUMBER:
        return _number_value(field)
    if field.kind is FieldKind.BOOLEAN:
        return "i % 2 == 0"
    return "datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(days=i)"


def _join_node(name: str) -> str:
    return f"join:{name}"


def seed_order(ir) -> list:
    """
    Stored entity names and join nodes (`join:<Name>`) ordered so every key
    target comes first.
    """
    stored = [e.name for e in ir.database_entities]
    graph = nx.DiGraph()
    graph.add_nodes_from(stored)
    for entity in ir.database_entities:
        for key in entity.foreign_keys:
            target = key.references.entity
            if target in graph and target != entity.name:
                graph.add_edge(target, entity.name)
    for join in ir.join_entities:
        if join.left in graph and join.right in graph:
            node = _join_node(join.name)
            graph.add_edge(join.left, node)
            graph.add_edge(join.right, node)

    position = {name: index for index, name in enumerate(stored + [_join_node(j.name) for j in ir.join_entities])}
    try:
        return list(nx.lexicographical_topological_sort(graph, key=position.get))
    except nx.NetworkXUnfeasible:
        cycle = nx.find_cycle(graph)
        logger.warning(f"Foreign keys form a cycle ({' -> '.join(a for a, _ in cycle)}); seeding in declaration order")
        return sorted(graph.nodes, key=position.get)


def _entity_seed(ir, entity) -> dict:
    columns = []
    for field in entity.fields:
        if field.origin is FieldOrigin.BEHAVIOR:
            continue
        columns.append({"name": field.name, "value": mock_value(field, ir, entity.name, entity.module)})
    return {"kind": "entity", "name": entity.name, "builder": f"build_{entity.table}", "columns": columns}


def _join_seed(ir, join) -> dict:
    left = ir.entity(join.left)
    right = ir.entity(join.right)

    def key_expr(entity, offset: bool) -> str:
        index = "i % count + 1" if offset else "i"
        if entity.primary_key.kind is FieldKind.TEXT:
            return f'f"{entity.module}-{{{index}}}"'
        return index

    columns = [
        {"name": join.left_key.column, "value": key_expr(left, offset=False)},
        # self-referential rows link each record to the next one
        {"name": join.right_key.column, "value": key_expr(right, offset=join.self_referential)},
    ]
    columns += [{"name": f.column, "value": mock_value(f, ir, join.name, join.module)} for f in join.pivot_fields]
    return {"kind": "join", "name": join.name, "table_var": f"{join.module}_table", "builder": f"build_{join.module}_links", "columns": columns}


def generate_seed(ir, ctx) -> GeneratedFile:
    entries = []
    for node in seed_order(ir):
        if node.startswith("join:"):
            entries.append(_join_seed(ir, ir.join_entity(node[len("join:"):])))
        else:
            entries.append(_entity_seed(ir, ir.entity(node)))
    logger.debug(f"    seed order: {', '.join(e['name'] for e in entries) or '(none)'}")

    content = render(
        "seed.py.jinja",
        header=HEADER,
        entries=entries,
        count=SEED_COUNT,
        database=has_storage_schema(ir),
        models_module=ctx.resolve_path("@models"),
        session_module=ctx.resolve_path("@database"),
    )
    return GeneratedFile(path="db/seed.py", content=content)
