"""
Unit tests for the manifest compiler and relation resolution.
"""

import pytest
from pydantic import ValidationError

from archetype_engine.errors import ManifestCompileError
from archetype_engine.ir import compile_manifest
from archetype_engine.ir.models import FieldOrigin
from archetype_engine.kinds import FieldKind, ModeKind, RelationKind
from archetype_engine.naming import DEFAULT_NAMING


def _compile(*entities, **extra):
    manifest = {"entities": list(entities), "database": {"type": "sqlite", "file": "./app.db"}}
    manifest.update(extra)
    return compile_manifest(manifest)


class TestCompilerBasics:
    """Test preconditions and top-level IR shape."""

    def test_refuses_invalid_manifest(self):
        """Test compilation of an invalid manifest raises with the validation result."""
        with pytest.raises(ManifestCompileError) as exc_info:
            compile_manifest({"entities": [{"name": "user", "fields": {"email": {"type": "text"}}}]})
        codes = exc_info.value.result.error_codes
        assert "INVALID_ENTITY_NAME" in codes
        assert "DATABASE_REQUIRED" in codes
        assert "INVALID_ENTITY_NAME" in str(exc_info.value)

    def test_ir_is_immutable(self, blog_ir):
        """Test the IR cannot be modified after compilation."""
        with pytest.raises(ValidationError):
            blog_ir.template = "other"
        with pytest.raises(ValidationError):
            blog_ir.entity("Post").name = "Article"
        assert isinstance(blog_ir.entities, tuple)

    def test_compilation_is_deterministic(self, store_manifest):
        """Test compiling the same manifest twice yields equal IRs."""
        assert compile_manifest(store_manifest) == compile_manifest(store_manifest)

    def test_entity_names(self, store_ir):
        """Test derived table, module and route names."""
        customer = store_ir.entity("Customer")
        assert customer.table == "customers"
        assert customer.module == "customer"
        assert customer.route == "customers"

    def test_unknown_entity_lookup(self, blog_ir):
        """Test looking up a missing entity raises KeyError."""
        with pytest.raises(KeyError):
            blog_ir.entity("Comment")

    def test_database_and_auth(self, store_ir):
        """Test database and auth configuration is carried over."""
        assert store_ir.database.is_postgres
        assert store_ir.database.url_env == "DATABASE_URL"
        assert store_ir.auth.enabled
        assert store_ir.auth.providers == ("credentials",)
        assert store_ir.auth.session_strategy == "jwt"

    def test_naming_config_recorded(self, blog_ir):
        """Test the IR records the naming tables it was compiled with."""
        assert blog_ir.naming == DEFAULT_NAMING


class TestImplicitFields:
    """Test injected primary keys, behavior fields and field resolution."""

    def test_implicit_primary_key(self, blog_ir):
        """Test entities without a primary key get a text 'id'."""
        pk = blog_ir.entity("User").primary_key
        assert pk.name == "id"
        assert pk.kind is FieldKind.TEXT
        assert pk.origin is FieldOrigin.PRIMARY_KEY

    def test_declared_primary_key(self, store_ir):
        """Test a declared primaryKey is used and no 'id' is injected."""
        product = store_ir.entity("Product")
        assert product.primary_key.name == "sku"
        assert product.field("id") is None

    def test_field_order(self, blog_ir):
        """Test primary key, declared, injected, then behavior fields."""
        names = [f.name for f in blog_ir.entity("Post").fields]
        assert names == ["id", "title", "authorId", "createdAt", "updatedAt"]

    def test_soft_delete_field(self, store_ir):
        """Test softDelete adds a nullable deletedAt."""
        deleted_at = store_ir.entity("Order").field("deletedAt")
        assert deleted_at.origin is FieldOrigin.BEHAVIOR
        assert deleted_at.nullable
        assert store_ir.entity("Order").behaviors.audit

    def test_timestamps_can_be_disabled(self):
        """Test manifest defaults switch timestamps off."""
        ir = _compile({"name": "User", "fields": {"email": {"type": "text"}}}, defaults={"timestamps": False})
        assert ir.entity("User").field("createdAt") is None

    def test_field_rules(self, store_ir):
        """Test modifiers become rules."""
        full_name = store_ir.entity("Customer").field("fullName")
        assert full_name.rule("minLength").value == 2
        assert full_name.rule("maxLength").value == 80
        assert full_name.has_rule("trim")
        assert full_name.column == "full_name"
        assert full_name.display_label == "Full name"

        status = store_ir.entity("Order").field("status")
        assert status.rule("oneOf").value == ("pending", "paid", "shipped")
        assert status.default == "pending"

    def test_optional_field(self, store_ir):
        """Test optional fields are nullable."""
        assert store_ir.entity("Customer").field("website").nullable
        assert not store_ir.entity("Customer").field("email").nullable


class TestRelationResolution:
    """Test key injection for every relation kind."""

    def test_has_one_injects_key(self, blog_ir):
        """Test hasOne puts a key referencing the target's primary key on the declaring entity."""
        key = blog_ir.entity("Post").field("authorId")
        assert key.origin is FieldOrigin.FOREIGN_KEY
        assert key.required
        assert key.references.entity == "User"
        assert key.references.field == "id"
        assert key.references.table == "users"

        relation = blog_ir.entity("Post").relation("author")
        assert relation.kind is RelationKind.HAS_ONE
        assert relation.key_owner == "Post"
        assert relation.key_field == "authorId"

    def test_optional_has_one(self):
        """Test optional hasOne keys are nullable."""
        ir = _compile(
            {"name": "Post", "fields": {"title": {"type": "text"}}, "relations": {"editor": {"type": "hasOne", "entity": "User", "optional": True}}},
            {"name": "User", "fields": {"email": {"type": "text"}}},
        )
        assert ir.entity("Post").field("editorId").nullable

    def test_has_one_explicit_field(self):
        """Test a hasOne can name its key field."""
        ir = _compile(
            {"name": "Post", "fields": {"title": {"type": "text"}}, "relations": {"author": {"type": "hasOne", "entity": "User", "field": "writerId"}}},
            {"name": "User", "fields": {"email": {"type": "text"}}},
        )
        assert ir.entity("Post").field("writerId").references.entity == "User"
        assert ir.entity("Post").field("authorId") is None

    def test_has_one_reuses_declared_field(self):
        """Test a declared field with the key's name becomes the key."""
        ir = _compile(
            {"name": "Post", "fields": {"authorId": {"type": "text"}}, "relations": {"author": {"type": "hasOne", "entity": "User"}}},
            {"name": "User", "fields": {"email": {"type": "text"}}},
        )
        keys = [f for f in ir.entity("Post").fields if f.name == "authorId"]
        assert len(keys) == 1
        assert keys[0].references.entity == "User"

    def test_has_many_reuses_back_reference(self, store_ir):
        """Test hasMany reuses the target's hasOne key instead of adding another."""
        order = store_ir.entity("Order")
        assert [f.name for f in order.foreign_keys] == ["customerId"]

        relation = store_ir.entity("Customer").relation("orders")
        assert relation.key_owner == "Order"
        assert relation.key_field == "customerId"
        assert relation.accessor == "orders"

    def test_has_many_synthesizes_key(self):
        """Test hasMany without a back reference injects a key on the target."""
        ir = _compile(
            {"name": "User", "fields": {"email": {"type": "text"}}, "relations": {"posts": {"type": "hasMany", "entity": "Post"}}},
            {"name": "Post", "fields": {"title": {"type": "text"}}},
        )
        key = ir.entity("Post").field("userId")
        assert key.origin is FieldOrigin.FOREIGN_KEY
        assert key.references.entity == "User"
        assert ir.entity("User").field("postId") is None

    def test_self_referential_has_many(self):
        """Test a self-referential hasMany key is nullable."""
        ir = _compile({
            "name": "Category",
            "fields": {"title": {"type": "text"}},
            "relations": {"children": {"type": "hasMany", "entity": "Category"}},
        })
        key = ir.entity("Category").field("categoryId")
        assert key.nullable
        assert key.references.entity == "Category"

    def test_belongs_to_many_join_is_symmetric(self, store_ir):
        """Test both sides of a many-to-many share one alphabetical join entity."""
        assert [j.name for j in store_ir.join_entities] == ["OrderTag"]
        join = store_ir.join_entity("OrderTag")
        assert join.table == "order_tag"
        assert (join.left, join.right) == ("Order", "Tag")
        assert join.left_key.name == "orderId"
        assert join.right_key.name == "tagId"
        assert [f.name for f in join.pivot_fields] == ["note"]

        tags = store_ir.entity("Order").relation("tags")
        orders = store_ir.entity("Tag").relation("orders")
        assert tags.join_entity == orders.join_entity == "OrderTag"
        assert (tags.key_field, tags.target_key) == ("orderId", "tagId")
        assert (orders.key_field, orders.target_key) == ("tagId", "orderId")

    def test_belongs_to_many_adds_no_entity_fields(self, store_ir):
        """Test many-to-many keys live only on the join entity."""
        assert store_ir.entity("Tag").foreign_keys == ()

    def test_join_shape_ignores_declaration_order(self):
        """Test declaring the relation from either side gives the same join."""
        tag = {"name": "Tag", "fields": {"label": {"type": "text"}}}
        post = {"name": "Post", "fields": {"title": {"type": "text"}}}
        from_post = _compile(dict(post, relations={"tags": {"type": "belongsToMany", "entity": "Tag"}}), tag)
        from_tag = _compile(dict(tag, relations={"posts": {"type": "belongsToMany", "entity": "Post"}}), post)
        assert from_post.join_entities == from_tag.join_entities

    def test_self_referential_belongs_to_many(self):
        """Test a self-referential many-to-many uses source/target keys."""
        ir = _compile({
            "name": "User",
            "fields": {"email": {"type": "text"}},
            "relations": {"friends": {"type": "belongsToMany", "entity": "User"}},
        })
        join = ir.join_entity("UserFriends")
        assert join.self_referential
        assert join.table == "user_friends"
        assert (join.left_key.name, join.right_key.name) == ("sourceId", "targetId")

    def test_mutual_has_one_first_declared_wins(self):
        """Test the second of two mutual hasOne relations reuses the first key."""
        ir = _compile(
            {"name": "User", "fields": {"email": {"type": "text"}}, "relations": {"profile": {"type": "hasOne", "entity": "Profile"}}},
            {"name": "Profile", "fields": {"bio": {"type": "text"}}, "relations": {"user": {"type": "hasOne", "entity": "User"}}},
        )
        assert ir.entity("User").field("profileId") is not None
        assert ir.entity("Profile").field("userId") is None

        inverse = ir.entity("Profile").relation("user")
        assert inverse.inverse
        assert (inverse.key_owner, inverse.key_field) == ("User", "profileId")
        assert [w.code.value for w in ir.warnings] == ["BIDIRECTIONAL_RELATION"]


class TestPolicies:
    """Test protection, hooks, sources and mode resolution."""

    def test_protection_shorthands(self, store_ir):
        """Test 'write', default-with-auth, false and per-operation maps."""
        customer = store_ir.entity("Customer").protected
        assert not customer.list and not customer.get
        assert customer.create and customer.update and customer.remove

        assert all(store_ir.entity("Order").protected.requires_auth(op) for op in ("list", "get", "create", "update", "remove"))
        assert not store_ir.entity("Tag").protected.any

        product = store_ir.entity("Product").protected
        assert product.create and not product.get

    def test_unprotected_without_auth(self, blog_ir):
        """Test entities are open when auth is disabled."""
        assert not blog_ir.auth.enabled
        assert not blog_ir.entity("Post").protected.any

    @pytest.mark.parametrize("auth", [None, {"enabled": False}])
    def test_protected_requires_auth(self, auth):
        """Test protected entities do not compile while auth is disabled."""
        extra = {"auth": auth} if auth is not None else {}
        with pytest.raises(ManifestCompileError) as exc_info:
            _compile({"name": "Post", "fields": {"title": {"type": "text"}}, "protected": "all"}, **extra)
        assert exc_info.value.result.error_codes == ["AUTH_REQUIRED_FOR_PROTECTED"]

    def test_hooks(self, store_ir):
        """Test hook flags are resolved to snake_case names."""
        hooks = store_ir.entity("Order").hooks
        assert hooks.enabled == ("before_create", "after_remove")
        assert not store_ir.entity("Customer").hooks.any

    def test_external_source(self, store_ir):
        """Test an entity source with env URL, prefix, auth and override."""
        product = store_ir.entity("Product")
        assert product.is_external
        assert product.source.base_url_env == "CATALOG_API_URL"
        assert product.source.path_prefix == "/v1"
        assert product.source.auth.type == "bearer"
        assert product.source.auth.header == "Authorization"
        assert product.source.endpoints.get == "GET /items/:sku"
        assert [e.name for e in store_ir.external_entities] == ["Product"]
        assert "Product" not in [e.name for e in store_ir.database_entities]

    def test_global_source_applies_to_every_entity(self):
        """Test a manifest-level source makes every entity external."""
        ir = compile_manifest({
            "mode": "headless",
            "source": {"baseUrl": "https://api.example.com", "auth": {"type": "api-key"}},
            "entities": [{"name": "Item", "fields": {"title": {"type": "text"}}}],
        })
        item = ir.entity("Item")
        assert item.is_external
        assert item.source.auth.header == "X-API-Key"

    def test_headless_drops_database(self):
        """Test headless mode carries no database info."""
        ir = compile_manifest({
            "mode": {"type": "headless", "include": ["api"]},
            "database": {"type": "sqlite", "file": "./app.db"},
            "entities": [{"name": "Item", "fields": {"title": {"type": "text"}}}],
        })
        assert ir.mode.kind is ModeKind.HEADLESS
        assert ir.mode.include == ("api",)
        assert ir.database is None
