"""
Unit tests for identifier derivation and pluralization.
"""

from archetype_engine.naming import (
    DEFAULT_NAMING,
    Naming,
    NamingConfig,
    is_camel_case,
    is_pascal_case,
    to_camel_case,
    to_pascal_case,
    to_snake_case,
)


class TestCaseConversion:
    """Test case helpers."""

    def test_snake_case(self):
        """Test PascalCase, camelCase and acronyms convert to snake_case."""
        assert to_snake_case("OrderItem") == "order_item"
        assert to_snake_case("firstName") == "first_name"
        assert to_snake_case("HTTPRequest") == "http_request"
        assert to_snake_case("user") == "user"

    def test_camel_case(self):
        """Test snake_case and PascalCase convert to camelCase."""
        assert to_camel_case("first_name") == "firstName"
        assert to_camel_case("Email") == "email"
        assert to_camel_case("UserProfile") == "userProfile"

    def test_pascal_case(self):
        """Test lower and snake_case names convert to PascalCase."""
        assert to_pascal_case("user") == "User"
        assert to_pascal_case("user_profile") == "UserProfile"
        assert to_pascal_case("blogPost") == "BlogPost"

    def test_case_predicates(self):
        """Test the PascalCase and camelCase checks used by validation."""
        assert is_pascal_case("User")
        assert not is_pascal_case("user")
        assert not is_pascal_case("User_Profile")
        assert is_camel_case("email")
        assert is_camel_case("firstName")
        assert not is_camel_case("Email")
        assert not is_camel_case(None)


class TestPluralization:
    """Test the pluralizer through Naming."""

    def test_regular_plurals(self):
        """Test the regular English suffix rules."""
        naming = Naming()
        assert naming.pluralize("post") == "posts"
        assert naming.pluralize("category") == "categories"
        assert naming.pluralize("day") == "days"
        assert naming.pluralize("box") == "boxes"
        assert naming.pluralize("match") == "matches"

    def test_irregular_and_uncountable(self):
        """Test irregular plurals and uncountable words."""
        naming = Naming()
        assert naming.pluralize("person") == "people"
        assert naming.pluralize("Person") == "People"
        assert naming.pluralize("child") == "children"
        assert naming.pluralize("news") == "news"
        assert naming.pluralize("sheep") == "sheep"

    def test_already_plural_is_unchanged(self):
        """Test words that already look plural are left alone."""
        naming = Naming()
        assert naming.pluralize("posts") == "posts"
        assert naming.pluralize("people") == "people"

    def test_singulars_ending_in_s(self):
        """Test singular nouns ending in 's' are still pluralized."""
        naming = Naming()
        assert naming.pluralize("canvas") == "canvases"
        assert naming.pluralize("Alias") == "Aliases"
        assert naming.pluralize("canvases") == "canvases"
        assert naming.table_name("Canvas") == "canvases"
        assert naming.table_name("ProductAlias") == "product_aliases"
        assert naming.route_path("GasStation") == "gas-stations"
        # plurals ending in -as and -os are left alone
        assert naming.pluralize("ideas") == "ideas"
        assert naming.pluralize("photos") == "photos"

    def test_custom_irregulars(self):
        """Test a substituted irregular table changes derived names."""
        config = DEFAULT_NAMING.with_irregulars({"cactus": "cacti"})
        naming = Naming(config)
        assert naming.pluralize("cactus") == "cacti"
        # the default table is untouched
        assert Naming().pluralize("cactus") != "cacti"

    def test_config_is_a_value(self):
        """Test NamingConfig instances compare by value."""
        assert NamingConfig() == DEFAULT_NAMING


class TestDerivedNames:
    """Test derived storage and API identifiers."""

    def test_table_names(self):
        """Test table names are snake_case plurals of the last word."""
        naming = Naming()
        assert naming.table_name("User") == "users"
        assert naming.table_name("OrderItem") == "order_items"
        assert naming.table_name("Category") == "categories"
        assert naming.table_name("Person") == "people"

    def test_column_and_module_names(self):
        """Test column and module names are snake_case."""
        naming = Naming()
        assert naming.column_name("firstName") == "first_name"
        assert naming.module_name("OrderItem") == "order_item"

    def test_route_path(self):
        """Test routes use dashes instead of underscores."""
        assert Naming().route_path("OrderItem") == "order-items"

    def test_accessor_and_foreign_key(self):
        """Test relation accessors and foreign key names."""
        naming = Naming()
        assert naming.accessor_name("bestFriend", many=True) == "bestFriends"
        assert naming.accessor_name("author", many=False) == "author"
        assert naming.foreign_key_name("author") == "authorId"
        assert naming.foreign_key_name("OrderItem") == "orderItemId"

    def test_join_names_ignore_declaration_order(self):
        """Test join entity and table names are alphabetical."""
        naming = Naming()
        assert naming.join_entity_name("Tag", "Post") == "PostTag"
        assert naming.join_entity_name("Post", "Tag") == "PostTag"
        assert naming.join_table_name("Tag", "Post") == "post_tag"
