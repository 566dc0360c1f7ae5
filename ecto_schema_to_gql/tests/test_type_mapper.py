"""
Tests for native-to-target type mapping and derived names.
"""

from __future__ import annotations

import pytest

from ecto_schema_to_gql.pipeline.analyzer import TypeMapper, enum_name, related_type_name
from ecto_schema_to_gql.pipeline.schema_ast import NativeType, TypeKind, TypeRef


class TestTypeMapper:
    """Tests for TypeMapper.map_type."""

    @pytest.mark.parametrize(
        "tag, expected",
        [
            ("binary_id", "id"),
            ("id", "id"),
            ("string", "string"),
            ("boolean", "boolean"),
            ("integer", "integer"),
            ("float", "float"),
            ("decimal", "decimal"),
            ("date", "date"),
            ("time", "time"),
            ("time_usec", "time"),
            ("naive_datetime", "naive_datetime"),
            ("naive_datetime_usec", "naive_datetime"),
            ("utc_datetime", "datetime"),
            ("utc_datetime_usec", "datetime"),
            ("map", "json"),
        ],
    )
    def test_every_known_tag_maps_to_its_target(self, tag, expected):
        """Every native tag of the mapping table maps to its target scalar."""
        assert TypeMapper().map_type(NativeType(tag)) == TypeRef.scalar(expected)

    @pytest.mark.parametrize("tag", ["Ecto.UUID", "binary", "embed", "MyApp.Money", "any"])
    def test_unknown_tags_fall_back_to_string(self, tag):
        """The mapping is total: anything unrecognized maps to string."""
        assert TypeMapper().map_type(NativeType(tag)) == TypeRef.scalar("string")

    @pytest.mark.parametrize("inner", ["string", "integer", "map", "MyApp.Thing"])
    def test_containers_map_to_json(self, inner):
        mapper = TypeMapper()
        assert mapper.map_type(NativeType("array", inner=NativeType(inner))) == TypeRef.scalar("json")
        assert mapper.map_type(NativeType("map", inner=NativeType(inner))) == TypeRef.scalar("json")

    def test_enum_maps_to_derived_name(self):
        native = NativeType.enum(["active", "inactive"])
        result = TypeMapper().map_type(native, "user_status")
        assert result.kind == TypeKind.ENUM
        assert result.name == "user_status"

    def test_enum_without_name_degrades_to_string(self):
        assert TypeMapper().map_type(NativeType.enum(["a"])) == TypeRef.scalar("string")

    def test_map_field_derives_enum_name(self):
        result = TypeMapper().map_field("MyApp.Accounts.User", "status", NativeType.enum(["active"]))
        assert result == TypeRef.enum("user_status")

    def test_map_manual_keeps_target_scalars(self):
        mapper = TypeMapper()
        assert mapper.map_manual("datetime") == TypeRef.scalar("datetime")
        assert mapper.map_manual("json") == TypeRef.scalar("json")
        assert mapper.map_manual("utc_datetime") == TypeRef.scalar("datetime")
        assert mapper.map_manual("text") == TypeRef.scalar("string")


class TestDerivedNames:
    """Tests for enum and relation naming."""

    def test_enum_name_uses_last_segment(self):
        assert enum_name("MyApp.Accounts.User", "status") == "user_status"

    def test_enum_name_snake_cases_segment(self):
        assert enum_name("MyApp.Blog.BlogPost", "state") == "blog_post_state"

    def test_enum_name_is_stable(self):
        """Repeated calls give the same name."""
        names = {enum_name("Shop.OrderItem", "kind") for _ in range(5)}
        assert names == {"order_item_kind"}

    def test_colliding_roots_share_a_name(self):
        """Schemas whose last segment collapses to the same root collide."""
        assert enum_name("A.User", "role") == enum_name("B.User", "role")

    def test_related_type_name(self):
        assert related_type_name("MyApp.Blog.Post") == "post"
        assert related_type_name("MyApp.Accounts.UserProfile") == "user_profile"
