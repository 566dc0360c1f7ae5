"""
Mapping from Ecto field types to Absinthe target types.

The mapping is total: any type it does not recognise maps to `string`
so that generation keeps going on unusual schemas.
"""

from __future__ import annotations

from ...utils import last_segment, snake_case
from ..schema_ast.nodes import SCALAR_TYPES, NativeType, TypeRef


def enum_name(schema_identity: str, field_name: str) -> str:
    """Derive the enum type name for an enum field.

    `Accounts.User` + `status` -> `user_status`. Two schemas whose last
    segment collapses to the same snake_case root produce the same name.
    """
    return f"{snake_case(last_segment(schema_identity))}_{field_name}"


def related_type_name(related_identity: str) -> str:
    """Derive the object type name of an association target (`Blog.Post` -> `post`)."""
    return snake_case(last_segment(related_identity))


class TypeMapper:
    """Maps native types to target type references."""

    # Native scalar tag -> target scalar
    TYPE_MAP: dict[str, str] = {
        "binary_id": "id",
        "id": "id",
        "string": "string",
        "boolean": "boolean",
        "integer": "integer",
        "float": "float",
        "decimal": "decimal",
        "date": "date",
        "time": "time",
        "time_usec": "time",
        "naive_datetime": "naive_datetime",
        "naive_datetime_usec": "naive_datetime",
        "utc_datetime": "datetime",
        "utc_datetime_usec": "datetime",
        "map": "json",
    }

    # Parameterized tags that always map to json, whatever their inner type
    CONTAINER_TAGS = {"array", "map"}

    DEFAULT = "string"

    def map_type(self, native: NativeType, derived_name: str | None = None) -> TypeRef:
        """
        Map a native type to a target type.

        Args:
            native: The native field type
            derived_name: Derived enum name; an enum without one degrades to string

        Returns:
            The target type reference
        """
        if native.is_enum and derived_name:
            return TypeRef.enum(derived_name)

        if native.inner is not None and native.tag in self.CONTAINER_TAGS:
            return TypeRef.scalar("json")

        return TypeRef.scalar(self.TYPE_MAP.get(native.tag, self.DEFAULT))

    def map_field(self, schema_identity: str, field_name: str, native: NativeType) -> TypeRef:
        """Map a schema field, deriving the enum name when needed."""
        name = enum_name(schema_identity, field_name) if native.is_enum else None
        return self.map_type(native, name)

    def map_manual(self, token: str) -> TypeRef:
        """Map a manual `name:type` type token.

        Tokens already naming a target scalar are kept as is.
        """
        if token in SCALAR_TYPES:
            return TypeRef.scalar(token)
        return self.map_type(NativeType(token))
