"""
Descriptor definitions for introspected schemas.

These nodes represent a schema exactly as the Ecto source declares it,
plus the target type each field maps to. They are built once per
introspection call and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ...utils import last_segment


class TypeKind(Enum):
    """Kind of target type."""

    SCALAR = "scalar"  # id, string, datetime, ...
    ENUM = "enum"  # derived enum type
    RELATION = "relation"  # another generated object


class Cardinality(str, Enum):
    """Association cardinality."""

    ONE = "one"
    MANY = "many"


# Target scalar vocabulary
SCALAR_TYPES = (
    "id",
    "string",
    "boolean",
    "integer",
    "float",
    "decimal",
    "date",
    "time",
    "naive_datetime",
    "datetime",
    "json",
)


@dataclass(frozen=True)
class NativeType:
    """A native (Ecto) field type.

    `tag` is the Ecto primitive name ("string", "utc_datetime_usec", ...),
    "array"/"map" for parameterized containers (with `inner`), "enum" for
    Ecto.Enum fields (with `values`), or the module name for custom types.
    """

    tag: str
    inner: NativeType | None = None
    values: tuple[str, ...] = ()

    @classmethod
    def enum(cls, values) -> NativeType:
        return cls(tag="enum", values=tuple(values))

    @property
    def is_enum(self) -> bool:
        return self.tag == "enum"

    def __str__(self) -> str:
        if self.inner is not None:
            return f"{{:{self.tag}, {self.inner}}}"
        if self.is_enum:
            return f"Ecto.Enum{list(self.values)}"
        return self.tag if "." in self.tag else f":{self.tag}"


@dataclass(frozen=True)
class TypeRef:
    """A resolved target type reference."""

    kind: TypeKind = TypeKind.SCALAR
    name: str = "string"

    # Only set for relations
    cardinality: Cardinality | None = None

    @classmethod
    def scalar(cls, name: str) -> TypeRef:
        return cls(TypeKind.SCALAR, name)

    @classmethod
    def enum(cls, name: str) -> TypeRef:
        return cls(TypeKind.ENUM, name)

    @classmethod
    def relation(cls, name: str, cardinality: Cardinality) -> TypeRef:
        return cls(TypeKind.RELATION, name, cardinality)

    @property
    def is_collection(self) -> bool:
        return self.cardinality == Cardinality.MANY


@dataclass(frozen=True)
class FieldDescriptor:
    """A schema field in declaration order."""

    name: str
    native_type: NativeType
    target_type: TypeRef


@dataclass(frozen=True)
class EnumDescriptor:
    """An enum derived from an Ecto.Enum field."""

    name: str
    values: tuple[str, ...] = ()
    field_name: str = ""  # Field that owns this enum


@dataclass(frozen=True)
class AssociationDescriptor:
    """A declared association (has_one, has_many, belongs_to, many_to_many)."""

    name: str
    related_identity: str
    related_type_name: str
    cardinality: Cardinality = Cardinality.ONE

    @property
    def target_type(self) -> TypeRef:
        return TypeRef.relation(self.related_type_name, self.cardinality)


@dataclass(frozen=True)
class SchemaDescriptor:
    """Normalized introspection result."""

    identity: str  # e.g. "MyApp.Accounts.User"
    source_name: str  # singularized source, e.g. "user"
    fields: tuple[FieldDescriptor, ...] = ()
    associations: tuple[AssociationDescriptor, ...] = ()
    enums: tuple[EnumDescriptor, ...] = ()

    @property
    def last_segment(self) -> str:
        return last_segment(self.identity)

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def field(self, name: str) -> FieldDescriptor | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None
