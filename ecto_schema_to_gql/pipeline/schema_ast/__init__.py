"""
Schema introspection module.

Contains the schema descriptors, the Ecto source parser and the
introspector that turns schema sources into descriptors.
"""

from __future__ import annotations

from .nodes import (
    AssociationDescriptor,
    Cardinality,
    EnumDescriptor,
    FieldDescriptor,
    NativeType,
    SchemaDescriptor,
    TypeKind,
    TypeRef,
)
from .parser import EctoSchemaParser, EctoSchemaSource
from .introspector import (
    AssociationSource,
    SchemaIntrospector,
    SchemaSource,
    parse_manual_fields,
)

__all__ = [
    "AssociationDescriptor",
    "Cardinality",
    "EnumDescriptor",
    "FieldDescriptor",
    "NativeType",
    "SchemaDescriptor",
    "TypeKind",
    "TypeRef",
    "EctoSchemaParser",
    "EctoSchemaSource",
    "SchemaIntrospector",
    "SchemaSource",
    "AssociationSource",
    "parse_manual_fields",
]
