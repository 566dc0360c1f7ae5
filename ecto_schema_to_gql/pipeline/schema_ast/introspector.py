"""
Schema introspection.

Turns a schema source into a `SchemaDescriptor`. A source is anything
satisfying the `SchemaSource` protocol; Ecto schema files are parsed into
one by `EctoSchemaParser`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable

from ...utils import last_segment, singularize, snake_case
from ..analyzer.type_mapper import TypeMapper, related_type_name
from ..errors import NotASchemaError, SchemaNotFoundError, UnresolvedEnumError
from .nodes import (
    AssociationDescriptor,
    Cardinality,
    EnumDescriptor,
    FieldDescriptor,
    NativeType,
    SchemaDescriptor,
    TypeKind,
)
from .parser import EctoSchemaParser

logger = logging.getLogger(__name__)


@runtime_checkable
class SchemaSource(Protocol):
    """Capabilities a source must expose to be introspected."""

    def schema_identity(self) -> str: ...

    def schema_fields(self) -> list[str]: ...

    def schema_type(self, field_name: str) -> NativeType: ...

    def schema_source(self) -> str | None: ...


@runtime_checkable
class AssociationSource(Protocol):
    """Optional capability: declared associations as (name, related identity, cardinality)."""

    def schema_associations(self) -> Iterable[tuple[str, str, Cardinality | str]]: ...


def parse_manual_fields(tokens: Iterable[str]) -> list[tuple[str, str]]:
    """Parse `name:type` tokens; a bare `name` is a string field."""
    fields = []
    for token in tokens:
        name, _, type_name = token.partition(":")
        fields.append((name, type_name or "string"))
    return fields


class SchemaIntrospector:
    """Builds schema descriptors from schema sources."""

    def __init__(self, type_mapper: TypeMapper | None = None, parser: EctoSchemaParser | None = None):
        self.type_mapper = type_mapper or TypeMapper()
        self.parser = parser or EctoSchemaParser()

    def load(self, path: str | Path) -> SchemaDescriptor:
        """
        Load and introspect an Ecto schema file.

        Args:
            path: Path to the `.ex` file

        Returns:
            A fresh SchemaDescriptor (never cached, the file may change between runs)

        Raises:
            SchemaNotFoundError: If the file does not exist
            NotASchemaError: If the file declares no Ecto schema
        """
        path = Path(path)
        if not path.is_file():
            raise SchemaNotFoundError(path)

        source = self.parser.parse_file(path)
        if source is None:
            raise NotASchemaError(str(path), 'no `schema "..." do` block found')
        if not source.identity:
            raise NotASchemaError(str(path), "schema is not inside a defmodule")

        return self.introspect(source)

    def introspect(self, source: object) -> SchemaDescriptor:
        """
        Introspect any object satisfying `SchemaSource`.

        Raises:
            NotASchemaError: If the object lacks the capability or has no source name
        """
        if not isinstance(source, SchemaSource):
            raise NotASchemaError(repr(source), "does not expose schema introspection")

        identity = source.schema_identity()
        source_name = source.schema_source()
        if not isinstance(source_name, str):
            raise NotASchemaError(identity, "schema has no source")

        fields = []
        enums: dict[str, EnumDescriptor] = {}
        for name in source.schema_fields():
            native = source.schema_type(name)
            if native.is_enum and not native.values:
                raise UnresolvedEnumError(identity, name)
            target = self.type_mapper.map_field(identity, name, native)
            fields.append(FieldDescriptor(name=name, native_type=native, target_type=target))
            if target.kind == TypeKind.ENUM and target.name not in enums:
                enums[target.name] = EnumDescriptor(name=target.name, values=native.values, field_name=name)

        associations = []
        if isinstance(source, AssociationSource):
            for name, related, cardinality in source.schema_associations():
                associations.append(
                    AssociationDescriptor(
                        name=name,
                        related_identity=related,
                        related_type_name=related_type_name(related),
                        cardinality=Cardinality(cardinality),
                    )
                )

        descriptor = SchemaDescriptor(
            identity=identity,
            source_name=singularize(source_name),
            fields=tuple(fields),
            associations=tuple(associations),
            enums=tuple(enums.values()),
        )
        logger.debug(
            "Introspected %s: %d fields, %d associations, %d enums",
            identity,
            len(descriptor.fields),
            len(descriptor.associations),
            len(descriptor.enums),
        )
        return descriptor

    def from_manual_fields(self, identity: str, tokens: Iterable[str]) -> SchemaDescriptor:
        """
        Build a descriptor from `name:type` tokens, bypassing introspection.

        An `id` field is prepended unless the tokens declare one.
        """
        parsed = parse_manual_fields(tokens)
        if "id" not in {name for name, _ in parsed}:
            parsed.insert(0, ("id", "id"))

        fields = tuple(
            FieldDescriptor(name=name, native_type=NativeType(type_name), target_type=self.type_mapper.map_manual(type_name))
            for name, type_name in parsed
        )
        return SchemaDescriptor(
            identity=identity,
            source_name=snake_case(last_segment(identity)),
            fields=fields,
        )
