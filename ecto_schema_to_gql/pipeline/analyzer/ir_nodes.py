"""
Generation request and plan definitions.

A `GenerationRequest` says what to generate for one target type; the
`GenerationPlan` is the resolved result handed to the renderer.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from ..errors import ConflictingFilterError
from ..schema_ast.nodes import Cardinality, EnumDescriptor, SchemaDescriptor, TypeRef


class GenerationKind(str, Enum):
    """Kind of generated type."""

    OBJECT = "object"  # readable type
    INPUT = "input"  # write-argument type


def check_filters(only: Iterable[str] | None, except_: Iterable[str]) -> None:
    """Raise if both `only` and a non-empty `except` are given."""
    if only is not None and except_:
        raise ConflictingFilterError(only, except_)


def _names(values: Iterable[str] | None) -> frozenset[str]:
    return frozenset(str(v) for v in values) if values else frozenset()


@dataclass
class GenerationRequest:
    """A request to generate one object or input type from a schema."""

    target_name: str
    schema: SchemaDescriptor
    kind: GenerationKind = GenerationKind.OBJECT

    # Field filters
    only: frozenset[str] | None = None
    except_: frozenset[str] = field(default_factory=frozenset)

    # Nullability (object kind only)
    non_null: frozenset[str] = field(default_factory=frozenset)
    nullable: frozenset[str] = field(default_factory=frozenset)

    include_associations: bool = True

    # Fields the caller defines by hand in a custom block
    overridden_field_names: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self):
        self.kind = GenerationKind(self.kind)
        self.only = frozenset(str(v) for v in self.only) if self.only is not None else None
        self.except_ = _names(self.except_)
        self.non_null = _names(self.non_null)
        self.nullable = _names(self.nullable)
        self.overridden_field_names = _names(self.overridden_field_names)

        check_filters(self.only, self.except_)

        # Input types only take leaf values
        if self.kind == GenerationKind.INPUT:
            self.include_associations = False

    def admits(self, name: str) -> bool:
        """Whether `name` passes the only/except filter."""
        if self.only:
            return name in self.only
        return name not in self.except_


@dataclass(frozen=True)
class ResolvedField:
    """A field as it will be rendered."""

    name: str
    target_type: TypeRef
    is_non_null: bool = False


@dataclass(frozen=True)
class ResolvedAssociation:
    """An association as it will be rendered."""

    name: str
    target_type: TypeRef
    cardinality: Cardinality = Cardinality.ONE


@dataclass(frozen=True)
class GenerationPlan:
    """The resolved output for one target type.

    `ordered_fields` holds scalar and enum fields in declaration order,
    followed by association fields in association order.
    """

    target_name: str
    kind: GenerationKind
    ordered_fields: tuple[ResolvedField, ...] = ()
    ordered_enums: tuple[EnumDescriptor, ...] = ()
    ordered_associations: tuple[ResolvedAssociation, ...] = ()

    @property
    def is_input(self) -> bool:
        return self.kind == GenerationKind.INPUT

    def field_names(self) -> list[str]:
        return [f.name for f in self.ordered_fields]

    def non_null_names(self) -> set[str]:
        return {f.name for f in self.ordered_fields if f.is_non_null}
