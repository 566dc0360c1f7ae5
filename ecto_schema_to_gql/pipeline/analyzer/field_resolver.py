"""
Field set resolution.

Computes which fields and associations a generated type contains, in
which order, and which of them are non-null.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from ..schema_ast.nodes import FieldDescriptor
from .ir_nodes import (
    GenerationKind,
    GenerationRequest,
    ResolvedAssociation,
    ResolvedField,
    check_filters,
)

# `field :name, ...` or `field(:name, ...)` in a hand-written block
_FIELD_DECL = re.compile(r"^\s*field[\s(]+:(\w+[?!]?)", re.MULTILINE)


def extract_field_names(custom_block: str | None) -> frozenset[str]:
    """Names of the fields a hand-written block defines."""
    if not custom_block:
        return frozenset()
    return frozenset(_FIELD_DECL.findall(custom_block))


def select_fields(
    fields: Iterable[FieldDescriptor],
    only: Iterable[str] | None = None,
    except_: Iterable[str] = (),
) -> list[FieldDescriptor]:
    """
    Apply the only/except filter to schema fields, keeping their order.

    Raises:
        ConflictingFilterError: If both `only` and a non-empty `except_` are given
    """
    except_ = frozenset(except_)
    check_filters(only, except_)

    if only:
        only = frozenset(only)
        return [f for f in fields if f.name in only]
    return [f for f in fields if f.name not in except_]


class AssociationResolver:
    """Derives relation fields from schema associations."""

    def resolve(self, request: GenerationRequest) -> list[ResolvedAssociation]:
        # Input types never carry associations, whatever the request asked for
        if request.kind == GenerationKind.INPUT or not request.include_associations:
            return []

        resolved = []
        for association in request.schema.associations:
            if not request.admits(association.name):
                continue
            if association.name in request.overridden_field_names:
                continue
            resolved.append(
                ResolvedAssociation(
                    name=association.name,
                    target_type=association.target_type,
                    cardinality=association.cardinality,
                )
            )
        return resolved


class FieldSetResolver:
    """Resolves the ordered field list of a generation request."""

    def __init__(self, association_resolver: AssociationResolver | None = None):
        self.association_resolver = association_resolver or AssociationResolver()

    def resolve(self, request: GenerationRequest) -> tuple[list[ResolvedField], list[ResolvedAssociation]]:
        """
        Resolve fields and associations.

        Args:
            request: The generation request

        Returns:
            (fields, associations): scalar/enum fields in declaration order
            followed by association fields, and the associations alone

        Raises:
            ConflictingFilterError: If both `only` and `except` are set
        """
        selected = select_fields(request.schema.fields, request.only, request.except_)

        fields = []
        for field in selected:
            if field.name in request.overridden_field_names:
                continue
            fields.append(
                ResolvedField(
                    name=field.name,
                    target_type=field.target_type,
                    is_non_null=self._is_non_null(request, field.name),
                )
            )

        associations = self.association_resolver.resolve(request)
        for association in associations:
            fields.append(ResolvedField(name=association.name, target_type=association.target_type, is_non_null=False))

        return fields, associations

    def _is_non_null(self, request: GenerationRequest, name: str) -> bool:
        if request.kind == GenerationKind.INPUT:
            return False
        is_non_null = name in request.non_null
        # nullable wins over non_null
        if name in request.nullable:
            is_non_null = False
        return is_non_null
