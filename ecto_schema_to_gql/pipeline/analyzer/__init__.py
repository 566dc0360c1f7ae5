"""
Analyzer module.

Contains type mapping, field set resolution and generation planning.
"""

from __future__ import annotations

from .field_resolver import (
    AssociationResolver,
    FieldSetResolver,
    extract_field_names,
    select_fields,
)
from .ir_nodes import (
    GenerationKind,
    GenerationPlan,
    GenerationRequest,
    ResolvedAssociation,
    ResolvedField,
)
from .planner import GenerationPlanner
from .type_mapper import TypeMapper, enum_name, related_type_name

__all__ = [
    "AssociationResolver",
    "FieldSetResolver",
    "extract_field_names",
    "select_fields",
    "GenerationKind",
    "GenerationPlan",
    "GenerationRequest",
    "ResolvedAssociation",
    "ResolvedField",
    "GenerationPlanner",
    "TypeMapper",
    "enum_name",
    "related_type_name",
]
