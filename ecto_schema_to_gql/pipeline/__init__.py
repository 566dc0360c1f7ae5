"""
Pipeline - Ecto schema to Absinthe generator.

1. Phase 1 (Introspection): Parse an Ecto schema into a SchemaDescriptor
2. Phase 2 (Analyzer): Map types, resolve the field set, plan the types
3. Phase 3 (Backend): Render Absinthe blocks from Jinja2 templates
4. Phase 4 (Merger): Create or append to artifacts, then link them into
   the aggregator modules
"""

from __future__ import annotations

from .config import GeneratorConfig, OutputConfig, read_mix_app
from .errors import (
    ConflictingFilterError,
    GenerationError,
    IntrospectionError,
    NotASchemaError,
    RenderError,
    SchemaNotFoundError,
    SchemaSyntaxError,
    UnmergeableArtifactError,
    UnresolvedEnumError,
)
from .generator import GenerationReport, GqlGenerator
from .merger import AtomicWriter, ImportLinker, MergeEngine

__all__ = [
    "GqlGenerator",
    "GenerationReport",
    "GeneratorConfig",
    "OutputConfig",
    "read_mix_app",
    "GenerationError",
    "IntrospectionError",
    "SchemaNotFoundError",
    "NotASchemaError",
    "SchemaSyntaxError",
    "UnresolvedEnumError",
    "ConflictingFilterError",
    "UnmergeableArtifactError",
    "RenderError",
    "AtomicWriter",
    "ImportLinker",
    "MergeEngine",
]
