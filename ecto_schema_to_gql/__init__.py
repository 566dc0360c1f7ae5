"""Ecto Schema to GraphQL Generator

A Python package for generating Absinthe GraphQL types, schemas and
resolvers from Ecto schema definitions, merged into an existing Phoenix
project without overwriting hand-written code.
"""

__version__ = "0.1.0"

from .pipeline import (
    GenerationReport,
    GeneratorConfig,
    GqlGenerator,
    OutputConfig,
)

__all__ = [
    "GqlGenerator",
    "GenerationReport",
    "GeneratorConfig",
    "OutputConfig",
]
