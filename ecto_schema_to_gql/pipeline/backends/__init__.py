"""
Backend module for artifact generation.

Contains the template registry, the renderer and the Absinthe backend.
"""

from __future__ import annotations

from .absinthe_backend import AbsintheBackend, UnitNames
from .base import ArtifactBackend, Renderer, TemplateRegistry

__all__ = [
    "AbsintheBackend",
    "ArtifactBackend",
    "Renderer",
    "TemplateRegistry",
    "UnitNames",
]
