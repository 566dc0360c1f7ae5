"""
Merger module.

Appends generated blocks to existing artifacts, links them into the
aggregator modules, and writes files atomically.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .base import Artifact, MergeEngine, MergeOutcome
from .import_linker import ImportLinker

__all__ = [
    "Artifact",
    "AtomicWriter",
    "ImportLinker",
    "MergeEngine",
    "MergeOutcome",
]
