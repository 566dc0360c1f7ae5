"""
Block merging into Elixir artifacts.

A generated block is either wrapped into a new module (artifact absent)
or spliced in before the module's closing line (artifact present).
Existing content is never rewritten.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..errors import UnmergeableArtifactError
from .atomic_writer import AtomicWriter

logger = logging.getLogger(__name__)


class MergeOutcome(Enum):
    """What a merge did to its artifact."""

    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True)
class Artifact:
    """A target file, absent or present."""

    path: Path

    @property
    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> str | None:
        """Current content, or None when the file is absent."""
        if not self.exists:
            return None
        return self.path.read_text(encoding="utf-8")


def find_closing_line(lines: list[str], closing_token: str) -> int | None:
    """Index of the last line whose stripped text is the closing token."""
    for index in range(len(lines) - 1, -1, -1):
        if lines[index].strip() == closing_token:
            return index
    return None


class MergeEngine:
    """Merges rendered blocks into artifacts.

    Appending is not idempotent: merging the same block twice leaves two
    copies of it in the artifact.
    """

    def __init__(self, closing_token: str = "end", writer: AtomicWriter | None = None, validate: bool = True):
        self.closing_token = closing_token
        self.writer = writer or AtomicWriter(closing_token=closing_token)
        self.validate = validate

    def merge(self, block: str, existing: str | None, wrap: Callable[[str], str]) -> str:
        """
        Merge a block into existing content.

        Args:
            block: The rendered block
            existing: Current artifact content, None if the artifact is absent
            wrap: Builds a complete artifact around a block

        Returns:
            The new artifact content

        Raises:
            UnmergeableArtifactError: If the content has no closing line
        """
        if existing is None:
            return wrap(block)

        lines = existing.splitlines(keepends=True)
        index = find_closing_line(lines, self.closing_token)
        if index is None:
            raise UnmergeableArtifactError(f"no closing '{self.closing_token}' line to insert before")

        insert = block if block.endswith("\n") else block + "\n"
        if index > 0 and not lines[index - 1].endswith("\n"):
            insert = "\n" + insert
        return "".join(lines[:index]) + insert + "".join(lines[index:])

    def apply(self, artifact: Artifact, block: str, wrap: Callable[[str], str]) -> MergeOutcome:
        """
        Read, merge and write one artifact.

        Raises:
            UnmergeableArtifactError: With the artifact path, content untouched
        """
        existing = artifact.read()
        if existing is None:
            logger.info("Creating %s...", artifact.path)
            outcome = MergeOutcome.CREATED
        else:
            logger.info("Updating %s...", artifact.path)
            outcome = MergeOutcome.UPDATED

        try:
            content = self.merge(block, existing, wrap)
            self.writer.write(artifact.path, content, validate=self.validate)
        except UnmergeableArtifactError as e:
            if e.path is not None:
                raise
            raise e.with_path(artifact.path) from e
        return outcome
