"""
Linkage injection into aggregator artifacts.

Adds one-line statements (`import_types ...`, `import_fields ...`, router
scopes) to files that already exist. Every injection is guarded by a
substring check, so linking twice leaves the file byte-identical.
"""

from __future__ import annotations

import logging
import re

from ..errors import UnmergeableArtifactError
from .atomic_writer import AtomicWriter
from .base import Artifact, find_closing_line

logger = logging.getLogger(__name__)

INDENT = "  "


def _indent_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def _indent_block(statement: str, indent: str) -> str:
    lines = statement.strip("\n").splitlines()
    return "".join(f"{indent}{line}\n" if line.strip() else "\n" for line in lines)


def _splice(lines: list[str], index: int, text: str) -> str:
    # Line before the splice point may lack its newline (last line of a file)
    if index > 0 and not lines[index - 1].endswith("\n"):
        lines[index - 1] += "\n"
    return "".join(lines[:index]) + text + "".join(lines[index:])


class ImportLinker:
    """Injects linkage statements into existing artifacts."""

    def __init__(self, closing_token: str = "end", writer: AtomicWriter | None = None, validate: bool = True):
        self.closing_token = closing_token
        self.writer = writer or AtomicWriter(closing_token=closing_token)
        self.validate = validate

    @staticmethod
    def is_linked(content: str, statement: str) -> bool:
        return statement.strip() in content

    def link_before_close(self, content: str, statement: str) -> str:
        """Inject before the final closing line, one level deeper than it."""
        if self.is_linked(content, statement):
            return content

        lines = content.splitlines(keepends=True)
        index = find_closing_line(lines, self.closing_token)
        if index is None:
            raise UnmergeableArtifactError(f"no closing '{self.closing_token}' line to link before")

        indent = _indent_of(lines[index]) + INDENT
        return _splice(lines, index, _indent_block(statement, indent))

    def link_into_block(self, content: str, block_name: str, statement: str) -> str:
        """Inject as the first statement of the first `<block_name> do` block."""
        if self.is_linked(content, statement):
            return content

        opener = re.compile(rf"^\s*{re.escape(block_name)}\s+do\s*$")
        lines = content.splitlines(keepends=True)
        for index, line in enumerate(lines):
            if opener.match(line):
                indent = _indent_of(line) + INDENT
                return _splice(lines, index + 1, _indent_block(statement, indent))

        raise UnmergeableArtifactError(f"no '{block_name} do' block to link into")

    def link_after_last(self, content: str, prefix: str, statement: str) -> str:
        """Inject after the last line starting with `prefix`, else before the closing line."""
        if self.is_linked(content, statement):
            return content

        lines = content.splitlines(keepends=True)
        for index in range(len(lines) - 1, -1, -1):
            if lines[index].lstrip().startswith(prefix):
                indent = _indent_of(lines[index])
                return _splice(lines, index + 1, _indent_block(statement, indent))

        return self.link_before_close(content, statement)

    def inject(self, artifact: Artifact, statement: str, block_name: str | None = None, after: str | None = None) -> bool:
        """
        Link a statement into an existing artifact and write it back.

        Args:
            artifact: The aggregator artifact
            statement: The linkage statement
            block_name: Inject into this `do` block
            after: Inject after the last line with this prefix

        Returns:
            True if the artifact changed, False if the statement was already there

        Raises:
            UnmergeableArtifactError: If the artifact is absent or has no anchor
        """
        content = artifact.read()
        if content is None:
            raise UnmergeableArtifactError("artifact does not exist, run `init` first", artifact.path)

        try:
            if block_name is not None:
                linked = self.link_into_block(content, block_name, statement)
            elif after is not None:
                linked = self.link_after_last(content, after, statement)
            else:
                linked = self.link_before_close(content, statement)
        except UnmergeableArtifactError as e:
            raise e.with_path(artifact.path) from e

        if linked == content:
            logger.debug("%s already links %s", artifact.path, statement.strip().splitlines()[0])
            return False

        logger.info("Injecting %s into %s...", statement.strip().splitlines()[0], artifact.path)
        self.writer.write(artifact.path, linked, validate=self.validate)
        return True
