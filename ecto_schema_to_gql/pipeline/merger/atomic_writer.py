"""
Atomic file writer for generated artifacts.

Ensures that an interrupted write never leaves an artifact half written.
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import UnmergeableArtifactError


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(
        self,
        closing_token: str = "end",
        validate_content: Callable[[str], None] | None = None,
        atomic: bool = True,
    ):
        """Initialize the atomic writer.

        Args:
            closing_token: Line that must close every generated module
            validate_content: Optional replacement for the default validation
            atomic: Write in place when False (validation still runs first)
        """
        self.closing_token = closing_token
        self.atomic = atomic
        self._validate = validate_content or self._default_validate

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Raises:
            UnmergeableArtifactError: If validation fails
            OSError: If file operations fail
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if not self.atomic:
            if validate:
                self._validate(content)
            path.write_text(content, encoding="utf-8")
            return

        # Same directory keeps the rename on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate:
                self._validate(content)

            temp_path.replace(path)

        except Exception:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass
            raise

    def _default_validate(self, content: str) -> None:
        """Generated Elixir must end its module with a closing-token line."""
        if not any(line.strip() == self.closing_token for line in content.splitlines()):
            raise UnmergeableArtifactError(f"refusing to write content without a closing '{self.closing_token}' line")
