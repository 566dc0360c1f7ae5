"""Exception hierarchy for the generation pipeline.

Every failure carries enough context (schema path, artifact path or
template name) for the invoker to act on it manually.
"""

from __future__ import annotations

from pathlib import Path


class GenerationError(Exception):
    """Base exception for all generation errors."""


# --- Introspection ---


class IntrospectionError(GenerationError):
    """Base for schema introspection errors."""


class SchemaNotFoundError(IntrospectionError):
    """Raised when the schema source does not exist."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Schema file not found: {self.path}")


class NotASchemaError(IntrospectionError):
    """Raised when a source loads but does not describe an Ecto schema."""

    def __init__(self, source: str, detail: str = "") -> None:
        self.source = source
        message = f"{source} is not an Ecto schema"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class SchemaSyntaxError(IntrospectionError):
    """Raised when a schema file is not valid Elixir."""

    def __init__(self, origin: str, line: int, snippet: str = "") -> None:
        self.origin = origin
        self.line = line
        message = f"{origin}: syntax error on line {line}"
        if snippet:
            message = f"{message} near '{snippet}'"
        super().__init__(message)


class UnresolvedEnumError(IntrospectionError):
    """Raised when the values of an Ecto.Enum field cannot be determined."""

    def __init__(self, identity: str, field_name: str) -> None:
        self.identity = identity
        self.field_name = field_name
        super().__init__(f"{identity}: cannot resolve the Ecto.Enum values of field :{field_name}")


# --- Resolution ---


class ConflictingFilterError(GenerationError, ValueError):
    """Raised when both `only` and a non-empty `except` are supplied."""

    def __init__(self, only, except_) -> None:
        self.only = only
        self.except_ = except_
        super().__init__("accepts either `only` or `except`, not both")


# --- Merge ---


class UnmergeableArtifactError(GenerationError):
    """Raised when an existing artifact has no anchor to merge into.

    Non-fatal for a generation run: the artifact is left untouched and the
    remaining artifacts are still processed.
    """

    def __init__(self, detail: str, path: str | Path | None = None) -> None:
        self.detail = detail
        self.path = Path(path) if path is not None else None
        super().__init__(self._format())

    def _format(self) -> str:
        if self.path is None:
            return self.detail
        return f"{self.path}: {self.detail}"

    def with_path(self, path: str | Path) -> UnmergeableArtifactError:
        return UnmergeableArtifactError(self.detail, path)


# --- Rendering ---


class RenderError(GenerationError):
    """Raised when a template cannot be loaded or rendered."""

    def __init__(self, template_name: str, detail: str) -> None:
        self.template_name = template_name
        super().__init__(f"Failed to render template '{template_name}': {detail}")
