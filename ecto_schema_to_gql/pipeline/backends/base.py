"""
Template registry and renderer.

Templates live in the packaged `templates/<lang>` directory and can be
overridden file by file from a user template directory.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ...utils import atom, camelize, pluralize, snake_case
from ..analyzer.ir_nodes import ResolvedField
from ..errors import RenderError

PACKAGED_TEMPLATES = Path(__file__).parent.parent.parent / "templates"


class TemplateRegistry:
    """Jinja2 environment built once per generation run."""

    def __init__(self, lang: str, template_dir: str | Path | None = None):
        """
        Initialize the registry.

        Args:
            lang: Template language directory under the packaged templates
            template_dir: Optional directory whose templates take precedence
        """
        loaders = []
        if template_dir:
            loaders.append(jinja2.FileSystemLoader(str(template_dir)))
        loaders.append(jinja2.FileSystemLoader(str(PACKAGED_TEMPLATES / lang)))

        self.lang = lang
        self.jinja_env = jinja2.Environment(
            loader=jinja2.ChoiceLoader(loaders),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
            undefined=jinja2.StrictUndefined,
        )
        self.jinja_env.filters["snake_case"] = snake_case
        self.jinja_env.filters["camelize"] = camelize
        self.jinja_env.filters["pluralize"] = pluralize
        self.jinja_env.filters["atom"] = atom

    def get(self, name: str) -> jinja2.Template:
        try:
            return self.jinja_env.get_template(name)
        except jinja2.TemplateNotFound as e:
            raise RenderError(name, "template not found") from e
        except jinja2.TemplateSyntaxError as e:
            raise RenderError(name, f"line {e.lineno}: {e.message}") from e


class Renderer:
    """Renders named templates, reporting any failure as `RenderError`."""

    def __init__(self, registry: TemplateRegistry):
        self.registry = registry

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        template = self.registry.get(template_name)
        try:
            return template.render(context)
        except jinja2.TemplateError as e:
            raise RenderError(template_name, str(e)) from e


class ArtifactBackend(ABC):
    """Abstract base class for artifact backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    def __init__(self, renderer: Renderer):
        self.renderer = renderer

    @abstractmethod
    def translate_type(self, field: ResolvedField) -> str:
        """
        Translate a resolved field type to target notation.

        Args:
            field: The resolved field

        Returns:
            Type expression string
        """
