"""
Configuration for the generator pipeline.

Values come from a JSON file (`--config`) and are overridden by CLI
options.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from ..utils import camelize

_MIX_APP = re.compile(r"\bapp:\s*:(\w+)")


def read_mix_app(project_root: str | Path = ".") -> str | None:
    """Read the application name from `mix.exs` (`app: :my_app`), if present."""
    mix_file = Path(project_root) / "mix.exs"
    if not mix_file.is_file():
        return None
    match = _MIX_APP.search(mix_file.read_text(encoding="utf-8"))
    return match.group(1) if match else None


@dataclass
class OutputConfig:
    """Configuration for artifact writes.

    Attributes:
        atomic_write: Write through a temporary file and an atomic rename
        validate_before_write: Refuse content without a closing-token line
    """

    atomic_write: bool = True
    validate_before_write: bool = True


@dataclass
class GeneratorConfig:
    """Configuration options for generation."""

    # OTP application name, e.g. "my_app"
    app: str = ""

    # Base module ("MyApp") and web module ("MyAppWeb"); derived from app when empty
    base_module: str = ""
    web_module: str = ""

    # Source root of the Phoenix project
    lib_dir: str = "lib"

    # Directory overriding the packaged templates (same layout)
    template_dir: str | None = None

    # Line closing an Elixir module; blocks are spliced in before the last one
    closing_token: str = "end"

    # Add a header comment naming the command that created the file
    add_generation_comment: bool = True

    # Resolve association fields through Dataloader
    use_dataloader: bool = True

    # Fields made non-null on every object type unless listed as nullable
    default_non_null: list[str] = field(default_factory=list)

    output: OutputConfig = field(default_factory=OutputConfig)

    @property
    def base(self) -> str:
        return self.base_module or camelize(self.app)

    @property
    def web_mod(self) -> str:
        return self.web_module or f"{self.base}Web"

    @property
    def graphql_dir(self) -> Path:
        return Path(self.lib_dir) / f"{self.app}_web" / "graphql"

    @property
    def router_path(self) -> Path:
        return Path(self.lib_dir) / f"{self.app}_web" / "router.ex"

    def context_dir(self, context: str) -> Path:
        return self.graphql_dir / context.lower()

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "output" and isinstance(v, dict):
                config.output = OutputConfig(
                    atomic_write=v.get("atomic_write", True),
                    validate_before_write=v.get("validate_before_write", True),
                )
            elif hasattr(config, k) and not isinstance(getattr(type(config), k, None), property):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "app": self.app,
            "base_module": self.base_module,
            "web_module": self.web_module,
            "lib_dir": self.lib_dir,
            "template_dir": self.template_dir,
            "closing_token": self.closing_token,
            "add_generation_comment": self.add_generation_comment,
            "use_dataloader": self.use_dataloader,
            "default_non_null": self.default_non_null,
            "output": {
                "atomic_write": self.output.atomic_write,
                "validate_before_write": self.output.validate_before_write,
            },
        }
