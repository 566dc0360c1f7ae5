"""
Absinthe backend.

Renders types, schema and resolver blocks for one generation unit, the
module wrappers used when those artifacts do not exist yet, and the
project-level aggregators created by `init`.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass
from typing import Any

from ...utils import camelize, pluralize
from ..analyzer.ir_nodes import GenerationPlan, ResolvedField
from ..schema_ast.nodes import EnumDescriptor, TypeKind
from .base import ArtifactBackend, Renderer


@dataclass(frozen=True)
class UnitNames:
    """Module and type names shared by the artifacts of one generation unit."""

    web_module: str  # "MyAppWeb"
    base_module: str  # "MyApp"
    context: str = ""  # "Accounts"
    singular: str = ""  # "user"
    header: str | None = None  # Generation comment, only written on creation

    @property
    def plural(self) -> str:
        return pluralize(self.singular)

    def as_context(self) -> dict[str, Any]:
        return {
            "web_module": self.web_module,
            "base_module": self.base_module,
            "context": camelize(self.context),
            "singular": self.singular,
            "plural": self.plural,
            "header": self.header,
        }


class AbsintheBackend(ArtifactBackend):
    """Absinthe notation backend."""

    TEMPLATE_LANG = "absinthe"

    def __init__(self, renderer: Renderer, use_dataloader: bool = True):
        super().__init__(renderer)
        self.use_dataloader = use_dataloader

    def translate_type(self, field: ResolvedField) -> str:
        """`:string`, `non_null(:string)`, `list_of(:post)`..."""
        type_ref = field.target_type
        expr = f":{type_ref.name}"
        if type_ref.kind == TypeKind.RELATION and type_ref.is_collection:
            expr = f"list_of({expr})"
        if field.is_non_null:
            expr = f"non_null({expr})"
        return expr

    def _field_context(self, field: ResolvedField) -> dict[str, Any]:
        return {
            "name": field.name,
            "type": self.translate_type(field),
            "dataloader": self.use_dataloader and field.target_type.kind == TypeKind.RELATION,
        }

    def _plan_context(self, plan: GenerationPlan) -> dict[str, Any]:
        return {
            "name": plan.target_name,
            "fields": [self._field_context(f) for f in plan.ordered_fields],
        }

    @staticmethod
    def collect_enums(*plans: GenerationPlan) -> list[EnumDescriptor]:
        """Enums of all plans, first occurrence wins."""
        seen: dict[str, EnumDescriptor] = {}
        for plan in plans:
            for enum in plan.ordered_enums:
                seen.setdefault(enum.name, enum)
        return list(seen.values())

    # --- Generation unit ---

    def types_block(
        self,
        object_plan: GenerationPlan,
        input_plan: GenerationPlan,
        custom_block: str | None = None,
    ) -> str:
        return self.renderer.render(
            "types/block.ex.jinja2",
            {
                "enums": [{"name": e.name, "members": list(e.values)} for e in self.collect_enums(object_plan, input_plan)],
                "object": self._plan_context(object_plan),
                "input": self._plan_context(input_plan),
                "custom_block": textwrap.dedent(custom_block).strip("\n") if custom_block else None,
            },
        )

    def types_module(self, block: str, names: UnitNames) -> str:
        return self.renderer.render(
            "types/module.ex.jinja2",
            {**names.as_context(), "block": block, "use_dataloader": self.use_dataloader},
        )

    def schema_block(self, names: UnitNames) -> str:
        return self.renderer.render("schema/block.ex.jinja2", names.as_context())

    def schema_module(self, block: str, names: UnitNames) -> str:
        return self.renderer.render("schema/module.ex.jinja2", {**names.as_context(), "block": block})

    def resolvers_block(self, names: UnitNames) -> str:
        return self.renderer.render("resolvers/block.ex.jinja2", names.as_context())

    def resolvers_module(self, block: str, names: UnitNames) -> str:
        return self.renderer.render("resolvers/module.ex.jinja2", {**names.as_context(), "block": block})

    # --- Project initialisation ---

    def root_schema(self, names: UnitNames) -> str:
        return self.renderer.render("init/schema.ex.jinja2", {**names.as_context(), "use_dataloader": self.use_dataloader})

    def types_aggregator(self, names: UnitNames) -> str:
        return self.renderer.render("init/types.ex.jinja2", names.as_context())

    def router_scope(self, names: UnitNames) -> str:
        return self.renderer.render("init/router_scope.ex.jinja2", names.as_context())
