"""
Generation planner.

Assembles the read-only `GenerationPlan` a template is rendered from.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..schema_ast.nodes import SchemaDescriptor
from .field_resolver import FieldSetResolver
from .ir_nodes import GenerationKind, GenerationPlan, GenerationRequest


class GenerationPlanner:
    """Builds generation plans from requests."""

    def __init__(self, field_resolver: FieldSetResolver | None = None):
        self.field_resolver = field_resolver or FieldSetResolver()

    def plan(self, request: GenerationRequest) -> GenerationPlan:
        """
        Plan one object or input type.

        Enums are those of the schema whose owning field passes the
        request's only/except filter, in schema order.
        """
        fields, associations = self.field_resolver.resolve(request)

        enums = []
        for enum in request.schema.enums:
            if enum.field_name and not request.admits(enum.field_name):
                continue
            enums.append(enum)

        return GenerationPlan(
            target_name=request.target_name,
            kind=request.kind,
            ordered_fields=tuple(fields),
            ordered_enums=tuple(enums),
            ordered_associations=tuple(associations),
        )

    def plan_pair(
        self,
        schema: SchemaDescriptor,
        singular: str,
        only: Iterable[str] | None = None,
        except_: Iterable[str] = (),
        non_null: Iterable[str] = (),
        nullable: Iterable[str] = (),
        include_associations: bool = True,
        overridden_field_names: Iterable[str] = (),
    ) -> tuple[GenerationPlan, GenerationPlan]:
        """Plan the `<singular>` object and its `<singular>_params` input."""
        object_plan = self.plan(
            GenerationRequest(
                target_name=singular,
                schema=schema,
                kind=GenerationKind.OBJECT,
                only=only,
                except_=except_,
                non_null=non_null,
                nullable=nullable,
                include_associations=include_associations,
                overridden_field_names=overridden_field_names,
            )
        )
        input_plan = self.plan(
            GenerationRequest(
                target_name=f"{singular}_params",
                schema=schema,
                kind=GenerationKind.INPUT,
                only=only,
                except_=except_,
            )
        )
        return object_plan, input_plan
