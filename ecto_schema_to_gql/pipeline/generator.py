"""
Generator orchestration.

Sequences one generation unit (types, resolvers, schema, then linkage
into the aggregators) and the project initialisation step.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ..utils import camelize, snake_case
from .analyzer import GenerationPlanner, extract_field_names
from .backends import AbsintheBackend, Renderer, TemplateRegistry, UnitNames
from .config import GeneratorConfig
from .errors import GenerationError, UnmergeableArtifactError
from .merger import Artifact, AtomicWriter, ImportLinker, MergeEngine, MergeOutcome
from .schema_ast import SchemaDescriptor, SchemaIntrospector

logger = logging.getLogger(__name__)


@dataclass
class GenerationReport:
    """What a run did to the project, artifact by artifact."""

    created: list[Path] = field(default_factory=list)
    updated: list[Path] = field(default_factory=list)
    linked: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    diagnostics: list[UnmergeableArtifactError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def record(self, path: Path, outcome: MergeOutcome) -> None:
        if outcome == MergeOutcome.CREATED:
            self.created.append(path)
        else:
            self.updated.append(path)


def looks_like_path(value: str, root: Path = Path(".")) -> bool:
    return value.endswith((".ex", ".exs")) or "/" in value or (root / value).is_file()


class GqlGenerator:
    """Generates Absinthe artifacts for Ecto schemas inside a Phoenix project."""

    def __init__(self, config: GeneratorConfig, project_root: str | Path = ".", command_line: str | None = None):
        """
        Initialize the generator.

        Args:
            config: Generation configuration; `config.app` must be set
            project_root: Root of the Phoenix project
            command_line: Command written into the header of created files
        """
        if not config.app:
            raise GenerationError("application name is unknown, pass --app or run inside a Mix project")

        self.config = config
        self.root = Path(project_root)

        registry = TemplateRegistry(AbsintheBackend.TEMPLATE_LANG, config.template_dir)
        self.backend = AbsintheBackend(Renderer(registry), use_dataloader=config.use_dataloader)

        writer = AtomicWriter(closing_token=config.closing_token, atomic=config.output.atomic_write)
        validate = config.output.validate_before_write
        self.merge_engine = MergeEngine(config.closing_token, writer, validate)
        self.linker = ImportLinker(config.closing_token, writer, validate)
        self.writer = writer

        self.introspector = SchemaIntrospector()
        self.planner = GenerationPlanner()

        self.header = None
        if config.add_generation_comment and command_line:
            self.header = f"Generated by: {command_line}"

    @property
    def graphql_dir(self) -> Path:
        return self.root / self.config.graphql_dir

    def names(self, context: str = "", singular: str = "") -> UnitNames:
        return UnitNames(
            web_module=self.config.web_mod,
            base_module=self.config.base,
            context=context,
            singular=singular,
            header=self.header,
        )

    # --- Schema resolution ---

    def resolve_schema(self, context: str, target: str, args: Iterable[str] = ()) -> SchemaDescriptor:
        """
        Resolve the schema of a `gen` invocation.

        `target` is a schema file, or a schema name followed either by a
        schema file (the name overrides the source name) or by manual
        `name:type` tokens.
        """
        args = list(args)
        if not args and looks_like_path(target, self.root):
            return self.introspector.load(self.root / target)

        if len(args) == 1 and looks_like_path(args[0], self.root):
            schema = self.introspector.load(self.root / args[0])
            return dataclasses.replace(schema, source_name=snake_case(target))

        identity = f"{self.config.base}.{camelize(context)}.{camelize(target)}"
        return self.introspector.from_manual_fields(identity, args)

    # --- Generation ---

    def generate(
        self,
        context: str,
        schema: SchemaDescriptor,
        only: Iterable[str] | None = None,
        except_: Iterable[str] = (),
        non_null: Iterable[str] = (),
        nullable: Iterable[str] = (),
        include_associations: bool = True,
        custom_block: str | None = None,
    ) -> GenerationReport:
        """
        Generate and merge the artifacts of one schema.

        Args:
            context: Context name ("Accounts")
            schema: The introspected schema
            only: Fields to keep (exclusive with except_)
            except_: Fields to drop
            non_null: Fields made non-null on the object type
            nullable: Fields kept nullable even if listed as non-null
            include_associations: Add association fields to the object type
            custom_block: Hand-written lines added to the object type

        Returns:
            The generation report; unmergeable artifacts are listed in its
            diagnostics and were left untouched

        Raises:
            ConflictingFilterError: If both only and except_ are given
            RenderError: If a template fails
        """
        singular = schema.source_name
        non_null = set(non_null) | set(self.config.default_non_null)

        object_plan, input_plan = self.planner.plan_pair(
            schema,
            singular,
            only=only,
            except_=except_,
            non_null=non_null,
            nullable=nullable,
            include_associations=include_associations,
            overridden_field_names=extract_field_names(custom_block),
        )

        names = self.names(context, singular)
        context_dir = self.root / self.config.context_dir(context)
        report = GenerationReport()

        self._merge(
            report,
            context_dir / "type.ex",
            self.backend.types_block(object_plan, input_plan, custom_block),
            lambda block: self.backend.types_module(block, names),
        )
        self._merge(
            report,
            context_dir / "resolvers.ex",
            self.backend.resolvers_block(names),
            lambda block: self.backend.resolvers_module(block, names),
        )
        self._merge(
            report,
            context_dir / "schema.ex",
            self.backend.schema_block(names),
            lambda block: self.backend.schema_module(block, names),
        )

        module_prefix = f"{names.web_module}.Graphql.{camelize(context)}"
        types_aggregator = Artifact(self.graphql_dir / "types.ex")
        root_schema = Artifact(self.graphql_dir / "schema.ex")

        self._link(report, types_aggregator, f"import_types {module_prefix}.Types", after="import_types")
        self._link(report, types_aggregator, f"import_types {module_prefix}.Schema", after="import_types")
        self._link(report, root_schema, f"import_fields :{singular}_queries", block_name="query")
        self._link(report, root_schema, f"import_fields :{singular}_mutations", block_name="mutation")

        logger.info("Generated GraphQL files for %s!", singular)
        return report

    # --- Project initialisation ---

    def init_project(self, router: bool = True) -> GenerationReport:
        """Create the root schema and types aggregator, and route `/graphql`."""
        report = GenerationReport()
        names = self.names()

        self._create(report, Artifact(self.graphql_dir / "schema.ex"), self.backend.root_schema(names))
        self._create(report, Artifact(self.graphql_dir / "types.ex"), self.backend.types_aggregator(names))

        if router:
            self._inject_routes(report, names)

        logger.info("GraphQL initialization complete!")
        return report

    def _create(self, report: GenerationReport, artifact: Artifact, content: str) -> None:
        if artifact.exists:
            logger.info("%s already exists, leaving it alone", artifact.path)
            report.skipped.append(artifact.path)
            return

        logger.info("Creating %s...", artifact.path)
        self.writer.write(artifact.path, content, validate=self.config.output.validate_before_write)
        report.created.append(artifact.path)

    def _inject_routes(self, report: GenerationReport, names: UnitNames) -> None:
        artifact = Artifact(self.root / self.config.router_path)
        content = artifact.read()
        if content is None:
            self._diagnose(
                report,
                UnmergeableArtifactError("router not found, add the GraphQL routes manually", artifact.path),
            )
            return

        if '"/graphql"' in content:
            logger.info("GraphQL routes already appear to be present. Skipping injection.")
            report.skipped.append(artifact.path)
            return

        self._link(report, artifact, self.backend.router_scope(names))

    # --- Helpers ---

    def _merge(self, report: GenerationReport, path: Path, block: str, wrap: Callable[[str], str]) -> None:
        try:
            report.record(path, self.merge_engine.apply(Artifact(path), block, wrap))
        except UnmergeableArtifactError as e:
            self._diagnose(report, e)

    def _link(self, report: GenerationReport, artifact: Artifact, statement: str, **anchor) -> None:
        try:
            if self.linker.inject(artifact, statement, **anchor) and artifact.path not in report.linked:
                report.linked.append(artifact.path)
        except UnmergeableArtifactError as e:
            self._diagnose(report, e)

    def _diagnose(self, report: GenerationReport, error: UnmergeableArtifactError) -> None:
        logger.warning("Skipping %s", error)
        report.diagnostics.append(error)
