"""
End-to-end tests for GqlGenerator on a copy of a minimal Phoenix project.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from ecto_schema_to_gql.pipeline import (
    ConflictingFilterError,
    GenerationError,
    GeneratorConfig,
    GqlGenerator,
    NotASchemaError,
    SchemaNotFoundError,
)

TEST_DATA = Path(__file__).parent / "test_data"
SCHEMAS = TEST_DATA / "schemas"


@pytest.fixture
def project(tmp_path) -> Path:
    root = tmp_path / "project"
    shutil.copytree(TEST_DATA / "project", root)
    return root


@pytest.fixture
def generator(project) -> GqlGenerator:
    return GqlGenerator(GeneratorConfig(app="my_app"), project)


def graphql(project: Path, *parts: str) -> Path:
    return project.joinpath("lib", "my_app_web", "graphql", *parts)


class TestInitProject:
    """Tests for project initialisation."""

    def test_creates_aggregators_and_routes(self, project, generator):
        report = generator.init_project()

        assert report.ok
        assert graphql(project, "schema.ex") in report.created
        assert graphql(project, "types.ex") in report.created
        assert graphql(project, "schema.ex").read_text().startswith("defmodule MyAppWeb.Graphql.Schema do\n")

        router = (project / "lib" / "my_app_web" / "router.ex").read_text()
        assert 'forward "/graphql", Absinthe.Plug,' in router
        assert router.rstrip().endswith("  end\nend")

    def test_second_init_changes_nothing(self, project, generator):
        generator.init_project()
        router = (project / "lib" / "my_app_web" / "router.ex").read_text()
        schema = graphql(project, "schema.ex").read_text()

        report = generator.init_project()

        assert report.created == []
        assert len(report.skipped) == 3
        assert (project / "lib" / "my_app_web" / "router.ex").read_text() == router
        assert graphql(project, "schema.ex").read_text() == schema

    def test_missing_router_is_reported(self, project, generator):
        (project / "lib" / "my_app_web" / "router.ex").unlink()

        report = generator.init_project()

        assert len(report.diagnostics) == 1
        assert "router" in str(report.diagnostics[0])
        assert graphql(project, "types.ex").exists()

    def test_router_can_be_skipped(self, project, generator):
        before = (project / "lib" / "my_app_web" / "router.ex").read_text()
        generator.init_project(router=False)
        assert (project / "lib" / "my_app_web" / "router.ex").read_text() == before


class TestGenerate:
    """Tests for one generation unit."""

    def test_creates_context_artifacts(self, project, generator):
        generator.init_project()
        schema = generator.resolve_schema("Accounts", str(SCHEMAS / "user.ex"))

        report = generator.generate("Accounts", schema, non_null=["id", "name"])

        assert report.ok
        assert report.created == [
            graphql(project, "accounts", "type.ex"),
            graphql(project, "accounts", "resolvers.ex"),
            graphql(project, "accounts", "schema.ex"),
        ]
        types = graphql(project, "accounts", "type.ex").read_text()
        assert types.startswith("defmodule MyAppWeb.Graphql.Accounts.Types do\n")
        assert "  enum :user_status do\n" in types
        assert "    field :name, non_null(:string)\n" in types
        assert "  input_object :user_params do\n" in types

    def test_links_into_aggregators(self, project, generator):
        generator.init_project()
        schema = generator.resolve_schema("Accounts", str(SCHEMAS / "user.ex"))

        report = generator.generate("Accounts", schema)

        assert report.linked == [graphql(project, "types.ex"), graphql(project, "schema.ex")]
        types = graphql(project, "types.ex").read_text()
        assert "  import_types MyAppWeb.Graphql.Accounts.Types\n  import_types MyAppWeb.Graphql.Accounts.Schema\nend\n" in types

        root = graphql(project, "schema.ex").read_text()
        assert "  query do\n    import_fields :user_queries\n" in root
        assert "  mutation do\n    import_fields :user_mutations\n" in root

    def test_second_run_appends_and_links_once(self, project, generator):
        generator.init_project()
        schema = generator.resolve_schema("Accounts", str(SCHEMAS / "user.ex"))
        generator.generate("Accounts", schema)
        root = graphql(project, "schema.ex").read_text()

        report = generator.generate("Accounts", schema)

        assert report.created == []
        assert len(report.updated) == 3
        assert report.linked == []
        assert graphql(project, "accounts", "type.ex").read_text().count("  object :user do\n") == 2
        assert graphql(project, "schema.ex").read_text() == root

    def test_second_schema_in_context(self, project, generator):
        generator.init_project()
        generator.generate("Accounts", generator.resolve_schema("Accounts", str(SCHEMAS / "user.ex")))

        report = generator.generate("Accounts", generator.resolve_schema("Accounts", str(SCHEMAS / "profile.ex")))

        assert len(report.updated) == 3
        types = graphql(project, "accounts", "type.ex").read_text()
        assert types.index("object :user do") < types.index("object :profile do")
        assert "  enum :profile_visibility do\n" in types
        assert "import_fields :profile_queries" in graphql(project, "schema.ex").read_text()

    def test_unmergeable_artifact_does_not_stop_the_run(self, project, generator):
        generator.init_project()
        broken = graphql(project, "accounts", "type.ex")
        broken.parent.mkdir(parents=True)
        broken.write_text("defmodule MyAppWeb.Graphql.Accounts.Types do\n")

        report = generator.generate("Accounts", generator.resolve_schema("Accounts", str(SCHEMAS / "user.ex")))

        assert not report.ok
        assert report.diagnostics[0].path == broken
        assert broken.read_text() == "defmodule MyAppWeb.Graphql.Accounts.Types do\n"
        assert graphql(project, "accounts", "resolvers.ex") in report.created
        assert graphql(project, "accounts", "schema.ex") in report.created

    def test_without_init_linkage_is_reported(self, project, generator):
        report = generator.generate("Accounts", generator.resolve_schema("Accounts", str(SCHEMAS / "user.ex")))

        assert len(report.created) == 3
        assert len(report.diagnostics) == 4
        assert not graphql(project, "types.ex").exists()

    def test_conflicting_filters_write_nothing(self, project, generator):
        schema = generator.resolve_schema("Accounts", str(SCHEMAS / "user.ex"))

        with pytest.raises(ConflictingFilterError):
            generator.generate("Accounts", schema, only=["name"], except_=["age"])

        assert not graphql(project, "accounts").exists()

    def test_custom_block(self, project, generator):
        generator.init_project()
        schema = generator.resolve_schema("Accounts", str(SCHEMAS / "user.ex"))
        custom = "field :email, :string do\n  resolve fn user, _, _ -> {:ok, String.downcase(user.email)} end\nend\n"

        generator.generate("Accounts", schema, custom_block=custom)

        types = graphql(project, "accounts", "type.ex").read_text()
        object_section = types.split("input_object", 1)[0]
        assert "    field :email, :string do\n" in object_section
        assert "    field :email, :string\n" not in object_section
        assert "    field :email, :string\n" in types.split("input_object", 1)[1]

    def test_default_non_null_from_config(self, project):
        generator = GqlGenerator(GeneratorConfig(app="my_app", default_non_null=["id"]), project)
        generator.generate("Accounts", generator.resolve_schema("Accounts", str(SCHEMAS / "user.ex")), nullable=[])

        assert "    field :id, non_null(:id)\n" in graphql(project, "accounts", "type.ex").read_text()

    def test_generation_header(self, project):
        generator = GqlGenerator(GeneratorConfig(app="my_app"), project, command_line="ecto_schema_to_gql gen Accounts user.ex")
        generator.generate("Accounts", generator.resolve_schema("Accounts", str(SCHEMAS / "user.ex")))

        types = graphql(project, "accounts", "type.ex").read_text()
        assert types.startswith("# Generated by: ecto_schema_to_gql gen Accounts user.ex\n")

    def test_lib_dir_and_web_module(self, tmp_path):
        config = GeneratorConfig(app="shop", web_module="StorefrontWeb", lib_dir="src")
        generator = GqlGenerator(config, tmp_path)
        generator.generate("Catalog", generator.resolve_schema("Catalog", "product", ["title"]))

        types = tmp_path / "src" / "shop_web" / "graphql" / "catalog" / "type.ex"
        assert types.read_text().startswith("defmodule StorefrontWeb.Graphql.Catalog.Types do\n")


class TestResolveSchema:
    """Tests for gen target resolution."""

    def test_manual_fields(self, generator):
        schema = generator.resolve_schema("Blog", "post", ["title", "views:integer"])

        assert schema.identity == "MyApp.Blog.Post"
        assert schema.source_name == "post"
        assert schema.field_names() == ["id", "title", "views"]

    def test_name_without_fields(self, generator):
        schema = generator.resolve_schema("Blog", "post")
        assert schema.field_names() == ["id"]

    def test_name_override(self, generator):
        schema = generator.resolve_schema("Accounts", "Member", [str(SCHEMAS / "user.ex")])

        assert schema.identity == "MyApp.Accounts.User"
        assert schema.source_name == "member"

    def test_relative_path(self, project, generator):
        target = project / "lib" / "my_app" / "accounts" / "user.ex"
        target.parent.mkdir(parents=True)
        shutil.copy(SCHEMAS / "user.ex", target)

        schema = generator.resolve_schema("Accounts", "lib/my_app/accounts/user.ex")
        assert schema.source_name == "user"

    def test_missing_schema_file(self, generator):
        with pytest.raises(SchemaNotFoundError):
            generator.resolve_schema("Accounts", "lib/my_app/accounts/missing.ex")

    def test_not_a_schema(self, generator):
        with pytest.raises(NotASchemaError):
            generator.resolve_schema("Accounts", str(SCHEMAS / "not_a_schema.ex"))

    def test_app_is_required(self, project):
        with pytest.raises(GenerationError):
            GqlGenerator(GeneratorConfig(), project)
