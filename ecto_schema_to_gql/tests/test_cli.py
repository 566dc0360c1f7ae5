"""
Tests for the command line interface.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest
from click.testing import CliRunner

from ecto_schema_to_gql.ecto_schema_to_gql import cli

TEST_DATA = Path(__file__).parent / "test_data"
SCHEMAS = TEST_DATA / "schemas"


@pytest.fixture
def project(tmp_path, monkeypatch) -> Path:
    root = tmp_path / "project"
    shutil.copytree(TEST_DATA / "project", root)
    schema_dir = root / "lib" / "my_app" / "accounts"
    schema_dir.mkdir(parents=True)
    shutil.copy(SCHEMAS / "user.ex", schema_dir / "user.ex")
    monkeypatch.chdir(root)
    return root


GRAPHQL = Path("lib") / "my_app_web" / "graphql"


class TestCli:
    """Tests for the init and gen commands."""

    def test_init_reads_app_from_mix(self, project):
        result = CliRunner().invoke(cli, ["init"])

        assert result.exit_code == 0, result.output
        assert (GRAPHQL / "schema.ex").exists()
        assert (GRAPHQL / "types.ex").exists()
        assert "/graphql" in (project / "lib" / "my_app_web" / "router.ex").read_text()

    def test_init_without_router(self, project):
        result = CliRunner().invoke(cli, ["init", "--no-router"])

        assert result.exit_code == 0, result.output
        assert "/graphql" not in (project / "lib" / "my_app_web" / "router.ex").read_text()

    def test_gen_from_schema_file(self, project):
        runner = CliRunner()
        runner.invoke(cli, ["init"])

        result = runner.invoke(
            cli,
            ["gen", "Accounts", "lib/my_app/accounts/user.ex", "--non-null", "id,name", "--nullable", "id", "--except", "settings"],
        )

        assert result.exit_code == 0, result.output
        types = (GRAPHQL / "accounts" / "type.ex").read_text()
        assert types.startswith("# Generated by: ecto_schema_to_gql gen Accounts lib/my_app/accounts/user.ex")
        assert "    field :id, :id\n" in types
        assert "    field :name, non_null(:string)\n" in types
        assert ":settings" not in types
        assert "import_fields :user_queries" in (GRAPHQL / "schema.ex").read_text()

    def test_gen_manual_fields(self, project):
        result = CliRunner().invoke(cli, ["gen", "Blog", "post", "title", "views:integer", "--no-associations"])

        types = (GRAPHQL / "blog" / "type.ex").read_text()
        assert "  object :post do\n    field :id, :id\n    field :title, :string\n    field :views, :integer\n  end\n" in types
        # Aggregators are missing without init, reported as warnings
        assert result.exit_code == 0
        assert "warning:" in result.output

    def test_gen_repeated_options(self, project):
        result = CliRunner().invoke(cli, ["gen", "Accounts", "lib/my_app/accounts/user.ex", "--only", "id,name", "--only", "email"])

        assert result.exit_code == 0, result.output
        types = (GRAPHQL / "accounts" / "type.ex").read_text()
        assert "  object :user do\n    field :id, :id\n    field :name, :string\n    field :email, :string\n  end\n" in types

    def test_gen_custom_block(self, project):
        Path("email_field.ex").write_text('field :email, :string, description: "Lowercased"\n')

        result = CliRunner().invoke(cli, ["gen", "Accounts", "lib/my_app/accounts/user.ex", "--custom-block", "email_field.ex"])

        assert result.exit_code == 0, result.output
        types = (GRAPHQL / "accounts" / "type.ex").read_text()
        assert '    field :email, :string, description: "Lowercased"\n' in types

    def test_conflicting_filters(self, project):
        result = CliRunner().invoke(cli, ["gen", "Accounts", "lib/my_app/accounts/user.ex", "--only", "name", "--except", "age"])

        assert result.exit_code == 1
        assert "either `only` or `except`" in result.output
        assert not (GRAPHQL / "accounts").exists()

    def test_missing_schema(self, project):
        result = CliRunner().invoke(cli, ["gen", "Accounts", "lib/my_app/accounts/missing.ex"])

        assert result.exit_code == 1
        assert "missing.ex" in result.output

    def test_not_a_schema(self, project):
        shutil.copy(SCHEMAS / "not_a_schema.ex", "accounts.ex")

        result = CliRunner().invoke(cli, ["gen", "Accounts", "accounts.ex"])

        assert result.exit_code == 1
        assert "not an Ecto schema" in result.output

    def test_app_option_and_config_file(self, project):
        Path("mix.exs").unlink()
        Path("gql.json").write_text(json.dumps({"web_module": "ShopWeb", "add_generation_comment": False}))

        result = CliRunner().invoke(cli, ["gen", "Blog", "post", "title", "--app", "my_app", "--config", "gql.json"])

        assert result.exit_code == 0, result.output
        types = (GRAPHQL / "blog" / "type.ex").read_text()
        assert types.startswith("defmodule ShopWeb.Graphql.Blog.Types do\n")

    def test_unknown_app(self, project):
        Path("mix.exs").unlink()

        result = CliRunner().invoke(cli, ["init"])

        assert result.exit_code == 2
        assert "--app" in result.output

    def test_custom_templates(self, project):
        templates = Path("gql_templates") / "resolvers"
        templates.mkdir(parents=True)
        (templates / "block.ex.jinja2").write_text("\n  # resolvers for {{ plural }}\n")

        result = CliRunner().invoke(cli, ["gen", "Blog", "post", "title", "--templates", "gql_templates"])

        assert result.exit_code == 0, result.output
        assert "  # resolvers for posts\n" in (GRAPHQL / "blog" / "resolvers.ex").read_text()
