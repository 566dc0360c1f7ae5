import json
import logging
from pathlib import Path

import click

from . import __version__
from .cli_utils import reconstruct_command_line
from .pipeline import GenerationError, GenerationReport, GeneratorConfig, GqlGenerator, read_mix_app


def _split_names(values: tuple[str, ...]) -> list[str]:
    """Flatten repeated, comma-separated option values."""
    return [name.strip() for value in values for name in value.split(",") if name.strip()]


def _load_config(config: str | None, **overrides) -> GeneratorConfig:
    if config is not None:
        with open(config) as f:
            generator_config = GeneratorConfig.from_dict(json.load(f))
    else:
        generator_config = GeneratorConfig()

    # CLI options override the config file
    for key, value in overrides.items():
        if value is not None:
            setattr(generator_config, key, value)

    if not generator_config.app:
        generator_config.app = read_mix_app(".") or ""
    if not generator_config.app:
        raise click.UsageError("Cannot determine the application name: pass --app or run inside a Mix project.")

    return generator_config


def _echo_report(report: GenerationReport) -> None:
    for path in report.created:
        click.echo(f"* creating {path}")
    for path in report.updated:
        click.echo(f"* updating {path}")
    for path in report.linked:
        click.echo(f"* linking {path}")
    for path in report.skipped:
        click.echo(f"* skipping {path}")
    for diagnostic in report.diagnostics:
        click.echo(f"warning: {diagnostic}", err=True)


def project_options(f):
    """Options shared by every command that writes into the project."""
    f = click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False), help="JSON config file")(f)
    f = click.option("--lib-dir", default=None, type=str, help="Source root of the Phoenix project (default: lib)")(f)
    f = click.option("--web-module", default=None, type=str, help="Web module name (default: <App>Web)")(f)
    f = click.option("--app", default=None, type=str, help="OTP application name (default: read from mix.exs)")(f)
    return f


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every step")
@click.version_option(__version__)
def cli(verbose):
    """Generate Absinthe GraphQL artifacts from Ecto schemas."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")


@cli.command()
@project_options
@click.option("--router/--no-router", default=True, help="Inject the /graphql routes into the router")
def init(app, web_module, lib_dir, config, router):
    """Create the root schema and the types aggregator."""
    generator_config = _load_config(config, app=app, web_module=web_module, lib_dir=lib_dir)

    try:
        generator = GqlGenerator(generator_config, ".", reconstruct_command_line(init))
        report = generator.init_project(router=router)
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    _echo_report(report)


@cli.command()
@click.argument("context")
@click.argument("target")
@click.argument("args", nargs=-1)
@click.option("--only", multiple=True, help="Fields to keep (comma separated, repeatable)")
@click.option("--except", "except_", multiple=True, help="Fields to drop (comma separated, repeatable)")
@click.option("--non-null", multiple=True, help="Fields made non-null on the object type")
@click.option("--nullable", multiple=True, help="Fields kept nullable, wins over --non-null")
@click.option("--associations/--no-associations", default=True, help="Add association fields to the object type")
@click.option(
    "--custom-block",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="File with hand-written fields for the object type; they replace generated fields of the same name",
)
@click.option("--templates", default=None, type=click.Path(exists=True, file_okay=False), help="Directory overriding the packaged templates")
@project_options
def gen(context, target, args, only, except_, non_null, nullable, associations, custom_block, templates, app, web_module, lib_dir, config):
    """Generate types, schema and resolvers for one schema.

    TARGET is an Ecto schema file, or a schema name followed by either a
    schema file or manual fields (name:type, or name for a string).
    """
    generator_config = _load_config(
        config,
        app=app,
        web_module=web_module,
        lib_dir=lib_dir,
        template_dir=templates,
    )

    block = Path(custom_block).read_text(encoding="utf-8") if custom_block else None

    try:
        generator = GqlGenerator(generator_config, ".", reconstruct_command_line(gen))
        schema = generator.resolve_schema(context, target, args)
        report = generator.generate(
            context,
            schema,
            only=_split_names(only) or None,
            except_=_split_names(except_),
            non_null=_split_names(non_null),
            nullable=_split_names(nullable),
            include_associations=associations,
            custom_block=block,
        )
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    _echo_report(report)
