"""
CLI utilities for command line reconstruction and introspection.
"""

from pathlib import Path

import click

PROG_NAME = "ecto_schema_to_gql"


def _format_value(value) -> str:
    if isinstance(value, Path):
        return value.as_posix()
    return str(value)


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct command line from current Click context using introspection.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
        cli_args = ctx.params
    except RuntimeError:
        # No active context, return basic command
        return PROG_NAME

    cmd_parts = [PROG_NAME]
    if ctx.parent is not None and ctx.info_name:
        cmd_parts.append(ctx.info_name)

    arguments = []  # For positional arguments
    options = []  # For optional arguments

    for param in click_command.params:
        param_name = param.name
        if param_name not in cli_args:
            continue

        value = cli_args[param_name]

        if isinstance(param, click.Argument):
            if isinstance(value, (tuple, list)):
                arguments.extend(_format_value(v) for v in value)
            elif value is not None:
                arguments.append(_format_value(value))

        elif isinstance(param, click.Option):
            # Skip if it's the default value
            if value == param.default or value is None or value == ():
                continue

            if param.is_flag:
                if value:
                    options.append(param.opts[0])
                elif param.secondary_opts:
                    options.append(param.secondary_opts[0])
                continue

            flag = param.opts[0] if param.opts else f"--{param_name}"
            values = value if isinstance(value, (tuple, list)) else (value,)
            for v in values:
                options.extend([flag, _format_value(v)])

    cmd_parts.extend(arguments)
    cmd_parts.extend(options)

    return " ".join(cmd_parts)
