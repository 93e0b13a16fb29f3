"""CLI command for inspecting a file's rotation metadata."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from vsplit.cli.exit_codes import ExitCode
from vsplit.cli.output import echo_json, error_exit
from vsplit.core.exceptions import ExternalToolMissingError
from vsplit.core.rotation import transform_for_tag
from vsplit.executor import require_tools
from vsplit.introspector import FFprobeRotationProbe, MediaIntrospectionError


@click.command("probe")
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--json",
    "-j",
    "json_output",
    is_flag=True,
    default=False,
    help="Print the result as JSON.",
)
@click.pass_context
def probe_command(ctx: click.Context, file: Path, json_output: bool) -> None:
    """Show the rotate tag of FILE and the transform auto rotation would apply."""
    if not file.is_file():
        error_exit(f"Input file not found: {file}", ExitCode.USAGE_ERROR, json_output)

    try:
        tools = require_tools(ctx.obj["config"].tools, ("ffprobe",))
    except ExternalToolMissingError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE, json_output)

    try:
        tag = FFprobeRotationProbe(tools["ffprobe"]).get_rotation_tag(file)
    except MediaIntrospectionError as e:
        error_exit(str(e), ExitCode.OPERATION_FAILED, json_output)

    transform = transform_for_tag(tag)
    if json_output:
        echo_json(
            {
                "file": str(file),
                "rotate_tag": tag,
                "transform": transform.value,
                "filter": transform.filter_expression,
            }
        )
    else:
        click.echo(f"File:       {file}")
        click.echo(f"Rotate tag: {tag if tag is not None else '(none)'}")
        click.echo(f"Transform:  {transform.value}")
        if transform.filter_expression:
            click.echo(f"Filter:     {transform.filter_expression}")
    sys.exit(ExitCode.SUCCESS)
