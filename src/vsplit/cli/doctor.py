"""CLI command for checking the local environment."""

from __future__ import annotations

import sys

import click

from vsplit.cli.exit_codes import ExitCode
from vsplit.cli.output import echo_json
from vsplit.config.loader import get_data_dir, get_default_config_path
from vsplit.config.profiles import list_profiles
from vsplit.executor import check_tool_availability


@click.command("doctor")
@click.option(
    "--json",
    "-j",
    "json_output",
    is_flag=True,
    default=False,
    help="Print the report as JSON.",
)
@click.pass_context
def doctor_command(ctx: click.Context, json_output: bool) -> None:
    """Check that ffmpeg and ffprobe are available and show config locations.

    Exits with status 127 when a required tool is missing.
    """
    config = ctx.obj["config"]
    tools = check_tool_availability(config.tools)
    config_path = get_default_config_path()
    data_dir = get_data_dir()
    profiles = list_profiles(data_dir)
    missing = [name for name, path in tools.items() if path is None]

    if json_output:
        echo_json(
            {
                "tools": {
                    name: str(path) if path else None for name, path in tools.items()
                },
                "config_file": str(config_path),
                "config_file_exists": config_path.exists(),
                "data_dir": str(data_dir),
                "profiles": profiles,
                "defaults": {
                    "segment_time": config.defaults.segment_time,
                    "rotate": config.defaults.rotate,
                    "reencode": config.defaults.reencode,
                    "workers": config.defaults.workers,
                },
            }
        )
    else:
        click.echo("Tools:")
        for name, path in tools.items():
            status = str(path) if path else "NOT FOUND"
            click.echo(f"  {name:<8} {status}")
        suffix = "" if config_path.exists() else " (not present)"
        click.echo(f"Config:   {config_path}{suffix}")
        click.echo(f"Profiles: {', '.join(profiles) if profiles else '(none)'}")
        if missing:
            click.echo(
                f"Missing required tools: {', '.join(missing)}. "
                "Install FFmpeg or set VSPLIT_FFMPEG_PATH / VSPLIT_FFPROBE_PATH.",
                err=True,
            )

    sys.exit(ExitCode.TOOL_NOT_AVAILABLE if missing else ExitCode.SUCCESS)
