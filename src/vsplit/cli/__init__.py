"""CLI module for vsplit."""

import logging
import sys
from dataclasses import replace
from pathlib import Path

import click

from vsplit.cli.exit_codes import ExitCode
from vsplit.cli.output import error_exit

logger = logging.getLogger(__name__)


def _configure_logging(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from the loaded config plus CLI overrides."""
    from vsplit.logging import configure_logging

    overrides: dict[str, object] = {}
    if log_level is not None:
        overrides["level"] = log_level
    if log_file is not None:
        overrides["file"] = log_file
    if log_json:
        overrides["format"] = "json"
    configure_logging(replace(ctx.obj["config"].logging, **overrides))


@click.group(invoke_without_command=True)
@click.version_option(package_name="vsplit")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use (default: ~/.vsplit/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: warning).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Write logs to this file.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """vsplit - rotate and split videos into fixed-length segments with FFmpeg."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(ExitCode.SUCCESS)

    ctx.ensure_object(dict)

    # Preserve a config injected by tests
    if "config" not in ctx.obj:
        from vsplit.config import ConfigError, get_config

        try:
            ctx.obj["config"] = get_config(config_path=config_path)
        except ConfigError as e:
            error_exit(str(e), ExitCode.INVALID_VALUE)

    _configure_logging(ctx, log_level, log_file, log_json)


def _register_commands() -> None:
    from vsplit.cli.doctor import doctor_command
    from vsplit.cli.probe import probe_command
    from vsplit.cli.split import split_command

    main.add_command(split_command)
    main.add_command(probe_command)
    main.add_command(doctor_command)


_register_commands()


def run() -> None:
    """Console script entry point.

    Click reports parse errors with status 2; vsplit reserves 2 for invalid
    values and uses 1 for usage errors.
    """
    try:
        rv = main.main(standalone_mode=False)
    except click.UsageError as e:
        e.show()
        sys.exit(ExitCode.USAGE_ERROR)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(ExitCode.USAGE_ERROR)
    sys.exit(rv if isinstance(rv, int) else ExitCode.SUCCESS)
