"""Shared CLI output helpers for JSON and human-readable modes."""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn

import click

from vsplit.cli.exit_codes import ExitCode


def error_exit(
    message: str,
    code: ExitCode | int,
    json_output: bool = False,
) -> NoReturn:
    """Print an error and exit.

    Args:
        message: Error message to display.
        code: Exit code (ExitCode enum or int).
        json_output: Emit a JSON error object instead of plain text.
    """
    if json_output:
        code_name = code.name if isinstance(code, ExitCode) else "UNKNOWN_ERROR"
        click.echo(
            json.dumps(
                {"status": "failed", "error": {"code": code_name, "message": message}}
            ),
            err=True,
        )
    else:
        click.echo(f"Error: {message}", err=True)

    sys.exit(int(code))


def echo_json(data: dict[str, Any]) -> None:
    """Print data as indented JSON on stdout."""
    click.echo(json.dumps(data, indent=2))


def stderr_echo(message: str = "", err: bool = True) -> None:
    """Trace sink that keeps stdout free for JSON output."""
    click.echo(message, err=True)
