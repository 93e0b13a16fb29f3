"""Executor result type and external tool resolution.

Tools are resolved from configured paths (config file or VSPLIT_*_PATH)
first, then from the system PATH.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from vsplit.core.exceptions import ExternalToolMissingError

if TYPE_CHECKING:
    import threading

    from vsplit.config.models import ToolPathsConfig
    from vsplit.core.types import Plan

REQUIRED_TOOLS: tuple[str, ...] = ("ffmpeg", "ffprobe")


@dataclass(frozen=True)
class ExecutorResult:
    """Result of running a Plan."""

    success: bool
    """True if ffmpeg exited with status 0."""

    return_code: int
    """Process exit status; -1 when killed on timeout or cancellation."""

    message: str = ""
    """Human-readable summary of the result."""

    stderr_tail: tuple[str, ...] = ()
    """Last lines of ffmpeg's stderr, kept for failure reports."""


class Executor(Protocol):
    """Protocol for plan executors."""

    def execute(
        self, plan: Plan, cancel_event: threading.Event | None = None
    ) -> ExecutorResult:
        """Run the plan to completion (or until cancelled)."""
        ...


def get_tool_path(tool_name: str, tools: ToolPathsConfig | None = None) -> Path | None:
    """Get path to a tool, or None if not available.

    Args:
        tool_name: "ffmpeg" or "ffprobe".
        tools: Configured tool paths (optional).

    Returns:
        Configured path if it exists, else the PATH lookup result, else None.
    """
    configured = getattr(tools, tool_name, None) if tools is not None else None
    if configured is not None:
        configured = Path(configured).expanduser()
        if configured.is_file():
            return configured
        found = shutil.which(str(configured))
        return Path(found) if found else None

    found = shutil.which(tool_name)
    return Path(found) if found else None


def check_tool_availability(
    tools: ToolPathsConfig | None = None,
) -> dict[str, Path | None]:
    """Resolve every required tool.

    Returns:
        Dict mapping tool name to its path (None if missing).
    """
    return {name: get_tool_path(name, tools) for name in REQUIRED_TOOLS}


def require_tools(
    tools: ToolPathsConfig | None = None,
    names: tuple[str, ...] = REQUIRED_TOOLS,
) -> dict[str, Path]:
    """Resolve tools, raising if any is missing.

    Args:
        tools: Configured tool paths (optional).
        names: Tool names that must be present.

    Returns:
        Dict mapping tool name to its path.

    Raises:
        ExternalToolMissingError: If one or more tools cannot be found.
    """
    resolved = {name: get_tool_path(name, tools) for name in names}
    missing = [name for name, path in resolved.items() if path is None]
    if missing:
        raise ExternalToolMissingError(missing)
    return {name: path for name, path in resolved.items() if path is not None}
