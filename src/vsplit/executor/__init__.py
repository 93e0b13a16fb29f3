"""Executor module for running segment plans through ffmpeg.

- FFmpegSegmentExecutor: runs a Plan with timeout and cancellation
- ExecutorResult: outcome of a single ffmpeg run
- get_tool_path / require_tools / check_tool_availability: tool resolution
"""

from vsplit.executor.ffmpeg import FFmpegSegmentExecutor
from vsplit.executor.interface import (
    REQUIRED_TOOLS,
    Executor,
    ExecutorResult,
    check_tool_availability,
    get_tool_path,
    require_tools,
)

__all__ = [
    "REQUIRED_TOOLS",
    "Executor",
    "ExecutorResult",
    "FFmpegSegmentExecutor",
    "check_tool_availability",
    "get_tool_path",
    "require_tools",
]
