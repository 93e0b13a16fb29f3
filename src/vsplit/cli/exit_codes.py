"""Centralized exit codes for all CLI commands.

    0: Success (also --help)
    1: Usage error (bad flag combination, missing input file)
    2: Invalid value (rotation, re-encode mode, pattern, trim, config)
    3: Operation failed (ffmpeg or ffprobe returned an error)
  127: Required external tool missing
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for vsplit CLI commands."""

    SUCCESS = 0
    USAGE_ERROR = 1
    INVALID_VALUE = 2
    OPERATION_FAILED = 3
    TOOL_NOT_AVAILABLE = 127
