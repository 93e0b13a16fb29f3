"""Exception hierarchy for segment planning and execution.

File-local errors (invalid values, execution failures) abort a single file;
ExternalToolMissingError is global and aborts before any file is touched.
"""

from __future__ import annotations

from pathlib import Path


class VsplitError(Exception):
    """Base class for all vsplit errors."""

    pass


class InvalidValueError(VsplitError):
    """Base class for rejected configuration values."""

    pass


class InvalidRotationError(InvalidValueError):
    """Raised for a rotation value outside 0, 90, 180, 270, auto."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(
            f"Invalid rotation value '{value}'. Use 0, 90, 180, 270, or auto."
        )


class InvalidReencodeModeError(InvalidValueError):
    """Raised for a re-encode mode outside auto, always, never."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(
            f"Invalid re-encode mode '{value}'. Use auto, always, or never."
        )


class InvalidPatternError(InvalidValueError):
    """Raised when an output filename pattern lacks a single index placeholder."""

    pass


class InvalidTrimError(InvalidValueError):
    """Raised when a start/end trim value is not an FFmpeg time duration."""

    pass


class InvalidSegmentTimeError(InvalidValueError):
    """Raised when the segment length is not a positive number."""

    pass


class MissingInputError(VsplitError):
    """Raised when a single input file does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Input file not found: {path}")


class ExternalToolMissingError(VsplitError):
    """Raised when ffmpeg or ffprobe cannot be located."""

    def __init__(self, tools: list[str]) -> None:
        self.tools = tools
        super().__init__(
            f"Required tool(s) not found in PATH: {', '.join(tools)}. "
            "Install ffmpeg or configure tool paths via VSPLIT_FFMPEG_PATH / "
            "VSPLIT_FFPROBE_PATH or the [tools] section of config.toml."
        )


class ExternalExecutionError(VsplitError):
    """Raised when ffmpeg exits with a non-zero status for a file."""

    def __init__(self, path: Path, return_code: int, message: str = "") -> None:
        self.path = path
        self.return_code = return_code
        detail = f": {message}" if message else ""
        super().__init__(f"ffmpeg failed for {path} (exit {return_code}){detail}")
