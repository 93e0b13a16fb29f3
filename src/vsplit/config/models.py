"""Configuration data models.

This module defines dataclasses for vsplit configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "warning"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class DefaultsConfig:
    """Defaults for `vsplit split` options (overridden by CLI flags)."""

    segment_time: float = 60.0
    rotate: str = "0"
    reencode: str = "auto"
    vcodec: str = "libx264"
    crf: int = 23
    preset: str = "medium"
    threads: int | None = None
    pattern: str | None = None
    start: str | None = None
    end: str | None = None
    output_dir: Path = Path("./output")
    overwrite: bool = False

    workers: int = 1
    """Number of files processed in parallel (1 = sequential)."""

    timeout: float | None = None
    """Seconds before a running ffmpeg is killed (None or 0 = no limit)."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if self.segment_time <= 0:
            raise ValueError(
                f"segment_time must be greater than zero, got {self.segment_time}"
            )


@dataclass
class VsplitConfig:
    """Top-level configuration."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)


@dataclass(frozen=True)
class Profile:
    """Named set of `split` defaults loaded from ~/.vsplit/profiles/.

    Immutable; applied on top of the base config defaults.
    """

    name: str
    description: str | None = None
    overrides: dict = field(default_factory=dict)
