"""Core data types for rotation, re-encode and segment planning.

These are closed enums and frozen dataclasses. A Plan is built once per
input file by the pipeline builder and never mutated afterwards.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from vsplit.core.exceptions import InvalidReencodeModeError, InvalidRotationError

# Extensions picked up by directory discovery (compared case-insensitively)
VIDEO_EXTENSIONS: frozenset[str] = frozenset(
    {".mp4", ".mov", ".mkv", ".avi", ".m4v", ".webm"}
)

DEFAULT_SEGMENT_EXTENSION = "mp4"
DEFAULT_SEGMENT_TIME = 60.0


class RotationPreference(Enum):
    """Rotation requested by the user, before metadata is consulted."""

    NONE = "0"
    DEG_90 = "90"
    DEG_180 = "180"
    DEG_270 = "270"
    AUTO = "auto"

    @classmethod
    def parse(cls, value: str | RotationPreference) -> RotationPreference:
        """Parse a rotation literal.

        Args:
            value: One of "0", "90", "180", "270", "auto" (or an enum member).

        Returns:
            Matching RotationPreference.

        Raises:
            InvalidRotationError: If the literal is not recognized.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().casefold()
        for member in cls:
            if member.value == text:
                return member
        raise InvalidRotationError(str(value))


class Transform(Enum):
    """Concrete rotation applied to the video stream."""

    NOOP = "noop"
    ROTATE_90_CW = "rotate_90_cw"
    ROTATE_180 = "rotate_180"
    ROTATE_90_CCW = "rotate_90_ccw"

    @property
    def filter_expression(self) -> str | None:
        """FFmpeg -vf expression, or None when no filter is needed.

        180 degrees is emitted as two successive transposes.
        """
        return _FILTER_EXPRESSIONS[self]

    @property
    def degrees(self) -> int:
        """Clockwise rotation in degrees (0, 90, 180, 270)."""
        return _TRANSFORM_DEGREES[self]


_FILTER_EXPRESSIONS: dict[Transform, str | None] = {
    Transform.NOOP: None,
    Transform.ROTATE_90_CW: "transpose=1",
    Transform.ROTATE_180: "transpose=2,transpose=2",
    Transform.ROTATE_90_CCW: "transpose=2",
}

_TRANSFORM_DEGREES: dict[Transform, int] = {
    Transform.NOOP: 0,
    Transform.ROTATE_90_CW: 90,
    Transform.ROTATE_180: 180,
    Transform.ROTATE_90_CCW: 270,
}


class ReencodeMode(Enum):
    """User preference for stream copy versus re-encoding."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"

    @classmethod
    def parse(cls, value: str | ReencodeMode) -> ReencodeMode:
        """Parse a re-encode mode literal.

        Raises:
            InvalidReencodeModeError: If the literal is not recognized.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().casefold()
        for member in cls:
            if member.value == text:
                return member
        raise InvalidReencodeModeError(str(value))


class ReencodeDecision(Enum):
    """Resolved codec strategy for one file."""

    STREAM_COPY = "stream_copy"
    FULL_REENCODE = "full_reencode"


@dataclass(frozen=True)
class TrimRange:
    """Optional start/end timestamps in FFmpeg time syntax.

    Ordering is not checked here; FFmpeg rejects inverted ranges itself.
    """

    start: str | None = None
    end: str | None = None


@dataclass(frozen=True)
class EncodingParameters:
    """Encoder settings, only consulted when re-encoding."""

    video_codec: str = "libx264"
    crf: int = 23
    preset: str = "medium"
    threads: int | None = None


def escape_percent(text: str) -> str:
    """Double every "%" so the segment muxer treats it as a literal."""
    return text.replace("%", "%%")


@dataclass(frozen=True)
class OutputSpec:
    """Where and how segments are written."""

    output_dir: Path
    filename_pattern: str
    overwrite: bool = False

    @property
    def template(self) -> Path:
        """Full output path template passed to FFmpeg.

        The segment muxer reads the whole path as a printf template, so a
        literal "%" in the directory part is doubled.
        """
        return Path(escape_percent(str(self.output_dir))) / self.filename_pattern


@dataclass(frozen=True)
class SegmentConfig:
    """Immutable per-run settings shared by every file of a run."""

    segment_time: float = DEFAULT_SEGMENT_TIME
    rotation: RotationPreference = RotationPreference.NONE
    reencode: ReencodeMode = ReencodeMode.AUTO
    encoding: EncodingParameters = field(default_factory=EncodingParameters)
    pattern: str | None = None
    trim: TrimRange = field(default_factory=TrimRange)
    dry_run: bool = False
    overwrite: bool = False
    timeout: float | None = None


def format_seconds(value: float) -> str:
    """Render seconds without a trailing '.0' for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class Plan:
    """Fully resolved FFmpeg segment invocation for one input file."""

    ffmpeg_path: str
    input_path: Path
    output: OutputSpec
    transform: Transform
    decision: ReencodeDecision
    segment_time: float
    trim: TrimRange = field(default_factory=TrimRange)
    encoding: EncodingParameters = field(default_factory=EncodingParameters)

    @property
    def output_template(self) -> Path:
        return self.output.template

    @property
    def filter_expression(self) -> str | None:
        """Filter actually attached; stream copy never carries one."""
        if self.decision is ReencodeDecision.STREAM_COPY:
            return None
        return self.transform.filter_expression

    def to_args(self) -> list[str]:
        """Build the ordered FFmpeg argument list.

        Returns:
            Command list starting with the ffmpeg executable.
        """
        args = [self.ffmpeg_path, "-hide_banner", "-loglevel", "info"]
        args.append("-y" if self.output.overwrite else "-n")

        # Start trim seeks the input, end trim bounds the output
        if self.trim.start:
            args.extend(["-ss", self.trim.start])
        args.extend(["-i", str(self.input_path)])
        if self.trim.end:
            args.extend(["-to", self.trim.end])

        # First video stream plus optional audio
        args.extend(["-map", "0:v:0", "-map", "0:a?"])

        if self.filter_expression:
            args.extend(["-vf", self.filter_expression])

        args.extend(
            [
                "-f",
                "segment",
                "-segment_time",
                format_seconds(self.segment_time),
                "-reset_timestamps",
                "1",
            ]
        )

        if self.decision is ReencodeDecision.FULL_REENCODE:
            args.extend(
                [
                    "-c:v",
                    self.encoding.video_codec,
                    "-crf",
                    str(self.encoding.crf),
                    "-preset",
                    self.encoding.preset,
                    "-c:a",
                    "copy",
                ]
            )
            if self.encoding.threads is not None:
                args.extend(["-threads", str(self.encoding.threads)])
        else:
            args.extend(["-c", "copy"])

        args.append(str(self.output_template))
        return args

    @property
    def command_line(self) -> str:
        """Shell-quoted equivalent of to_args() for display."""
        return shlex.join(self.to_args())

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {
            "input": str(self.input_path),
            "output_template": str(self.output_template),
            "transform": self.transform.value,
            "decision": self.decision.value,
            "filter": self.filter_expression,
            "segment_time": self.segment_time,
            "command": self.to_args(),
        }


class OutcomeStatus(Enum):
    """Per-file processing result."""

    SKIPPED = "skipped"
    EXECUTED = "executed"
    DRY_RUN = "dry_run"
    FAILED = "failed"


@dataclass(frozen=True)
class FileOutcome:
    """Outcome of processing one input file."""

    input_path: Path
    status: OutcomeStatus
    output_dir: Path | None = None
    plan: Plan | None = None
    reason: str | None = None
    return_code: int | None = None

    @property
    def success(self) -> bool:
        return self.status in (OutcomeStatus.EXECUTED, OutcomeStatus.DRY_RUN)

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {
            "input": str(self.input_path),
            "status": self.status.value,
            "output_dir": str(self.output_dir) if self.output_dir else None,
            "reason": self.reason,
            "return_code": self.return_code,
            "plan": self.plan.to_dict() if self.plan else None,
        }
