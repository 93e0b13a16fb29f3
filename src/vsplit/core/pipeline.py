"""Segment pipeline construction.

build_plan() is a pure function from a resolved transform, re-encode
decision, trim range, encoder settings and output spec to a Plan. It does
no I/O; validation of patterns and trim values happens here so a Plan is
either complete and consistent or never created.
"""

from __future__ import annotations

import re
from pathlib import Path

from vsplit.core.exceptions import (
    InvalidPatternError,
    InvalidSegmentTimeError,
    InvalidTrimError,
)
from vsplit.core.types import (
    DEFAULT_SEGMENT_EXTENSION,
    EncodingParameters,
    OutputSpec,
    Plan,
    ReencodeDecision,
    Transform,
    TrimRange,
    escape_percent,
)

# printf-style integer placeholder as understood by the segment muxer
_INDEX_PLACEHOLDER = re.compile(r"%(\d*)d")

# [-][HH:]MM:SS[.frac] or [-]S[.frac][s|ms|us]
_TIME_DURATION = re.compile(
    r"^-?(?:(?:\d+:)?\d{1,2}:\d{1,2}(?:\.\d+)?|\d+(?:\.\d+)?(?:s|ms|us)?)$"
)


def default_pattern(input_path: Path) -> str:
    """Default segment filename pattern: <stem>_%03d.mp4."""
    return f"{escape_percent(input_path.stem)}_%03d.{DEFAULT_SEGMENT_EXTENSION}"


def validate_pattern(pattern: str) -> str:
    """Check that a filename pattern has exactly one segment index placeholder.

    Args:
        pattern: Filename pattern such as "clip_%03d.mp4".

    Returns:
        The pattern unchanged.

    Raises:
        InvalidPatternError: If the pattern is empty or does not contain
            exactly one integer placeholder, or if it holds a "%"
            that is neither the placeholder nor an escaped "%%".
    """
    if not pattern or not pattern.strip():
        raise InvalidPatternError("Output filename pattern must not be empty.")

    placeholders = _INDEX_PLACEHOLDER.findall(pattern.replace("%%", ""))
    if len(placeholders) != 1:
        raise InvalidPatternError(
            f"Output filename pattern '{pattern}' must contain exactly one "
            f"segment index placeholder such as %03d (found {len(placeholders)})."
        )
    if "%" in _INDEX_PLACEHOLDER.sub("", pattern.replace("%%", "")):
        raise InvalidPatternError(
            f"Output filename pattern '{pattern}' contains a stray '%'; "
            "write a literal percent sign as '%%'."
        )
    return pattern


def validate_time(value: str, label: str) -> str:
    """Check that a trim value is an FFmpeg time duration.

    Raises:
        InvalidTrimError: If the value cannot be parsed as a duration.
    """
    if not _TIME_DURATION.match(value.strip()):
        raise InvalidTrimError(
            f"Invalid {label} time '{value}'. Use [HH:]MM:SS[.ms] or seconds."
        )
    return value.strip()


def validate_trim(trim: TrimRange) -> TrimRange:
    """Validate both ends of a trim range, normalizing blank values to None."""
    start = validate_time(trim.start, "start") if trim.start else None
    end = validate_time(trim.end, "end") if trim.end else None
    return TrimRange(start=start, end=end)


def validate_segment_time(segment_time: float) -> float:
    """Check that the segment length is a positive number of seconds.

    Raises:
        InvalidSegmentTimeError: If the value is not positive.
    """
    try:
        seconds = float(segment_time)
    except (TypeError, ValueError) as e:
        raise InvalidSegmentTimeError(
            f"Segment time must be a number of seconds, got {segment_time!r}"
        ) from e
    if seconds <= 0:
        raise InvalidSegmentTimeError(
            f"Segment time must be greater than zero, got {segment_time!r}"
        )
    return seconds


def build_output_spec(
    input_path: Path,
    output_dir: Path,
    pattern: str | None = None,
    overwrite: bool = False,
) -> OutputSpec:
    """Build the output spec for a file.

    A custom pattern replaces the default entirely.

    Raises:
        InvalidPatternError: If the resulting pattern is malformed.
    """
    filename_pattern = pattern if pattern else default_pattern(input_path)
    return OutputSpec(
        output_dir=output_dir,
        filename_pattern=validate_pattern(filename_pattern),
        overwrite=overwrite,
    )


def build_plan(
    input_path: Path,
    transform: Transform,
    decision: ReencodeDecision,
    output: OutputSpec,
    segment_time: float,
    trim: TrimRange | None = None,
    encoding: EncodingParameters | None = None,
    ffmpeg_path: str | Path = "ffmpeg",
) -> Plan:
    """Assemble the segment Plan for one input file.

    Args:
        input_path: Source video file.
        transform: Resolved rotation transform.
        decision: Stream copy or full re-encode.
        output: Output directory, pattern and overwrite policy.
        segment_time: Segment length in seconds.
        trim: Optional start/end trim.
        encoding: Encoder settings (ignored for stream copy).
        ffmpeg_path: FFmpeg executable to invoke.

    Returns:
        Immutable Plan describing the full invocation.

    Raises:
        InvalidPatternError: If the output pattern is malformed.
        InvalidTrimError: If a trim value is malformed.
        InvalidSegmentTimeError: If segment_time is not positive.
    """
    validate_pattern(output.filename_pattern)

    return Plan(
        ffmpeg_path=str(ffmpeg_path),
        input_path=input_path,
        output=output,
        transform=transform,
        decision=decision,
        segment_time=validate_segment_time(segment_time),
        trim=validate_trim(trim or TrimRange()),
        encoding=encoding or EncodingParameters(),
    )
