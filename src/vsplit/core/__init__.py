"""Core decision logic: rotation, re-encode policy and segment planning.

- resolve_rotation: RotationPreference -> Transform
- decide_reencode: (ReencodeMode, Transform) -> ReencodeDecision
- build_plan: resolved inputs -> Plan (pure, no I/O)
"""

from vsplit.core.exceptions import (
    ExternalExecutionError,
    ExternalToolMissingError,
    InvalidPatternError,
    InvalidReencodeModeError,
    InvalidRotationError,
    InvalidSegmentTimeError,
    InvalidTrimError,
    InvalidValueError,
    MissingInputError,
    VsplitError,
)
from vsplit.core.pipeline import (
    build_output_spec,
    build_plan,
    default_pattern,
    validate_pattern,
    validate_segment_time,
    validate_trim,
)
from vsplit.core.reencode import decide_reencode, transform_dropped
from vsplit.core.rotation import resolve_rotation, transform_for_tag
from vsplit.core.types import (
    VIDEO_EXTENSIONS,
    EncodingParameters,
    FileOutcome,
    OutcomeStatus,
    OutputSpec,
    Plan,
    ReencodeDecision,
    ReencodeMode,
    RotationPreference,
    SegmentConfig,
    Transform,
    TrimRange,
)

__all__ = [
    # Types
    "VIDEO_EXTENSIONS",
    "EncodingParameters",
    "FileOutcome",
    "OutcomeStatus",
    "OutputSpec",
    "Plan",
    "ReencodeDecision",
    "ReencodeMode",
    "RotationPreference",
    "SegmentConfig",
    "Transform",
    "TrimRange",
    # Decisions
    "decide_reencode",
    "resolve_rotation",
    "transform_dropped",
    "transform_for_tag",
    # Pipeline
    "build_output_spec",
    "build_plan",
    "default_pattern",
    "validate_pattern",
    "validate_segment_time",
    "validate_trim",
    # Errors
    "ExternalExecutionError",
    "ExternalToolMissingError",
    "InvalidPatternError",
    "InvalidReencodeModeError",
    "InvalidRotationError",
    "InvalidSegmentTimeError",
    "InvalidTrimError",
    "InvalidValueError",
    "MissingInputError",
    "VsplitError",
]
