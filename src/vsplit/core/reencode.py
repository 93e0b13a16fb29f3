"""Re-encode policy: stream copy versus full re-encode."""

from __future__ import annotations

from vsplit.core.types import ReencodeDecision, ReencodeMode, Transform


def decide_reencode(
    mode: ReencodeMode | str, transform: Transform
) -> ReencodeDecision:
    """Decide how the video stream is produced.

    ALWAYS re-encodes, NEVER copies even when a transform was requested
    (the transform is then not applied), AUTO re-encodes only when a
    transform is needed.

    Args:
        mode: Re-encode mode or its literal ("auto", "always", "never").
        transform: Resolved rotation transform.

    Returns:
        The ReencodeDecision for this file.

    Raises:
        InvalidReencodeModeError: If a literal mode is not recognized.
    """
    mode = ReencodeMode.parse(mode)

    if mode is ReencodeMode.ALWAYS:
        return ReencodeDecision.FULL_REENCODE
    if mode is ReencodeMode.NEVER:
        return ReencodeDecision.STREAM_COPY
    if transform is not Transform.NOOP:
        return ReencodeDecision.FULL_REENCODE
    return ReencodeDecision.STREAM_COPY


def transform_dropped(decision: ReencodeDecision, transform: Transform) -> bool:
    """True when a requested transform cannot be applied under stream copy."""
    return (
        decision is ReencodeDecision.STREAM_COPY and transform is not Transform.NOOP
    )
