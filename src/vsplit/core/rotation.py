"""Rotation resolution.

Turns a rotation preference into a concrete Transform. Fixed angles map
directly; "auto" reads the rotate tag of the first video stream and falls
back to no rotation when the tag is missing, unexpected, or unreadable.
"""

from __future__ import annotations

import logging
from pathlib import Path

from vsplit.core.types import RotationPreference, Transform
from vsplit.introspector.interface import MediaIntrospectionError, RotationProbe

logger = logging.getLogger(__name__)

_FIXED_TRANSFORMS: dict[RotationPreference, Transform] = {
    RotationPreference.NONE: Transform.NOOP,
    RotationPreference.DEG_90: Transform.ROTATE_90_CW,
    RotationPreference.DEG_180: Transform.ROTATE_180,
    RotationPreference.DEG_270: Transform.ROTATE_90_CCW,
}

# Metadata tag values honoured by auto rotation; everything else is NOOP
_TAG_TRANSFORMS: dict[str, Transform] = {
    "90": Transform.ROTATE_90_CW,
    "180": Transform.ROTATE_180,
    "270": Transform.ROTATE_90_CCW,
}


def transform_for_tag(tag: str | None) -> Transform:
    """Map a raw rotate tag to a Transform.

    Args:
        tag: Tag value as reported by ffprobe, or None.

    Returns:
        The matching Transform, NOOP for anything unrecognized.
    """
    if tag is None:
        return Transform.NOOP
    return _TAG_TRANSFORMS.get(tag.strip(), Transform.NOOP)


def resolve_rotation(
    preference: RotationPreference | str,
    probe: RotationProbe | None = None,
    path: Path | None = None,
) -> Transform:
    """Resolve a rotation preference to a Transform.

    Args:
        preference: Rotation preference or its literal ("0", "90", "auto", ...).
        probe: Metadata probe, only used for auto rotation.
        path: File to probe, only used for auto rotation.

    Returns:
        The Transform to apply.

    Raises:
        InvalidRotationError: If a literal preference is not recognized.
    """
    preference = RotationPreference.parse(preference)

    if preference is not RotationPreference.AUTO:
        return _FIXED_TRANSFORMS[preference]

    if probe is None or path is None:
        logger.debug("Auto rotation without probe or path, assuming no rotation")
        return Transform.NOOP

    try:
        tag = probe.get_rotation_tag(path)
    except (MediaIntrospectionError, OSError) as e:
        logger.warning("Could not read rotation tag for %s: %s", path, e)
        return Transform.NOOP

    transform = transform_for_tag(tag)
    logger.debug(
        "Auto rotation for %s: tag=%r -> %s", path, tag, transform.value
    )
    return transform
