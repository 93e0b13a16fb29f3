"""Introspector module for vsplit.

- RotationProbe: Protocol for reading the rotate tag of a video stream
- FFprobeRotationProbe: Production implementation using ffprobe
- StubRotationProbe: Stub implementation for testing
- MediaIntrospectionError: Exception for probe failures
"""

from vsplit.introspector.ffprobe import FFprobeRotationProbe, parse_rotation_tag
from vsplit.introspector.interface import MediaIntrospectionError, RotationProbe
from vsplit.introspector.stub import StubRotationProbe

__all__ = [
    "RotationProbe",
    "MediaIntrospectionError",
    "FFprobeRotationProbe",
    "StubRotationProbe",
    "parse_rotation_tag",
]
