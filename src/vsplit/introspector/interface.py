"""RotationProbe interface for reading container rotation metadata."""

from pathlib import Path
from typing import Protocol


class MediaIntrospectionError(Exception):
    """Raised when media introspection fails."""

    pass


class RotationProbe(Protocol):
    """Protocol for reading the rotation tag of the primary video stream.

    Implementations may use ffprobe or return canned values for testing.
    """

    def get_rotation_tag(self, path: Path) -> str | None:
        """Read the rotate tag of the first video stream.

        Args:
            path: Path to the video file.

        Returns:
            The raw tag value (e.g. "90"), or None when the stream has none.

        Raises:
            MediaIntrospectionError: If the file cannot be probed.
        """
        ...
