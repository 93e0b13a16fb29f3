"""FFprobe-based implementation of the RotationProbe protocol."""

import json
import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
import time
from pathlib import Path

from vsplit.introspector.interface import MediaIntrospectionError

logger = logging.getLogger(__name__)


class FFprobeRotationProbe:
    """ffprobe-based implementation of RotationProbe.

    Reads the ``rotate`` tag of the first video stream.
    """

    def __init__(self, ffprobe_path: Path | str = "ffprobe", timeout: int = 60):
        """Initialize the probe.

        Args:
            ffprobe_path: Path to the ffprobe executable.
            timeout: Seconds before a probe is abandoned.
        """
        self._ffprobe_path = str(ffprobe_path)
        self._timeout = timeout

    def build_args(self, path: Path) -> list[str]:
        """Build the ffprobe command for reading the rotate tag."""
        return [
            self._ffprobe_path,
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream_tags=rotate",
            "-of",
            "json",
            str(path),
        ]

    def get_rotation_tag(self, path: Path) -> str | None:
        """Read the rotate tag of the first video stream.

        Args:
            path: Path to the video file.

        Returns:
            The tag value as a string, or None when absent.

        Raises:
            MediaIntrospectionError: If ffprobe fails, times out, or returns
                unparseable output.
        """
        if not path.exists():
            raise MediaIntrospectionError(f"File not found: {path}")

        result = self._run(path)
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise MediaIntrospectionError(
                f"ffprobe failed for {path}: {stderr or result.returncode}"
            )

        return parse_rotation_tag(result.stdout or "", path)

    def _run(self, path: Path) -> subprocess.CompletedProcess[str]:
        """Run ffprobe on one file, mapping launch and timeout errors."""
        args = self.build_args(path)
        logger.debug("Probing rotation: %s", " ".join(args))

        start = time.monotonic()
        try:
            result = subprocess.run(  # nosec B603 - args built by build_args
                args,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            # run() kills the child before raising
            raise MediaIntrospectionError(
                f"ffprobe timed out for {path} after {e.timeout}s"
            ) from e
        except OSError as e:
            raise MediaIntrospectionError(f"Could not run ffprobe: {e}") from e

        logger.debug(
            "ffprobe finished for %s",
            path,
            extra={
                "returncode": result.returncode,
                "elapsed_seconds": round(time.monotonic() - start, 3),
            },
        )
        return result


def parse_rotation_tag(output: str, path: Path | None = None) -> str | None:
    """Extract the rotate tag from ffprobe JSON output.

    Args:
        output: ffprobe stdout in JSON format.
        path: File the output belongs to (for error messages).

    Returns:
        The tag value, or None when the stream or tag is missing.

    Raises:
        MediaIntrospectionError: If the output is not valid JSON or does not
            have the shape ffprobe produces.
    """
    if not output.strip():
        return None
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise MediaIntrospectionError(
            f"Invalid ffprobe output for {path}: {e}"
        ) from e

    if not isinstance(data, dict):
        raise MediaIntrospectionError(
            f"Invalid ffprobe output for {path}: expected a JSON object"
        )
    streams = data.get("streams") or []
    if not isinstance(streams, list):
        raise MediaIntrospectionError(
            f"Invalid ffprobe output for {path}: 'streams' is not a list"
        )
    if not streams:
        return None
    stream = streams[0]
    tags = (stream.get("tags") or {}) if isinstance(stream, dict) else None
    if not isinstance(tags, dict):
        raise MediaIntrospectionError(
            f"Invalid ffprobe output for {path}: malformed stream entry"
        )
    tag = tags.get("rotate")
    if tag is None:
        return None
    return str(tag).strip()
