"""Stub implementation of RotationProbe for development and testing."""

from pathlib import Path

from vsplit.introspector.interface import MediaIntrospectionError


class StubRotationProbe:
    """Stub probe that returns canned rotate tags.

    Tags are looked up by file name first, then by full path; files without
    an entry report no tag. Paths listed in ``failing`` raise
    MediaIntrospectionError to simulate unreadable files.
    """

    def __init__(
        self,
        tags: dict[str, str] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self._tags = dict(tags or {})
        self._failing = set(failing or ())
        self.calls: list[Path] = []

    def get_rotation_tag(self, path: Path) -> str | None:
        """Return the canned tag for path, or None."""
        self.calls.append(path)
        if path.name in self._failing or str(path) in self._failing:
            raise MediaIntrospectionError(f"Simulated probe failure: {path}")
        if path.name in self._tags:
            return self._tags[path.name]
        return self._tags.get(str(path))
