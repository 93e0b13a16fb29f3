"""Environment variable reader with dependency injection support.

EnvReader reads VSPLIT_* variables with type conversion. Tests inject a
plain dict instead of touching os.environ.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)


class EnvReader:
    """Environment variable reader with type conversion.

    Invalid values are logged and replaced by the default rather than
    raising, so a typo in the environment never blocks a run.

    Example:
        reader = EnvReader(env={"VSPLIT_WORKERS": "4"})
        workers = reader.get_int("VSPLIT_WORKERS", 1)  # Returns 4
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the environment reader.

        Args:
            env: Optional mapping to use instead of os.environ.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Get a string, or default if unset or empty."""
        value = self._env.get(var)
        if value is None or not value.strip():
            return default
        return value.strip()

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Get an integer, or default if unset or not an integer."""
        value = self.get_str(var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_float(self, var: str, default: float | None = None) -> float | None:
        """Get a float, or default if unset or not a number."""
        value = self.get_str(var)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float value for %s: %s", var, value)
            return default

    def get_path(
        self, var: str, must_exist: bool = True, default: Path | None = None
    ) -> Path | None:
        """Get a path with tilde expansion.

        Args:
            var: Environment variable name.
            must_exist: If True, fall back to default when the path is missing.
            default: Value returned when unset (or missing with must_exist).
        """
        value = self.get_str(var)
        if value is None:
            return default

        path = Path(value).expanduser()
        if must_exist and not path.exists():
            logger.warning(
                "Environment variable %s points to non-existent path: %s",
                var,
                value,
            )
            return default
        return path
