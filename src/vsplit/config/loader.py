"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (applied by the CLI on top of the returned config)
2. Profile (--profile, applied by the CLI)
3. Environment variables (VSPLIT_*)
4. Config file (~/.vsplit/config.toml)
5. Default values

Environment variables:
- VSPLIT_FFMPEG_PATH: Path to ffmpeg executable
- VSPLIT_FFPROBE_PATH: Path to ffprobe executable
- VSPLIT_CONFIG_PATH: Path to config file (overrides default location)
- VSPLIT_DATA_DIR: Path to vsplit data directory (overrides ~/.vsplit/)
- VSPLIT_LOG_LEVEL: Log level (debug, info, warning, error)
- VSPLIT_WORKERS: Default number of parallel workers
- VSPLIT_TIMEOUT: Default ffmpeg timeout in seconds
"""

from __future__ import annotations

import logging
import threading
import tomllib
from dataclasses import replace
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from vsplit.config.env import EnvReader
from vsplit.config.models import (
    DefaultsConfig,
    LoggingConfig,
    ToolPathsConfig,
    VsplitConfig,
)
from vsplit.config.schema import DefaultsModel, format_validation_error

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".vsplit"

# Cache for loaded config files (path -> (parsed dict, mtime))
_config_cache: dict[Path, tuple[dict, float]] = {}
_config_cache_lock = threading.Lock()


class ConfigError(Exception):
    """Raised when a config file or profile cannot be loaded or is invalid."""

    pass


def get_data_dir(env: EnvReader | None = None) -> Path:
    """Get the vsplit data directory (~/.vsplit/ or VSPLIT_DATA_DIR)."""
    env = env or EnvReader()
    return env.get_path("VSPLIT_DATA_DIR", must_exist=False) or DEFAULT_DATA_DIR


def get_default_config_path(env: EnvReader | None = None) -> Path:
    """Get the config file path (VSPLIT_CONFIG_PATH or <data_dir>/config.toml)."""
    env = env or EnvReader()
    env_path = env.get_path("VSPLIT_CONFIG_PATH", must_exist=False)
    if env_path:
        return env_path
    return get_data_dir(env) / "config.toml"


def clear_config_cache() -> None:
    """Drop cached config file contents."""
    with _config_cache_lock:
        _config_cache.clear()


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Load and parse a TOML config file.

    Missing files yield an empty dict. Parsed contents are cached and
    reloaded when the file's mtime changes.

    Args:
        path: Config file path. None uses the default location.

    Returns:
        Parsed TOML as a dict.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML.
    """
    path = path or get_default_config_path()
    if not path.exists():
        return {}

    try:
        mtime = path.stat().st_mtime
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    with _config_cache_lock:
        cached = _config_cache.get(path)
        if cached is not None and cached[1] == mtime:
            return cached[0]

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    with _config_cache_lock:
        _config_cache[path] = (data, mtime)
    return data


def _section(data: dict[str, Any], name: str, source: Path | str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] in {source} must be a table")
    return section


def _build_tools(section: dict[str, Any], env: EnvReader) -> ToolPathsConfig:
    def _path(key: str) -> Path | None:
        value = section.get(key)
        return Path(value).expanduser() if value else None

    return ToolPathsConfig(
        ffmpeg=env.get_path("VSPLIT_FFMPEG_PATH") or _path("ffmpeg"),
        ffprobe=env.get_path("VSPLIT_FFPROBE_PATH") or _path("ffprobe"),
    )


def _build_logging(
    section: dict[str, Any], env: EnvReader, source: Path | str
) -> LoggingConfig:
    base = LoggingConfig()
    try:
        return LoggingConfig(
            level=env.get_str("VSPLIT_LOG_LEVEL") or section.get("level", base.level),
            file=Path(section["file"]).expanduser() if section.get("file") else None,
            format=section.get("format", base.format),
            include_stderr=bool(section.get("include_stderr", base.include_stderr)),
            max_bytes=int(section.get("max_bytes", base.max_bytes)),
            backup_count=int(section.get("backup_count", base.backup_count)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid [logging] section in {source}: {e}") from e


def apply_defaults_overrides(
    defaults: DefaultsConfig, overrides: dict[str, Any], source: str
) -> DefaultsConfig:
    """Validate overrides and return a new DefaultsConfig with them applied.

    Args:
        defaults: Base defaults.
        overrides: Raw mapping from a config file or profile.
        source: Description of where the overrides came from.

    Raises:
        ConfigError: If validation fails.
    """
    try:
        model = DefaultsModel.model_validate(overrides)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid defaults in {source}: {format_validation_error(e)}"
        ) from e
    try:
        return replace(defaults, **model.overrides())
    except ValueError as e:
        raise ConfigError(f"Invalid defaults in {source}: {e}") from e


def get_config(
    config_path: Path | None = None, env: EnvReader | None = None
) -> VsplitConfig:
    """Build the effective configuration from file, environment and defaults.

    Args:
        config_path: Config file to read. None uses the default location.
        env: Environment reader (injectable for tests).

    Returns:
        The merged VsplitConfig.

    Raises:
        ConfigError: If the config file is invalid.
    """
    env = env or EnvReader()
    path = config_path or get_default_config_path(env)
    data = load_config_file(path)

    defaults = apply_defaults_overrides(
        DefaultsConfig(), _section(data, "defaults", path), str(path)
    )

    env_overrides: dict[str, Any] = {}
    workers = env.get_int("VSPLIT_WORKERS")
    if workers is not None:
        env_overrides["workers"] = workers
    timeout = env.get_float("VSPLIT_TIMEOUT")
    if timeout is not None:
        env_overrides["timeout"] = timeout
    if env_overrides:
        defaults = apply_defaults_overrides(defaults, env_overrides, "environment")

    config = VsplitConfig(
        tools=_build_tools(_section(data, "tools", path), env),
        logging=_build_logging(_section(data, "logging", path), env, path),
        defaults=defaults,
    )
    logger.debug("Loaded configuration from %s", path if data else "defaults")
    return config
