"""Configuration profile management.

Profiles store named `split` defaults for recurring jobs (shorts, dashcam
footage, phone clips) and are applied via the --profile flag. Each profile
is a YAML file in <data_dir>/profiles/:

    description: Vertical phone clips
    defaults:
      rotate: auto
      segment_time: 30
      crf: 20
"""

from __future__ import annotations

import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from vsplit.config.loader import ConfigError, apply_defaults_overrides, get_data_dir
from vsplit.config.models import DefaultsConfig, Profile
from vsplit.config.schema import ProfileModel, format_validation_error

_PROFILE_NAME = re.compile(r"^[a-zA-Z0-9_-]+$")


class ProfileError(ConfigError):
    """Error loading or validating a profile."""

    pass


class ProfileNotFoundError(ProfileError):
    """Profile does not exist."""

    pass


def get_profiles_directory(data_dir: Path | None = None) -> Path:
    """Get the profiles directory path (<data_dir>/profiles/)."""
    return (data_dir or get_data_dir()) / "profiles"


def list_profiles(data_dir: Path | None = None) -> list[str]:
    """List available profile names (without .yaml extension)."""
    profiles_dir = get_profiles_directory(data_dir)
    if not profiles_dir.exists():
        return []

    return sorted(
        p.stem
        for p in profiles_dir.glob("*.yaml")
        if p.is_file() and not p.name.startswith(".")
    )


def load_profile(name: str, data_dir: Path | None = None) -> Profile:
    """Load a profile by name.

    Args:
        name: Profile name (without .yaml extension).
        data_dir: Data directory override (default: ~/.vsplit).

    Returns:
        Loaded Profile.

    Raises:
        ProfileNotFoundError: If the profile doesn't exist.
        ProfileError: If the profile is invalid.
    """
    if not _PROFILE_NAME.match(name):
        raise ProfileError(f"Profile name must be alphanumeric (with - or _): {name}")

    profile_path = get_profiles_directory(data_dir) / f"{name}.yaml"
    if not profile_path.exists():
        raise ProfileNotFoundError(f"Profile not found: {name}")

    try:
        with open(profile_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ProfileError(f"Invalid YAML in profile {name}: {e}") from e

    if not isinstance(data, dict):
        raise ProfileError(f"Profile {name} must be a mapping")

    try:
        model = ProfileModel.model_validate(data)
    except ValidationError as e:
        raise ProfileError(
            f"Invalid profile {name}: {format_validation_error(e)}"
        ) from e

    return Profile(
        name=model.name or name,
        description=model.description,
        overrides=model.defaults.overrides(),
    )


def merge_profile_with_defaults(
    profile: Profile, defaults: DefaultsConfig
) -> DefaultsConfig:
    """Apply profile overrides to base defaults.

    Precedence (highest wins): CLI flags, profile, base config, defaults.

    Raises:
        ProfileError: If the merged values are invalid.
    """
    try:
        return apply_defaults_overrides(
            defaults, profile.overrides, f"profile '{profile.name}'"
        )
    except ConfigError as e:
        raise ProfileError(str(e)) from e
