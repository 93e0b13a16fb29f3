"""Configuration management for vsplit.

Precedence (highest first): CLI flags, --profile, environment variables
(VSPLIT_*), config file (~/.vsplit/config.toml), defaults.
"""

from vsplit.config.env import EnvReader
from vsplit.config.loader import (
    ConfigError,
    apply_defaults_overrides,
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
)
from vsplit.config.models import (
    DefaultsConfig,
    LoggingConfig,
    Profile,
    ToolPathsConfig,
    VsplitConfig,
)
from vsplit.config.profiles import (
    ProfileError,
    ProfileNotFoundError,
    list_profiles,
    load_profile,
    merge_profile_with_defaults,
)

__all__ = [
    # Models
    "DefaultsConfig",
    "LoggingConfig",
    "Profile",
    "ToolPathsConfig",
    "VsplitConfig",
    # Loader
    "ConfigError",
    "EnvReader",
    "apply_defaults_overrides",
    "clear_config_cache",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "load_config_file",
    # Profiles
    "ProfileError",
    "ProfileNotFoundError",
    "list_profiles",
    "load_profile",
    "merge_profile_with_defaults",
]
