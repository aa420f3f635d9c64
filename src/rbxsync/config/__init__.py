"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .roblox import API_KEY_ENV_VAR, RobloxConfig, get_roblox_config
from .storage import DEFAULT_CONFIG_FILENAME, LOCKFILE_FILENAME, ProjectPaths, get_project_paths

__all__ = [
    "API_KEY_ENV_VAR",
    "DEFAULT_CONFIG_FILENAME",
    "LOCKFILE_FILENAME",
    "ConfigurationError",
    "MissingConfigurationError",
    "ProjectPaths",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "RobloxConfig",
    "configure_logging",
    "get_project_paths",
    "get_roblox_config",
    "optional_env_var",
    "require_env_vars",
]
