"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when runtime configuration (environment, credentials) is invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent or blank."""
