"""Local file adapters: project config, lockfile and TOML writing."""

from __future__ import annotations

from .config_store import TomlConfigStore, config_to_document, parse_config, validate_icon_paths
from .lockfile import (
    TomlLockfileUnitOfWork,
    load_lockfile,
    lockfile_to_document,
    parse_lockfile,
    save_lockfile,
)
from .template import DEFAULT_TEMPLATE

__all__ = [
    "DEFAULT_TEMPLATE",
    "TomlConfigStore",
    "TomlLockfileUnitOfWork",
    "config_to_document",
    "load_lockfile",
    "lockfile_to_document",
    "parse_config",
    "parse_lockfile",
    "save_lockfile",
    "validate_icon_paths",
]
