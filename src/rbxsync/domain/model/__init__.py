"""Resource model for rbxsync."""

from __future__ import annotations

from .enums import CodegenStyle, CreatorType, FieldScope, ResourceType
from .fields import (
    FIELD_TABLE,
    FieldSpec,
    FieldValue,
    fields_for,
    normalize_field,
    remote_field_names,
)
from .lock import LOCKFILE_VERSION, LockEntry, Lockfile
from .project import CodegenConfig, Creator, Experience, IconsConfig, ProjectConfig
from .remote import RemoteSnapshot, RemoteState
from .resources import (
    RESOURCE_ORDER,
    SPEC_TYPES,
    BadgeSpec,
    PassSpec,
    ProductSpec,
    ResourceKey,
    ResourceSpec,
    derive_key,
    spec_from_remote,
    validate_key,
)

__all__ = [
    "FIELD_TABLE",
    "LOCKFILE_VERSION",
    "RESOURCE_ORDER",
    "SPEC_TYPES",
    "BadgeSpec",
    "CodegenConfig",
    "CodegenStyle",
    "Creator",
    "CreatorType",
    "Experience",
    "FieldScope",
    "FieldSpec",
    "FieldValue",
    "IconsConfig",
    "LockEntry",
    "Lockfile",
    "PassSpec",
    "ProductSpec",
    "ProjectConfig",
    "RemoteSnapshot",
    "RemoteState",
    "ResourceKey",
    "ResourceSpec",
    "ResourceType",
    "derive_key",
    "fields_for",
    "normalize_field",
    "remote_field_names",
    "spec_from_remote",
    "validate_key",
]
