"""Lockfile model: the last-known remote snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Self

from .enums import ResourceType
from .fields import FieldValue, normalize_field, remote_field_names
from .resources import RESOURCE_ORDER, ResourceKey

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from datetime import datetime

LOCKFILE_VERSION = 1


@dataclass(slots=True, frozen=True, kw_only=True)
class LockEntry:
    """Remote identity and last-synced values of one resource.

    An entry exists only once the resource has been created remotely.
    """

    id: int
    fields: Mapping[str, FieldValue] = field(default_factory=dict)
    icon_hash: str | None = None
    icon_asset_id: int | None = None
    synced_at: datetime | None = None

    @property
    def name(self) -> str | None:
        value = self.fields.get("name")
        return value if isinstance(value, str) else None

    def synced_fields(self, resource_type: ResourceType) -> dict[str, FieldValue]:
        return {
            name: normalize_field(name, self.fields.get(name))
            for name in remote_field_names(resource_type)
        }

    def with_fields(self, values: Mapping[str, FieldValue], *, synced_at: datetime) -> Self:
        merged = dict(self.fields)
        merged.update(values)
        return replace(self, fields=merged, synced_at=synced_at)

    def with_icon(
        self,
        *,
        icon_hash: str | None,
        icon_asset_id: int | None,
        synced_at: datetime | None = None,
    ) -> Self:
        return replace(
            self,
            icon_hash=icon_hash,
            icon_asset_id=icon_asset_id,
            synced_at=synced_at or self.synced_at,
        )


@dataclass(slots=True, kw_only=True)
class Lockfile:
    version: int = LOCKFILE_VERSION
    universe_id: int | None = None
    entries: dict[ResourceType, dict[str, LockEntry]] = field(
        default_factory=lambda: {resource_type: {} for resource_type in RESOURCE_ORDER}
    )

    def get(self, key: ResourceKey) -> LockEntry | None:
        return self.entries.get(key.resource_type, {}).get(key.key)

    def put(self, key: ResourceKey, entry: LockEntry) -> None:
        self.entries.setdefault(key.resource_type, {})[key.key] = entry

    def remove(self, key: ResourceKey) -> LockEntry | None:
        return self.entries.get(key.resource_type, {}).pop(key.key, None)

    def keys(self, resource_type: ResourceType | None = None) -> Iterator[ResourceKey]:
        types = (resource_type,) if resource_type is not None else RESOURCE_ORDER
        for current in types:
            for key in sorted(self.entries.get(current, {})):
                yield ResourceKey(current, key)

    def key_for_id(self, resource_type: ResourceType, remote_id: int) -> ResourceKey | None:
        for key, entry in self.entries.get(resource_type, {}).items():
            if entry.id == remote_id:
                return ResourceKey(resource_type, key)
        return None

    def rename(self, old: ResourceKey, new_key: str) -> bool:
        entry = self.remove(old)
        if entry is None:
            return False
        self.put(ResourceKey(old.resource_type, new_key), entry)
        return True

    def copy(self) -> Lockfile:
        return Lockfile(
            version=self.version,
            universe_id=self.universe_id,
            entries={resource_type: dict(items) for resource_type, items in self.entries.items()},
        )

    def __len__(self) -> int:
        return sum(len(items) for items in self.entries.values())
