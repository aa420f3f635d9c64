"""Pull-side conflict resolution.

Remote-visible fields flow from the platform into both the lockfile and the
local config. Config-only fields are never touched. Icons are the only field
that can conflict: the remote icon changed since the last sync while a local
icon file is configured.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from rbxsync.domain.model import (
    RESOURCE_ORDER,
    LockEntry,
    ResourceKey,
    derive_key,
    fields_for,
    spec_from_remote,
)
from rbxsync.domain.model.enums import FieldScope

from .contracts import Conflict, DiffMode, FieldChange
from .diff import diff_resource

if TYPE_CHECKING:
    from datetime import datetime

    from rbxsync.domain.model import (
        FieldValue,
        Lockfile,
        ProjectConfig,
        RemoteSnapshot,
        RemoteState,
        ResourceSpec,
    )


class ResolutionMode(StrEnum):
    NONE = "none"
    ACCEPT_REMOTE = "accept_remote"
    ACCEPT_LOCAL = "accept_local"


class IconAction(StrEnum):
    KEEP = "keep"
    CLEAR = "clear"
    DOWNLOAD = "download"


class PullStatus(StrEnum):
    NEW = "new"
    ADOPTED = "adopted"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    CONFLICT = "conflict"
    ORPHAN = "orphan"
    REMOTE_MISSING = "remote_missing"


@dataclass(slots=True, frozen=True, kw_only=True)
class PullItem:
    key: ResourceKey
    status: PullStatus
    remote: RemoteState | None = None
    old_entry: LockEntry | None = None
    new_entry: LockEntry | None = None
    old_spec: ResourceSpec | None = None
    new_spec: ResourceSpec | None = None
    config_changes: tuple[FieldChange, ...] = ()
    icon_action: IconAction = IconAction.KEEP
    icon_target: str | None = None
    conflict: Conflict | None = None

    @property
    def lock_changed(self) -> bool:
        return self.new_entry != self.old_entry

    @property
    def config_changed(self) -> bool:
        return self.new_spec != self.old_spec


@dataclass(slots=True, kw_only=True)
class PullPlan:
    mode: ResolutionMode
    universe_id: int
    items: tuple[PullItem, ...] = ()
    warnings: tuple[str, ...] = ()

    def with_status(self, status: PullStatus) -> tuple[PullItem, ...]:
        return tuple(item for item in self.items if item.status is status)

    @property
    def conflicts(self) -> tuple[PullItem, ...]:
        return self.with_status(PullStatus.CONFLICT)

    @property
    def downloads(self) -> tuple[PullItem, ...]:
        return tuple(item for item in self.items if item.icon_action is IconAction.DOWNLOAD)

    @property
    def has_changes(self) -> bool:
        return any(
            item.lock_changed or item.config_changed or item.icon_action is IconAction.DOWNLOAD
            for item in self.items
        )


def default_icon_target(icons_dir: str, key: ResourceKey, remote_id: int) -> str:
    """Config-relative path for an icon downloaded for a resource without one."""

    filename = f"{key.resource_type.label}-{remote_id}-{key.key}.png"
    return str(PurePosixPath(icons_dir) / filename)


def _locked_fields(
    remote: RemoteState,
    old_entry: LockEntry | None,
    local: ResourceSpec | None,
) -> dict[str, FieldValue]:
    """Remote values where reported, otherwise the best value already known."""

    local_values = local.remote_fields() if local is not None else {}
    values: dict[str, FieldValue] = {}
    for spec in fields_for(remote.resource_type, scope=FieldScope.REMOTE):
        if spec.name in remote.fields:
            values[spec.name] = remote.fields[spec.name]
        elif old_entry is not None and spec.name in old_entry.fields:
            values[spec.name] = old_entry.fields[spec.name]
        elif spec.name in local_values:
            values[spec.name] = local_values[spec.name]
        else:
            values[spec.name] = spec.default
    return values


def _config_changes(old: ResourceSpec | None, new: ResourceSpec) -> tuple[FieldChange, ...]:
    before = old.remote_fields() if old is not None else {}
    return tuple(
        FieldChange(field=name, old=before.get(name), new=value)
        for name, value in new.remote_fields().items()
        if before.get(name) != value
    )


@dataclass(slots=True)
class _IconDecision:
    action: IconAction
    icon_hash: str | None
    icon_asset_id: int | None
    target: str | None = None
    conflict: Conflict | None = None


def _decide_icon(
    key: ResourceKey,
    *,
    remote: RemoteState,
    old_entry: LockEntry | None,
    local: ResourceSpec | None,
    conflict: Conflict | None,
    mode: ResolutionMode,
    icons_dir: str,
) -> _IconDecision:
    old_asset = old_entry.icon_asset_id if old_entry is not None else None
    old_hash = old_entry.icon_hash if old_entry is not None else None
    if remote.icon_asset_id == old_asset:
        return _IconDecision(IconAction.KEEP, old_hash, old_asset)

    local_icon = local.icon if local is not None else None
    if mode is ResolutionMode.ACCEPT_REMOTE and remote.icon_asset_id is not None:
        target = local_icon or default_icon_target(icons_dir, key, remote.id)
        return _IconDecision(IconAction.DOWNLOAD, None, remote.icon_asset_id, target=target)
    if local_icon is not None and mode is ResolutionMode.NONE:
        flagged = conflict or Conflict(
            field="icon", local=local_icon, remote=remote.icon_asset_id
        )
        return _IconDecision(IconAction.KEEP, old_hash, old_asset, conflict=flagged)
    return _IconDecision(IconAction.CLEAR, None, remote.icon_asset_id)


def _resolve_remote(
    key: ResourceKey,
    remote: RemoteState,
    *,
    lockfile: Lockfile,
    config: ProjectConfig,
    mode: ResolutionMode,
    now: datetime,
) -> PullItem:
    old_entry = lockfile.get(key)
    local = config.get(key)

    if old_entry is not None and local is None:
        return PullItem(
            key=key,
            status=PullStatus.ORPHAN,
            remote=remote,
            old_entry=old_entry,
            new_entry=old_entry,
        )

    conflict: Conflict | None = None
    if old_entry is not None and local is not None:
        diff = diff_resource(
            key,
            local=local,
            entry=old_entry,
            remote=remote,
            remote_fetched=True,
            mode=DiffMode.PULL,
        )
        conflict = diff.find(Conflict)

    icon = _decide_icon(
        key,
        remote=remote,
        old_entry=old_entry,
        local=local,
        conflict=conflict,
        mode=mode,
        icons_dir=config.icons.dir.as_posix(),
    )

    if local is None:
        new_spec = spec_from_remote(key.resource_type, key.key, remote.fields, icon=icon.target)
    else:
        new_spec = local.with_remote_fields(remote.fields)
        if local.icon is None and icon.target is not None:
            new_spec = replace(new_spec, icon=icon.target)

    # A new entry records exactly what the seeded spec declares.
    fields = _locked_fields(remote, old_entry, local if local is not None else new_spec)
    if old_entry is None:
        new_entry = LockEntry(
            id=remote.id,
            fields=fields,
            icon_hash=icon.icon_hash,
            icon_asset_id=icon.icon_asset_id,
            synced_at=now,
        )
    else:
        new_entry = replace(
            old_entry,
            id=remote.id,
            fields=fields,
            icon_hash=icon.icon_hash,
            icon_asset_id=icon.icon_asset_id,
        )
        if new_entry != old_entry:
            new_entry = replace(new_entry, synced_at=now)

    if icon.conflict is not None:
        status = PullStatus.CONFLICT
    elif local is None:
        status = PullStatus.NEW
    elif old_entry is None:
        status = PullStatus.ADOPTED
    elif new_entry != old_entry or new_spec != local or icon.action is IconAction.DOWNLOAD:
        status = PullStatus.UPDATED
    else:
        status = PullStatus.UNCHANGED

    return PullItem(
        key=key,
        status=status,
        remote=remote,
        old_entry=old_entry,
        new_entry=new_entry,
        old_spec=local,
        new_spec=new_spec,
        config_changes=_config_changes(local, new_spec),
        icon_action=icon.action,
        icon_target=icon.target,
        conflict=icon.conflict,
    )


def resolve_pull(
    config: ProjectConfig,
    lockfile: Lockfile,
    snapshot: RemoteSnapshot,
    *,
    mode: ResolutionMode,
    now: datetime,
) -> PullPlan:
    """Plan how remote state is merged into the lockfile and local config."""

    items: list[PullItem] = []
    warnings: list[str] = []
    for resource_type in RESOURCE_ORDER:
        if not snapshot.covers(resource_type):
            continue
        assigned: set[ResourceKey] = set()
        for remote in snapshot.of_type(resource_type):
            key = lockfile.key_for_id(resource_type, remote.id)
            if key is None:
                key = ResourceKey(resource_type, derive_key(remote.name))
                existing = lockfile.get(key)
                if existing is not None and existing.id != remote.id:
                    warnings.append(
                        f"{key} already tracks id {existing.id}; skipping remote id {remote.id}"
                    )
                    continue
            if key in assigned:
                warnings.append(f"duplicate {key} for remote id {remote.id}, skipping")
                continue
            assigned.add(key)
            items.append(
                _resolve_remote(key, remote, lockfile=lockfile, config=config, mode=mode, now=now)
            )

        for key in lockfile.keys(resource_type):
            if key in assigned:
                continue
            entry = lockfile.get(key)
            if config.get(key) is None:
                items.append(
                    PullItem(key=key, status=PullStatus.ORPHAN, old_entry=entry, new_entry=entry)
                )
            else:
                spec = config.get(key)
                items.append(
                    PullItem(
                        key=key,
                        status=PullStatus.REMOTE_MISSING,
                        old_entry=entry,
                        old_spec=spec,
                        new_spec=spec,
                    )
                )

    items.sort(key=lambda item: item.key.sort_key())
    return PullPlan(
        mode=mode,
        universe_id=config.experience.universe_id,
        items=tuple(items),
        warnings=tuple(warnings),
    )


__all__ = [
    "IconAction",
    "PullItem",
    "PullPlan",
    "PullStatus",
    "ResolutionMode",
    "default_icon_target",
    "resolve_pull",
]
