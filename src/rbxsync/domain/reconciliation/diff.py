"""Per-resource three-way diff.

Pure: no I/O, no clock. Local icon hashes and remote snapshots are computed by
the caller and passed in.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .contracts import (
    Conflict,
    Create,
    Decision,
    DiffMode,
    FieldChange,
    IconChange,
    Orphan,
    RemoteMissing,
    ResourceDiff,
    Unchanged,
    Update,
)

if TYPE_CHECKING:
    from rbxsync.domain.model import LockEntry, RemoteState, ResourceKey, ResourceSpec


def diff_fields(local: ResourceSpec, entry: LockEntry) -> tuple[FieldChange, ...]:
    """Remote-visible fields whose local value differs from the last-synced value."""

    synced = entry.synced_fields(local.resource_type)
    return tuple(
        FieldChange(field=name, old=synced.get(name), new=value)
        for name, value in local.remote_fields().items()
        if synced.get(name) != value
    )


def diff_resource(
    key: ResourceKey,
    *,
    local: ResourceSpec | None,
    entry: LockEntry | None,
    local_icon_hash: str | None = None,
    remote: RemoteState | None = None,
    remote_fetched: bool = False,
    mode: DiffMode = DiffMode.SYNC,
) -> ResourceDiff:
    """Decide what reconciling ``key`` requires.

    ``remote_fetched`` distinguishes "remote not consulted" from "remote
    consulted and the resource is absent".
    """

    if local is None:
        if entry is None:
            raise ValueError(f"{key} is neither declared nor locked")
        return ResourceDiff(key=key, decisions=(Orphan(entry=entry),))

    if mode is DiffMode.SYNC and local.icon is not None and local_icon_hash is None:
        raise ValueError(f"{key} declares an icon but no icon hash was provided")

    if entry is None:
        return ResourceDiff(key=key, decisions=(Create(spec=local, icon_hash=local_icon_hash),))

    if remote_fetched and remote is None:
        return ResourceDiff(key=key, decisions=(RemoteMissing(entry=entry),))

    if mode is DiffMode.PULL:
        if (
            remote is not None
            and local.icon is not None
            and remote.icon_asset_id != entry.icon_asset_id
        ):
            conflict = Conflict(field="icon", local=local.icon, remote=remote.icon_asset_id)
            return ResourceDiff(key=key, decisions=(conflict,))
        return ResourceDiff(key=key, decisions=(Unchanged(),))

    decisions: list[Decision] = []
    changes = diff_fields(local, entry)
    if changes:
        decisions.append(Update(changes=changes))
    if local_icon_hash is not None and local_icon_hash != entry.icon_hash:
        decisions.append(IconChange(old_hash=entry.icon_hash, new_hash=local_icon_hash))
    if not decisions:
        decisions.append(Unchanged())
    return ResourceDiff(key=key, decisions=tuple(decisions))
