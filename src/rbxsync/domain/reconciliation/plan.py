"""Sync plan: the diff of every resource in scope."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rbxsync.domain.model import RESOURCE_ORDER, ResourceKey

from .contracts import DecisionKind, DiffMode, ResourceDiff
from .diff import diff_resource

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from rbxsync.domain.model import Lockfile, ProjectConfig, RemoteSnapshot, ResourceType

ORPHAN_WARNING = "exists in lockfile but not in config (will not be deleted)"


@dataclass(slots=True, kw_only=True)
class SyncPlan:
    diffs: tuple[ResourceDiff, ...] = field(default_factory=tuple)

    def with_kind(self, kind: DecisionKind) -> tuple[ResourceDiff, ...]:
        return tuple(diff for diff in self.diffs if kind in diff.kinds)

    @property
    def creates(self) -> tuple[ResourceDiff, ...]:
        return self.with_kind(DecisionKind.CREATE)

    @property
    def updates(self) -> tuple[ResourceDiff, ...]:
        """Resources needing a field update, an icon upload, or both."""

        return tuple(
            diff
            for diff in self.diffs
            if diff.kinds & {DecisionKind.UPDATE, DecisionKind.ICON_CHANGE}
        )

    @property
    def unchanged(self) -> tuple[ResourceDiff, ...]:
        return self.with_kind(DecisionKind.UNCHANGED)

    @property
    def orphans(self) -> tuple[ResourceDiff, ...]:
        return self.with_kind(DecisionKind.ORPHAN)

    @property
    def remote_missing(self) -> tuple[ResourceDiff, ...]:
        return self.with_kind(DecisionKind.REMOTE_MISSING)

    @property
    def has_changes(self) -> bool:
        return any(diff.is_pending for diff in self.diffs)

    def warnings(self) -> list[str]:
        return [f"{diff.key} {ORPHAN_WARNING}" for diff in self.orphans]

    def summary(self) -> str:
        return (
            f"{len(self.creates)} to create, {len(self.updates)} to update, "
            f"{len(self.unchanged)} unchanged"
        )


def keys_in_scope(
    config: ProjectConfig,
    lockfile: Lockfile,
    types: Iterable[ResourceType] | None = None,
) -> list[ResourceKey]:
    """Declared keys followed by locked keys, deduplicated, in resource order."""

    wanted = set(types) if types is not None else set(RESOURCE_ORDER)
    keys = {spec.resource_key for spec in config.specs(wanted)}
    for resource_type in wanted:
        keys.update(lockfile.keys(resource_type))
    return sorted(keys, key=ResourceKey.sort_key)


def build_sync_plan(
    config: ProjectConfig,
    lockfile: Lockfile,
    *,
    icon_hashes: Mapping[ResourceKey, str],
    types: Iterable[ResourceType] | None = None,
    snapshot: RemoteSnapshot | None = None,
) -> SyncPlan:
    """Diff local config against the lockfile for the selected resource types.

    When ``snapshot`` covers a type, locked resources absent from it become
    ``RemoteMissing`` instead of being updated.
    """

    diffs: list[ResourceDiff] = []
    for key in keys_in_scope(config, lockfile, types):
        entry = lockfile.get(key)
        fetched = snapshot is not None and snapshot.covers(key.resource_type)
        remote = snapshot.get(key.resource_type, entry.id) if fetched and entry else None
        diffs.append(
            diff_resource(
                key,
                local=config.get(key),
                entry=entry,
                local_icon_hash=icon_hashes.get(key),
                remote=remote,
                remote_fetched=fetched,
                mode=DiffMode.SYNC,
            )
        )
    return SyncPlan(diffs=tuple(diffs))
