"""Apply reconciliation plans against the remote service and the lockfile.

Resources are applied strictly one after another. Every successful remote
mutation is recorded in the lockfile and committed before the next call, so
an interrupted run leaves the lockfile consistent up to the last success.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from rbxsync.domain.errors import ConflictError, RemoteError, UnauthorizedError
from rbxsync.domain.hashing import hash_icon
from rbxsync.domain.model import LockEntry, ResourceType

from .contracts import Create, DecisionKind, IconChange, ResourceDiff, Update
from .resolve import IconAction, PullItem, PullPlan

if TYPE_CHECKING:
    from pathlib import Path

    from rbxsync.domain.model import ProjectConfig, ResourceKey, ResourceSpec
    from rbxsync.domain.ports import (
        IconSource,
        IconStore,
        LockfileUnitOfWork,
        RemoteResourceService,
    )

    from .plan import SyncPlan

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(microsecond=0)


class OutcomeStatus(StrEnum):
    PLANNED = "planned"
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True, frozen=True, kw_only=True)
class ResourceOutcome:
    key: ResourceKey
    status: OutcomeStatus
    actions: tuple[str, ...] = ()
    message: str | None = None
    error: RemoteError | None = None


@dataclass(slots=True, kw_only=True)
class ApplyResult:
    dry_run: bool
    outcomes: list[ResourceOutcome] = field(default_factory=list)
    halted: bool = False

    def with_status(self, status: OutcomeStatus) -> list[ResourceOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is status]

    @property
    def failed(self) -> list[ResourceOutcome]:
        return self.with_status(OutcomeStatus.FAILED)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.halted


type IconPathResolver = Callable[[str], Path]


@dataclass(slots=True)
class SyncApplier:
    """Push a ``SyncPlan`` to the remote service."""

    remote: RemoteResourceService
    icons: IconSource
    resolve_icon_path: IconPathResolver
    badge_cost: int | None = None
    clock: Callable[[], datetime] = _utcnow

    def __call__(
        self,
        plan: SyncPlan,
        config: ProjectConfig,
        unit_of_work: LockfileUnitOfWork,
        *,
        dry_run: bool = False,
    ) -> ApplyResult:
        if dry_run:
            return preview_sync(plan)
        result = ApplyResult(dry_run=False)

        lockfile = unit_of_work.lockfile
        lockfile.universe_id = config.experience.universe_id
        for diff in plan.diffs:
            if result.halted:
                result.outcomes.append(
                    ResourceOutcome(
                        key=diff.key,
                        status=OutcomeStatus.SKIPPED,
                        message="not attempted after authorization failure",
                    )
                )
                continue
            try:
                outcome = self._apply_diff(diff, config, unit_of_work)
            except RemoteError as exc:
                log.error("Failed to sync %s: %s", diff.key, exc)
                outcome = ResourceOutcome(
                    key=diff.key, status=OutcomeStatus.FAILED, message=str(exc), error=exc
                )
                if isinstance(exc, UnauthorizedError):
                    result.halted = True
            result.outcomes.append(outcome)
        return result

    def _apply_diff(
        self,
        diff: ResourceDiff,
        config: ProjectConfig,
        unit_of_work: LockfileUnitOfWork,
    ) -> ResourceOutcome:
        if (create := diff.find(Create)) is not None:
            return self._create(diff.key, create.spec, unit_of_work)

        update = diff.find(Update)
        icon_change = diff.find(IconChange)
        if update is None and icon_change is None:
            return _passive_outcome(diff)

        spec = config.get(diff.key)
        if spec is None:
            raise ValueError(f"{diff.key} has pending changes but is not declared")
        actions: list[str] = []
        if update is not None:
            self._update(diff.key, update, unit_of_work)
            actions.append("updated " + ", ".join(change.field for change in update.changes))
        if icon_change is not None:
            self._upload_icon(diff.key, spec, unit_of_work)
            actions.append("uploaded icon")
        return ResourceOutcome(key=diff.key, status=OutcomeStatus.UPDATED, actions=tuple(actions))

    def _create(
        self,
        key: ResourceKey,
        spec: ResourceSpec,
        unit_of_work: LockfileUnitOfWork,
    ) -> ResourceOutcome:
        fields = spec.remote_fields()
        icon = self.icons(self.resolve_icon_path(spec.icon)) if spec.icon else None
        expected_cost = self.badge_cost if key.resource_type is ResourceType.BADGE else None
        log.info("Creating %s", key)
        created = self.remote.create(
            key.resource_type, fields, icon=icon, expected_cost=expected_cost
        )
        entry = LockEntry(
            id=created.id,
            fields=fields,
            icon_hash=hash_icon(icon) if icon is not None else None,
            icon_asset_id=created.icon_asset_id,
            synced_at=self.clock(),
        )
        unit_of_work.lockfile.put(key, entry)
        unit_of_work.commit()
        return ResourceOutcome(
            key=key,
            status=OutcomeStatus.CREATED,
            actions=(f"created with id {created.id}",),
        )

    def _update(self, key: ResourceKey, update: Update, unit_of_work: LockfileUnitOfWork) -> None:
        entry = _require_entry(unit_of_work, key)
        log.info("Updating %s: %s", key, ", ".join(update.fields))
        self.remote.update(key.resource_type, entry.id, update.fields)
        unit_of_work.lockfile.put(key, entry.with_fields(update.fields, synced_at=self.clock()))
        unit_of_work.commit()

    def _upload_icon(
        self,
        key: ResourceKey,
        spec: ResourceSpec,
        unit_of_work: LockfileUnitOfWork,
    ) -> None:
        entry = _require_entry(unit_of_work, key)
        if spec.icon is None:
            raise ValueError(f"{key} has an icon change but no icon")
        data = self.icons(self.resolve_icon_path(spec.icon))
        log.info("Uploading icon for %s", key)
        asset_id = self.remote.upload_icon(key.resource_type, entry.id, data)
        unit_of_work.lockfile.put(
            key,
            entry.with_icon(
                icon_hash=hash_icon(data),
                icon_asset_id=asset_id if asset_id is not None else entry.icon_asset_id,
                synced_at=self.clock(),
            ),
        )
        unit_of_work.commit()


def _require_entry(unit_of_work: LockfileUnitOfWork, key: ResourceKey) -> LockEntry:
    entry = unit_of_work.lockfile.get(key)
    if entry is None:
        raise ValueError(f"{key} is not in the lockfile")
    return entry


def _passive_outcome(diff: ResourceDiff) -> ResourceOutcome:
    if DecisionKind.ORPHAN in diff.kinds:
        return ResourceOutcome(
            key=diff.key,
            status=OutcomeStatus.SKIPPED,
            message="exists in lockfile but not in config (will not be deleted)",
        )
    if DecisionKind.REMOTE_MISSING in diff.kinds:
        return ResourceOutcome(
            key=diff.key,
            status=OutcomeStatus.FAILED,
            message="no longer exists remotely; run `rbxsync pull` to repair the lockfile",
        )
    return ResourceOutcome(key=diff.key, status=OutcomeStatus.UNCHANGED)


def _planned_outcome(diff: ResourceDiff) -> ResourceOutcome:
    if not diff.is_pending:
        return _passive_outcome(diff)
    actions: list[str] = []
    if diff.find(Create) is not None:
        actions.append("create")
    if (update := diff.find(Update)) is not None:
        actions.extend(
            f"update {change.field}: {change.old!r} -> {change.new!r}" for change in update.changes
        )
    if diff.find(IconChange) is not None:
        actions.append("upload icon")
    return ResourceOutcome(key=diff.key, status=OutcomeStatus.PLANNED, actions=tuple(actions))


def preview_sync(plan: SyncPlan, *, dry_run: bool = True) -> ApplyResult:
    """Outcomes for ``plan`` without touching the remote service or the lockfile."""

    return ApplyResult(dry_run=dry_run, outcomes=[_planned_outcome(diff) for diff in plan.diffs])


@dataclass(slots=True, kw_only=True)
class PullResult:
    plan: PullPlan
    dry_run: bool
    applied: list[PullItem] = field(default_factory=list)
    failed: list[ResourceOutcome] = field(default_factory=list)

    @property
    def unresolved(self) -> tuple[PullItem, ...]:
        return self.plan.conflicts

    @property
    def ok(self) -> bool:
        return not self.failed and not self.unresolved

    def raise_for_conflicts(self) -> None:
        if self.unresolved:
            raise ConflictError(tuple(item.key for item in self.unresolved))


@dataclass(slots=True)
class PullApplier:
    """Write a ``PullPlan`` into the lockfile and the in-memory project config."""

    remote: RemoteResourceService
    icons: IconSource
    icon_store: IconStore
    resolve_icon_path: IconPathResolver

    def __call__(
        self,
        plan: PullPlan,
        config: ProjectConfig,
        unit_of_work: LockfileUnitOfWork,
        *,
        dry_run: bool = False,
    ) -> PullResult:
        result = PullResult(plan=plan, dry_run=dry_run)
        if dry_run:
            return result

        lockfile = unit_of_work.lockfile
        lockfile.universe_id = plan.universe_id
        for item in plan.items:
            try:
                entry = self._materialize_icon(item)
            except RemoteError as exc:
                log.error("Failed to download icon for %s: %s", item.key, exc)
                result.failed.append(
                    ResourceOutcome(
                        key=item.key, status=OutcomeStatus.FAILED, message=str(exc), error=exc
                    )
                )
                continue

            if entry is None:
                lockfile.remove(item.key)
            else:
                lockfile.put(item.key, entry)
            if item.new_spec is not None and item.config_changed:
                config.put(item.new_spec)
            unit_of_work.commit()
            result.applied.append(item)
        return result

    def _materialize_icon(self, item: PullItem) -> LockEntry | None:
        entry = item.new_entry
        if item.icon_action is not IconAction.DOWNLOAD or entry is None:
            return entry
        if item.icon_target is None or entry.icon_asset_id is None:
            raise ValueError(f"{item.key} is missing its icon download target")
        path = self.resolve_icon_path(item.icon_target)
        log.info("Downloading icon %s for %s to %s", entry.icon_asset_id, item.key, path)
        self.icon_store.write(path, self.remote.fetch_icon(entry.icon_asset_id))
        return entry.with_icon(
            icon_hash=hash_icon(self.icons(path)),
            icon_asset_id=entry.icon_asset_id,
        )
