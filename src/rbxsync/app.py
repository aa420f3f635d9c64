"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import closing
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from rbxsync.adapters.codegen import write_codegen
from rbxsync.adapters.files import (
    DEFAULT_TEMPLATE,
    TomlConfigStore,
    TomlLockfileUnitOfWork,
    load_lockfile,
)
from rbxsync.adapters.icons import FileIconStore, PillowIconSource
from rbxsync.adapters.roblox import RobloxResourceService
from rbxsync.config import MissingConfigurationError, get_roblox_config
from rbxsync.domain.codegen import check_codegen_paths, map_codegen_paths
from rbxsync.domain.errors import ConsistencyError, ValidationError
from rbxsync.domain.hashing import hash_icon
from rbxsync.domain.model import (
    RESOURCE_ORDER,
    Experience,
    ProjectConfig,
    RemoteSnapshot,
    ResourceKey,
    ResourceType,
)
from rbxsync.domain.reconciliation import (
    PullApplier,
    ResolutionMode,
    SyncApplier,
    build_sync_plan,
    preview_sync,
    resolve_pull,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from rbxsync.config import ProjectPaths
    from rbxsync.domain.model import Lockfile, RemoteState, ResourceSpec
    from rbxsync.domain.ports import IconSource, LockfileUnitOfWork, RemoteResourceService
    from rbxsync.domain.reconciliation import ApplyResult, PullResult, SyncPlan

type RemoteFactory = Callable[[ProjectConfig], RemoteResourceService]
type UnitOfWorkFactory = Callable[[Path], LockfileUnitOfWork]

log = getLogger(__name__)


def build_roblox_service(
    config: ProjectConfig, *, api_key: str | None = None
) -> RobloxResourceService:
    """Roblox-backed remote service for the experience declared in ``config``."""

    return RobloxResourceService(
        config=get_roblox_config(api_key=api_key),
        universe_id=config.experience.universe_id,
        payment_source_type=config.experience.creator.payment_source_type,
    )


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(microsecond=0)


def fetch_snapshot(
    remote: RemoteResourceService,
    types: Iterable[ResourceType],
    lockfile: Lockfile | None = None,
) -> RemoteSnapshot:
    """List every type in ``types``.

    The badge listing leaves out disabled badges, so locked badges missing from
    it are looked up one by one before they count as deleted.
    """

    snapshot = RemoteSnapshot()
    for resource_type in types:
        states = remote.list_resources(resource_type)
        log.info("Fetched %d remote %s", len(states), resource_type.value)
        snapshot.add(resource_type, states)
    if lockfile is not None and snapshot.covers(ResourceType.BADGE):
        for key in lockfile.keys(ResourceType.BADGE):
            entry = lockfile.get(key)
            if entry is None or snapshot.get(ResourceType.BADGE, entry.id) is not None:
                continue
            state = remote.get_resource(ResourceType.BADGE, entry.id)
            if state is not None:
                log.debug("Found unlisted %s by id %d", key, entry.id)
                snapshot.add(ResourceType.BADGE, [state])
    return snapshot


def compute_icon_hashes(
    config: ProjectConfig,
    paths: ProjectPaths,
    icons: IconSource,
    types: Iterable[ResourceType] | None = None,
) -> dict[ResourceKey, str]:
    """Hash the processed bytes of every configured icon in scope."""

    return {
        spec.resource_key: hash_icon(icons(paths.resolve(spec.icon)))
        for spec in config.specs(types)
        if spec.icon is not None
    }


def _check_universe(config: ProjectConfig, lockfile: Lockfile) -> None:
    locked = lockfile.universe_id
    if locked is not None and locked != config.experience.universe_id:
        raise ConsistencyError(
            f"lockfile belongs to universe {locked} but config declares "
            f"{config.experience.universe_id}"
        )


@dataclass(slots=True, kw_only=True)
class SyncResult:
    plan: SyncPlan
    apply: ApplyResult
    codegen_files: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.apply.ok


def sync(
    paths: ProjectPaths,
    *,
    remote_factory: RemoteFactory,
    types: Sequence[ResourceType] | None = None,
    dry_run: bool = False,
    badge_cost: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory = TomlLockfileUnitOfWork,
) -> SyncResult:
    """Push local config to the platform and regenerate the codegen output."""

    config = TomlConfigStore(paths).load()
    if config.codegen.output:
        check_codegen_paths(config)
    icons = PillowIconSource(bleed=config.icons.bleed)
    icon_hashes = compute_icon_hashes(config, paths, icons, types)
    log.info(
        "Starting sync: universe=%s, types=%s, dry_run=%s",
        config.experience.universe_id,
        ",".join(t.value for t in types) if types else "all",
        dry_run,
    )

    with unit_of_work_factory(paths.lockfile_path) as unit_of_work:
        _check_universe(config, unit_of_work.lockfile)
        plan = build_sync_plan(config, unit_of_work.lockfile, icon_hashes=icon_hashes, types=types)
        if dry_run:
            return SyncResult(plan=plan, apply=preview_sync(plan))

        if plan.has_changes:
            with closing(remote_factory(config)) as remote:
                if plan.updates:
                    # Updates against resources deleted on the platform would fail one by one.
                    stale_types = sorted(
                        {diff.key.resource_type for diff in plan.updates},
                        key=RESOURCE_ORDER.index,
                    )
                    snapshot = fetch_snapshot(remote, stale_types, unit_of_work.lockfile)
                    plan = build_sync_plan(
                        config,
                        unit_of_work.lockfile,
                        icon_hashes=icon_hashes,
                        types=types,
                        snapshot=snapshot,
                    )

                applier = SyncApplier(
                    remote=remote,
                    icons=icons,
                    resolve_icon_path=paths.resolve,
                    badge_cost=badge_cost,
                )
                result = applier(plan, config, unit_of_work)
        else:
            log.info("Everything is up to date")
            result = preview_sync(plan, dry_run=False)

        written: list[Path] = []
        if config.codegen.output:
            entries = map_codegen_paths(config, unit_of_work.lockfile)
            written = write_codegen(
                entries, config.codegen, output=paths.resolve(config.codegen.output)
            )

    log.info(
        "Finished sync: %d outcomes, %d failed, halted=%s",
        len(result.outcomes),
        len(result.failed),
        result.halted,
    )
    return SyncResult(plan=plan, apply=result, codegen_files=written)


def pull(
    paths: ProjectPaths,
    *,
    remote_factory: RemoteFactory,
    mode: ResolutionMode = ResolutionMode.NONE,
    dry_run: bool = False,
    unit_of_work_factory: UnitOfWorkFactory = TomlLockfileUnitOfWork,
    now: datetime | None = None,
) -> PullResult:
    """Merge remote state into the lockfile and the local config."""

    store = TomlConfigStore(paths, validate_icons=False)
    config = store.load()
    with closing(remote_factory(config)) as remote:
        result = _pull_into(
            config,
            paths,
            remote=remote,
            mode=mode,
            dry_run=dry_run,
            unit_of_work_factory=unit_of_work_factory,
            now=now or _utcnow(),
        )
    if not dry_run and any(item.config_changed for item in result.applied):
        store.save(config)
        log.info("Updated config %s", paths.config_path)
    return result


def _pull_into(
    config: ProjectConfig,
    paths: ProjectPaths,
    *,
    remote: RemoteResourceService,
    mode: ResolutionMode,
    dry_run: bool,
    unit_of_work_factory: UnitOfWorkFactory,
    now: datetime,
) -> PullResult:
    with unit_of_work_factory(paths.lockfile_path) as unit_of_work:
        _check_universe(config, unit_of_work.lockfile)
        snapshot = fetch_snapshot(remote, RESOURCE_ORDER, unit_of_work.lockfile)
        plan = resolve_pull(config, unit_of_work.lockfile, snapshot, mode=mode, now=now)
        for warning in plan.warnings:
            log.warning(warning)
        applier = PullApplier(
            remote=remote,
            icons=PillowIconSource(bleed=config.icons.bleed),
            icon_store=FileIconStore(),
            resolve_icon_path=paths.resolve,
        )
        result = applier(plan, config, unit_of_work, dry_run=dry_run)
    log.info(
        "Finished pull: %d items, %d applied, %d conflicts, %d failed",
        len(plan.items),
        len(result.applied),
        len(result.unresolved),
        len(result.failed),
    )
    return result


@dataclass(slots=True, kw_only=True)
class InitResult:
    config_path: Path
    pull: PullResult | None = None


def init_project(
    paths: ProjectPaths,
    *,
    universe_id: int | None = None,
    remote_factory: RemoteFactory | None = None,
    unit_of_work_factory: UnitOfWorkFactory = TomlLockfileUnitOfWork,
    now: datetime | None = None,
) -> InitResult:
    """Write a starter config, or build config and lockfile from remote state.

    Passing ``remote_factory`` selects the remote bootstrap, which requires
    ``universe_id``. Existing project files are never overwritten.
    """

    store = TomlConfigStore(paths, validate_icons=False)
    if store.exists():
        raise ValidationError(f"config file already exists: {paths.config_path}")

    if remote_factory is None:
        store.write_text(DEFAULT_TEMPLATE)
        log.info("Wrote starter config %s", paths.config_path)
        return InitResult(config_path=paths.config_path)

    if universe_id is None:
        raise ValidationError("a universe id is required to initialise from remote")
    if paths.lockfile_path.exists():
        raise ValidationError(f"lockfile already exists: {paths.lockfile_path}")

    config = ProjectConfig(experience=Experience(universe_id=universe_id))
    with closing(remote_factory(config)) as remote:
        result = _pull_into(
            config,
            paths,
            remote=remote,
            mode=ResolutionMode.ACCEPT_REMOTE,
            dry_run=False,
            unit_of_work_factory=unit_of_work_factory,
            now=now or _utcnow(),
        )
    store.save(config)
    log.info("Initialised %s from universe %s", paths.config_path, universe_id)
    return InitResult(config_path=paths.config_path, pull=result)


@dataclass(slots=True, kw_only=True)
class CheckReport:
    plan: SyncPlan
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    drift: list[str] = field(default_factory=list)
    remote_checked: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise ConsistencyError("; ".join(self.errors))


def _drift(key: ResourceKey, lockfile: Lockfile, remote: RemoteState) -> list[str]:
    entry = lockfile.get(key)
    if entry is None:
        return []
    locked = entry.synced_fields(key.resource_type)
    messages = [
        f"{key} {name} is {value!r} remotely but {locked.get(name)!r} in the lockfile"
        for name, value in sorted(remote.comparable_fields().items())
        if name in locked and locked[name] != value
    ]
    if remote.icon_asset_id != entry.icon_asset_id:
        messages.append(
            f"{key} icon asset is {remote.icon_asset_id} remotely "
            f"but {entry.icon_asset_id} in the lockfile"
        )
    return messages


def check(
    paths: ProjectPaths,
    *,
    remote_factory: RemoteFactory | None = None,
) -> CheckReport:
    """Validate config and lockfile, and compare against remote state when possible.

    A missing API key only skips the remote comparison.
    """

    config = TomlConfigStore(paths).load()
    check_codegen_paths(config)
    lockfile = load_lockfile(paths.lockfile_path)
    icon_hashes = compute_icon_hashes(config, paths, PillowIconSource(bleed=config.icons.bleed))

    errors: list[str] = []
    try:
        _check_universe(config, lockfile)
    except ConsistencyError as exc:
        errors.append(str(exc))

    plan = build_sync_plan(config, lockfile, icon_hashes=icon_hashes)
    report = CheckReport(plan=plan, errors=errors, warnings=plan.warnings())
    if remote_factory is None:
        return report

    try:
        remote = remote_factory(config)
    except MissingConfigurationError as exc:
        log.info("Skipping remote checks: %s", exc)
        return report

    locked_types = [t for t in RESOURCE_ORDER if any(True for _ in lockfile.keys(t))]
    with closing(remote):
        snapshot = fetch_snapshot(remote, locked_types, lockfile)
    report.plan = build_sync_plan(config, lockfile, icon_hashes=icon_hashes, snapshot=snapshot)
    report.remote_checked = True
    for diff in report.plan.remote_missing:
        report.errors.append(f"{diff.key} no longer exists remotely; run `rbxsync pull`")
    for key in lockfile.keys():
        entry = lockfile.get(key)
        state = snapshot.get(key.resource_type, entry.id) if entry is not None else None
        if state is not None:
            report.drift.extend(_drift(key, lockfile, state))
    return report


@dataclass(slots=True, kw_only=True)
class RenameResult:
    old: ResourceKey
    new: ResourceKey
    spec: ResourceSpec
    lock_renamed: bool


def rename(
    paths: ProjectPaths,
    resource_type: ResourceType,
    old_key: str,
    new_key: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory = TomlLockfileUnitOfWork,
) -> RenameResult:
    """Rename a resource key in both config and lockfile."""

    store = TomlConfigStore(paths, validate_icons=False)
    config = store.load()
    old = ResourceKey(resource_type, old_key)
    new = ResourceKey(resource_type, new_key)
    spec = config.rename(resource_type, old_key, new_key)

    with unit_of_work_factory(paths.lockfile_path) as unit_of_work:
        if unit_of_work.lockfile.get(new) is not None:
            raise ValidationError(
                f"{new} already exists in the lockfile", key=f"{resource_type.value}.{new_key}"
            )
        lock_renamed = unit_of_work.lockfile.rename(old, new_key)
        if lock_renamed:
            unit_of_work.commit()
    store.save(config)
    log.info("Renamed %s to %s", old, new)
    return RenameResult(old=old, new=new, spec=spec, lock_renamed=lock_renamed)


@dataclass(slots=True, frozen=True, kw_only=True)
class ListedResource:
    state: RemoteState
    key: ResourceKey | None = None


def list_remote(
    paths: ProjectPaths,
    resource_type: ResourceType,
    *,
    remote_factory: RemoteFactory,
) -> list[ListedResource]:
    """Remote resources of one type, annotated with the lockfile key tracking them."""

    config = TomlConfigStore(paths, validate_icons=False).load()
    lockfile = load_lockfile(paths.lockfile_path)
    with closing(remote_factory(config)) as remote:
        states = remote.list_resources(resource_type)
    return [
        ListedResource(state=state, key=lockfile.key_for_id(resource_type, state.id))
        for state in sorted(states, key=lambda state: state.id)
    ]
