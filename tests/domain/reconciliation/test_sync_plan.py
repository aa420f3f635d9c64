from __future__ import annotations

from rbxsync.domain.model import (
    BadgeSpec,
    LockEntry,
    Lockfile,
    PassSpec,
    ProductSpec,
    RemoteSnapshot,
    RemoteState,
    ResourceKey,
    ResourceType,
)
from rbxsync.domain.reconciliation import ORPHAN_WARNING, build_sync_plan, keys_in_scope
from tests.helpers.project import make_config


def _lockfile(*items: tuple[ResourceKey, LockEntry]) -> Lockfile:
    lockfile = Lockfile()
    for key, entry in items:
        lockfile.put(key, entry)
    return lockfile


def _synced(spec: PassSpec | BadgeSpec | ProductSpec, remote_id: int) -> LockEntry:
    return LockEntry(id=remote_id, fields=spec.remote_fields())


def test_keys_in_scope_orders_types_and_merges_sources() -> None:
    config = make_config(ProductSpec(key="Coins", price=10), PassSpec(key="VIP"))
    lockfile = _lockfile((ResourceKey(ResourceType.BADGE, "Old"), LockEntry(id=1)))

    keys = keys_in_scope(config, lockfile)

    assert keys == [
        ResourceKey(ResourceType.PASS, "VIP"),
        ResourceKey(ResourceType.BADGE, "Old"),
        ResourceKey(ResourceType.PRODUCT, "Coins"),
    ]


def test_plan_summary_counts_creates_updates_and_unchanged() -> None:
    vip = PassSpec(key="VIP", price=100)
    gold = PassSpec(key="Gold", price=50)
    welcome = BadgeSpec(key="Welcome")
    config = make_config(vip, gold, welcome)
    lockfile = _lockfile(
        (vip.resource_key, _synced(PassSpec(key="VIP", price=80), 1)),
        (welcome.resource_key, _synced(welcome, 2)),
    )

    plan = build_sync_plan(config, lockfile, icon_hashes={})

    assert [diff.key for diff in plan.creates] == [gold.resource_key]
    assert [diff.key for diff in plan.updates] == [vip.resource_key]
    assert [diff.key for diff in plan.unchanged] == [welcome.resource_key]
    assert plan.summary() == "1 to create, 1 to update, 1 unchanged"
    assert plan.has_changes


def test_only_filter_limits_plan_to_selected_types() -> None:
    config = make_config(PassSpec(key="VIP"), BadgeSpec(key="Welcome"))

    plan = build_sync_plan(config, Lockfile(), icon_hashes={}, types=[ResourceType.BADGE])

    assert [diff.key.resource_type for diff in plan.diffs] == [ResourceType.BADGE]


def test_orphans_are_warned_about_but_never_pending() -> None:
    orphan = ResourceKey(ResourceType.PASS, "Retired")
    plan = build_sync_plan(
        make_config(), _lockfile((orphan, LockEntry(id=5))), icon_hashes={}
    )

    assert [diff.key for diff in plan.orphans] == [orphan]
    assert not plan.has_changes
    assert plan.warnings() == [f"pass 'Retired' {ORPHAN_WARNING}"]


def test_snapshot_marks_deleted_resources_as_remote_missing() -> None:
    vip = PassSpec(key="VIP", price=100)
    config = make_config(vip)
    lockfile = _lockfile((vip.resource_key, _synced(PassSpec(key="VIP", price=80), 1)))
    snapshot = RemoteSnapshot()
    snapshot.add(ResourceType.PASS, [])

    plan = build_sync_plan(config, lockfile, icon_hashes={}, snapshot=snapshot)

    assert [diff.key for diff in plan.remote_missing] == [vip.resource_key]
    assert not plan.updates


def test_snapshot_without_the_type_keeps_plain_update() -> None:
    vip = PassSpec(key="VIP", price=100)
    config = make_config(vip)
    lockfile = _lockfile((vip.resource_key, _synced(PassSpec(key="VIP", price=80), 1)))
    snapshot = RemoteSnapshot()
    snapshot.add(
        ResourceType.BADGE, [RemoteState(resource_type=ResourceType.BADGE, id=9, fields={})]
    )

    plan = build_sync_plan(config, lockfile, icon_hashes={}, snapshot=snapshot)

    assert [diff.key for diff in plan.updates] == [vip.resource_key]
