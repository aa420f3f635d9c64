from __future__ import annotations

import pytest

from rbxsync.domain.model import (
    BadgeSpec,
    LockEntry,
    PassSpec,
    RemoteState,
    ResourceKey,
    ResourceType,
)
from rbxsync.domain.reconciliation import (
    Conflict,
    Create,
    DecisionKind,
    DiffMode,
    IconChange,
    Orphan,
    RemoteMissing,
    ResourceDiff,
    Unchanged,
    Update,
    diff_resource,
)

VIP = ResourceKey(ResourceType.PASS, "VIP")


def _vip_entry(*, price: int = 400, icon_hash: str | None = "H1") -> LockEntry:
    return LockEntry(
        id=11,
        fields={
            "name": "VIP",
            "price": price,
            "description": "",
            "for_sale": True,
            "regional_pricing": False,
        },
        icon_hash=icon_hash,
        icon_asset_id=501,
    )


def _vip_spec(*, price: int = 499, icon: str | None = "icons/vip.png") -> PassSpec:
    return PassSpec(key="VIP", price=price, icon=icon)


def test_price_change_yields_update_without_icon_change() -> None:
    diff = diff_resource(VIP, local=_vip_spec(), entry=_vip_entry(), local_icon_hash="H1")

    update = diff.find(Update)
    assert update is not None
    assert update.fields == {"price": 499}
    assert diff.find(IconChange) is None


def test_price_and_icon_change_yield_both_decisions() -> None:
    diff = diff_resource(VIP, local=_vip_spec(), entry=_vip_entry(), local_icon_hash="H2")

    assert diff.kinds == {DecisionKind.UPDATE, DecisionKind.ICON_CHANGE}
    icon_change = diff.find(IconChange)
    assert icon_change == IconChange(old_hash="H1", new_hash="H2")


def test_matching_state_is_unchanged() -> None:
    diff = diff_resource(
        VIP, local=_vip_spec(price=400), entry=_vip_entry(), local_icon_hash="H1"
    )

    assert diff.decisions == (Unchanged(),)
    assert not diff.is_pending


def test_missing_description_equals_empty_description() -> None:
    spec = BadgeSpec(key="Welcome")
    entry = LockEntry(id=3, fields={"name": "Welcome", "description": None, "enabled": True})

    diff = diff_resource(spec.resource_key, local=spec, entry=entry)

    assert diff.kinds == {DecisionKind.UNCHANGED}


def test_unlocked_resource_is_created_with_its_icon_hash() -> None:
    spec = _vip_spec()

    diff = diff_resource(VIP, local=spec, entry=None, local_icon_hash="H1")

    assert diff.decisions == (Create(spec=spec, icon_hash="H1"),)


def test_locked_but_undeclared_resource_is_orphan() -> None:
    entry = _vip_entry()

    diff = diff_resource(VIP, local=None, entry=entry)

    assert diff.decisions == (Orphan(entry=entry),)
    assert not diff.is_pending


def test_neither_declared_nor_locked_is_a_programming_error() -> None:
    with pytest.raises(ValueError, match="neither declared nor locked"):
        diff_resource(VIP, local=None, entry=None)


def test_sync_requires_icon_hash_for_declared_icon() -> None:
    with pytest.raises(ValueError, match="no icon hash"):
        diff_resource(VIP, local=_vip_spec(), entry=_vip_entry())


def test_remote_absence_is_reported_when_remote_was_fetched() -> None:
    entry = _vip_entry()

    diff = diff_resource(
        VIP,
        local=_vip_spec(),
        entry=entry,
        local_icon_hash="H1",
        remote=None,
        remote_fetched=True,
    )

    assert diff.decisions == (RemoteMissing(entry=entry),)


def test_removing_local_icon_does_not_upload_anything() -> None:
    diff = diff_resource(VIP, local=_vip_spec(price=400, icon=None), entry=_vip_entry())

    assert diff.kinds == {DecisionKind.UNCHANGED}


def test_pull_flags_remote_icon_change_with_local_icon_as_conflict() -> None:
    remote = RemoteState(resource_type=ResourceType.PASS, id=11, icon_asset_id=777)

    diff = diff_resource(
        VIP,
        local=_vip_spec(),
        entry=_vip_entry(),
        remote=remote,
        remote_fetched=True,
        mode=DiffMode.PULL,
    )

    assert diff.decisions == (Conflict(field="icon", local="icons/vip.png", remote=777),)


def test_pull_without_local_icon_has_no_conflict() -> None:
    remote = RemoteState(resource_type=ResourceType.PASS, id=11, icon_asset_id=777)

    diff = diff_resource(
        VIP,
        local=_vip_spec(icon=None),
        entry=_vip_entry(),
        remote=remote,
        remote_fetched=True,
        mode=DiffMode.PULL,
    )

    assert diff.kinds == {DecisionKind.UNCHANGED}


def test_resource_diff_rejects_incompatible_decisions() -> None:
    with pytest.raises(ValueError, match="may co-occur"):
        ResourceDiff(key=VIP, decisions=(Unchanged(), IconChange(old_hash=None, new_hash="H")))
