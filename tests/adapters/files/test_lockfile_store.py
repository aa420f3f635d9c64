from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from rbxsync.adapters.files import (
    TomlLockfileUnitOfWork,
    load_lockfile,
    parse_lockfile,
    save_lockfile,
)
from rbxsync.domain.errors import ConsistencyError
from rbxsync.domain.model import LockEntry, Lockfile, ResourceKey, ResourceType

if TYPE_CHECKING:
    from pathlib import Path

VIP = ResourceKey(ResourceType.PASS, "VIP")
SYNCED_AT = datetime(2025, 3, 1, 12, 30, tzinfo=UTC)


def _lockfile() -> Lockfile:
    lockfile = Lockfile(universe_id=123)
    lockfile.put(
        VIP,
        LockEntry(
            id=11,
            fields={
                "name": "VIP",
                "price": 499,
                "description": "",
                "for_sale": True,
                "regional_pricing": False,
            },
            icon_hash="ab" * 32,
            icon_asset_id=501,
            synced_at=SYNCED_AT,
        ),
    )
    lockfile.put(ResourceKey(ResourceType.BADGE, "Welcome"), LockEntry(id=12))
    return lockfile


def test_missing_lockfile_loads_empty(tmp_path: Path) -> None:
    lockfile = load_lockfile(tmp_path / "rbxsync.lock.toml")

    assert len(lockfile) == 0
    assert lockfile.universe_id is None


def test_save_and_load_preserve_entries(tmp_path: Path) -> None:
    path = tmp_path / "rbxsync.lock.toml"

    save_lockfile(path, _lockfile())

    assert load_lockfile(path) == _lockfile()
    text = path.read_text(encoding="utf-8")
    assert text.startswith("# This file is generated by rbxsync.")
    assert "[passes.VIP]" in text


def test_newer_lockfile_versions_are_refused() -> None:
    with pytest.raises(ConsistencyError, match="newer than supported"):
        parse_lockfile("version = 2\n")


@pytest.mark.parametrize(
    "text",
    ["version = [\n", "[passes.VIP]\nname = 'no id'\n", "[passes.VIP]\nid = 'abc'\n"],
)
def test_malformed_lockfiles_are_consistency_errors(text: str) -> None:
    with pytest.raises(ConsistencyError):
        parse_lockfile(text)


def test_unknown_lockfile_keys_are_tolerated() -> None:
    lockfile = parse_lockfile("[passes.VIP]\nid = 3\nlegacy = true\n")

    assert lockfile.get(VIP) == LockEntry(id=3)


def test_unit_of_work_writes_through_on_commit(tmp_path: Path) -> None:
    path = tmp_path / "rbxsync.lock.toml"
    unit_of_work = TomlLockfileUnitOfWork(path)

    with unit_of_work:
        unit_of_work.lockfile.put(VIP, LockEntry(id=1))
        unit_of_work.commit()
        assert load_lockfile(path).get(VIP) == LockEntry(id=1)
        unit_of_work.lockfile.put(ResourceKey(ResourceType.PASS, "Gold"), LockEntry(id=2))

    assert len(load_lockfile(path)) == 1


def test_unit_of_work_rolls_back_on_error(tmp_path: Path) -> None:
    path = tmp_path / "rbxsync.lock.toml"
    save_lockfile(path, _lockfile())
    unit_of_work = TomlLockfileUnitOfWork(path)

    with pytest.raises(RuntimeError, match="boom"), unit_of_work:
        unit_of_work.lockfile.remove(VIP)
        raise RuntimeError("boom")

    assert load_lockfile(path).get(VIP) is not None
    with pytest.raises(RuntimeError, match="outside of its context"):
        _ = unit_of_work.lockfile
