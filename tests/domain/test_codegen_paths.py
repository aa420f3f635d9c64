from __future__ import annotations

import pytest

from rbxsync.domain.codegen import check_codegen_paths, map_codegen_paths
from rbxsync.domain.errors import ValidationError
from rbxsync.domain.model import (
    BadgeSpec,
    CodegenConfig,
    CodegenStyle,
    LockEntry,
    Lockfile,
    PassSpec,
    ResourceType,
)
from tests.helpers.project import make_config


def _synced(*specs: PassSpec | BadgeSpec) -> Lockfile:
    lockfile = Lockfile()
    for index, spec in enumerate(specs, start=1):
        lockfile.put(spec.resource_key, LockEntry(id=index * 100))
    return lockfile


def test_type_default_path_is_prefixed_to_the_key() -> None:
    vip = PassSpec(key="VIP")
    config = make_config(
        vip, codegen=CodegenConfig(output="Ids.luau", paths={ResourceType.PASS: "player.vips"})
    )

    entries = map_codegen_paths(config, _synced(vip))

    assert [(entry.dotted, entry.value) for entry in entries] == [("player.vips.VIP", 100)]


def test_item_path_overrides_type_default_and_type_name() -> None:
    vip = PassSpec(key="VIP", path="shop.specials")
    welcome = BadgeSpec(key="Welcome")
    config = make_config(
        vip, welcome, codegen=CodegenConfig(paths={ResourceType.PASS: "player.vips"})
    )

    entries = map_codegen_paths(config, _synced(vip, welcome))

    assert [entry.dotted for entry in entries] == ["badges.Welcome", "shop.specials.VIP"]


def test_unsynced_resources_are_left_out_but_extras_included() -> None:
    config = make_config(
        PassSpec(key="VIP"), codegen=CodegenConfig(extra={"passes.legacy_vip": 1234567})
    )

    entries = map_codegen_paths(config, Lockfile())

    assert [(entry.path, entry.value) for entry in entries] == [
        (("passes", "legacy_vip"), 1234567)
    ]


def test_orphans_are_not_generated() -> None:
    lockfile = _synced(PassSpec(key="Retired"))

    assert map_codegen_paths(make_config(), lockfile) == []


def test_duplicate_paths_are_rejected() -> None:
    vip = PassSpec(key="VIP")
    config = make_config(vip, codegen=CodegenConfig(extra={"passes.VIP": 1}))

    with pytest.raises(ValidationError, match="also produced by"):
        map_codegen_paths(config, _synced(vip))


def test_nested_style_rejects_values_with_children() -> None:
    vip = PassSpec(key="VIP", path="shop")
    shop = PassSpec(key="shop", path="root")
    config = make_config(
        vip,
        shop,
        codegen=CodegenConfig(style=CodegenStyle.NESTED, extra={"shop": 5}),
    )

    with pytest.raises(ValidationError, match="nests under value"):
        map_codegen_paths(config, _synced(vip, shop))


def test_check_codegen_paths_covers_resources_not_yet_created() -> None:
    config = make_config(
        PassSpec(key="VIP"), codegen=CodegenConfig(extra={"passes.VIP": 1})
    )

    with pytest.raises(ValidationError):
        check_codegen_paths(config)


def test_empty_path_segments_are_invalid() -> None:
    vip = PassSpec(key="VIP", path="shop..vip")

    with pytest.raises(ValidationError, match="invalid codegen path"):
        map_codegen_paths(make_config(vip), _synced(vip))
