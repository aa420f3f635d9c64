from __future__ import annotations

import pytest

from rbxsync.domain.errors import ValidationError
from rbxsync.domain.model import (
    BadgeSpec,
    LockEntry,
    Lockfile,
    PassSpec,
    ProductSpec,
    ResourceKey,
    ResourceType,
    derive_key,
    fields_for,
    remote_field_names,
    spec_from_remote,
)
from rbxsync.domain.model.enums import FieldScope
from tests.helpers.project import make_config


@pytest.mark.parametrize("key", ["", " VIP", "VIP ", "player.vip"])
def test_invalid_keys_are_rejected(key: str) -> None:
    with pytest.raises(ValidationError):
        PassSpec(key=key)


def test_negative_price_is_rejected_with_key_and_field() -> None:
    with pytest.raises(ValidationError) as excinfo:
        PassSpec(key="VIP", price=-1)

    assert excinfo.value.key == "VIP"
    assert excinfo.value.field == "price"


def test_products_require_a_price() -> None:
    with pytest.raises(ValidationError, match="require a price"):
        ProductSpec(key="Coins")


def test_field_table_classifies_every_field_once() -> None:
    assert remote_field_names(ResourceType.PASS) == (
        "name",
        "price",
        "description",
        "for_sale",
        "regional_pricing",
    )
    assert remote_field_names(ResourceType.BADGE) == ("name", "description", "enabled")
    assert "store_page" in remote_field_names(ResourceType.PRODUCT)
    config_only = [spec.name for spec in fields_for(ResourceType.BADGE, scope=FieldScope.CONFIG)]
    assert config_only == ["icon", "path"]


def test_remote_fields_use_the_key_as_default_name() -> None:
    assert BadgeSpec(key="Welcome").remote_fields() == {
        "name": "Welcome",
        "description": "",
        "enabled": True,
    }


def test_with_remote_fields_never_touches_config_only_fields() -> None:
    spec = PassSpec(key="VIP", price=5, icon="icons/vip.png", path="shop")

    updated = spec.with_remote_fields({"name": "VIP", "price": 10, "description": "", "icon": "x"})

    assert updated == PassSpec(key="VIP", price=10, icon="icons/vip.png", path="shop")


def test_rename_keeps_the_display_name() -> None:
    config = make_config(PassSpec(key="VIP", price=5))

    renamed = config.rename(ResourceType.PASS, "VIP", "Vip2")

    assert renamed == PassSpec(key="Vip2", name="VIP", price=5)
    assert config.get(ResourceKey(ResourceType.PASS, "VIP")) is None


def test_rename_refuses_missing_or_taken_keys() -> None:
    config = make_config(PassSpec(key="A"), PassSpec(key="B"))

    with pytest.raises(ValidationError, match="no pass named"):
        config.rename(ResourceType.PASS, "C", "D")
    with pytest.raises(ValidationError, match="already exists"):
        config.rename(ResourceType.PASS, "A", "B")


def test_derive_key_replaces_separators() -> None:
    assert derive_key("Gold.Pass") == "Gold_Pass"
    assert derive_key("   ") == "unnamed"


def test_spec_from_remote_for_product_uses_remote_price() -> None:
    spec = spec_from_remote(
        ResourceType.PRODUCT, "Coins", {"name": "100 Coins", "price": 99, "store_page": True}
    )

    assert spec == ProductSpec(key="Coins", name="100 Coins", price=99, store_page=True)


def test_lockfile_lookup_and_rename() -> None:
    lockfile = Lockfile()
    key = ResourceKey(ResourceType.BADGE, "Welcome")
    lockfile.put(key, LockEntry(id=7))

    assert lockfile.key_for_id(ResourceType.BADGE, 7) == key
    assert lockfile.rename(key, "Hello")
    assert lockfile.get(key) is None
    assert lockfile.key_for_id(ResourceType.BADGE, 7) == ResourceKey(ResourceType.BADGE, "Hello")
    assert not lockfile.rename(key, "Other")


def test_resource_type_parse_accepts_labels_and_sections() -> None:
    assert ResourceType.parse("pass") is ResourceType.PASS
    assert ResourceType.parse(" Products ") is ResourceType.PRODUCT
    with pytest.raises(ValueError, match="Unknown resource type"):
        ResourceType.parse("gamepass")
