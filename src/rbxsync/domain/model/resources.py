"""Locally declared resource specs."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, ClassVar, Self

from rbxsync.domain.errors import ValidationError

from .enums import ResourceType
from .fields import FieldValue, normalize_field, remote_field_names

if TYPE_CHECKING:
    from collections.abc import Mapping

RESOURCE_ORDER: tuple[ResourceType, ...] = (
    ResourceType.PASS,
    ResourceType.BADGE,
    ResourceType.PRODUCT,
)

_UNSAFE_KEY_CHARS = re.compile(r"\.")


@dataclass(slots=True, frozen=True)
class ResourceKey:
    resource_type: ResourceType
    key: str

    def __str__(self) -> str:
        return f"{self.resource_type.label} '{self.key}'"

    def sort_key(self) -> tuple[int, str]:
        return RESOURCE_ORDER.index(self.resource_type), self.key


def validate_key(key: str) -> str:
    if not key or key != key.strip():
        raise ValidationError("keys must be non-empty without surrounding whitespace", key=key)
    if "." in key:
        raise ValidationError("keys may not contain '.'", key=key)
    return key


def derive_key(display_name: str) -> str:
    """Turn a remote display name into a usable config key."""

    key = _UNSAFE_KEY_CHARS.sub("_", display_name.strip())
    return key or "unnamed"


@dataclass(slots=True, frozen=True, kw_only=True)
class ResourceSpec:
    """Common fields of every declared resource."""

    resource_type: ClassVar[ResourceType]

    key: str
    name: str | None = None
    description: str | None = None
    icon: str | None = None
    path: str | None = None

    def __post_init__(self) -> None:
        validate_key(self.key)

    @property
    def resource_key(self) -> ResourceKey:
        return ResourceKey(self.resource_type, self.key)

    @property
    def display_name(self) -> str:
        return self.name or self.key

    def remote_fields(self) -> dict[str, FieldValue]:
        """Remote-visible field values in comparison form."""

        values: dict[str, FieldValue] = {}
        for name in remote_field_names(self.resource_type):
            value = self.display_name if name == "name" else getattr(self, name)
            values[name] = normalize_field(name, value)
        return values

    def with_remote_fields(self, values: Mapping[str, FieldValue]) -> Self:
        """Copy with remote-visible fields overwritten; config-only fields are kept."""

        allowed = set(remote_field_names(self.resource_type))
        changes: dict[str, FieldValue] = {}
        for name, value in values.items():
            if name not in allowed:
                continue
            if name == "name":
                changes[name] = None if value == self.key else value
            elif name == "description":
                changes[name] = value or None
            else:
                changes[name] = value
        return replace(self, **changes)  # type: ignore[arg-type]

    def renamed(self, new_key: str) -> Self:
        return replace(self, key=new_key, name=self.name or self.key)


def _check_price(spec: ResourceSpec, price: int | None) -> None:
    if price is not None and price < 0:
        raise ValidationError("price must not be negative", key=spec.key, field="price")


@dataclass(slots=True, frozen=True, kw_only=True)
class PassSpec(ResourceSpec):
    resource_type: ClassVar[ResourceType] = ResourceType.PASS

    price: int | None = None
    for_sale: bool = True
    regional_pricing: bool = False

    def __post_init__(self) -> None:
        super(PassSpec, self).__post_init__()
        _check_price(self, self.price)


@dataclass(slots=True, frozen=True, kw_only=True)
class BadgeSpec(ResourceSpec):
    resource_type: ClassVar[ResourceType] = ResourceType.BADGE

    enabled: bool = True


@dataclass(slots=True, frozen=True, kw_only=True)
class ProductSpec(ResourceSpec):
    resource_type: ClassVar[ResourceType] = ResourceType.PRODUCT

    price: int | None = None
    for_sale: bool = True
    regional_pricing: bool = False
    store_page: bool = False

    def __post_init__(self) -> None:
        super(ProductSpec, self).__post_init__()
        if self.price is None:
            raise ValidationError("developer products require a price", key=self.key, field="price")
        _check_price(self, self.price)


SPEC_TYPES: dict[ResourceType, type[ResourceSpec]] = {
    ResourceType.PASS: PassSpec,
    ResourceType.BADGE: BadgeSpec,
    ResourceType.PRODUCT: ProductSpec,
}


def spec_from_remote(
    resource_type: ResourceType,
    key: str,
    fields: Mapping[str, FieldValue],
    *,
    icon: str | None = None,
) -> ResourceSpec:
    """Build a fresh spec for a resource that so far only exists remotely."""

    spec_type = SPEC_TYPES[resource_type]
    seed: dict[str, object] = {"key": key, "icon": icon}
    if resource_type is ResourceType.PRODUCT:
        seed["price"] = fields.get("price") or 0
    return spec_type(**seed).with_remote_fields(fields)  # type: ignore[arg-type]
