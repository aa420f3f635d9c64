"""Translate Roblox payloads to remote state and remote-visible fields to requests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rbxsync.domain.model import RemoteState, ResourceType

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rbxsync.domain.model import FieldValue

    from .schema import BadgePayload, DeveloperProductPayload, GamePassPayload, PriceInformation

type FormFields = list[tuple[str, tuple[str | None, str | bytes] | tuple[str, bytes, str]]]

REGIONAL_PRICING_FEATURE = "RegionalPricing"


def _reported(values: Mapping[str, FieldValue]) -> dict[str, FieldValue]:
    return {name: value for name, value in values.items() if value is not None}


def _regional_pricing(price: PriceInformation | None) -> bool | None:
    if price is None or price.enabled_features is None:
        return None
    return REGIONAL_PRICING_FEATURE in price.enabled_features


def game_pass_state(payload: GamePassPayload) -> RemoteState:
    price = payload.price_information
    return RemoteState(
        resource_type=ResourceType.PASS,
        id=payload.id,
        fields=_reported(
            {
                "name": payload.name,
                "description": payload.description,
                "price": price.default_price_in_robux if price else None,
                "for_sale": payload.is_for_sale,
                "regional_pricing": _regional_pricing(price),
            }
        ),
        icon_asset_id=payload.icon_asset_id,
    )


def developer_product_state(payload: DeveloperProductPayload) -> RemoteState:
    price = payload.price_information
    return RemoteState(
        resource_type=ResourceType.PRODUCT,
        id=payload.id,
        fields=_reported(
            {
                "name": payload.name,
                "description": payload.description,
                "price": price.default_price_in_robux if price else None,
                "for_sale": payload.is_for_sale,
                "regional_pricing": _regional_pricing(price),
                "store_page": payload.store_page_enabled,
            }
        ),
        icon_asset_id=payload.icon_image_asset_id,
    )


def badge_state(payload: BadgePayload) -> RemoteState:
    return RemoteState(
        resource_type=ResourceType.BADGE,
        id=payload.id,
        fields=_reported(
            {
                "name": payload.name,
                "description": payload.description,
                "enabled": payload.enabled,
            }
        ),
        icon_asset_id=payload.icon_image_id,
    )


def _text(value: FieldValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


_FORM_NAMES = {
    "name": "name",
    "description": "description",
    "price": "price",
    "for_sale": "isForSale",
    "regional_pricing": "isRegionalPricingEnabled",
    "store_page": "storePageEnabled",
}


def monetization_form(fields: Mapping[str, FieldValue]) -> FormFields:
    """Multipart text parts for game pass and developer product requests.

    An unset price is omitted rather than sent empty.
    """

    parts: FormFields = []
    for name, value in fields.items():
        form_name = _FORM_NAMES.get(name)
        if form_name is None or (name == "price" and value is None):
            continue
        parts.append((form_name, (None, _text(value))))
    return parts


def product_form(fields: Mapping[str, FieldValue]) -> FormFields:
    """Store page visibility only applies to products that are for sale."""

    values = dict(fields)
    if values.get("for_sale") is False:
        values["store_page"] = False
    return monetization_form(values)


def badge_create_form(
    fields: Mapping[str, FieldValue],
    *,
    payment_source_type: int,
    expected_cost: int,
) -> FormFields:
    return [
        ("name", (None, _text(fields.get("name")))),
        ("description", (None, _text(fields.get("description")))),
        ("paymentSourceType", (None, str(payment_source_type))),
        ("expectedCost", (None, str(expected_cost))),
        ("isActive", (None, _text(fields.get("enabled", True)))),
    ]


def badge_update_body(fields: Mapping[str, FieldValue]) -> dict[str, FieldValue]:
    names = {"name": "name", "description": "description", "enabled": "enabled"}
    return {names[name]: value for name, value in fields.items() if name in names}


def icon_part(field_name: str, data: bytes) -> tuple[str, tuple[str, bytes, str]]:
    return field_name, ("icon.png", data, "image/png")
