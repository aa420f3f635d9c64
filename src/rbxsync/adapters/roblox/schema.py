"""Pydantic models describing the Roblox Open Cloud payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RobloxBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PriceInformation(RobloxBaseModel):
    default_price_in_robux: int | None = Field(default=None, alias="defaultPriceInRobux")
    enabled_features: list[str] | None = Field(default=None, alias="enabledFeatures")


class GamePassPayload(RobloxBaseModel):
    id: int = Field(alias="gamePassId")
    name: str | None = None
    description: str | None = None
    is_for_sale: bool | None = Field(default=None, alias="isForSale")
    icon_asset_id: int | None = Field(default=None, alias="iconAssetId")
    price_information: PriceInformation | None = Field(default=None, alias="priceInformation")


class ListGamePassesResponse(RobloxBaseModel):
    game_passes: list[GamePassPayload] = Field(default_factory=list, alias="gamePasses")
    next_page_token: str | None = Field(default=None, alias="nextPageToken")


class DeveloperProductPayload(RobloxBaseModel):
    id: int = Field(alias="productId")
    name: str | None = None
    description: str | None = None
    is_for_sale: bool | None = Field(default=None, alias="isForSale")
    store_page_enabled: bool | None = Field(default=None, alias="storePageEnabled")
    icon_image_asset_id: int | None = Field(default=None, alias="iconImageAssetId")
    price_information: PriceInformation | None = Field(default=None, alias="priceInformation")


class ListDeveloperProductsResponse(RobloxBaseModel):
    developer_products: list[DeveloperProductPayload] = Field(
        default_factory=list, alias="developerProducts"
    )
    next_page_token: str | None = Field(default=None, alias="nextPageToken")


class BadgePayload(RobloxBaseModel):
    id: int
    name: str | None = None
    description: str | None = None
    enabled: bool | None = None
    icon_image_id: int | None = Field(default=None, alias="iconImageId")


class ListBadgesResponse(RobloxBaseModel):
    data: list[BadgePayload] = Field(default_factory=list)
    next_page_cursor: str | None = Field(default=None, alias="nextPageCursor")


class BadgeIconResponse(RobloxBaseModel):
    target_id: int | None = Field(default=None, alias="targetId")


class AssetDeliveryResponse(RobloxBaseModel):
    location: str


class ErrorDetail(RobloxBaseModel):
    code: int | str | None = None
    message: str | None = None
    field: str | None = None


class ErrorResponse(RobloxBaseModel):
    """Covers both ``{"errors": [...]}`` and flat ``{"code", "message"}`` bodies."""

    errors: list[ErrorDetail] = Field(default_factory=list)
    code: int | str | None = None
    message: str | None = None

    def first_message(self) -> str | None:
        if self.message:
            return self.message
        for detail in self.errors:
            if detail.message:
                return detail.message
        return None

    def first_field(self) -> str | None:
        for detail in self.errors:
            if detail.field:
                return detail.field
        return None
