"""Pydantic models describing the config and lockfile TOML documents."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rbxsync.domain.model import CodegenStyle, CreatorType


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ConfigBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class CreatorDocument(ConfigBaseModel):
    type: CreatorType = CreatorType.USER
    id: int = Field(default=0, ge=0)


class ExperienceDocument(ConfigBaseModel):
    universe_id: int = Field(ge=0)
    creator: CreatorDocument = Field(default_factory=CreatorDocument)


class CodegenPathsDocument(ConfigBaseModel):
    passes: str | None = None
    badges: str | None = None
    products: str | None = None


class CodegenDocument(ConfigBaseModel):
    output: str | None = None
    typescript: bool = False
    style: CodegenStyle = CodegenStyle.FLAT
    paths: CodegenPathsDocument = Field(default_factory=CodegenPathsDocument)
    extra: dict[str, int] = Field(default_factory=dict)

    _normalize_output = field_validator("output", mode="before")(_blank_to_none)


class IconsDocument(ConfigBaseModel):
    bleed: bool = True
    dir: str = "icons"


class ResourceDocument(ConfigBaseModel):
    name: str | None = None
    description: str | None = None
    icon: str | None = None
    path: str | None = None

    _normalize_blank = field_validator("name", "icon", "path", mode="before")(_blank_to_none)


class PassDocument(ResourceDocument):
    price: int | None = Field(default=None, ge=0)
    for_sale: bool = True
    regional_pricing: bool = False


class BadgeDocument(ResourceDocument):
    enabled: bool = True


class ProductDocument(ResourceDocument):
    price: int = Field(ge=0)
    for_sale: bool = True
    regional_pricing: bool = False
    store_page: bool = False


class ConfigDocument(ConfigBaseModel):
    experience: ExperienceDocument
    codegen: CodegenDocument = Field(default_factory=CodegenDocument)
    icons: IconsDocument = Field(default_factory=IconsDocument)
    passes: dict[str, PassDocument] = Field(default_factory=dict)
    badges: dict[str, BadgeDocument] = Field(default_factory=dict)
    products: dict[str, ProductDocument] = Field(default_factory=dict)


class LockBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LockEntryDocument(LockBaseModel):
    id: int = Field(ge=0)
    name: str | None = None
    price: int | None = None
    description: str | None = None
    for_sale: bool | None = None
    regional_pricing: bool | None = None
    store_page: bool | None = None
    enabled: bool | None = None
    icon_hash: str | None = None
    icon_asset_id: int | None = None
    synced_at: datetime | None = None


class LockfileDocument(LockBaseModel):
    version: int = 1
    universe_id: int | None = None
    passes: dict[str, LockEntryDocument] = Field(default_factory=dict)
    badges: dict[str, LockEntryDocument] = Field(default_factory=dict)
    products: dict[str, LockEntryDocument] = Field(default_factory=dict)
