"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ResourceType(StrEnum):
    """Monetization resource kinds. Values match the config section names."""

    PASS = "passes"
    BADGE = "badges"
    PRODUCT = "products"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, value: str) -> ResourceType:
        """Accept section names (``passes``) and labels (``pass``)."""

        normalized = value.strip().lower()
        for member in cls:
            if normalized in (member.value, member.label):
                return member
        raise ValueError(f"Unknown resource type: {value!r}")


_LABELS = {
    ResourceType.PASS: "pass",
    ResourceType.BADGE: "badge",
    ResourceType.PRODUCT: "product",
}


class CreatorType(StrEnum):
    USER = "user"
    GROUP = "group"


class CodegenStyle(StrEnum):
    FLAT = "flat"
    NESTED = "nested"


class FieldScope(StrEnum):
    """Whether a field is mirrored on the platform or only lives in local config."""

    REMOTE = "remote"
    CONFIG = "config"
