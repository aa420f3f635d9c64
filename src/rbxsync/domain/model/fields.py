"""Static field classification table.

Every per-resource field is listed exactly once. Diffing, lockfile recording
and pull merging iterate this table instead of naming fields themselves.
"""

from __future__ import annotations

from dataclasses import dataclass

from .enums import FieldScope, ResourceType

type FieldValue = str | int | bool | None

_ALL = frozenset(ResourceType)
_PRICED = frozenset({ResourceType.PASS, ResourceType.PRODUCT})


@dataclass(slots=True, frozen=True, kw_only=True)
class FieldSpec:
    name: str
    scope: FieldScope
    resource_types: frozenset[ResourceType]
    default: FieldValue = None

    def applies_to(self, resource_type: ResourceType) -> bool:
        return resource_type in self.resource_types


FIELD_TABLE: tuple[FieldSpec, ...] = (
    FieldSpec(name="name", scope=FieldScope.REMOTE, resource_types=_ALL),
    FieldSpec(name="price", scope=FieldScope.REMOTE, resource_types=_PRICED),
    FieldSpec(name="description", scope=FieldScope.REMOTE, resource_types=_ALL, default=""),
    FieldSpec(name="for_sale", scope=FieldScope.REMOTE, resource_types=_PRICED, default=True),
    FieldSpec(
        name="regional_pricing", scope=FieldScope.REMOTE, resource_types=_PRICED, default=False
    ),
    FieldSpec(
        name="store_page",
        scope=FieldScope.REMOTE,
        resource_types=frozenset({ResourceType.PRODUCT}),
        default=False,
    ),
    FieldSpec(
        name="enabled",
        scope=FieldScope.REMOTE,
        resource_types=frozenset({ResourceType.BADGE}),
        default=True,
    ),
    FieldSpec(name="icon", scope=FieldScope.CONFIG, resource_types=_ALL),
    FieldSpec(name="path", scope=FieldScope.CONFIG, resource_types=_ALL),
)


def fields_for(
    resource_type: ResourceType, *, scope: FieldScope | None = None
) -> tuple[FieldSpec, ...]:
    return tuple(
        spec
        for spec in FIELD_TABLE
        if spec.applies_to(resource_type) and (scope is None or spec.scope is scope)
    )


def remote_field_names(resource_type: ResourceType) -> tuple[str, ...]:
    return tuple(spec.name for spec in fields_for(resource_type, scope=FieldScope.REMOTE))


def normalize_field(name: str, value: FieldValue) -> FieldValue:
    """Canonical comparison form: a missing description equals an empty one."""

    if name == "description" and value is None:
        return ""
    return value
