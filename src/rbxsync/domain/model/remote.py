"""Snapshot of resources as currently observed on the platform."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import ResourceType  # noqa: TC001
from .fields import FieldValue, normalize_field

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


@dataclass(slots=True, frozen=True, kw_only=True)
class RemoteState:
    """Fetched state of one remote resource. Never persisted directly.

    ``fields`` only holds the remote-visible fields the platform reported.
    """

    resource_type: ResourceType
    id: int
    fields: Mapping[str, FieldValue] = field(default_factory=dict)
    icon_asset_id: int | None = None

    @property
    def name(self) -> str:
        value = self.fields.get("name")
        return value if isinstance(value, str) else str(self.id)

    def comparable_fields(self) -> dict[str, FieldValue]:
        return {name: normalize_field(name, value) for name, value in self.fields.items()}


@dataclass(slots=True)
class RemoteSnapshot:
    """Remote listings for the resource types that were fetched."""

    states: dict[ResourceType, dict[int, RemoteState]] = field(default_factory=dict)

    def add(self, resource_type: ResourceType, states: Iterable[RemoteState]) -> None:
        bucket = self.states.setdefault(resource_type, {})
        for state in states:
            bucket[state.id] = state

    def covers(self, resource_type: ResourceType) -> bool:
        return resource_type in self.states

    def get(self, resource_type: ResourceType, remote_id: int) -> RemoteState | None:
        return self.states.get(resource_type, {}).get(remote_id)

    def of_type(self, resource_type: ResourceType) -> list[RemoteState]:
        return sorted(self.states.get(resource_type, {}).values(), key=lambda state: state.id)
