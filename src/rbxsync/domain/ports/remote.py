"""Port for the remote resource service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rbxsync.domain.model import FieldValue, RemoteState, ResourceType


@dataclass(slots=True, frozen=True)
class CreatedResource:
    id: int
    icon_asset_id: int | None = None


@runtime_checkable
class RemoteResourceService(Protocol):
    """Create, update and observe monetization resources on the platform.

    Implementations raise ``rbxsync.domain.errors.RemoteError`` subclasses.
    """

    def list_resources(self, resource_type: ResourceType) -> list[RemoteState]: ...

    def get_resource(
        self, resource_type: ResourceType, remote_id: int
    ) -> RemoteState | None: ...

    def create(
        self,
        resource_type: ResourceType,
        fields: Mapping[str, FieldValue],
        *,
        icon: bytes | None = None,
        expected_cost: int | None = None,
    ) -> CreatedResource:
        """Create the resource, sending the icon with the creation request when given."""
        ...

    def update(
        self,
        resource_type: ResourceType,
        remote_id: int,
        fields: Mapping[str, FieldValue],
    ) -> None: ...

    def upload_icon(self, resource_type: ResourceType, remote_id: int, data: bytes) -> int | None:
        """Upload icon bytes and return the new icon asset id when the platform reports it."""
        ...

    def fetch_icon(self, asset_id: int) -> bytes: ...

    def close(self) -> None:
        """Release connections held between calls."""
        ...


__all__ = ["CreatedResource", "RemoteResourceService"]
