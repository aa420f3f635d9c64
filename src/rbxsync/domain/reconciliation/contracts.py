"""Decision contracts produced by the diff engine.

Each resource yields a ``ResourceDiff``. It carries exactly one decision,
except that ``Update`` and ``IconChange`` may both be present.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from rbxsync.domain.model import FieldValue, LockEntry, ResourceKey, ResourceSpec


class DecisionKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    ICON_CHANGE = "icon_change"
    UNCHANGED = "unchanged"
    CONFLICT = "conflict"
    ORPHAN = "orphan"
    REMOTE_MISSING = "remote_missing"


class DiffMode(StrEnum):
    SYNC = "sync"
    PULL = "pull"


@dataclass(slots=True, frozen=True, kw_only=True)
class FieldChange:
    field: str
    old: FieldValue
    new: FieldValue


@dataclass(slots=True, frozen=True, kw_only=True)
class Create:
    spec: ResourceSpec
    icon_hash: str | None = None
    kind: Literal[DecisionKind.CREATE] = DecisionKind.CREATE


@dataclass(slots=True, frozen=True, kw_only=True)
class Update:
    changes: tuple[FieldChange, ...]
    kind: Literal[DecisionKind.UPDATE] = DecisionKind.UPDATE

    def __post_init__(self) -> None:
        if not self.changes:
            raise ValueError("Update decision must include at least one field change")

    @property
    def fields(self) -> dict[str, FieldValue]:
        return {change.field: change.new for change in self.changes}


@dataclass(slots=True, frozen=True, kw_only=True)
class IconChange:
    old_hash: str | None
    new_hash: str
    kind: Literal[DecisionKind.ICON_CHANGE] = DecisionKind.ICON_CHANGE


@dataclass(slots=True, frozen=True, kw_only=True)
class Unchanged:
    kind: Literal[DecisionKind.UNCHANGED] = DecisionKind.UNCHANGED


@dataclass(slots=True, frozen=True, kw_only=True)
class Conflict:
    """Remote icon changed since the last sync while a local icon is configured."""

    field: str
    local: FieldValue
    remote: FieldValue
    kind: Literal[DecisionKind.CONFLICT] = DecisionKind.CONFLICT


@dataclass(slots=True, frozen=True, kw_only=True)
class Orphan:
    entry: LockEntry
    kind: Literal[DecisionKind.ORPHAN] = DecisionKind.ORPHAN


@dataclass(slots=True, frozen=True, kw_only=True)
class RemoteMissing:
    entry: LockEntry
    kind: Literal[DecisionKind.REMOTE_MISSING] = DecisionKind.REMOTE_MISSING


type Decision = Create | Update | IconChange | Unchanged | Conflict | Orphan | RemoteMissing


@dataclass(slots=True, frozen=True, kw_only=True)
class ResourceDiff:
    key: ResourceKey
    decisions: tuple[Decision, ...]

    def __post_init__(self) -> None:
        kinds = [decision.kind for decision in self.decisions]
        if not kinds:
            raise ValueError("ResourceDiff must include a decision")
        if len(kinds) > 1 and set(kinds) != {DecisionKind.UPDATE, DecisionKind.ICON_CHANGE}:
            raise ValueError(f"Only update and icon change may co-occur, got {kinds}")

    @property
    def kinds(self) -> frozenset[DecisionKind]:
        return frozenset(decision.kind for decision in self.decisions)

    def find[T](self, decision_type: type[T]) -> T | None:
        for decision in self.decisions:
            if isinstance(decision, decision_type):
                return decision
        return None

    @property
    def is_pending(self) -> bool:
        """True when applying this diff would mutate remote state."""

        return bool(
            self.kinds & {DecisionKind.CREATE, DecisionKind.UPDATE, DecisionKind.ICON_CHANGE}
        )


__all__ = [
    "Conflict",
    "Create",
    "Decision",
    "DecisionKind",
    "DiffMode",
    "FieldChange",
    "IconChange",
    "Orphan",
    "RemoteMissing",
    "ResourceDiff",
    "Unchanged",
    "Update",
]
