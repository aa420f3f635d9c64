"""Three-way reconciliation of local config, lockfile and remote state."""

from __future__ import annotations

from .apply import (
    ApplyResult,
    OutcomeStatus,
    PullApplier,
    PullResult,
    ResourceOutcome,
    SyncApplier,
    preview_sync,
)
from .contracts import (
    Conflict,
    Create,
    Decision,
    DecisionKind,
    DiffMode,
    FieldChange,
    IconChange,
    Orphan,
    RemoteMissing,
    ResourceDiff,
    Unchanged,
    Update,
)
from .diff import diff_fields, diff_resource
from .plan import ORPHAN_WARNING, SyncPlan, build_sync_plan, keys_in_scope
from .resolve import (
    IconAction,
    PullItem,
    PullPlan,
    PullStatus,
    ResolutionMode,
    default_icon_target,
    resolve_pull,
)

__all__ = [
    "ORPHAN_WARNING",
    "ApplyResult",
    "Conflict",
    "Create",
    "Decision",
    "DecisionKind",
    "DiffMode",
    "FieldChange",
    "IconAction",
    "IconChange",
    "Orphan",
    "OutcomeStatus",
    "PullApplier",
    "PullItem",
    "PullPlan",
    "PullResult",
    "PullStatus",
    "RemoteMissing",
    "ResolutionMode",
    "ResourceDiff",
    "ResourceOutcome",
    "SyncApplier",
    "SyncPlan",
    "Unchanged",
    "Update",
    "build_sync_plan",
    "default_icon_target",
    "diff_fields",
    "diff_resource",
    "keys_in_scope",
    "preview_sync",
    "resolve_pull",
]
