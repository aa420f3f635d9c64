"""Plain-text rendering of command results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rbxsync.domain.reconciliation import OutcomeStatus, PullStatus

if TYPE_CHECKING:
    from rbxsync.app import CheckReport, ListedResource, RenameResult, SyncResult
    from rbxsync.domain.reconciliation import PullItem, PullResult, ResourceOutcome

_STATUS_MARKS = {
    OutcomeStatus.PLANNED: "~",
    OutcomeStatus.CREATED: "+",
    OutcomeStatus.UPDATED: "~",
    OutcomeStatus.UNCHANGED: "=",
    OutcomeStatus.SKIPPED: "!",
    OutcomeStatus.FAILED: "x",
}


def format_outcome(outcome: ResourceOutcome) -> list[str]:
    mark = _STATUS_MARKS[outcome.status]
    lines = [f"{mark} {outcome.key} [{outcome.status.value}]"]
    lines.extend(f"    {action}" for action in outcome.actions)
    if outcome.message:
        lines.append(f"    {outcome.message}")
    return lines


def format_sync(result: SyncResult, *, verbose: bool = False) -> list[str]:
    lines: list[str] = []
    if result.apply.dry_run:
        lines.append("Dry run: no changes were made.")
    for outcome in result.apply.outcomes:
        if outcome.status is OutcomeStatus.UNCHANGED and not verbose:
            continue
        lines.extend(format_outcome(outcome))
    lines.extend(f"warning: {warning}" for warning in result.plan.warnings())
    lines.extend(f"wrote {path}" for path in result.codegen_files)
    lines.append(result.plan.summary())
    if result.apply.halted:
        lines.append("Stopped after an authorization failure; check the API key permissions.")
    return lines


def _pull_item_lines(item: PullItem) -> list[str]:
    lines = [f"{item.key} [{item.status.value}]"]
    lines.extend(
        f"    {change.field}: {change.old!r} -> {change.new!r}" for change in item.config_changes
    )
    if item.icon_target is not None:
        lines.append(f"    icon -> {item.icon_target}")
    if item.conflict is not None:
        lines.append(
            f"    icon conflict: local {item.conflict.local!r}, remote asset {item.conflict.remote}"
        )
    return lines


def format_pull(result: PullResult, *, verbose: bool = False) -> list[str]:
    plan = result.plan
    lines: list[str] = []
    if result.dry_run:
        lines.append("Dry run: no changes were made.")
    for item in plan.items:
        if item.status is PullStatus.UNCHANGED and not verbose:
            continue
        lines.extend(_pull_item_lines(item))
    lines.extend(f"warning: {warning}" for warning in plan.warnings)
    for outcome in result.failed:
        lines.extend(format_outcome(outcome))
    counts = {status: len(plan.with_status(status)) for status in PullStatus}
    lines.append(
        ", ".join(f"{count} {status.value}" for status, count in counts.items() if count)
        or "nothing to pull"
    )
    if result.unresolved:
        lines.append("Re-run pull with --accept-remote or --accept-local to resolve conflicts.")
    return lines


def format_check(report: CheckReport) -> list[str]:
    lines = [f"error: {error}" for error in report.errors]
    lines.extend(f"warning: {warning}" for warning in report.warnings)
    lines.extend(f"drift: {drift}" for drift in report.drift)
    lines.append(f"pending: {report.plan.summary()}")
    if not report.remote_checked:
        lines.append("remote state not checked (no API key)")
    lines.append("ok" if report.ok else "check failed")
    return lines


def format_rename(result: RenameResult) -> list[str]:
    lines = [f"renamed {result.old} to {result.new}"]
    if not result.lock_renamed:
        lines.append("    (not in the lockfile yet)")
    return lines


def format_listing(resources: list[ListedResource]) -> list[str]:
    if not resources:
        return ["no remote resources"]
    lines: list[str] = []
    for resource in resources:
        state = resource.state
        tracked = resource.key.key if resource.key is not None else "-"
        details = ", ".join(
            f"{name}={value!r}" for name, value in sorted(state.fields.items()) if name != "name"
        )
        lines.append(f"{state.id}\t{tracked}\t{state.name}\t{details}")
    return lines
