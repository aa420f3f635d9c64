from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from rbxsync.adapters.files import load_lockfile
from rbxsync.app import SyncResult
from rbxsync.domain.errors import RemoteValidationError
from rbxsync.domain.model import ResourceKey, ResourceType
from rbxsync.domain.reconciliation import ApplyResult, SyncPlan
from rbxsync.ui import cli as cli_module
from tests.helpers.project import UNIVERSE_ID, write_icon, write_project
from tests.helpers.remote import FakeRemoteService, png_bytes

if TYPE_CHECKING:
    from pathlib import Path

    from rbxsync.config import ProjectPaths
    from rbxsync.domain.model import ProjectConfig

PROJECT = f"""\
[experience]
universe_id = {UNIVERSE_ID}

[passes.VIP]
price = 499
icon = "icons/vip.png"
"""


@pytest.fixture
def project(tmp_path: Path) -> ProjectPaths:
    write_icon(tmp_path, "icons/vip.png")
    return write_project(tmp_path, PROJECT)


@pytest.fixture
def remote() -> FakeRemoteService:
    return FakeRemoteService()


def _main(paths: ProjectPaths, remote: FakeRemoteService, *argv: str) -> None:
    def factory(config: ProjectConfig) -> FakeRemoteService:
        return remote

    cli_module.main(["--config", str(paths.config_path), *argv], remote_factory=factory)


def test_sync_only_parses_resource_types(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_sync(paths: object, **kwargs: object) -> SyncResult:
        captured.update(kwargs)
        return SyncResult(plan=SyncPlan(), apply=ApplyResult(dry_run=True))

    monkeypatch.setattr(cli_module, "sync", fake_sync)

    cli_module.main(
        ["sync", "--dry-run", "--only", "products,pass,products", "--badge-cost", "100"]
    )

    assert captured["types"] == [ResourceType.PASS, ResourceType.PRODUCT]
    assert captured["dry_run"] is True
    assert captured["badge_cost"] == 100


@pytest.mark.parametrize(
    "argv",
    [
        ["sync", "--only", "gamepasses"],
        ["sync", "--badge-cost", "-5"],
        ["init", "--from-remote"],
        ["init", "--universe-id", "12"],
        ["pull", "--accept-remote", "--accept-local"],
        ["rename", "passes", "VIP"],
    ],
)
def test_usage_errors_exit_with_code_2(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(argv)

    assert excinfo.value.code == 2


def test_sync_prints_outcomes_and_exits_cleanly(
    project: ProjectPaths, remote: FakeRemoteService, capsys: pytest.CaptureFixture[str]
) -> None:
    _main(project, remote, "sync")

    out = capsys.readouterr().out
    entry = load_lockfile(project.lockfile_path).get(ResourceKey(ResourceType.PASS, "VIP"))
    assert entry is not None
    assert "+ pass 'VIP' [created]" in out
    assert "1 to create, 0 to update, 0 unchanged" in out


def test_failed_sync_exits_with_code_1(project: ProjectPaths, remote: FakeRemoteService) -> None:
    remote.fail("create", RemoteValidationError("price too low", field="price"))

    with pytest.raises(SystemExit) as excinfo:
        _main(project, remote, "sync")

    assert excinfo.value.code == 1
    assert not project.lockfile_path.exists()


def test_missing_config_exits_with_code_1(tmp_path: Path, remote: FakeRemoteService) -> None:
    missing = tmp_path / "nowhere" / "rbxsync.toml"

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["--config", str(missing), "check"], remote_factory=lambda _: remote)

    assert excinfo.value.code == 1


def test_pull_conflict_exits_with_code_1(
    project: ProjectPaths, remote: FakeRemoteService, capsys: pytest.CaptureFixture[str]
) -> None:
    _main(project, remote, "sync")
    entry = load_lockfile(project.lockfile_path).get(ResourceKey(ResourceType.PASS, "VIP"))
    assert entry is not None
    remote.replace_icon(ResourceType.PASS, entry.id, png_bytes((9, 9, 9, 255)))
    capsys.readouterr()

    with pytest.raises(SystemExit) as excinfo:
        _main(project, remote, "pull")

    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert "--accept-remote" in captured.out
    assert "1 icon conflict(s): pass 'VIP'" in captured.err


def test_check_with_errors_exits_with_code_1(
    project: ProjectPaths, remote: FakeRemoteService, capsys: pytest.CaptureFixture[str]
) -> None:
    _main(project, remote, "sync")
    entry = load_lockfile(project.lockfile_path).get(ResourceKey(ResourceType.PASS, "VIP"))
    assert entry is not None
    remote.delete(ResourceType.PASS, entry.id)

    with pytest.raises(SystemExit) as excinfo:
        _main(project, remote, "check")

    assert excinfo.value.code == 1
    assert "no longer exists remotely" in capsys.readouterr().out


def test_rename_and_list(
    project: ProjectPaths, remote: FakeRemoteService, capsys: pytest.CaptureFixture[str]
) -> None:
    _main(project, remote, "sync")
    _main(project, remote, "rename", "pass", "VIP", "Premium")
    capsys.readouterr()

    _main(project, remote, "list", "passes")

    out = capsys.readouterr().out
    assert "\tPremium\t" in out


def test_init_writes_template(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "rbxsync.toml"

    cli_module.main(["--config", str(config_path), "init"])

    assert config_path.is_file()
    assert f"created {config_path}" in capsys.readouterr().out
