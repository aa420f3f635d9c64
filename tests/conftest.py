from __future__ import annotations

import pytest

from rbxsync.config import API_KEY_ENV_VAR


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's Roblox credentials and endpoints out of the tests."""

    for name in (API_KEY_ENV_VAR, "RBXSYNC_APIS_BASE_URL", "RBXSYNC_BADGES_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
