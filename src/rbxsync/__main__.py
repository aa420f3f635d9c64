from __future__ import annotations

from rbxsync.ui.cli import run

run()
