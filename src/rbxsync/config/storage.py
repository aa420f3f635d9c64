"""Project file layout helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

DEFAULT_CONFIG_FILENAME: Final[str] = "rbxsync.toml"
LOCKFILE_FILENAME: Final[str] = "rbxsync.lock.toml"


@dataclass(frozen=True, slots=True)
class ProjectPaths:
    """Locations of the files belonging to one rbxsync project."""

    config_path: Path

    @property
    def root(self) -> Path:
        return self.config_path.parent

    @property
    def lockfile_path(self) -> Path:
        return self.root / LOCKFILE_FILENAME

    def resolve(self, relative: str | Path) -> Path:
        """Resolve a config-relative path against the project root."""

        path = Path(relative)
        return path if path.is_absolute() else self.root / path


def get_project_paths(config_path: str | Path | None = None) -> ProjectPaths:
    path = Path(config_path) if config_path else Path(DEFAULT_CONFIG_FILENAME)
    return ProjectPaths(config_path=path.expanduser().resolve())
