"""Ports for reading and writing icon files."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path


@runtime_checkable
class IconSource(Protocol):
    """Produce the exact bytes that would be uploaded for an icon file."""

    def __call__(self, path: Path) -> bytes: ...


@runtime_checkable
class IconStore(Protocol):
    def write(self, path: Path, data: bytes) -> None: ...


__all__ = ["IconSource", "IconStore"]
