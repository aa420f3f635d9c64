"""Ports for local project state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from rbxsync.domain.model import Lockfile


@runtime_checkable
class LockfileUnitOfWork(Protocol):
    """Scoped access to the lockfile; ``commit`` writes it through immediately."""

    @property
    def lockfile(self) -> Lockfile: ...

    def __enter__(self) -> LockfileUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


__all__ = ["LockfileUnitOfWork"]
