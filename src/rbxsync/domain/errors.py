"""Domain error taxonomy.

Validation problems are fatal before any remote call. Remote errors are raised
by the remote resource service port and fail a single resource. Consistency
errors describe a lockfile that no longer matches reality.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .model import ResourceKey


class RbxSyncError(Exception):
    """Base class for all rbxsync domain errors."""


class ValidationError(RbxSyncError):
    """Local configuration is invalid."""

    def __init__(self, message: str, *, key: str | None = None, field: str | None = None) -> None:
        location = ".".join(part for part in (key, field) if part)
        super().__init__(f"{location}: {message}" if location else message)
        self.key = key
        self.field = field
        self.reason = message


class ConsistencyError(RbxSyncError):
    """The lockfile is malformed or references resources that no longer exist."""


class ConflictError(RbxSyncError):
    """A pull found icon conflicts that need an explicit resolution flag."""

    def __init__(self, keys: tuple[ResourceKey, ...]) -> None:
        listed = ", ".join(str(key) for key in keys)
        super().__init__(
            f"{len(keys)} icon conflict(s): {listed}. "
            "Re-run pull with --accept-remote or --accept-local."
        )
        self.keys = keys


class RemoteError(RbxSyncError):
    """A remote resource service call failed."""


class UnauthorizedError(RemoteError):
    """The API key is missing permissions or invalid."""


class RateLimitedError(RemoteError):
    def __init__(self, message: str, *, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class RemoteValidationError(RemoteError):
    """The platform rejected a request payload."""

    def __init__(self, reason: str, *, field: str | None = None) -> None:
        super().__init__(f"{field}: {reason}" if field else reason)
        self.field = field
        self.reason = reason


class NotFoundError(RemoteError):
    pass


class TransientError(RemoteError):
    """Timeouts, network failures and server errors left after retries."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


__all__ = [
    "ConflictError",
    "ConsistencyError",
    "NotFoundError",
    "RateLimitedError",
    "RbxSyncError",
    "RemoteError",
    "RemoteValidationError",
    "TransientError",
    "UnauthorizedError",
    "ValidationError",
]
