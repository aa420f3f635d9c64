"""Ports the reconciliation core depends on."""

from __future__ import annotations

from .icons import IconSource, IconStore
from .remote import CreatedResource, RemoteResourceService
from .storage import LockfileUnitOfWork

__all__ = [
    "CreatedResource",
    "IconSource",
    "IconStore",
    "LockfileUnitOfWork",
    "RemoteResourceService",
]
