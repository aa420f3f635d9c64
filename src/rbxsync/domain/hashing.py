"""Content hashing for icon bytes."""

from __future__ import annotations

import hashlib

type IconHash = str


def hash_icon(data: bytes) -> IconHash:
    """Return the SHA-256 hex digest of ``data``.

    Callers hash the bytes that are actually uploaded (after alpha bleed and
    re-encoding), so the lockfile hash always describes the remote icon.
    """

    return hashlib.sha256(data).hexdigest()
