from __future__ import annotations

from .client import RobloxResourceService, raise_for_status

__all__ = ["RobloxResourceService", "raise_for_status"]
