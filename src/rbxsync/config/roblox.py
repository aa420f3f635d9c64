"""Roblox Open Cloud configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

API_KEY_ENV_VAR = "RBXSYNC_API_KEY"
APIS_BASE_URL = "https://apis.roblox.com"
BADGES_BASE_URL = "https://badges.roblox.com"
ROBLOX_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class RobloxConfig:
    """Holds Roblox Open Cloud API configuration values."""

    api_key: str
    apis_base_url: str
    badges_base_url: str
    resilience: ResilienceConfig


def get_roblox_config(
    *,
    api_key: str | None = None,
    resilience: ResilienceConfig | None = None,
) -> RobloxConfig:
    """Build the Roblox config, reading the API key from the environment if not given."""

    if api_key is None or not api_key.strip():
        api_key = require_env_vars((API_KEY_ENV_VAR,))[API_KEY_ENV_VAR]
    return RobloxConfig(
        api_key=api_key.strip(),
        apis_base_url=optional_env_var("RBXSYNC_APIS_BASE_URL", APIS_BASE_URL),
        badges_base_url=optional_env_var("RBXSYNC_BADGES_BASE_URL", BADGES_BASE_URL),
        resilience=resilience
        or ResilienceConfig(
            name="roblox",
            timeout_seconds=ROBLOX_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            default_headers={"User-Agent": "rbxsync"},
        ),
    )
