"""Create-lock store configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_int, require_env_vars

DEFAULT_LOCK_TTL_SECONDS = 30
DEFAULT_LOCK_KEY_PREFIX = "eventsync:create-lock:"


@dataclass(frozen=True, slots=True)
class LockConfig:
    url: str
    ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS
    key_prefix: str = DEFAULT_LOCK_KEY_PREFIX


def get_lock_config() -> LockConfig:
    values = require_env_vars(("REDIS_URL",))
    return LockConfig(
        url=values["REDIS_URL"],
        ttl_seconds=optional_env_int("CREATE_LOCK_TTL_SECONDS", DEFAULT_LOCK_TTL_SECONDS),
    )
