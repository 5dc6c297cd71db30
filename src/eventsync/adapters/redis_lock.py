"""Create-lock backed by Redis ``SET NX EX``."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING
from uuid import uuid4

from redis.asyncio import Redis

from eventsync.config.lock import DEFAULT_LOCK_KEY_PREFIX
from eventsync.domain.ports import DistributedLock

if TYPE_CHECKING:
    from eventsync.config.lock import LockConfig

log = getLogger(__name__)

# Delete the key only while it still holds our token.
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class RedisLock:
    """Mutually exclusive claims keyed by event id, expiring after a TTL.

    Tokens of claims taken by this instance are remembered only until they are
    released; a claim that expired and was taken over elsewhere is left alone.
    """

    def __init__(self, redis: Redis, *, key_prefix: str = DEFAULT_LOCK_KEY_PREFIX) -> None:
        self._redis = redis
        self._key_prefix = key_prefix
        self._tokens: dict[str, str] = {}
        self._release_script = redis.register_script(_RELEASE_SCRIPT)

    @classmethod
    def from_config(cls, config: LockConfig) -> RedisLock:
        return cls(Redis.from_url(config.url, decode_responses=True), key_prefix=config.key_prefix)

    async def try_acquire(self, key: str, ttl_seconds: int) -> bool:
        token = uuid4().hex
        acquired = await self._redis.set(self._key(key), token, nx=True, ex=ttl_seconds)
        if not acquired:
            log.debug("Lock %s is already held", key)
            return False
        self._tokens[key] = token
        return True

    async def release(self, key: str) -> None:
        token = self._tokens.pop(key, None)
        if token is None:
            return
        released = await self._release_script(keys=[self._key(key)], args=[token])
        if not released:
            log.warning("Lock %s expired before it was released", key)

    async def aclose(self) -> None:
        await self._redis.aclose()

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"


if TYPE_CHECKING:
    _lock_check: type[DistributedLock] = RedisLock
