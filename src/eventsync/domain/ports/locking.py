"""Port for the short-lived lock guarding item creation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DistributedLock(Protocol):
    async def try_acquire(self, key: str, ttl_seconds: int) -> bool:
        """Atomically claim ``key`` unless another holder has it; ``False`` if taken."""
        ...

    async def release(self, key: str) -> None: ...
