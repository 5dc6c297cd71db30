"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import Any

import httpx
from httpx_retries import Retry

log = getLogger(__name__)

THROTTLED_STATUS = 429

BackoffFunction = Callable[[int], float]
Sleep = Callable[[float], Awaitable[None]]


def exponential_backoff(attempt: int) -> float:
    """Seconds to wait after the ``attempt``-th throttled response (1-based)."""

    return float(2**attempt)


class PolicyRetry(Retry):
    """``Retry`` that takes its waits from a ``RetryPolicy``.

    Waits go through an injectable ``sleep`` so a fake clock can observe them.
    """

    def __init__(
        self,
        *args: Any,
        name: str = "http",
        backoff: BackoffFunction = exponential_backoff,
        sleep: Sleep = asyncio.sleep,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.name = name
        self.backoff = backoff
        self._sleep = sleep

    def copy_with(self, *args: Any, **kwargs: Any) -> Retry:
        retry = super().copy_with(*args, **kwargs)
        if isinstance(retry, PolicyRetry):
            retry.name = self.name
            retry.backoff = self.backoff
            retry._sleep = self._sleep
        return retry

    def backoff_strategy(self) -> float:
        return min(self.backoff(self.attempts_made), self.max_backoff_wait)

    async def asleep(self, response: httpx.Response | Exception) -> None:
        headers = response.headers if isinstance(response, httpx.Response) else {}
        wait = self._calculate_sleep(headers)
        status = response.status_code if isinstance(response, httpx.Response) else response
        log.warning(
            "%s: request returned %s; retrying in %.1fs (attempt %s/%s)",
            self.name,
            status,
            wait,
            self.attempts_made,
            self.total + 1,
        )
        await self._sleep(wait)
        self.elapsed_sleep += wait


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Bounded retry for throttled responses.

    ``max_attempts`` counts every request sent, the first one included. Only
    statuses in ``status_forcelist`` are retried; timeouts and transport errors
    never are.
    """

    max_attempts: int = 5
    backoff: BackoffFunction = exponential_backoff
    status_forcelist: frozenset[int] = frozenset({THROTTLED_STATUS})
    allowed_methods: frozenset[str] = field(
        default_factory=lambda: frozenset(
            {"DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"}
        )
    )
    respect_retry_after_header: bool = True
    max_backoff_wait: float = 120.0

    def build(self, *, name: str = "http", sleep: Sleep = asyncio.sleep) -> PolicyRetry:
        return PolicyRetry(
            total=self.max_attempts - 1,
            allowed_methods=tuple(self.allowed_methods),
            status_forcelist=tuple(self.status_forcelist),
            retry_on_exceptions=(),
            respect_retry_after_header=self.respect_retry_after_header,
            max_backoff_wait=self.max_backoff_wait,
            backoff_jitter=0.0,
            name=name,
            backoff=self.backoff,
            sleep=sleep,
        )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    request_delay_seconds: float = 0.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
