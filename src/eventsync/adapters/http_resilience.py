from __future__ import annotations

import asyncio
import json
from logging import getLogger
from typing import (
    TYPE_CHECKING,
    TypedDict,
    Unpack,
)

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import RetryTransport

from eventsync.config.http_resilience import RateLimit, ResilienceConfig, RetryPolicy, Sleep

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._types import (
        HeaderTypes,
        QueryParamTypes,
        RequestData,
        TimeoutTypes,
        URLTypes,
    )

log = getLogger(__name__)

__all__ = [
    "ApiError",
    "ApiHttpError",
    "ApiNetworkError",
    "ApiResponseError",
    "ApiTimeoutError",
    "RateLimit",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
    "decode_json",
]


class ApiError(RuntimeError):
    """Base class for failed outbound API calls."""

    def __init__(self, message: str, *, method: str, url: str) -> None:
        super().__init__(message)
        self.method = method
        self.url = url


class ApiTimeoutError(ApiError):
    """The call exceeded its wall-clock timeout. Never retried."""


class ApiNetworkError(ApiError):
    """The connection failed before a response was received. Never retried."""


class ApiHttpError(ApiError):
    """The API answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        status_code: int,
        body: str,
    ) -> None:
        super().__init__(message, method=method, url=url)
        self.status_code = status_code
        self.body = body


class ApiResponseError(ApiError):
    """A successful response did not have the expected shape."""


class RequestOptions(TypedDict, total=False):
    json: object
    data: RequestData | None
    params: QueryParamTypes | None
    headers: HeaderTypes | None


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    transport: httpx.AsyncBaseTransport


def decode_json(response: httpx.Response) -> object:
    """Decode a JSON body, mapping empty bodies (e.g. 204) to ``None``."""

    if response.status_code == httpx.codes.NO_CONTENT or not response.content:
        return None
    try:
        return response.json()
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ApiResponseError(
            f"Response from {response.request.url} was not valid JSON "
            f"(status {response.status_code})",
            method=response.request.method,
            url=str(response.request.url),
        ) from exc


class PacedTransport(httpx.AsyncBaseTransport):
    """Waits a fixed delay before handing each attempt to the wrapped transport."""

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        *,
        delay_seconds: float,
        sleep: Sleep,
    ) -> None:
        self._transport = transport
        self._delay_seconds = delay_seconds
        self._sleep = sleep

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if self._delay_seconds > 0:
            await self._sleep(self._delay_seconds)
        return await self._transport.handle_async_request(request)

    async def aclose(self) -> None:
        await self._transport.aclose()


class ResilientClient:
    """Paced, throttling-aware wrapper around ``httpx.AsyncClient``.

    Every attempt waits ``request_delay_seconds`` first and, when a rate limit is
    configured, the call holds a slot of the shared limiter while in flight.
    Throttled responses are retried by ``httpx_retries`` under the configured
    ``RetryPolicy``; everything else is surfaced as a classified ``ApiError``.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        paced_transport = PacedTransport(
            transport or httpx.AsyncHTTPTransport(),
            delay_seconds=config.request_delay_seconds,
            sleep=sleep,
        )
        retry_transport = RetryTransport(
            transport=paced_transport,
            retry=config.retry.build(name=config.name, sleep=sleep),
        )

        client_kwargs: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": retry_transport,
        }
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if config.default_headers is not None:
            client_kwargs["headers"] = dict(config.default_headers)

        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        response = await self._send(method, url, **kwargs)
        if response.is_success:
            return response

        status = response.status_code
        body = response.text
        log.error(
            "%s: %s %s failed with %s: %s",
            self.config.name,
            method,
            response.request.url,
            status,
            body,
        )
        raise ApiHttpError(
            f"{method} {response.request.url} failed with status {status}",
            method=method,
            url=str(response.request.url),
            status_code=status,
            body=body,
        )

    async def request_json(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> object:
        response = await self.request(method, url, **kwargs)
        return decode_json(response)

    async def get(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def patch(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    async def _send(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        try:
            if self._limiter is None:
                return await self._client.request(method, url, **kwargs)
            async with self._limiter:
                return await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise ApiTimeoutError(
                f"{method} {url} timed out after {self.config.timeout_seconds}s",
                method=method,
                url=str(url),
            ) from exc
        except httpx.TransportError as exc:
            raise ApiNetworkError(
                f"{method} {url} failed: {exc}",
                method=method,
                url=str(url),
            ) from exc
