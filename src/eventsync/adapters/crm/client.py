"""HTTP client for the Dynamics CRM custom APIs (m8_*)."""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from eventsync.adapters.http_resilience import (
    ApiError,
    ApiHttpError,
    RequestOptions,
    ResilientClient,
    decode_json,
)
from eventsync.adapters.payloads import parse_payload
from eventsync.domain.ports import EventSource

from .schema import EventsResponse, PriceLevelResponse, TokenResponse
from .translator import parse_event

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from eventsync.config.crm import CrmConfig
    from eventsync.config.http_resilience import ResilienceConfig
    from eventsync.domain.model import SourceEvent

log = getLogger(__name__)

GET_EVENTS_ENDPOINT = "m8_GetEventsV1"
GET_EVENT_PRICE_LEVEL_ENDPOINT = "m8_GetEventPriceLevelV1"
SUBMIT_SALES_ORDER_ENDPOINT = "m8_SubmitSalesOrderV2"
WHO_AM_I_ENDPOINT = "WhoAmI"

# Renew tokens this many seconds before the identity platform expires them.
_TOKEN_EXPIRY_MARGIN_SECONDS = 60


class CrmAuthError(ApiError):
    """Raised when the client-credentials token request is rejected."""


class CrmClient:
    """Source-of-record adapter using an OAuth2 client-credentials grant."""

    def __init__(
        self,
        config: CrmConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._client = (client_factory or ResilientClient)(config.resilience)
        self._clock = clock
        self._token: str | None = None
        self._token_expires_at = 0.0

    async def __aenter__(self) -> CrmClient:
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

    async def get_events(self, entity_ids: Sequence[str]) -> list[SourceEvent]:
        body = {"entityids": list(entity_ids)} if entity_ids else None
        payload = await self._call("POST", GET_EVENTS_ENDPOINT, body)
        response = parse_payload(
            EventsResponse, payload, method="POST", url=GET_EVENTS_ENDPOINT
        )
        return [parse_event(event) for event in response.value]

    async def get_event_price_level(self, event_id: str) -> list[dict[str, object]]:
        if not event_id:
            raise ValueError("event_id is required to look up a price level")
        payload = await self._call("POST", GET_EVENT_PRICE_LEVEL_ENDPOINT, {"eventId": event_id})
        response = parse_payload(
            PriceLevelResponse, payload, method="POST", url=GET_EVENT_PRICE_LEVEL_ENDPOINT
        )
        if not response.value:
            return []
        return response.value[0].products

    async def submit_sales_order(self, sales_order: object) -> object:
        """Forward a sales order to the CRM.

        The custom API expects the order as a JSON *string* inside ``salesOrder``;
        strings are assumed to be serialized already.
        """

        if sales_order is None or sales_order == {}:
            raise ValueError("A sales order is required")
        serialized = sales_order if isinstance(sales_order, str) else json.dumps(sales_order)
        log.info("Submitting sales order to CRM")
        return await self._call("POST", SUBMIT_SALES_ORDER_ENDPOINT, {"salesOrder": serialized})

    async def who_am_i(self) -> object:
        return await self._call("GET", WHO_AM_I_ENDPOINT)

    async def _call(self, method: str, endpoint: str, body: object | None = None) -> object:
        token = await self._access_token()
        options: RequestOptions = {"headers": {"Authorization": f"Bearer {token}"}}
        if body is not None and method != "GET":
            options["json"] = body
        log.debug("Calling CRM: %s %s", method, endpoint)
        return await self._client.request_json(method, endpoint, **options)

    async def _access_token(self) -> str:
        if self._token is not None and self._clock() < self._token_expires_at:
            return self._token

        token_url = self._config.token_url
        try:
            response = await self._client.post(
                token_url,
                data={
                    "client_id": self._config.client_id,
                    "client_secret": self._config.client_secret,
                    "grant_type": "client_credentials",
                    "scope": self._config.scope,
                },
            )
        except ApiHttpError as exc:
            raise CrmAuthError(
                f"Token request failed: {exc.status_code} {exc.body}",
                method="POST",
                url=token_url,
            ) from exc

        token = parse_payload(TokenResponse, decode_json(response), method="POST", url=token_url)
        self._token = token.access_token
        self._token_expires_at = self._clock() + max(
            token.expires_in - _TOKEN_EXPIRY_MARGIN_SECONDS, 0
        )
        return self._token


if TYPE_CHECKING:
    _source_check: type[EventSource] = CrmClient
