"""HTTP client for the Webflow CMS v2 collection API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from eventsync.adapters.http_resilience import ApiHttpError, ResilientClient
from eventsync.adapters.payloads import parse_payload
from eventsync.domain.ports import TargetStore

from .pagination import read_all_items
from .schema import ItemPayload, ItemsPage
from .translator import parse_target_item

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from types import TracebackType

    from eventsync.config.http_resilience import ResilienceConfig
    from eventsync.config.webflow import WebflowConfig
    from eventsync.domain.ports import TargetItem

log = getLogger(__name__)


def _items_path(collection_id: str) -> str:
    return f"/collections/{collection_id}/items"


def _item_path(collection_id: str, item_id: str) -> str:
    return f"/collections/{collection_id}/items/{item_id}"


class WebflowClient:
    """Target-store adapter over a single paced connection to Webflow."""

    def __init__(
        self,
        config: WebflowConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client = (client_factory or ResilientClient)(config.resilience)

    async def __aenter__(self) -> WebflowClient:
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

    async def list_items(self, collection_id: str, *, offset: int, limit: int) -> ItemsPage:
        path = _items_path(collection_id)
        payload = await self._client.request_json(
            "GET", path, params={"limit": limit, "offset": offset}
        )
        return parse_payload(ItemsPage, payload, method="GET", url=path)

    async def read_all(self, collection_id: str) -> list[TargetItem]:
        return await read_all_items(self, collection_id, page_size=self._config.page_size)

    async def create_item(
        self,
        collection_id: str,
        field_data: Mapping[str, object],
    ) -> TargetItem:
        path = _items_path(collection_id)
        payload = await self._client.request_json(
            "POST",
            path,
            json={"isArchived": False, "isDraft": False, "fieldData": dict(field_data)},
        )
        created = parse_target_item(parse_payload(ItemPayload, payload, method="POST", url=path))
        log.info("Created item %s in collection %s", created.id, collection_id)
        return created

    async def update_item(
        self,
        collection_id: str,
        item_id: str,
        field_data: Mapping[str, object],
    ) -> None:
        await self._client.patch(
            _item_path(collection_id, item_id),
            json={"isArchived": False, "isDraft": False, "fieldData": dict(field_data)},
        )

    async def publish_items(self, collection_id: str, item_ids: Sequence[str]) -> None:
        if not item_ids:
            return
        await self._client.post(
            f"{_items_path(collection_id)}/publish",
            json={"itemIds": list(item_ids)},
        )

    async def unpublish_item(self, collection_id: str, item_id: str) -> None:
        path = _item_path(collection_id, item_id)
        await self._client.patch(path, json={"isDraft": True})
        try:
            await self._client.delete(f"{path}/live")
        except ApiHttpError as exc:
            if exc.status_code != httpx.codes.NOT_FOUND:
                raise
            log.info("Item %s had no live copy to remove", item_id)
        log.info("Unpublished item %s and moved it to draft", item_id)

    async def delete_item(self, collection_id: str, item_id: str) -> None:
        await self._client.delete(_item_path(collection_id, item_id))
        log.info("Deleted item %s from collection %s", item_id, collection_id)


if TYPE_CHECKING:
    _target_check: type[TargetStore] = WebflowClient
