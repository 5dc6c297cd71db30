from __future__ import annotations

import asyncio
import json
from collections.abc import Callable

import httpx
import pytest

from eventsync.adapters.http_resilience import (
    ApiHttpError,
    ApiResponseError,
    ResilienceConfig,
    ResilientClient,
)
from eventsync.adapters.webflow import WebflowClient
from eventsync.config.webflow import CollectionIds, WebflowConfig, default_webflow_resilience
from eventsync.domain.ports import PublishState

Handler = Callable[[httpx.Request], httpx.Response]

COLLECTIONS = CollectionIds(
    events="col-events",
    locations="col-locations",
    categories="col-categories",
    airports="col-airports",
)


async def _no_sleep(_seconds: float) -> None:
    return None


def _webflow(handler: Handler, *, page_size: int = 100) -> WebflowClient:
    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(
            resilience, transport=httpx.MockTransport(handler), sleep=_no_sleep
        )

    config = WebflowConfig(
        api_token="wf-token",
        collections=COLLECTIONS,
        resilience=default_webflow_resilience("wf-token"),
        page_size=page_size,
    )
    return WebflowClient(config, client_factory=factory)


def _item(index: int, **overrides: object) -> dict[str, object]:
    item: dict[str, object] = {
        "id": f"item-{index}",
        "isArchived": False,
        "isDraft": False,
        "lastPublished": "2025-03-01T10:00:00.000Z",
        "fieldData": {"name": f"Event {index}", "eventid": f"E{index}"},
    }
    item.update(overrides)
    return item


class PagedCollection:
    def __init__(self, total: int, *, report_total: int | None = None) -> None:
        self.items = [_item(index) for index in range(total)]
        self.report_total = total if report_total is None else report_total
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        offset = int(request.url.params["offset"])
        limit = int(request.url.params["limit"])
        return httpx.Response(
            200,
            json={
                "items": self.items[offset : offset + limit],
                "pagination": {"limit": limit, "offset": offset, "total": self.report_total},
            },
        )


def test_read_all_follows_pagination() -> None:
    collection = PagedCollection(250)

    async def run() -> list[str]:
        async with _webflow(collection) as client:
            return [item.id for item in await client.read_all("col-events")]

    ids = asyncio.run(run())

    assert ids == [f"item-{index}" for index in range(250)]
    assert [request.url.params["offset"] for request in collection.requests] == [
        "0",
        "100",
        "200",
    ]
    assert all(request.url.params["limit"] == "100" for request in collection.requests)
    assert collection.requests[0].url.path == "/v2/collections/col-events/items"


def test_read_all_stops_on_empty_page() -> None:
    collection = PagedCollection(3, report_total=10)

    async def run() -> int:
        async with _webflow(collection, page_size=2) as client:
            return len(await client.read_all("col-events"))

    assert asyncio.run(run()) == 3
    assert len(collection.requests) == 3


def test_read_all_translates_publish_state() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "items": [
                    _item(1, isDraft=True),
                    _item(2, isArchived=True),
                    _item(3),
                    _item(4, lastPublished=None),
                ],
                "pagination": {"limit": 100, "offset": 0, "total": 4},
            },
        )

    async def run():  # noqa: ANN202
        async with _webflow(handler) as client:
            return await client.read_all("col-events")

    drafted, archived, live, staged = asyncio.run(run())

    assert drafted.publish_state is PublishState.DRAFT
    assert archived.publish_state is PublishState.ARCHIVED
    assert live.publish_state is PublishState.PUBLISHED
    assert live.identity("eventid") == "E3"
    assert staged.publish_state is PublishState.STAGED


def test_page_without_pagination_is_rejected() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"items": [_item(1)]})

    async def run() -> None:
        async with _webflow(handler) as client:
            await client.read_all("col-events")

    with pytest.raises(ApiResponseError):
        asyncio.run(run())


def test_create_item_posts_live_field_data() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            202, json={"id": "new-1", "fieldData": json.loads(request.content)["fieldData"]}
        )

    async def run():  # noqa: ANN202
        async with _webflow(handler) as client:
            return await client.create_item("col-events", {"name": "Spring Rally"})

    created = asyncio.run(run())

    [request] = requests
    assert request.method == "POST"
    assert request.url.path == "/v2/collections/col-events/items"
    assert request.headers["Authorization"] == "Bearer wf-token"
    assert json.loads(request.content) == {
        "isArchived": False,
        "isDraft": False,
        "fieldData": {"name": "Spring Rally"},
    }
    assert created.id == "new-1"
    assert created.field_data == {"name": "Spring Rally"}


def test_update_and_publish_requests() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={})

    async def run() -> None:
        async with _webflow(handler) as client:
            await client.update_item("col-events", "item-1", {"name": "Renamed"})
            await client.publish_items("col-events", ["item-1"])
            await client.publish_items("col-events", [])

    asyncio.run(run())

    update, publish = requests
    assert (update.method, update.url.path) == ("PATCH", "/v2/collections/col-events/items/item-1")
    assert json.loads(update.content)["fieldData"] == {"name": "Renamed"}
    assert (publish.method, publish.url.path) == (
        "POST",
        "/v2/collections/col-events/items/publish",
    )
    assert json.loads(publish.content) == {"itemIds": ["item-1"]}


def test_unpublish_drafts_then_removes_live_copy() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(204)

    async def run() -> None:
        async with _webflow(handler) as client:
            await client.unpublish_item("col-events", "item-1")

    asyncio.run(run())

    draft, live = requests
    assert (draft.method, draft.url.path) == ("PATCH", "/v2/collections/col-events/items/item-1")
    assert json.loads(draft.content) == {"isDraft": True}
    assert (live.method, live.url.path) == (
        "DELETE",
        "/v2/collections/col-events/items/item-1/live",
    )


def test_unpublish_tolerates_missing_live_copy() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.method == "DELETE":
            return httpx.Response(404, json={"message": "Requested resource not found"})
        return httpx.Response(200, json=_item(1, isDraft=True))

    async def run() -> None:
        async with _webflow(handler) as client:
            await client.unpublish_item("col-events", "item-1")

    asyncio.run(run())

    assert [request.method for request in requests] == ["PATCH", "DELETE"]


def test_unpublish_propagates_other_live_removal_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            return httpx.Response(500, text="boom")
        return httpx.Response(200, json=_item(1, isDraft=True))

    async def run() -> None:
        async with _webflow(handler) as client:
            await client.unpublish_item("col-events", "item-1")

    with pytest.raises(ApiHttpError) as excinfo:
        asyncio.run(run())

    assert excinfo.value.status_code == 500


def test_delete_item_and_error_propagation() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.endswith("missing"):
            return httpx.Response(404, json={"message": "Requested resource not found"})
        return httpx.Response(204)

    async def run() -> None:
        async with _webflow(handler) as client:
            await client.delete_item("col-events", "item-1")
            await client.delete_item("col-events", "missing")

    with pytest.raises(ApiHttpError) as excinfo:
        asyncio.run(run())

    assert excinfo.value.status_code == 404
    assert [request.method for request in requests] == ["DELETE", "DELETE"]
    assert requests[0].url.path == "/v2/collections/col-events/items/item-1"
