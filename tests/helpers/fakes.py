"""In-memory implementations of the reconciliation ports for testing."""

from __future__ import annotations

import asyncio
import itertools
from collections import defaultdict
from typing import TYPE_CHECKING

from eventsync.domain.mapping import identity_key
from eventsync.domain.model import Airport, Category, Location, SourceEvent
from eventsync.domain.ports import DistributedLock, EventSource, TargetItem, TargetStore

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence


def make_event(
    event_id: str = "E1",
    name: str = "Spring Rally",
    *,
    published: bool = True,
    location: Location | None = None,
    categories: Iterable[Category] = (),
    airports: Iterable[Airport] = (),
    **fields: object,
) -> SourceEvent:
    """Create a source event with sensible defaults for every scalar field."""

    defaults: dict[str, object] = {
        "start_date": "2025-05-01T00:00:00Z",
        "end_date": "2025-05-04T00:00:00Z",
        "starting_amount": 1490.0,
        "driving_days": 3,
        "available_vehicles": 12,
        "booking_status_code": 1,
        "is_fully_booked": False,
        "is_flight_included": True,
        "is_accommodation_included": True,
    }
    defaults.update(fields)
    return SourceEvent(
        id=event_id,
        name=name,
        is_published=published,
        location=location,
        categories=tuple(categories),
        airports=tuple(airports),
        **defaults,  # type: ignore[arg-type]
    )


class FakeEventSource(EventSource):
    """Source of record returning whatever events are currently registered.

    Lookups ignore the case of the requested ids, as the CRM does.
    """

    def __init__(self, events: Iterable[SourceEvent] = ()) -> None:
        self.events: dict[str, SourceEvent] = {identity_key(event.id): event for event in events}
        self.calls: list[list[str]] = []

    def put(self, event: SourceEvent) -> None:
        self.events[identity_key(event.id)] = event

    def remove(self, event_id: str) -> None:
        self.events.pop(identity_key(event_id), None)

    async def get_events(self, entity_ids: Sequence[str]) -> list[SourceEvent]:
        self.calls.append(list(entity_ids))
        await asyncio.sleep(0)
        keys = [identity_key(entity_id) for entity_id in entity_ids]
        return [self.events[key] for key in keys if key in self.events]


class FakeTargetStore(TargetStore):
    """CMS collections held in memory; every call is recorded and yields once."""

    def __init__(self, collections: Mapping[str, Iterable[TargetItem]] | None = None) -> None:
        self.collections: defaultdict[str, list[TargetItem]] = defaultdict(list)
        for collection_id, items in (collections or {}).items():
            self.collections[collection_id].extend(items)
        self.calls: list[tuple[str, str, str | None]] = []
        self._ids = itertools.count(1)
        self.fail_on: str | None = None

    def items(self, collection_id: str) -> list[TargetItem]:
        return list(self.collections[collection_id])

    def get(self, collection_id: str, item_id: str) -> TargetItem | None:
        return next((item for item in self.collections[collection_id] if item.id == item_id), None)

    def writes(self, collection_id: str | None = None) -> list[tuple[str, str, str | None]]:
        return [
            call
            for call in self.calls
            if call[0] != "read_all" and (collection_id is None or call[1] == collection_id)
        ]

    async def _record(self, operation: str, collection_id: str, item_id: str | None) -> None:
        await asyncio.sleep(0)
        if self.fail_on == operation:
            raise RuntimeError(f"{operation} failed")
        self.calls.append((operation, collection_id, item_id))

    def _require(self, collection_id: str, item_id: str) -> TargetItem:
        item = self.get(collection_id, item_id)
        if item is None:
            raise KeyError(f"{item_id} not in {collection_id}")
        return item

    async def read_all(self, collection_id: str) -> list[TargetItem]:
        await self._record("read_all", collection_id, None)
        return self.items(collection_id)

    async def create_item(
        self, collection_id: str, field_data: Mapping[str, object]
    ) -> TargetItem:
        item_id = f"{collection_id}-item-{next(self._ids)}"
        await self._record("create", collection_id, item_id)
        item = TargetItem(id=item_id, field_data=dict(field_data), is_staged=True)
        self.collections[collection_id].append(item)
        return item

    async def update_item(
        self, collection_id: str, item_id: str, field_data: Mapping[str, object]
    ) -> None:
        await self._record("update", collection_id, item_id)
        item = self._require(collection_id, item_id)
        item.field_data = dict(field_data)
        item.is_draft = False
        item.is_archived = False

    async def publish_items(self, collection_id: str, item_ids: Sequence[str]) -> None:
        for item_id in item_ids:
            await self._record("publish", collection_id, item_id)
            item = self._require(collection_id, item_id)
            item.is_draft = False
            item.is_staged = False

    async def unpublish_item(self, collection_id: str, item_id: str) -> None:
        await self._record("unpublish", collection_id, item_id)
        self._require(collection_id, item_id).is_draft = True

    async def delete_item(self, collection_id: str, item_id: str) -> None:
        await self._record("delete", collection_id, item_id)
        self.collections[collection_id].remove(self._require(collection_id, item_id))


class FakeLock(DistributedLock):
    """Process-local stand-in for the shared lock store (TTL is recorded, not enforced)."""

    def __init__(self, *, held: Iterable[str] = ()) -> None:
        self.held: set[str] = set(held)
        self.acquired: list[tuple[str, int]] = []
        self.released: list[str] = []

    async def try_acquire(self, key: str, ttl_seconds: int) -> bool:
        await asyncio.sleep(0)
        if key in self.held:
            return False
        self.held.add(key)
        self.acquired.append((key, ttl_seconds))
        return True

    async def release(self, key: str) -> None:
        await asyncio.sleep(0)
        self.held.discard(key)
        self.released.append(key)
