"""Drain a paginated Webflow collection into memory."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from .translator import parse_target_item

if TYPE_CHECKING:
    from eventsync.domain.ports import TargetItem

    from .schema import ItemsPage

log = getLogger(__name__)


class PageReader(Protocol):
    async def list_items(self, collection_id: str, *, offset: int, limit: int) -> ItemsPage: ...


async def read_all_items(
    reader: PageReader,
    collection_id: str,
    *,
    page_size: int,
) -> list[TargetItem]:
    """Read every item of ``collection_id`` starting at offset 0.

    Stops once the reported total is reached or a page comes back empty. Items are
    returned in arrival order without deduplication.
    """

    items: list[TargetItem] = []
    offset = 0
    while True:
        page = await reader.list_items(collection_id, offset=offset, limit=page_size)
        if not page.items:
            break
        items.extend(parse_target_item(payload) for payload in page.items)
        offset += len(page.items)
        if offset >= page.pagination.total:
            break

    log.debug("Read %s items from collection %s", len(items), collection_id)
    return items
