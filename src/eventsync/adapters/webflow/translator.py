"""Translate Webflow payloads into domain target items."""

from __future__ import annotations

from typing import TYPE_CHECKING

from eventsync.domain.ports import TargetItem

if TYPE_CHECKING:
    from .schema import ItemPayload


def parse_target_item(payload: ItemPayload) -> TargetItem:
    return TargetItem(
        id=payload.id,
        field_data=dict(payload.field_data),
        is_draft=payload.is_draft,
        is_archived=payload.is_archived,
        is_staged=payload.last_published is None,
    )
