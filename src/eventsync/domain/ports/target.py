"""Port for the CMS collections mirrored from the source of record."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class PublishState(StrEnum):
    PUBLISHED = "published"
    DRAFT = "draft"
    STAGED = "staged"
    ARCHIVED = "archived"


@dataclass(slots=True)
class TargetItem:
    """A CMS item: opaque id, field data and its publish state.

    ``is_staged`` marks an item that is neither draft nor archived but has never
    been published, so it has no live copy.
    """

    id: str
    field_data: dict[str, object] = field(default_factory=dict)
    is_draft: bool = False
    is_archived: bool = False
    is_staged: bool = False

    @property
    def publish_state(self) -> PublishState:
        if self.is_archived:
            return PublishState.ARCHIVED
        if self.is_draft:
            return PublishState.DRAFT
        if self.is_staged:
            return PublishState.STAGED
        return PublishState.PUBLISHED

    def identity(self, id_field: str) -> str | None:
        value = self.field_data.get(id_field)
        return str(value) if value else None


@runtime_checkable
class TargetStore(Protocol):
    async def read_all(self, collection_id: str) -> list[TargetItem]: ...

    async def create_item(
        self, collection_id: str, field_data: Mapping[str, object]
    ) -> TargetItem: ...

    async def update_item(
        self, collection_id: str, item_id: str, field_data: Mapping[str, object]
    ) -> None: ...

    async def publish_items(self, collection_id: str, item_ids: Sequence[str]) -> None: ...

    async def unpublish_item(self, collection_id: str, item_id: str) -> None:
        """Remove the item from the live site and return it to draft."""
        ...

    async def delete_item(self, collection_id: str, item_id: str) -> None: ...
