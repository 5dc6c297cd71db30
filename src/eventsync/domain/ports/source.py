"""Port for reading events from the source of record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from eventsync.domain.model import SourceEvent


@runtime_checkable
class EventSource(Protocol):
    """Returns the currently published events among ``entity_ids``.

    An id missing from the result means the event is not published (or no longer
    exists) in the source of record.
    """

    async def get_events(self, entity_ids: Sequence[str]) -> list[SourceEvent]: ...
