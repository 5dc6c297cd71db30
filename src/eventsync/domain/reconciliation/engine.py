"""Single-event reconciliation between the CRM and the CMS events collection.

A change signal only says that *something* happened to an event. The hint is
never trusted on its own: apart from explicit deletions, the engine re-reads the
event from the source of record and derives the end state from what it finds.

======================  =====================  ==================================
change type             source event           action
======================  =====================  ==================================
Delete                  not consulted          delete the CMS item if it exists
Create / Update         absent or unpublished  unpublish + draft if it is live
Create / Update         published              upsert references, update or
                                               create (under the create-lock),
                                               then publish
======================  =====================  ==================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from eventsync.config.lock import DEFAULT_LOCK_TTL_SECONDS
from eventsync.domain.mapping import EVENT_ID_FIELD, identity_key, map_event_fields
from eventsync.domain.model import ChangeType
from eventsync.domain.ports import PublishState

from .references import ReferenceCollections, load_reference_caches, resolve_references

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from eventsync.config.webflow import CollectionIds
    from eventsync.domain.model import SourceEvent
    from eventsync.domain.ports import DistributedLock, EventSource, TargetItem, TargetStore

log = getLogger(__name__)


class ReconciliationError(RuntimeError):
    """Raised when a reconciliation request itself is malformed."""


class TargetState(StrEnum):
    ABSENT = "absent"
    DRAFT_OR_ARCHIVED = "draft-or-archived"
    PUBLISHED_CURRENT = "published-current"
    PUBLISHED_STALE = "published-stale"


class ReconcileAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    UNPUBLISHED = "unpublished"
    DELETED = "deleted"
    SKIPPED_LOCKED = "skipped-locked"
    NOOP = "noop"


@dataclass(slots=True, frozen=True)
class ReconcileResult:
    event_id: str
    change_type: ChangeType
    prior_state: TargetState
    action: ReconcileAction
    target_item_id: str | None = None


def classify_target(
    item: TargetItem | None,
    desired_fields: Mapping[str, object] | None = None,
) -> TargetState:
    """Place a CMS item in the reconciliation state machine.

    Without ``desired_fields`` (the source no longer wants the event live) every
    live item is stale.
    """

    if item is None:
        return TargetState.ABSENT
    if item.publish_state is not PublishState.PUBLISHED:
        return TargetState.DRAFT_OR_ARCHIVED
    if desired_fields is None:
        return TargetState.PUBLISHED_STALE
    for key, value in desired_fields.items():
        if item.field_data.get(key) != value:
            return TargetState.PUBLISHED_STALE
    return TargetState.PUBLISHED_CURRENT


def find_event_item(items: Iterable[TargetItem], event_id: str) -> TargetItem | None:
    wanted = identity_key(event_id)
    for item in items:
        identity = item.identity(EVENT_ID_FIELD)
        if identity is not None and identity_key(identity) == wanted:
            return item
    return None


@dataclass(slots=True)
class EventReconciler:
    source: EventSource
    target: TargetStore
    lock: DistributedLock
    collections: CollectionIds
    lock_ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS

    async def reconcile(
        self,
        event_id: str,
        change_type: ChangeType | str = ChangeType.UPDATE,
    ) -> ReconcileResult:
        if not event_id or not event_id.strip():
            raise ReconciliationError("An event id is required for reconciliation")

        hint = change_type if isinstance(change_type, ChangeType) else ChangeType.parse(change_type)
        run = _ReconciliationRun(self, event_id.strip(), hint)
        log.info("Reconciling event %s (change type %s)", run.event_id, hint)
        try:
            result = await run.execute()
        except Exception as exc:
            log.error(  # noqa: TRY400
                "Reconciliation of event %s failed during %s: %s",
                run.event_id,
                run.stage,
                exc,
            )
            raise
        log.info(
            "Finished event %s: %s -> %s (item %s)",
            result.event_id,
            result.prior_state,
            result.action,
            result.target_item_id,
        )
        return result


class _ReconciliationRun:
    """State of one reconciliation; nothing here outlives the run."""

    def __init__(self, reconciler: EventReconciler, event_id: str, hint: ChangeType) -> None:
        self.source = reconciler.source
        self.target = reconciler.target
        self.lock = reconciler.lock
        self.collections = reconciler.collections
        self.lock_ttl_seconds = reconciler.lock_ttl_seconds
        self.event_id = event_id
        self.lock_key = identity_key(event_id)
        self.hint = hint
        self.stage = "start"

    @property
    def events_collection(self) -> str:
        return self.collections.events

    async def execute(self) -> ReconcileResult:
        if self.hint is ChangeType.DELETE:
            return await self._delete()

        self.stage = "fetch-source"
        source_event = await self._fetch_source_event()
        if source_event is None or not source_event.is_published:
            return await self._unpublish()
        return await self._upsert(source_event)

    async def _fetch_source_event(self) -> SourceEvent | None:
        wanted = identity_key(self.event_id)
        for event in await self.source.get_events([self.event_id]):
            if identity_key(event.id) == wanted:
                return event
        log.info("Event %s is not published in the source of record", self.event_id)
        return None

    async def _find_existing(self) -> TargetItem | None:
        self.stage = "read-events"
        items = await self.target.read_all(self.events_collection)
        return find_event_item(items, self.event_id)

    def _result(
        self,
        prior_state: TargetState,
        action: ReconcileAction,
        item_id: str | None = None,
    ) -> ReconcileResult:
        return ReconcileResult(
            event_id=self.event_id,
            change_type=self.hint,
            prior_state=prior_state,
            action=action,
            target_item_id=item_id,
        )

    async def _delete(self) -> ReconcileResult:
        item = await self._find_existing()
        state = classify_target(item)
        if item is None:
            log.warning("No CMS item carries event id %s; nothing to delete", self.event_id)
            return self._result(state, ReconcileAction.NOOP)

        self.stage = "delete"
        await self.target.delete_item(self.events_collection, item.id)
        return self._result(state, ReconcileAction.DELETED, item.id)

    async def _unpublish(self) -> ReconcileResult:
        item = await self._find_existing()
        state = classify_target(item)
        if item is None:
            return self._result(state, ReconcileAction.NOOP)
        if state is TargetState.DRAFT_OR_ARCHIVED:
            log.info("CMS item %s is already offline", item.id)
            return self._result(state, ReconcileAction.NOOP, item.id)

        self.stage = "unpublish"
        await self.target.unpublish_item(self.events_collection, item.id)
        return self._result(state, ReconcileAction.UNPUBLISHED, item.id)

    async def _upsert(self, event: SourceEvent) -> ReconcileResult:
        self.stage = "resolve-references"
        collections = ReferenceCollections.from_ids(self.collections)
        caches = await load_reference_caches(self.target, collections)
        refs = await resolve_references(self.target, collections, caches, event)
        field_data = map_event_fields(event, refs)

        item = await self._find_existing()
        state = classify_target(item, field_data)
        if item is not None:
            await self._update(item.id, field_data)
            return self._result(state, ReconcileAction.UPDATED, item.id)
        return await self._create(field_data)

    async def _update(self, item_id: str, field_data: Mapping[str, object]) -> None:
        self.stage = "update"
        await self.target.update_item(self.events_collection, item_id, field_data)
        self.stage = "publish"
        await self.target.publish_items(self.events_collection, [item_id])

    async def _create(self, field_data: Mapping[str, object]) -> ReconcileResult:
        self.stage = "acquire-lock"
        if not await self.lock.try_acquire(self.lock_key, self.lock_ttl_seconds):
            log.info(
                "Create-lock for event %s is held elsewhere; leaving creation to that run",
                self.event_id,
            )
            return self._result(TargetState.ABSENT, ReconcileAction.SKIPPED_LOCKED)

        try:
            # A run that held the lock before us may have created the item already.
            existing = await self._find_existing()
            if existing is not None:
                await self._update(existing.id, field_data)
                return self._result(
                    classify_target(existing, field_data),
                    ReconcileAction.UPDATED,
                    existing.id,
                )

            self.stage = "create"
            created = await self.target.create_item(self.events_collection, field_data)
            self.stage = "publish"
            await self.target.publish_items(self.events_collection, [created.id])
            return self._result(TargetState.ABSENT, ReconcileAction.CREATED, created.id)
        finally:
            await self.lock.release(self.lock_key)
