"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import TYPE_CHECKING

from eventsync.adapters.crm import CrmClient
from eventsync.adapters.redis_lock import RedisLock
from eventsync.adapters.webflow import WebflowClient
from eventsync.config import get_sync_settings
from eventsync.domain.model import ChangeType
from eventsync.domain.reconciliation import EventReconciler

if TYPE_CHECKING:
    from eventsync.config import SyncSettings
    from eventsync.domain.model import ChangeSignal
    from eventsync.domain.reconciliation import ReconcileResult

Reconcile = Callable[[str, ChangeType], Awaitable["ReconcileResult"]]

log = getLogger(__name__)


async def reconcile_event(
    event_id: str,
    change_type: ChangeType | str = ChangeType.UPDATE,
    *,
    settings: SyncSettings | None = None,
) -> ReconcileResult:
    """Reconcile one event with freshly opened CRM, Webflow and lock connections."""

    effective = settings or get_sync_settings()
    lock = RedisLock.from_config(effective.lock)
    try:
        async with WebflowClient(effective.webflow) as target, CrmClient(effective.crm) as source:
            reconciler = EventReconciler(
                source=source,
                target=target,
                lock=lock,
                collections=effective.webflow.collections,
                lock_ttl_seconds=effective.lock.ttl_seconds,
            )
            return await reconciler.reconcile(event_id, change_type)
    finally:
        await lock.aclose()


def build_reconcile(settings: SyncSettings) -> Reconcile:
    async def reconcile(event_id: str, change_type: ChangeType) -> ReconcileResult:
        return await reconcile_event(event_id, change_type, settings=settings)

    return reconcile


async def handle_change_signal(
    signal: ChangeSignal,
    *,
    reconcile: Reconcile,
) -> ReconcileResult | None:
    """Act on a change signal; signals for entities other than events are ignored."""

    if not signal.is_event:
        log.info(
            "Ignoring change signal for %s %s (%s)",
            signal.entity_name,
            signal.record_id,
            signal.change_type,
        )
        return None
    return await reconcile(signal.record_id, signal.change_type)
