"""Reconciliation of CRM events into the CMS."""

from __future__ import annotations

from .engine import (
    EventReconciler,
    ReconcileAction,
    ReconcileResult,
    ReconciliationError,
    TargetState,
    classify_target,
    find_event_item,
)
from .references import (
    ReferenceCache,
    ReferenceCaches,
    ReferenceCollection,
    ReferenceCollections,
    load_reference_caches,
    resolve_references,
    upsert_reference,
)

__all__ = [
    "EventReconciler",
    "ReconcileAction",
    "ReconcileResult",
    "ReconciliationError",
    "ReferenceCache",
    "ReferenceCaches",
    "ReferenceCollection",
    "ReferenceCollections",
    "TargetState",
    "classify_target",
    "find_event_item",
    "load_reference_caches",
    "resolve_references",
    "upsert_reference",
]
