from __future__ import annotations

import pytest

from eventsync.config.webflow import CollectionIds
from eventsync.domain.reconciliation import EventReconciler
from tests.helpers.fakes import FakeEventSource, FakeLock, FakeTargetStore

_ENV_VARS = (
    "WEBFLOW_API_TOKEN",
    "WEBFLOW_COLLECTION_ID_EVENTS",
    "WEBFLOW_COLLECTION_ID_LOCATIONS",
    "WEBFLOW_COLLECTION_ID_CATEGORIES",
    "WEBFLOW_COLLECTION_ID_AIRPORTS",
    "CRM_TENANT_ID",
    "CRM_CLIENT_ID",
    "CRM_CLIENT_SECRET",
    "CRM_BASE_URL",
    "REDIS_URL",
    "CREATE_LOCK_TTL_SECONDS",
    "JWT_SECRET",
    "CORS_ALLOWED_ORIGINS",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def collection_ids() -> CollectionIds:
    return CollectionIds(
        events="events",
        locations="locations",
        categories="categories",
        airports="airports",
    )


@pytest.fixture
def target() -> FakeTargetStore:
    return FakeTargetStore()


@pytest.fixture
def source() -> FakeEventSource:
    return FakeEventSource()


@pytest.fixture
def lock() -> FakeLock:
    return FakeLock()


@pytest.fixture
def reconciler(
    source: FakeEventSource,
    target: FakeTargetStore,
    lock: FakeLock,
    collection_ids: CollectionIds,
) -> EventReconciler:
    return EventReconciler(
        source=source,
        target=target,
        lock=lock,
        collections=collection_ids,
        lock_ttl_seconds=30,
    )
