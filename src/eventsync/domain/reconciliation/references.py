"""Resolve CRM sub-entities (locations, categories, airports) to CMS items."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from eventsync.domain.mapping import (
    AIRPORT_ID_FIELD,
    CATEGORY_ID_FIELD,
    LOCATION_ID_FIELD,
    ResolvedReferences,
    identity_key,
    map_airport_fields,
    map_category_fields,
    map_location_fields,
    reference_field_data,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from eventsync.config.webflow import CollectionIds
    from eventsync.domain.model import SourceEvent
    from eventsync.domain.ports import TargetItem, TargetStore

log = getLogger(__name__)


@dataclass(slots=True)
class ReferenceCache:
    """Source id -> CMS item id for one collection, valid for a single run.

    Source ids are keyed case-insensitively.
    """

    entries: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.entries = {
            identity_key(source_id): item_id for source_id, item_id in self.entries.items()
        }

    @classmethod
    def from_items(cls, items: Iterable[TargetItem], id_field: str) -> ReferenceCache:
        entries: dict[str, str] = {}
        for item in items:
            source_id = item.identity(id_field)
            if source_id is not None:
                entries[source_id] = item.id
        return cls(entries=entries)

    def __contains__(self, source_id: object) -> bool:
        return isinstance(source_id, str) and identity_key(source_id) in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, source_id: str) -> str | None:
        return self.entries.get(identity_key(source_id))

    def remember(self, source_id: str, item_id: str) -> None:
        self.entries[identity_key(source_id)] = item_id


@dataclass(slots=True, frozen=True)
class ReferenceCollection:
    collection_id: str
    id_field: str


@dataclass(slots=True, frozen=True)
class ReferenceCollections:
    locations: ReferenceCollection
    categories: ReferenceCollection
    airports: ReferenceCollection

    @classmethod
    def from_ids(cls, ids: CollectionIds) -> ReferenceCollections:
        return cls(
            locations=ReferenceCollection(ids.locations, LOCATION_ID_FIELD),
            categories=ReferenceCollection(ids.categories, CATEGORY_ID_FIELD),
            airports=ReferenceCollection(ids.airports, AIRPORT_ID_FIELD),
        )


@dataclass(slots=True)
class ReferenceCaches:
    locations: ReferenceCache
    categories: ReferenceCache
    airports: ReferenceCache


async def load_reference_caches(
    target: TargetStore,
    collections: ReferenceCollections,
) -> ReferenceCaches:
    """Read every reference collection, one after the other, into fresh caches."""

    caches: dict[str, ReferenceCache] = {}
    for name in ("locations", "categories", "airports"):
        collection: ReferenceCollection = getattr(collections, name)
        items = await target.read_all(collection.collection_id)
        caches[name] = ReferenceCache.from_items(items, collection.id_field)
        log.debug("Loaded %s cached %s", len(caches[name]), name)
    return ReferenceCaches(**caches)


async def upsert_reference(
    target: TargetStore,
    cache: ReferenceCache,
    collection: ReferenceCollection,
    *,
    source_id: str | None,
    name: str,
    extra_fields: dict[str, object] | None = None,
) -> str | None:
    """Update-and-publish the cached item for ``source_id``, or create and publish one.

    Returns the CMS item id, or ``None`` when the reference carries no source id.
    """

    if not source_id:
        return None

    field_data = reference_field_data(
        id_field=collection.id_field,
        source_id=source_id,
        name=name,
        extra_fields=extra_fields,
    )

    existing = cache.get(source_id)
    if existing is not None:
        await target.update_item(collection.collection_id, existing, field_data)
        await target.publish_items(collection.collection_id, [existing])
        return existing

    log.info("Creating new reference item %r (%s)", name, source_id)
    created = await target.create_item(collection.collection_id, field_data)
    cache.remember(source_id, created.id)
    await target.publish_items(collection.collection_id, [created.id])
    return created.id


async def resolve_references(
    target: TargetStore,
    collections: ReferenceCollections,
    caches: ReferenceCaches,
    event: SourceEvent,
) -> ResolvedReferences:
    """Upsert every sub-entity of ``event`` sequentially and collect their item ids."""

    location_id: str | None = None
    if event.location is not None:
        location_id = await upsert_reference(
            target,
            caches.locations,
            collections.locations,
            source_id=event.location.id,
            name=event.location.name,
            extra_fields=map_location_fields(event.location),
        )

    category_ids: list[str] = []
    for category in event.categories:
        item_id = await upsert_reference(
            target,
            caches.categories,
            collections.categories,
            source_id=category.id,
            name=category.name,
            extra_fields=map_category_fields(category),
        )
        if item_id is not None:
            category_ids.append(item_id)

    airport_ids: list[str] = []
    for airport in event.airports:
        item_id = await upsert_reference(
            target,
            caches.airports,
            collections.airports,
            source_id=airport.id,
            name=airport.name,
            extra_fields=map_airport_fields(airport),
        )
        if item_id is not None:
            airport_ids.append(item_id)

    return ResolvedReferences(
        location_id=location_id,
        category_ids=tuple(category_ids),
        airport_ids=tuple(airport_ids),
    )
