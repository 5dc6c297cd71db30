"""Pure mapping from CRM events and sub-entities to CMS field data.

The CMS schema mixes field kinds: some flags exist both as a boolean field and as
a text field (``isfullybookedboleantext``) so that they can be used in text-only
filters. Field names are part of the CMS schema and must not change without
bumping ``FIELD_TABLE_VERSION``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from eventsync.domain.model import Airport, Category, Location, SourceEvent

FIELD_TABLE_VERSION: Final = 1

EVENT_ID_FIELD: Final = "eventid"
LOCATION_ID_FIELD: Final = "eventlocationid"
CATEGORY_ID_FIELD: Final = "category-id"
AIRPORT_ID_FIELD: Final = "airportid"

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9-]+")
_HYPHEN_RUNS = re.compile(r"-{2,}")


def slugify(text: str | None) -> str:
    """Derive the CMS slug for a display name.

    >>> slugify("Alpine Tour — 2025!")
    'alpine-tour-2025'
    """

    if not text:
        return ""
    slug = _WHITESPACE.sub("-", str(text).lower().strip())
    slug = _DISALLOWED.sub("", slug)
    slug = _HYPHEN_RUNS.sub("-", slug)
    return slug.strip("-")


def display_bool(value: bool | None) -> str:  # noqa: FBT001
    return "true" if value else "false"


def identity_key(source_id: str) -> str:
    """Case-insensitive key for a CRM GUID; the CRM returns the same id in varying case."""

    return source_id.strip().casefold()


@dataclass(slots=True, frozen=True)
class ResolvedReferences:
    """CMS item ids of the sub-entities an event points at."""

    location_id: str | None = None
    category_ids: tuple[str, ...] = field(default_factory=tuple)
    airport_ids: tuple[str, ...] = field(default_factory=tuple)


FieldGetter = Callable[["SourceEvent", ResolvedReferences], object]

EVENT_FIELD_TABLE: Final[tuple[tuple[str, FieldGetter], ...]] = (
    ("name", lambda event, _: event.name),
    ("slug", lambda event, _: slugify(event.name)),
    (EVENT_ID_FIELD, lambda event, _: event.id),
    ("startdate", lambda event, _: event.start_date),
    ("enddate", lambda event, _: event.end_date),
    ("startingamount", lambda event, _: event.starting_amount),
    ("drivingdays", lambda event, _: event.driving_days),
    ("eventbookingstatuscode", lambda event, _: event.booking_status_code),
    ("isflightincluded", lambda event, _: event.is_flight_included),
    ("iseventpublished", lambda event, _: event.is_published),
    (
        "isaccommodationandcateringincluded",
        lambda event, _: event.is_accommodation_included,
    ),
    ("isfullybooked", lambda event, _: event.is_fully_booked),
    ("isfullybookedboleantext", lambda event, _: display_bool(event.is_fully_booked)),
    ("availablevehicles", lambda event, _: event.available_vehicles),
    ("categorie", lambda _, refs: [ref for ref in refs.category_ids if ref]),
    ("airport", lambda _, refs: [ref for ref in refs.airport_ids if ref]),
    ("location", lambda _, refs: [refs.location_id] if refs.location_id else []),
)


def map_event_fields(
    event: SourceEvent,
    refs: ResolvedReferences | None = None,
) -> dict[str, object]:
    resolved = refs or ResolvedReferences()
    return {name: getter(event, resolved) for name, getter in EVENT_FIELD_TABLE}


def map_location_fields(location: Location) -> dict[str, object]:
    return {"address1city": location.city, "address1country": location.country}


def map_category_fields(_category: Category) -> dict[str, object]:
    return {}


def map_airport_fields(airport: Airport) -> dict[str, object]:
    return {
        "iataairport": airport.iata_name,
        "iataairportcode": airport.iata_code,
        "note": airport.note,
        "address1city": airport.city,
        "address1country": airport.country,
    }


def reference_field_data(
    *,
    id_field: str,
    source_id: str,
    name: str,
    extra_fields: dict[str, object] | None = None,
) -> dict[str, object]:
    return {
        "name": name,
        "slug": slugify(name),
        id_field: source_id,
        **(extra_fields or {}),
    }
