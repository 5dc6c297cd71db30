"""Translate CRM payloads into domain events."""

from __future__ import annotations

from typing import TYPE_CHECKING

from eventsync.domain.model import Airport, Category, Location, SourceEvent

if TYPE_CHECKING:
    from .schema import AirportPayload, CategoryPayload, EventPayload, LocationPayload


def parse_location(payload: LocationPayload) -> Location:
    return Location(
        id=payload.id,
        name=payload.name,
        city=payload.city,
        country=payload.country,
    )


def parse_category(payload: CategoryPayload) -> Category:
    return Category(id=payload.id, name=payload.name)


def parse_airport(payload: AirportPayload) -> Airport:
    return Airport(
        id=payload.id,
        name=payload.name,
        iata_name=payload.iata_name,
        iata_code=payload.iata_code,
        note=payload.note,
        city=payload.city,
        country=payload.country,
    )


def parse_event(payload: EventPayload) -> SourceEvent:
    return SourceEvent(
        id=payload.id,
        name=payload.name,
        start_date=payload.start_date,
        end_date=payload.end_date,
        starting_amount=payload.starting_amount,
        driving_days=payload.driving_days,
        available_vehicles=payload.available_vehicles,
        booking_status_code=payload.booking_status_code,
        is_published=payload.is_published,
        is_fully_booked=payload.is_fully_booked,
        is_flight_included=payload.is_flight_included,
        is_accommodation_included=payload.is_accommodation_included,
        location=parse_location(payload.location) if payload.location else None,
        categories=tuple(parse_category(item) for item in payload.categories),
        airports=tuple(parse_airport(item) for item in payload.airports),
    )
