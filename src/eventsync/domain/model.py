"""Domain types for events owned by the CRM and their referenced sub-entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

EVENT_ENTITY_NAME = "Event"


class ChangeType(StrEnum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"

    @classmethod
    def parse(cls, value: str | None) -> ChangeType:
        """Interpret a change-type hint; anything unknown counts as an update."""

        if value:
            normalized = value.strip().lower()
            for member in cls:
                if member.value.lower() == normalized:
                    return member
        return cls.UPDATE


@dataclass(slots=True, frozen=True)
class ChangeSignal:
    entity_name: str
    record_id: str
    change_type: ChangeType

    @property
    def is_event(self) -> bool:
        return self.entity_name == EVENT_ENTITY_NAME


@dataclass(slots=True, frozen=True)
class Location:
    id: str | None
    name: str
    city: str | None = None
    country: str | None = None


@dataclass(slots=True, frozen=True)
class Category:
    id: str | None
    name: str


@dataclass(slots=True, frozen=True)
class Airport:
    id: str | None
    name: str
    iata_name: str | None = None
    iata_code: str | None = None
    note: str | None = None
    city: str | None = None
    country: str | None = None


@dataclass(slots=True, frozen=True)
class SourceEvent:
    """An event as reported by the CRM; the reconciler only ever reads it."""

    id: str
    name: str
    start_date: str | None = None
    end_date: str | None = None
    starting_amount: float | None = None
    driving_days: int | None = None
    available_vehicles: int | None = None
    booking_status_code: int | None = None
    is_published: bool = False
    is_fully_booked: bool = False
    is_flight_included: bool = False
    is_accommodation_included: bool = False
    location: Location | None = None
    categories: tuple[Category, ...] = field(default_factory=tuple)
    airports: tuple[Airport, ...] = field(default_factory=tuple)
