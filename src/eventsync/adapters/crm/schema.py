"""Pydantic models describing the Dynamics CRM custom API payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _none_to_empty_list(value: object) -> object:
    return [] if value is None else value


def _none_to_false(value: object) -> object:
    return False if value is None else value


def _none_to_blank(value: object) -> object:
    return "" if value is None else value


class CrmBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LocationPayload(CrmBaseModel):
    id: str | None = Field(default=None, alias="m8_eventlocationid")
    name: str = Field(default="", alias="m8_name")
    city: str | None = Field(default=None, alias="m8_address1city")
    country: str | None = Field(default=None, alias="m8_address1country")

    _normalize_name = field_validator("name", mode="before")(_none_to_blank)


class CategoryPayload(CrmBaseModel):
    id: str | None = Field(default=None, alias="m8_eventcategoryid")
    name: str = Field(default="", alias="m8_name")

    _normalize_name = field_validator("name", mode="before")(_none_to_blank)


class AirportPayload(CrmBaseModel):
    id: str | None = Field(default=None, alias="m8_airportid")
    name: str = Field(default="", alias="m8_name")
    iata_name: str | None = Field(default=None, alias="m8_iataairport")
    iata_code: str | None = Field(default=None, alias="m8_iataairportcode")
    note: str | None = Field(default=None, alias="m8_note")
    city: str | None = Field(default=None, alias="m8_address1city")
    country: str | None = Field(default=None, alias="m8_address1country")

    _normalize_name = field_validator("name", mode="before")(_none_to_blank)


class EventPayload(CrmBaseModel):
    id: str = Field(alias="m8_eventid")
    name: str = Field(default="", alias="m8_name")
    start_date: str | None = Field(default=None, alias="m8_startdate")
    end_date: str | None = Field(default=None, alias="m8_enddate")
    starting_amount: float | None = Field(default=None, alias="m8_startingamount")
    driving_days: int | None = Field(default=None, alias="m8_drivingdays")
    available_vehicles: int | None = Field(default=None, alias="m8_availablevehicles")
    booking_status_code: int | None = Field(default=None, alias="m8_eventbookingstatuscode")
    is_published: bool = Field(default=False, alias="m8_iseventpublished")
    is_fully_booked: bool = Field(default=False, alias="m8_isfullybooked")
    is_flight_included: bool = Field(default=False, alias="m8_isflightincluded")
    is_accommodation_included: bool = Field(
        default=False, alias="m8_isaccommodationandcateringincluded"
    )
    location: LocationPayload | None = Field(default=None, alias="m8_eventlocation")
    categories: list[CategoryPayload] = Field(default_factory=list, alias="m8_eventcategories")
    airports: list[AirportPayload] = Field(default_factory=list, alias="m8_airports")

    _normalize_name = field_validator("name", mode="before")(_none_to_blank)
    _normalize_lists = field_validator("categories", "airports", mode="before")(
        _none_to_empty_list
    )
    _normalize_flags = field_validator(
        "is_published",
        "is_fully_booked",
        "is_flight_included",
        "is_accommodation_included",
        mode="before",
    )(_none_to_false)


class EventsResponse(CrmBaseModel):
    value: list[EventPayload]


class PriceLevelPayload(CrmBaseModel):
    products: list[dict[str, Any]] = Field(default_factory=list, alias="m8_pricelevelproducts")

    _normalize_products = field_validator("products", mode="before")(_none_to_empty_list)


class PriceLevelResponse(CrmBaseModel):
    value: list[PriceLevelPayload]


class TokenResponse(CrmBaseModel):
    access_token: str
    expires_in: int = 3599
