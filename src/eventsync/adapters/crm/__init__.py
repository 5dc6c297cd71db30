"""Public interface for the Dynamics CRM adapter."""

from __future__ import annotations

from .client import CrmAuthError, CrmClient
from .schema import EventPayload, EventsResponse, PriceLevelResponse, TokenResponse
from .translator import parse_event

__all__ = [
    "CrmAuthError",
    "CrmClient",
    "EventPayload",
    "EventsResponse",
    "PriceLevelResponse",
    "TokenResponse",
    "parse_event",
]
