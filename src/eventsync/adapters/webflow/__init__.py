"""Public interface for the Webflow CMS adapter."""

from __future__ import annotations

from .client import WebflowClient
from .pagination import read_all_items
from .schema import ItemPayload, ItemsPage, Pagination
from .translator import parse_target_item

__all__ = [
    "ItemPayload",
    "ItemsPage",
    "Pagination",
    "WebflowClient",
    "parse_target_item",
    "read_all_items",
]
