"""Pydantic models describing the Webflow CMS API payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WebflowBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ItemPayload(WebflowBaseModel):
    id: str
    is_archived: bool = Field(default=False, alias="isArchived")
    is_draft: bool = Field(default=False, alias="isDraft")
    last_published: str | None = Field(default=None, alias="lastPublished")
    field_data: dict[str, Any] = Field(default_factory=dict, alias="fieldData")


class Pagination(WebflowBaseModel):
    limit: int
    offset: int
    total: int


class ItemsPage(WebflowBaseModel):
    items: list[ItemPayload]
    pagination: Pagination
