"""Webflow CMS configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import ResilienceConfig

WEBFLOW_BASE_URL = "https://api.webflow.com/v2"
WEBFLOW_TIMEOUT_SECONDS = 45.0
# Webflow allows 60 requests per minute on most plans.
WEBFLOW_REQUEST_DELAY_SECONDS = 1.1
WEBFLOW_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class CollectionIds:
    events: str
    locations: str
    categories: str
    airports: str


@dataclass(frozen=True)
class WebflowConfig:
    api_token: str
    collections: CollectionIds
    resilience: ResilienceConfig
    page_size: int = WEBFLOW_PAGE_SIZE


def default_webflow_resilience(api_token: str) -> ResilienceConfig:
    return ResilienceConfig(
        name="webflow",
        base_url=WEBFLOW_BASE_URL,
        timeout_seconds=WEBFLOW_TIMEOUT_SECONDS,
        request_delay_seconds=WEBFLOW_REQUEST_DELAY_SECONDS,
        default_headers={
            "Accept": "application/json",
            "Authorization": f"Bearer {api_token}",
        },
    )


def get_webflow_config(*, resilience: ResilienceConfig | None = None) -> WebflowConfig:
    values = require_env_vars(
        (
            "WEBFLOW_API_TOKEN",
            "WEBFLOW_COLLECTION_ID_EVENTS",
            "WEBFLOW_COLLECTION_ID_LOCATIONS",
            "WEBFLOW_COLLECTION_ID_CATEGORIES",
            "WEBFLOW_COLLECTION_ID_AIRPORTS",
        )
    )
    api_token = values["WEBFLOW_API_TOKEN"]
    return WebflowConfig(
        api_token=api_token,
        collections=CollectionIds(
            events=values["WEBFLOW_COLLECTION_ID_EVENTS"],
            locations=values["WEBFLOW_COLLECTION_ID_LOCATIONS"],
            categories=values["WEBFLOW_COLLECTION_ID_CATEGORIES"],
            airports=values["WEBFLOW_COLLECTION_ID_AIRPORTS"],
        ),
        resilience=resilience or default_webflow_resilience(api_token),
    )
