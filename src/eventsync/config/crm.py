"""Dynamics CRM configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from .env import require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

CRM_TIMEOUT_SECONDS = 30.0
CRM_TOKEN_URL_TEMPLATE = "https://login.microsoftonline.com/{tenant_id}/oauth2/v2.0/token"


@dataclass(frozen=True)
class CrmConfig:
    """Holds the client-credentials grant and API location of the CRM."""

    tenant_id: str
    client_id: str
    client_secret: str
    base_url: str
    resilience: ResilienceConfig

    @property
    def token_url(self) -> str:
        return CRM_TOKEN_URL_TEMPLATE.format(tenant_id=self.tenant_id)

    @property
    def scope(self) -> str:
        return f"{resource_root(self.base_url)}/.default"


def resource_root(base_url: str) -> str:
    """Return ``scheme://host`` of the CRM base URL, used as the token scope."""

    parts = urlsplit(base_url)
    if not parts.scheme or not parts.netloc:
        raise ConfigurationError(
            f"Could not determine resource root from CRM_BASE_URL: {base_url!r}"
        )
    return f"{parts.scheme}://{parts.netloc}"


def get_crm_config(*, resilience: ResilienceConfig | None = None) -> CrmConfig:
    values = require_env_vars(
        ("CRM_TENANT_ID", "CRM_CLIENT_ID", "CRM_CLIENT_SECRET", "CRM_BASE_URL")
    )
    base_url = values["CRM_BASE_URL"].rstrip("/")
    resource_root(base_url)
    return CrmConfig(
        tenant_id=values["CRM_TENANT_ID"],
        client_id=values["CRM_CLIENT_ID"],
        client_secret=values["CRM_CLIENT_SECRET"],
        base_url=base_url,
        resilience=resilience
        or ResilienceConfig(
            name="crm",
            base_url=base_url,
            timeout_seconds=CRM_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=100, per_seconds=10.0),
            default_headers={
                "Accept": "application/json",
                "OData-MaxVersion": "4.0",
                "OData-Version": "4.0",
            },
        ),
    )
