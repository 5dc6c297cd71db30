from __future__ import annotations

import pytest

from eventsync.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_crm_config,
    get_ingress_config,
    get_lock_config,
    get_sync_settings,
    get_webflow_config,
    require_env_vars,
)
from eventsync.config.crm import resource_root
from eventsync.config.env import optional_env_int, optional_env_list

WEBFLOW_ENV = {
    "WEBFLOW_API_TOKEN": "wf-token",
    "WEBFLOW_COLLECTION_ID_EVENTS": "col-events",
    "WEBFLOW_COLLECTION_ID_LOCATIONS": "col-locations",
    "WEBFLOW_COLLECTION_ID_CATEGORIES": "col-categories",
    "WEBFLOW_COLLECTION_ID_AIRPORTS": "col-airports",
}

CRM_ENV = {
    "CRM_TENANT_ID": "tenant-1",
    "CRM_CLIENT_ID": "client-1",
    "CRM_CLIENT_SECRET": "secret-1",
    "CRM_BASE_URL": "https://contoso.crm4.dynamics.com/api/data/v9.2/",
}


def _set_env(monkeypatch: pytest.MonkeyPatch, values: dict[str, str]) -> None:
    for name, value in values.items():
        monkeypatch.setenv(name, value)


def test_require_env_vars_strips_values(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("JWT_SECRET", "  s3cret ")

    assert require_env_vars(["JWT_SECRET"]) == {"JWT_SECRET": "s3cret"}


def test_require_env_vars_lists_every_missing_name(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("REDIS_URL", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["REDIS_URL", "JWT_SECRET"])

    assert "JWT_SECRET, REDIS_URL" in str(exc.value)


def test_webflow_config(clean_env: pytest.MonkeyPatch) -> None:
    _set_env(clean_env, WEBFLOW_ENV)

    config = get_webflow_config()

    assert config.collections.events == "col-events"
    assert config.collections.airports == "col-airports"
    assert config.resilience.base_url == "https://api.webflow.com/v2"
    assert config.resilience.request_delay_seconds == pytest.approx(1.1)
    assert config.resilience.retry.max_attempts == 5
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["Authorization"] == "Bearer wf-token"


def test_webflow_config_requires_every_collection(clean_env: pytest.MonkeyPatch) -> None:
    _set_env(clean_env, WEBFLOW_ENV)
    clean_env.delenv("WEBFLOW_COLLECTION_ID_AIRPORTS")

    with pytest.raises(MissingConfigurationError, match="WEBFLOW_COLLECTION_ID_AIRPORTS"):
        get_webflow_config()


def test_crm_config_derives_token_url_and_scope(clean_env: pytest.MonkeyPatch) -> None:
    _set_env(clean_env, CRM_ENV)

    config = get_crm_config()

    assert config.base_url == "https://contoso.crm4.dynamics.com/api/data/v9.2"
    assert config.token_url == "https://login.microsoftonline.com/tenant-1/oauth2/v2.0/token"
    assert config.scope == "https://contoso.crm4.dynamics.com/.default"
    assert config.resilience.ratelimit is not None


def test_crm_config_rejects_relative_base_url(clean_env: pytest.MonkeyPatch) -> None:
    _set_env(clean_env, {**CRM_ENV, "CRM_BASE_URL": "contoso/api"})

    with pytest.raises(ConfigurationError):
        get_crm_config()


def test_resource_root() -> None:
    assert resource_root("https://org.crm.dynamics.com/api/data/v9.2") == (
        "https://org.crm.dynamics.com"
    )


def test_lock_config_defaults_and_override(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("REDIS_URL", "redis://localhost:6379/0")

    assert get_lock_config().ttl_seconds == 30

    clean_env.setenv("CREATE_LOCK_TTL_SECONDS", "90")
    assert get_lock_config().ttl_seconds == 90


def test_lock_ttl_must_be_an_integer(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("CREATE_LOCK_TTL_SECONDS", "soon")

    with pytest.raises(ConfigurationError, match="CREATE_LOCK_TTL_SECONDS"):
        optional_env_int("CREATE_LOCK_TTL_SECONDS", 30)


def test_ingress_config(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("JWT_SECRET", "s3cret")
    clean_env.setenv("CORS_ALLOWED_ORIGINS", "https://www.example.com, https://example.webflow.io,")

    config = get_ingress_config()

    assert config.jwt_secret == "s3cret"
    assert config.jwt_algorithms == ("HS256",)
    assert config.allowed_origins == ("https://www.example.com", "https://example.webflow.io")


def test_optional_env_list_unset(clean_env: pytest.MonkeyPatch) -> None:
    assert optional_env_list("CORS_ALLOWED_ORIGINS") == ()
    assert clean_env is not None


def test_sync_settings_aggregate_all_sections(clean_env: pytest.MonkeyPatch) -> None:
    _set_env(clean_env, {**WEBFLOW_ENV, **CRM_ENV, "REDIS_URL": "redis://localhost:6379/0"})

    settings = get_sync_settings()

    assert settings.webflow.collections.locations == "col-locations"
    assert settings.crm.client_id == "client-1"
    assert settings.lock.url == "redis://localhost:6379/0"
