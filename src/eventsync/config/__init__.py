"""Application configuration helpers."""

from __future__ import annotations

from .crm import CrmConfig, get_crm_config
from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import (
    PolicyRetry,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    exponential_backoff,
)
from .ingress import IngressConfig, get_ingress_config
from .lock import LockConfig, get_lock_config
from .logging import configure_logging
from .sync import SyncSettings, get_sync_settings
from .webflow import CollectionIds, WebflowConfig, get_webflow_config

__all__ = [
    "CollectionIds",
    "ConfigurationError",
    "CrmConfig",
    "IngressConfig",
    "LockConfig",
    "MissingConfigurationError",
    "PolicyRetry",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SyncSettings",
    "WebflowConfig",
    "configure_logging",
    "exponential_backoff",
    "get_crm_config",
    "get_ingress_config",
    "get_lock_config",
    "get_sync_settings",
    "get_webflow_config",
    "require_env_vars",
]
