"""Aggregated settings for a reconciliation run."""

from __future__ import annotations

from dataclasses import dataclass

from .crm import CrmConfig, get_crm_config
from .lock import LockConfig, get_lock_config
from .webflow import WebflowConfig, get_webflow_config


@dataclass(frozen=True)
class SyncSettings:
    webflow: WebflowConfig
    crm: CrmConfig
    lock: LockConfig


def get_sync_settings() -> SyncSettings:
    return SyncSettings(
        webflow=get_webflow_config(),
        crm=get_crm_config(),
        lock=get_lock_config(),
    )
