"""Domain port definitions for adapters."""

from __future__ import annotations

from .locking import DistributedLock
from .source import EventSource
from .target import PublishState, TargetItem, TargetStore

__all__ = [
    "DistributedLock",
    "EventSource",
    "PublishState",
    "TargetItem",
    "TargetStore",
]
