"""
Runtime module - live records and the in-memory live query store.
"""

from __future__ import annotations

from .record import (
    LiveRecord,
    PublishUpdate,
    ResourceIdentifierBuilder,
    build_resource_identifier,
)
from .store import InMemoryLiveQueryStore, Unsubscribe

__all__ = [
    "LiveRecord",
    "PublishUpdate",
    "ResourceIdentifierBuilder",
    "build_resource_identifier",
    "InMemoryLiveQueryStore",
    "Unsubscribe",
]
