"""
livequery - in-memory GraphQL live query store.

Live queries are re-executed whenever a resource they read is invalidated.
Resources are tracked automatically: every `id` field resolved during an
execution is recorded as "TypeName:id", along with "Query:field" for each
root field of the operation.

Usage:
    from graphql import build_schema, parse
    from livequery import GraphQLLiveDirective, InMemoryLiveQueryStore

    store = InMemoryLiveQueryStore()
    unsubscribe = store.register(
        schema,
        parse('query @live { user(id: "1") { id name } }'),
        publish_update=lambda result: print(result.data),
    )

    await store.trigger_update("User:1")
"""

from __future__ import annotations

from .core import (
    LIVE_DIRECTIVE_NAME,
    Collector,
    ConfigError,
    ExecutionEnvelope,
    ExecutionMode,
    GraphQLLiveDirective,
    LiveQueryError,
    LiveQueryStoreConfig,
    RegistrationError,
    extract_root_field_coordinates,
    get_live_query_operation,
    is_live_query_operation,
    load_config,
    resolve_envelope,
)
from .schema import (
    SchemaCache,
    instrument_schema,
    is_identity_field,
    unobserved,
    with_user_context,
    wrap_field_resolvers,
)
from .runtime import (
    InMemoryLiveQueryStore,
    LiveRecord,
    Unsubscribe,
    build_resource_identifier,
)

__version__ = "0.1.0"

__all__ = [
    # Errors
    "LiveQueryError",
    "RegistrationError",
    "ConfigError",
    # Config
    "LiveQueryStoreConfig",
    "load_config",
    # Live query documents
    "LIVE_DIRECTIVE_NAME",
    "GraphQLLiveDirective",
    "is_live_query_operation",
    "get_live_query_operation",
    "extract_root_field_coordinates",
    # Execution envelope
    "ExecutionMode",
    "ExecutionEnvelope",
    "Collector",
    "resolve_envelope",
    # Schema
    "wrap_field_resolvers",
    "instrument_schema",
    "is_identity_field",
    "unobserved",
    "with_user_context",
    "SchemaCache",
    # Store
    "LiveRecord",
    "build_resource_identifier",
    "InMemoryLiveQueryStore",
    "Unsubscribe",
]
