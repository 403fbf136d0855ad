"""
Core module - errors, configuration and static analysis of live query documents.
"""

from __future__ import annotations

from .config import LiveQueryStoreConfig, load_config
from .context import Collector, ExecutionEnvelope, ExecutionMode, resolve_envelope
from .coordinates import extract_root_field_coordinates
from .directives import (
    LIVE_DIRECTIVE_NAME,
    GraphQLLiveDirective,
    get_live_query_operation,
    is_live_query_operation,
)
from .errors import ConfigError, LiveQueryError, RegistrationError

__all__ = [
    # Errors
    "LiveQueryError",
    "RegistrationError",
    "ConfigError",
    # Execution envelope
    "ExecutionMode",
    "ExecutionEnvelope",
    "Collector",
    "resolve_envelope",
    # Config
    "LiveQueryStoreConfig",
    "load_config",
    # Static analysis
    "LIVE_DIRECTIVE_NAME",
    "GraphQLLiveDirective",
    "is_live_query_operation",
    "get_live_query_operation",
    "extract_root_field_coordinates",
]
