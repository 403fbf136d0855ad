"""
Schema module - transformation, identity observation and caching.
"""

from __future__ import annotations

from .cache import SchemaCache
from .observer import (
    instrument_schema,
    is_identity_field,
    is_unobserved,
    observe_resolver,
    unobserved,
    with_user_context,
)
from .transform import FieldRewrite, TypeResolverRewrite, wrap_field_resolvers

__all__ = [
    "FieldRewrite",
    "TypeResolverRewrite",
    "wrap_field_resolvers",
    "instrument_schema",
    "is_identity_field",
    "is_unobserved",
    "observe_resolver",
    "unobserved",
    "with_user_context",
    "SchemaCache",
]
