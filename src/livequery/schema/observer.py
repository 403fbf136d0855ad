"""
Identity observer - schema instrumentation for resource identifier collection.

Every object type field resolver is wrapped. During an observed execution
the wrapper hands the real user context to the original resolver and, for
identity fields (`id: ID!` by default), reports (type_name, value) to the
execution's collector once the value is available.

Usage:
    instrumented = instrument_schema(schema)
    collected = set()
    envelope = ExecutionEnvelope.observed(
        user_context, lambda type_name, id_: collected.add(f"{type_name}:{id_}")
    )
    result = await graphql.execute(instrumented, document, context_value=envelope)
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable

from graphql import (
    GraphQLField,
    GraphQLFieldResolver,
    GraphQLResolveInfo,
    GraphQLSchema,
    default_field_resolver,
    is_non_null_type,
    is_scalar_type,
)
from graphql.pyutils import is_awaitable

from ..core.context import Collector, ExecutionEnvelope, resolve_envelope
from .transform import wrap_field_resolvers

logger = logging.getLogger(__name__)

UNOBSERVED_ATTR = "__live_unobserved__"


def with_user_context(resolver: Callable) -> Callable:
    """
    Wrap a resolver so it always receives the caller's context.

    Works for field resolvers, is_type_of and resolve_type: the info argument
    is the second positional argument in all of them. Identity fields are
    not reported.
    """

    @functools.wraps(resolver)
    def resolve_with_user_context(value: Any, info: GraphQLResolveInfo, *args: Any, **kwargs: Any) -> Any:
        if not isinstance(info.context, ExecutionEnvelope):
            return resolver(value, info, *args, **kwargs)

        user_context, _ = resolve_envelope(info.context)
        return resolver(value, info._replace(context=user_context), *args, **kwargs)

    return resolve_with_user_context


def unobserved(resolver: Callable) -> Callable:
    """
    Mark a resolver as handled by a push-based live resolver.

    instrument_schema() does not observe fields using the returned resolver;
    it still receives the caller's context during observed executions.

    Usage:
        @unobserved
        def resolve_status(source, info):
            return info.context["status_feed"].current()
    """
    wrapped = with_user_context(resolver)
    setattr(wrapped, UNOBSERVED_ATTR, True)
    return wrapped


def is_unobserved(resolver: Any) -> bool:
    return getattr(resolver, UNOBSERVED_ATTR, False) is True


def is_identity_field(field_name: str, field: GraphQLField, id_field_name: str = "id") -> bool:
    """Identity fields match the configured name and are a non-null scalar."""
    if field_name != id_field_name:
        return False
    return is_non_null_type(field.type) and is_scalar_type(field.type.of_type)


async def _collect_when_settled(
    result: Awaitable[Any], type_name: str, collector: Collector
) -> Any:
    value = await result
    if value is not None:
        collector(type_name, value)
    return value


def observe_resolver(
    type_name: str, resolve: GraphQLFieldResolver, is_id_field: bool
) -> GraphQLFieldResolver:
    """
    Wrap a field resolver so it unwraps ExecutionEnvelope contexts.

    The value returned to the engine is always the original resolver's value.
    """

    def observed_resolve(source: Any, info: GraphQLResolveInfo, **args: Any) -> Any:
        if not isinstance(info.context, ExecutionEnvelope):
            return resolve(source, info, **args)

        user_context, collector = resolve_envelope(info.context)
        result = resolve(source, info._replace(context=user_context), **args)

        if collector is None or not is_id_field:
            return result

        if is_awaitable(result):
            return _collect_when_settled(result, type_name, collector)

        if result is not None:
            collector(type_name, result)
        return result

    return observed_resolve


def instrument_schema(schema: GraphQLSchema, id_field_name: str = "id") -> GraphQLSchema:
    """
    Build an instrumented copy of a schema.

    Args:
        schema: Original schema (left unchanged)
        id_field_name: Name of the identity field on object types

    Returns:
        Schema with every object field resolver wrapped, except fields
        whose resolver is marked with unobserved(), and with is_type_of and
        resolve_type unwrapping the execution envelope
    """
    wrapped_count = 0

    def rewrite(type_name: str, field_name: str, field: GraphQLField) -> GraphQLField:
        nonlocal wrapped_count
        if is_unobserved(field.resolve):
            return field

        wrapped_count += 1
        field.resolve = observe_resolver(
            type_name,
            field.resolve or default_field_resolver,
            is_identity_field(field_name, field, id_field_name),
        )
        return field

    instrumented = wrap_field_resolvers(schema, rewrite, with_user_context)
    logger.debug(f"Instrumented schema: {wrapped_count} field resolvers wrapped")
    return instrumented
