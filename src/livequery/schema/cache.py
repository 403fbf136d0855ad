"""
Instrumented schema cache.

Instrumenting walks the whole type graph, so each distinct schema object is
instrumented once and the result is shared by every live query registered
against it. Keys are schema identities, not structural equality.
"""

from __future__ import annotations

import logging
from typing import Callable

from graphql import GraphQLSchema

logger = logging.getLogger(__name__)


class SchemaCache:
    """
    Memoizes a schema transformation per schema object.

    Usage:
        cache = SchemaCache(instrument_schema)
        instrumented = cache.get(schema)
        assert cache.get(schema) is instrumented
    """

    def __init__(self, transform: Callable[[GraphQLSchema], GraphQLSchema]):
        self._transform = transform
        # id(schema) -> (schema, transformed); the original is kept alive so its id stays unique
        self._entries: dict[int, tuple[GraphQLSchema, GraphQLSchema]] = {}

    def get(self, schema: GraphQLSchema) -> GraphQLSchema:
        """Get the transformed schema, creating it on first use."""
        entry = self._entries.get(id(schema))
        if entry is not None:
            logger.debug(f"Schema cache HIT: {id(schema):#x}")
            return entry[1]

        logger.debug(f"Schema cache MISS: {id(schema):#x}")
        transformed = self._transform(schema)
        self._entries[id(schema)] = (schema, transformed)
        return transformed

    def __contains__(self, schema: GraphQLSchema) -> bool:
        return id(schema) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Drop all cached schemas."""
        self._entries.clear()
