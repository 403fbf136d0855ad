"""
In-memory live query store.

Registers live queries, executes them against an instrumented schema and
re-executes every query whose resource identifiers are invalidated.

Usage:
    store = InMemoryLiveQueryStore()

    unsubscribe = store.register(
        schema,
        parse('query @live { user(id: "1") { id name } }'),
        publish_update=send_to_client,
        context_value=request_context,
    )

    # After a mutation changed user 1
    await store.trigger_update("User:1")

    # Client went away
    unsubscribe()
"""

from __future__ import annotations

import asyncio
import functools
import itertools
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional

from graphql import DocumentNode, GraphQLSchema

from ..core.config import LiveQueryStoreConfig
from ..core.coordinates import extract_root_field_coordinates
from ..core.directives import get_live_query_operation
from ..core.errors import RegistrationError
from ..schema.cache import SchemaCache
from ..schema.observer import instrument_schema
from .record import (
    LiveRecord,
    PublishUpdate,
    ResourceIdentifierBuilder,
    build_resource_identifier,
)

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]


class InMemoryLiveQueryStore:
    """
    Registry of live query records for a single process.

    Instrumented schemas are cached per store instance and shared by all
    records registered against the same schema object.
    """

    def __init__(
        self,
        config: Optional[LiveQueryStoreConfig] = None,
        build_identifier: Optional[ResourceIdentifierBuilder] = None,
    ):
        """
        Initialize store.

        Args:
            config: Store settings (defaults when omitted)
            build_identifier: Custom builder for identifiers of observed
                identity fields, called as build_identifier(type_name, id_value)
        """
        self.config = config or LiveQueryStoreConfig()
        self._build_identifier = build_identifier or build_resource_identifier
        self._records: dict[int, LiveRecord] = {}
        self._record_ids = itertools.count(1)
        self._schema_cache = SchemaCache(
            functools.partial(instrument_schema, id_field_name=self.config.id_field_name)
        )
        self._initial_executions: set[asyncio.Future] = set()

    @property
    def schema_cache(self) -> SchemaCache:
        return self._schema_cache

    def register(
        self,
        schema: GraphQLSchema,
        document: DocumentNode,
        publish_update: PublishUpdate,
        root_value: Any = None,
        context_value: Any = None,
        variable_values: Optional[dict[str, Any]] = None,
        operation_name: Optional[str] = None,
    ) -> Unsubscribe:
        """
        Register a live query and execute it once.

        The initial result is published synchronously when the engine resolves
        synchronously, otherwise from a task on the running event loop.

        Args:
            schema: Schema to execute against (instrumented once per schema object)
            document: Parsed document containing a @live query
            publish_update: Called with each accepted ExecutionResult
            root_value: Root value passed to the engine
            context_value: Context passed to resolvers
            variable_values: Operation variables
            operation_name: Operation to execute

        Returns:
            Function that stops further updates for this registration

        Raises:
            RegistrationError: If the selected operation is not a live query
            Exception: Whatever the engine or publish_update raised during a
                synchronous initial execution; nothing stays registered
        """
        if get_live_query_operation(document, operation_name, variable_values) is None:
            raise RegistrationError("document contains no @live query operation", operation_name)

        root_type_name = schema.query_type.name if schema.query_type else "Query"
        root_coordinates = extract_root_field_coordinates(document, operation_name, root_type_name)

        record = LiveRecord(
            schema=self._schema_cache.get(schema),
            document=document,
            publish_update=publish_update,
            root_coordinates=root_coordinates,
            root_value=root_value,
            context_value=context_value,
            variable_values=variable_values,
            operation_name=operation_name,
            identifier_builder=self._build_identifier,
            identifier_extension_key=(
                self.config.identifier_extension_key
                if self.config.include_identifier_extension
                else None
            ),
        )
        record_id = next(self._record_ids)
        self._records[record_id] = record
        logger.info(f"Registered live query {record_id} ({operation_name or 'anonymous'})")

        try:
            continuation = record.execute()
        except Exception:
            record.deactivate()
            self._records.pop(record_id, None)
            logger.error(f"Live query {record_id} initial execution failed, registration dropped")
            raise
        self._schedule_initial(record_id, continuation)

        def unsubscribe() -> None:
            record.deactivate()
            if self._records.pop(record_id, None) is not None:
                logger.info(f"Unregistered live query {record_id}")

        return unsubscribe

    async def trigger_update(self, identifier: str) -> None:
        """Re-execute every live query depending on a resource identifier."""
        await self.invalidate([identifier])

    async def invalidate(self, identifiers: str | Iterable[str]) -> None:
        """
        Re-execute every live query depending on any of the identifiers.

        All matching records start executing before this coroutine first
        suspends; a record matching several identifiers runs once. Failures
        of one record are logged and do not affect the others.

        Args:
            identifiers: Resource identifier or iterable of identifiers
        """
        if isinstance(identifiers, str):
            identifiers = [identifiers]
        wanted = set(identifiers)

        matched = [
            (record_id, record)
            for record_id, record in list(self._records.items())
            if not record.identifiers.isdisjoint(wanted)
        ]
        if not matched:
            logger.debug(f"No live queries depend on {sorted(wanted)}")
            return

        logger.debug(f"Invalidating {len(matched)} live queries for {sorted(wanted)}")

        pending: list[tuple[int, Awaitable[None]]] = []
        for record_id, record in matched:
            try:
                continuation = record.execute()
            except Exception as e:
                logger.error(f"Live query {record_id} re-execution failed: {e}", exc_info=True)
                continue
            if continuation is not None:
                pending.append((record_id, continuation))

        if not pending:
            return

        outcomes = await asyncio.gather(
            *(continuation for _, continuation in pending),
            return_exceptions=True,
        )
        for (record_id, _), outcome in zip(pending, outcomes):
            if isinstance(outcome, Exception):
                logger.error(
                    f"Live query {record_id} re-execution failed: {outcome}",
                    exc_info=outcome,
                )

    def records_for(self, identifier: str) -> list[LiveRecord]:
        """Get the records currently depending on an identifier."""
        return [record for record in self._records.values() if identifier in record.identifiers]

    def close(self) -> None:
        """Unregister every live query and drop cached schemas."""
        for record in self._records.values():
            record.deactivate()
        self._records.clear()
        self._schema_cache.clear()
        logger.info("Live query store closed")

    def __len__(self) -> int:
        return len(self._records)

    def _schedule_initial(self, record_id: int, continuation: Optional[Awaitable[None]]) -> None:
        if continuation is None:
            return

        task = asyncio.ensure_future(continuation)
        self._initial_executions.add(task)

        def on_done(done: asyncio.Future) -> None:
            self._initial_executions.discard(done)
            if done.cancelled():
                return
            exc = done.exception()
            if exc is not None:
                logger.error(f"Live query {record_id} initial execution failed: {exc}", exc_info=exc)

        task.add_done_callback(on_done)
