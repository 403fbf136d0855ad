"""
Live record - state and execution of one registered live query.

Each call to LiveRecord.execute() starts a new generation. When an execution
settles it may only commit its identifiers and publish its result if no
newer execution has started meanwhile; older executions that finish late
are dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterable, Optional

from graphql import DocumentNode, ExecutionResult, GraphQLSchema, execute
from graphql.pyutils import is_awaitable

from ..core.context import ExecutionEnvelope

logger = logging.getLogger(__name__)

PublishUpdate = Callable[[ExecutionResult], None]
ResourceIdentifierBuilder = Callable[[str, Any], str]


def build_resource_identifier(type_name: str, value: Any) -> str:
    """Build the "TypeName:id" identifier for an observed identity field."""
    return f"{type_name}:{value}"


class LiveRecord:
    """
    Registered live query operation.

    Attributes:
        identifiers: Resource identifiers of the last committed execution
        generation: Number of executions started so far
        active: False once the live query was unsubscribed
    """

    def __init__(
        self,
        schema: GraphQLSchema,
        document: DocumentNode,
        publish_update: PublishUpdate,
        root_coordinates: Iterable[str] = (),
        root_value: Any = None,
        context_value: Any = None,
        variable_values: Optional[dict[str, Any]] = None,
        operation_name: Optional[str] = None,
        identifier_builder: ResourceIdentifierBuilder = build_resource_identifier,
        identifier_extension_key: Optional[str] = None,
    ):
        """
        Initialize record.

        Args:
            schema: Instrumented schema to execute against
            document: Live query document
            publish_update: Called with every accepted ExecutionResult
            root_coordinates: Static "TypeName:field" identifiers for the root fields
            identifier_builder: Builds identifiers from observed (type_name, id) pairs
            identifier_extension_key: When set, committed identifiers are added
                to the published result's extensions under this key
        """
        self.schema = schema
        self.document = document
        self.publish_update = publish_update
        self.root_coordinates = tuple(root_coordinates)
        self.root_value = root_value
        self.context_value = context_value
        self.variable_values = variable_values
        self.operation_name = operation_name
        self.identifier_builder = identifier_builder
        self.identifier_extension_key = identifier_extension_key

        self.identifiers: frozenset[str] = frozenset(self.root_coordinates)
        self.generation = 0
        self.active = True

    def execute(self) -> Optional[Awaitable[None]]:
        """
        Start a new execution of the operation.

        The generation is claimed before the engine is invoked, so overlapping
        calls are ordered by start time.

        Returns:
            Awaitable that commits and publishes once the result settles, or
            None when the engine produced its result synchronously
        """
        self.generation += 1
        generation = self.generation
        collected = set(self.root_coordinates)

        def collect(type_name: str, value: Any) -> None:
            collected.add(self.identifier_builder(type_name, value))

        result = execute(
            self.schema,
            self.document,
            root_value=self.root_value,
            context_value=ExecutionEnvelope.observed(self.context_value, collect),
            variable_values=self.variable_values,
            operation_name=self.operation_name,
        )

        if is_awaitable(result):
            return self._settle(result, generation, collected)

        self._commit(result, generation, collected)
        return None

    def deactivate(self) -> None:
        """Stop publishing; in-flight executions are discarded when they settle."""
        self.active = False

    async def _settle(
        self,
        result: Awaitable[ExecutionResult],
        generation: int,
        collected: set[str],
    ) -> None:
        self._commit(await result, generation, collected)

    def _commit(self, result: ExecutionResult, generation: int, collected: set[str]) -> bool:
        if not self.active:
            logger.debug(f"Discarding result of generation {generation}: live query unsubscribed")
            return False

        if generation != self.generation:
            logger.debug(
                f"Discarding stale result of generation {generation} "
                f"(current generation {self.generation})"
            )
            return False

        self.identifiers = frozenset(collected)
        logger.debug(f"Committed generation {generation} with {len(self.identifiers)} identifiers")

        if self.identifier_extension_key:
            result = ExecutionResult(
                data=result.data,
                errors=result.errors,
                extensions={
                    **(result.extensions or {}),
                    self.identifier_extension_key: sorted(self.identifiers),
                },
            )

        self.publish_update(result)
        return True
