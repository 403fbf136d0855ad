"""
Live query marker detection.

A query is live when its operation definition carries the @live directive:

    query UserProfile @live {
        user(id: "1") { id name }
    }

The directive takes an optional `if` argument so clients can toggle it
with a variable:

    query UserProfile($live: Boolean) @live(if: $live) { ... }
"""

from __future__ import annotations

from typing import Any, Optional

from graphql import (
    DirectiveLocation,
    DocumentNode,
    GraphQLArgument,
    GraphQLBoolean,
    GraphQLDirective,
    OperationDefinitionNode,
    OperationType,
    Undefined,
    value_from_ast_untyped,
)
from graphql.utilities import get_operation_ast

LIVE_DIRECTIVE_NAME = "live"

GraphQLLiveDirective = GraphQLDirective(
    name=LIVE_DIRECTIVE_NAME,
    description=(
        "Instruct the server to send the current result and re-send it "
        "whenever the data it depends on changes."
    ),
    locations=[DirectiveLocation.QUERY],
    args={
        "if": GraphQLArgument(
            GraphQLBoolean,
            default_value=True,
            description="Whether the query should be live.",
        ),
    },
)


def is_live_query_operation(
    operation: OperationDefinitionNode,
    variable_values: Optional[dict[str, Any]] = None,
) -> bool:
    """
    Check whether an operation is a live query.

    Only query operations can be live. A missing `if` argument counts as true,
    a variable reference missing from `variable_values` counts as false.
    """
    if operation.operation != OperationType.QUERY:
        return False

    for directive in operation.directives or ():
        if directive.name.value != LIVE_DIRECTIVE_NAME:
            continue

        if_argument = next(
            (arg for arg in directive.arguments or () if arg.name.value == "if"),
            None,
        )
        if if_argument is None:
            return True

        value = value_from_ast_untyped(if_argument.value, variable_values or {})
        if value is Undefined:
            return False
        return bool(value)

    return False


def get_live_query_operation(
    document: DocumentNode,
    operation_name: Optional[str] = None,
    variable_values: Optional[dict[str, Any]] = None,
) -> Optional[OperationDefinitionNode]:
    """
    Get the operation the engine would execute, if it is a live query.

    Args:
        document: Parsed GraphQL document
        operation_name: Operation to select (required for multi-operation documents)
        variable_values: Variables used to evaluate @live(if: $var)

    Returns:
        The live operation definition or None
    """
    operation = get_operation_ast(document, operation_name)
    if operation is None:
        return None
    if not is_live_query_operation(operation, variable_values):
        return None
    return operation
