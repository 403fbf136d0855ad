"""
Root field coordinate extraction.

Every top-level field of a live query is tracked as "<RootType>:<field>"
(e.g. "Query:user"), so invalidating a whole root field re-runs every live
query selecting it regardless of which objects were resolved.
"""

from __future__ import annotations

from typing import Optional

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    SelectionSetNode,
)
from graphql.utilities import get_operation_ast


def extract_root_field_coordinates(
    document: DocumentNode,
    operation_name: Optional[str] = None,
    root_type_name: str = "Query",
) -> list[str]:
    """
    Extract "TypeName:fieldName" coordinates for the operation's root fields.

    Aliases resolve to the underlying field name, fragments at the root level
    are expanded and introspection fields are skipped.

    Args:
        document: Parsed GraphQL document
        operation_name: Operation to select
        root_type_name: Name of the operation's root type in the schema

    Returns:
        Coordinates in selection order, without duplicates
    """
    operation = get_operation_ast(document, operation_name)
    if operation is None:
        return []

    fragments = {
        definition.name.value: definition
        for definition in document.definitions
        if isinstance(definition, FragmentDefinitionNode)
    }

    coordinates: dict[str, None] = {}
    _collect_root_fields(
        operation.selection_set, fragments, root_type_name, coordinates, set()
    )
    return list(coordinates)


def _collect_root_fields(
    selection_set: SelectionSetNode,
    fragments: dict[str, FragmentDefinitionNode],
    root_type_name: str,
    coordinates: dict[str, None],
    visited_fragments: set[str],
) -> None:
    for selection in selection_set.selections:
        if isinstance(selection, FieldNode):
            field_name = selection.name.value
            if field_name.startswith("__"):
                continue
            coordinates.setdefault(f"{root_type_name}:{field_name}", None)

        elif isinstance(selection, InlineFragmentNode):
            _collect_root_fields(
                selection.selection_set,
                fragments,
                root_type_name,
                coordinates,
                visited_fragments,
            )

        elif isinstance(selection, FragmentSpreadNode):
            name = selection.name.value
            fragment = fragments.get(name)
            if fragment is None or name in visited_fragments:
                continue
            visited_fragments.add(name)
            _collect_root_fields(
                fragment.selection_set,
                fragments,
                root_type_name,
                coordinates,
                visited_fragments,
            )
