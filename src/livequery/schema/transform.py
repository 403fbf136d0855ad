"""
Schema transformation - rebuild a schema with rewritten object fields.

graphql-core types hold direct references to each other, so rewriting one
field resolver means rebuilding every composite output type that can reach
it. Scalars, enums, input types and directives only reference input types
and are shared with the original schema unchanged.

Usage:
    def log_field(type_name, field_name, field):
        return field

    new_schema = wrap_field_resolvers(schema, log_field)
"""

from __future__ import annotations

from typing import Callable, Optional

from graphql import (
    GraphQLField,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNamedType,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLType,
    GraphQLUnionType,
    is_interface_type,
    is_introspection_type,
    is_list_type,
    is_non_null_type,
    is_object_type,
    is_union_type,
)

FieldRewrite = Callable[[str, str, GraphQLField], GraphQLField]
TypeResolverRewrite = Callable[[Callable], Callable]


def wrap_field_resolvers(
    schema: GraphQLSchema,
    rewrite: FieldRewrite,
    rewrite_type_resolver: Optional[TypeResolverRewrite] = None,
) -> GraphQLSchema:
    """
    Build an equivalent schema whose object type fields pass through `rewrite`.

    Args:
        schema: Original schema (never mutated)
        rewrite: Called as rewrite(type_name, field_name, field) for every field
            of every object type; returns the field to use in the new schema
        rewrite_type_resolver: Optional; applied to every is_type_of of object
            types and every resolve_type of interfaces and unions that is set

    Returns:
        New GraphQLSchema
    """
    type_map: dict[str, GraphQLNamedType] = {}

    def replace_type(type_: GraphQLType) -> GraphQLType:
        if is_list_type(type_):
            return GraphQLList(replace_type(type_.of_type))
        if is_non_null_type(type_):
            return GraphQLNonNull(replace_type(type_.of_type))
        return replace_named_type(type_)

    def replace_named_type(type_: GraphQLNamedType) -> GraphQLNamedType:
        return type_map.get(type_.name, type_)

    def replace_maybe_type(type_: Optional[GraphQLNamedType]) -> Optional[GraphQLNamedType]:
        return replace_named_type(type_) if type_ else None

    def rewrite_maybe_resolver(resolver: Optional[Callable]) -> Optional[Callable]:
        if resolver is None or rewrite_type_resolver is None:
            return resolver
        return rewrite_type_resolver(resolver)

    def copy_fields(fields: dict[str, GraphQLField]) -> dict[str, GraphQLField]:
        return {
            name: GraphQLField(**{**field.to_kwargs(), "type_": replace_type(field.type)})
            for name, field in fields.items()
        }

    def rewrite_fields(type_: GraphQLObjectType) -> dict[str, GraphQLField]:
        return {
            name: rewrite(type_.name, name, field)
            for name, field in copy_fields(type_.fields).items()
        }

    def rebuild_named_type(type_: GraphQLNamedType) -> GraphQLNamedType:
        if is_object_type(type_):
            return GraphQLObjectType(**{
                **type_.to_kwargs(),
                "fields": lambda: rewrite_fields(type_),
                "interfaces": lambda: [replace_named_type(i) for i in type_.interfaces],
                "is_type_of": rewrite_maybe_resolver(type_.is_type_of),
            })
        if is_interface_type(type_):
            return GraphQLInterfaceType(**{
                **type_.to_kwargs(),
                "fields": lambda: copy_fields(type_.fields),
                "interfaces": lambda: [replace_named_type(i) for i in type_.interfaces],
                "resolve_type": rewrite_maybe_resolver(type_.resolve_type),
            })
        if is_union_type(type_):
            return GraphQLUnionType(**{
                **type_.to_kwargs(),
                "types": lambda: [replace_named_type(t) for t in type_.types],
                "resolve_type": rewrite_maybe_resolver(type_.resolve_type),
            })
        # scalars, enums and input types reference no output types
        return type_

    for type_ in schema.type_map.values():
        if is_introspection_type(type_):
            continue
        type_map[type_.name] = rebuild_named_type(type_)

    return GraphQLSchema(
        query=replace_maybe_type(schema.query_type),
        mutation=replace_maybe_type(schema.mutation_type),
        subscription=replace_maybe_type(schema.subscription_type),
        types=list(type_map.values()),
        directives=list(schema.directives),
        description=schema.description,
        extensions=schema.extensions,
        ast_node=schema.ast_node,
        extension_ast_nodes=schema.extension_ast_nodes,
    )
