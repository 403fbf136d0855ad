"""
Tests for identity observation through the instrumented schema.
"""

import pytest
from graphql import build_schema, execute, graphql_sync, parse

from livequery import (
    ExecutionEnvelope,
    instrument_schema,
    is_identity_field,
    unobserved,
)


def observed_execute(schema, source, root_value=None, context=None):
    collected = []
    envelope = ExecutionEnvelope.observed(
        context, lambda type_name, value: collected.append((type_name, value))
    )
    result = execute(schema, parse(source), root_value=root_value, context_value=envelope)
    return result, collected


class TestIsIdentityField:
    """Tests for is_identity_field()."""

    @pytest.fixture
    def fields(self):
        schema = build_schema(
            """
            type Query { a: A }
            type A { id: ID! optional: ID uuid: String! ids: [ID!]! other: A }
            """
        )
        return schema.get_type("A").fields

    def test_non_null_scalar_id(self, schema):
        assert is_identity_field("id", schema.get_type("User").fields["id"])

    def test_nullable_id_is_not_identity(self, fields):
        assert not is_identity_field("optional", fields["optional"], id_field_name="optional")

    def test_name_must_match(self, fields):
        assert not is_identity_field("uuid", fields["uuid"])
        assert is_identity_field("uuid", fields["uuid"], id_field_name="uuid")

    def test_list_is_not_identity(self, fields):
        assert not is_identity_field("ids", fields["ids"], id_field_name="ids")

    def test_object_is_not_identity(self, fields):
        assert not is_identity_field("other", fields["other"], id_field_name="other")


class TestInstrumentSchema:
    """Tests for instrument_schema()."""

    def test_collects_identity_pairs(self, schema, root_value):
        instrumented = instrument_schema(schema)
        result, collected = observed_execute(
            instrumented, '{ user(id: "1") { id name friends { id } } }', root_value
        )
        assert result.errors is None
        assert result.data == {
            "user": {"id": "1", "name": "Ada", "friends": [{"id": "2"}]}
        }
        assert sorted(collected) == [("User", "1"), ("User", "2")]

    def test_identity_not_selected_is_not_collected(self, schema, root_value):
        instrumented = instrument_schema(schema)
        _, collected = observed_execute(instrumented, '{ user(id: "1") { name } }', root_value)
        assert collected == []

    def test_abstract_fields_report_concrete_type(self, schema, root_value):
        instrumented = instrument_schema(schema)
        _, collected = observed_execute(instrumented, '{ node(id: "2") { id } }', root_value)
        assert collected == [("User", "2")]

    def test_resolvers_receive_user_context(self, schema):
        instrumented = instrument_schema(schema)
        seen = []

        def user(info, id):
            seen.append(info.context)
            return {"id": id, "name": info.context["viewer"]}

        result, _ = observed_execute(
            instrumented,
            '{ user(id: "1") { name } }',
            root_value={"user": user},
            context={"viewer": "Ada"},
        )
        assert result.data == {"user": {"name": "Ada"}}
        assert seen == [{"viewer": "Ada"}]

    def test_plain_context_behaves_like_original(self, schema, root_value):
        instrumented = instrument_schema(schema)
        result = graphql_sync(
            instrumented,
            '{ user(id: "1") { id name } }',
            root_value=root_value,
            context_value={"any": "context"},
        )
        assert result.errors is None
        assert result.data == {"user": {"id": "1", "name": "Ada"}}

    def test_passthrough_envelope_unwraps_without_collecting(self, schema):
        instrumented = instrument_schema(schema)
        result = execute(
            instrumented,
            parse('{ user(id: "1") { id name } }'),
            root_value={"user": lambda info, id: {"id": id, "name": info.context}},
            context_value=ExecutionEnvelope.passthrough("Grace"),
        )
        assert result.data == {"user": {"id": "1", "name": "Grace"}}

    def test_original_schema_is_not_modified(self, schema):
        instrument_schema(schema)
        assert schema.get_type("User").fields["id"].resolve is None

    def test_custom_id_field_name(self):
        schema = build_schema("type Query { item: Item } type Item { key: String! id: ID! }")
        instrumented = instrument_schema(schema, id_field_name="key")
        _, collected = observed_execute(
            instrumented, "{ item { key id } }", {"item": {"key": "k1", "id": "i1"}}
        )
        assert collected == [("Item", "k1")]

    def test_unobserved_fields_pass_through(self, schema):
        @unobserved
        def live_name(source, info):
            return "pushed"

        schema.get_type("User").fields["name"].resolve = live_name
        instrumented = instrument_schema(schema)
        assert instrumented.get_type("User").fields["name"].resolve is live_name
        assert instrumented.get_type("User").fields["id"].resolve is not None

    def test_unobserved_resolver_receives_user_context(self, schema):
        seen = []

        @unobserved
        def live_name(source, info):
            seen.append(info.context)
            return info.context["name"]

        schema.get_type("User").fields["name"].resolve = live_name
        instrumented = instrument_schema(schema)
        result, collected = observed_execute(
            instrumented,
            '{ user(id: "1") { id name } }',
            root_value={"user": lambda info, id: {"id": id}},
            context={"name": "pushed"},
        )
        assert result.errors is None
        assert result.data == {"user": {"id": "1", "name": "pushed"}}
        assert seen == [{"name": "pushed"}]
        assert collected == [("User", "1")]

    def test_interface_resolve_type_receives_user_context(self, schema):
        seen = []

        def resolve_node_type(value, info, abstract_type):
            seen.append(info.context)
            return "User"

        schema.get_type("Node").resolve_type = resolve_node_type
        instrumented = instrument_schema(schema)
        result, collected = observed_execute(
            instrumented,
            '{ node(id: "1") { id } }',
            root_value={"node": lambda info, id: {"id": id}},
            context={"tenant": "acme"},
        )
        assert result.errors is None
        assert result.data == {"node": {"id": "1"}}
        assert seen == [{"tenant": "acme"}]
        assert collected == [("User", "1")]

    def test_union_resolve_type_receives_user_context(self, schema):
        seen = []

        def resolve_result_type(value, info, abstract_type):
            seen.append(info.context)
            return "Post" if "title" in value else "User"

        schema.get_type("SearchResult").resolve_type = resolve_result_type
        instrumented = instrument_schema(schema)
        result, _ = observed_execute(
            instrumented,
            '{ search(term: "x") { ... on Post { title } } }',
            root_value={"search": lambda info, term: [{"id": "p1", "title": "Hello"}]},
            context="ctx",
        )
        assert result.errors is None
        assert result.data == {"search": [{"title": "Hello"}]}
        assert seen == ["ctx"]

    def test_is_type_of_receives_user_context(self, schema):
        seen = []

        def is_user(value, info):
            seen.append(info.context)
            return "name" in value

        schema.get_type("User").is_type_of = is_user
        schema.get_type("Post").is_type_of = lambda value, info: "title" in value
        instrumented = instrument_schema(schema)
        result, _ = observed_execute(
            instrumented,
            '{ node(id: "1") { id } }',
            root_value={"node": lambda info, id: {"id": id, "name": "Ada"}},
            context={"tenant": "acme"},
        )
        assert result.errors is None
        assert result.data == {"node": {"id": "1"}}
        assert {"tenant": "acme"} in seen
        assert all(not isinstance(context, ExecutionEnvelope) for context in seen)

    def test_type_resolvers_unchanged_without_envelope(self, schema):
        def resolve_node_type(value, info, abstract_type):
            return info.context["type"]

        schema.get_type("Node").resolve_type = resolve_node_type
        instrumented = instrument_schema(schema)
        result = graphql_sync(
            instrumented,
            '{ node(id: "1") { id } }',
            root_value={"node": lambda info, id: {"id": id}},
            context_value={"type": "User"},
        )
        assert result.errors is None
        assert result.data == {"node": {"id": "1"}}

    @pytest.mark.asyncio
    async def test_async_identity_collected_after_settling(self, schema):
        async def resolve_id(source, info):
            return source["key"]

        schema.get_type("User").fields["id"].resolve = resolve_id
        instrumented = instrument_schema(schema)
        result, collected = observed_execute(
            instrumented, '{ user(id: "1") { id } }', {"user": lambda info, id: {"key": "7"}}
        )
        assert collected == []
        result = await result
        assert result.data == {"user": {"id": "7"}}
        assert collected == [("User", "7")]

    @pytest.mark.asyncio
    async def test_failing_async_identity_is_not_collected(self, schema):
        async def resolve_id(source, info):
            raise ValueError("boom")

        schema.get_type("User").fields["id"].resolve = resolve_id
        instrumented = instrument_schema(schema)
        result, collected = observed_execute(
            instrumented, '{ user(id: "1") { id } }', {"user": lambda info, id: {"id": id}}
        )
        result = await result
        assert result.data == {"user": None}
        assert "boom" in result.errors[0].message
        assert collected == []
