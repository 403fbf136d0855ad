"""
Live users - minimal live query example.

Registers a live query, renames a user through a mutation and lets the
store push the updated result.

Usage:
    python example/live_users/main.py
"""

import asyncio
import logging

from graphql import build_schema, graphql, parse

from livequery import InMemoryLiveQueryStore, load_config

logging.basicConfig(level=logging.DEBUG)

schema = build_schema(
    """
    directive @live(if: Boolean = true) on QUERY

    type User {
      id: ID!
      name: String
    }

    type Query {
      user(id: ID!): User
    }

    type Mutation {
      renameUser(id: ID!, name: String!): User
    }
    """
)

users = {"1": {"id": "1", "name": "Ada"}}


async def main():
    store = InMemoryLiveQueryStore(load_config("livequery.yaml"))

    async def rename_user(info, id, name):
        users[id]["name"] = name
        await store.trigger_update(f"User:{id}")
        return users[id]

    root_value = {
        "user": lambda info, id: users.get(id),
        "renameUser": rename_user,
    }

    unsubscribe = store.register(
        schema,
        parse('query @live { user(id: "1") { id name } }'),
        publish_update=lambda result: print("live update:", result.data),
        root_value=root_value,
    )

    await graphql(schema, 'mutation { renameUser(id: "1", name: "Ada Lovelace") { id } }', root_value)

    unsubscribe()
    store.close()


if __name__ == "__main__":
    asyncio.run(main())
