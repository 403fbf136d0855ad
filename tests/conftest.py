"""
Pytest configuration and fixtures for livequery tests.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from graphql import build_schema

SDL = """
directive @live(if: Boolean = true) on QUERY

interface Node {
  id: ID!
}

type User implements Node {
  id: ID!
  name: String
  friends: [User!]!
}

type Post {
  id: ID!
  title: String
}

union SearchResult = User | Post

type Query {
  user(id: ID!): User
  users: [User!]!
  node(id: ID!): Node
  search(term: String!): [SearchResult!]!
}

type Mutation {
  renameUser(id: ID!, name: String!): User
}
"""


class ControlledResolver:
    """Async resolver whose calls only complete when the test releases them."""

    def __init__(self):
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, info, **args):
        call = {"event": asyncio.Event(), "value": None, "args": args}
        self.calls.append(call)
        await call["event"].wait()
        return call["value"]

    def release(self, index: int, value: Any) -> None:
        call = self.calls[index]
        call["value"] = value
        call["event"].set()


async def settle(rounds: int = 20) -> None:
    """Let pending tasks and callbacks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def sdl():
    """Schema definition shared by the tests."""
    return SDL


@pytest.fixture
def schema():
    """Schema without custom resolvers; data comes from root_value."""
    return build_schema(SDL)


@pytest.fixture
def users():
    """Mutable user table."""
    return {
        "1": {"id": "1", "name": "Ada", "friend_ids": ["2"]},
        "2": {"id": "2", "name": "Grace", "friend_ids": []},
    }


@pytest.fixture
def root_value(users):
    """Root resolvers backed by the users table."""

    def to_user(row):
        return {
            "__typename": "User",
            "id": row["id"],
            "name": row["name"],
            "friends": lambda info: [to_user(users[i]) for i in row["friend_ids"]],
        }

    def user(info, id):
        row = users.get(id)
        return to_user(row) if row else None

    return {
        "user": user,
        "users": lambda info: [to_user(row) for row in users.values()],
        "node": user,
        "search": lambda info, term: [
            to_user(row) for row in users.values() if term.lower() in row["name"].lower()
        ] + [{"__typename": "Post", "id": "p1", "title": f"About {term}"}],
    }


@pytest.fixture
def controlled():
    """Async resolver released step by step by the test."""
    return ControlledResolver()


@pytest.fixture
def wait():
    """Coroutine function that lets pending tasks run."""
    return settle
