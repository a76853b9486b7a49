"""Pytest configuration and shared fixtures.

Organization:
    - Environment: settings that keep tests free of external services
    - Store Fixtures: in-memory document store
    - Schema Fixtures: declarations and generated schemas
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

# Ensure tests run without external infrastructure
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_CONSOLE_ENABLED", "false")
os.environ.pop("GRAPHQL_DECLARATIONS_PATH", None)

PEOPLE_SDL = """
type Person {
    id: ID!
    name: String!
    age: Int
    friends: [Person!]
    employer: Company
}

type Company {
    id: ID!
    name: String!
    employees: [Person]
}
"""


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Iterator[None]:
    """Reset cached settings so environment patches take effect."""
    from docgraph.core.settings import clear_all_caches

    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def store():
    """Empty in-memory document store."""
    from docgraph.infra.store.memory import InMemoryDocumentStore

    return InMemoryDocumentStore()


# ============================================================================
# Schema Fixtures
# ============================================================================


@pytest.fixture
def people_sdl() -> str:
    """SDL declaring self- and mutually-referencing entities."""
    return PEOPLE_SDL


@pytest.fixture
def people_schema(people_sdl: str):
    """Schema generated from the people declarations."""
    from docgraph.features.graphql.schema import build_schema_from_sdl

    return build_schema_from_sdl(people_sdl)


@pytest.fixture
def declarations_file(tmp_path, people_sdl: str):
    """People declarations written to a temporary file."""
    path = tmp_path / "people.graphql"
    path.write_text(people_sdl, encoding="utf-8")
    return path
