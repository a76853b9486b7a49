"""GraphQL schemas generated from entity declarations.

This module builds a graphql-core schema per declaration set with:
- A by-id query, a create mutation and a change subscription per entity
- A relation-linking mutation per object-valued field
- Resolvers bound to a document store through the operation context
- Shared, reference-counted store listeners for subscriptions
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "StoreContext",
    "StoreLink",
    "StoreSchema",
    "build_schema",
    "build_schema_from_sdl",
    "execute",
]


def __getattr__(name: str) -> Any:
    if name in ("StoreSchema", "build_schema", "build_schema_from_sdl"):
        from docgraph.features.graphql import schema

        return getattr(schema, name)
    if name == "execute":
        from docgraph.features.graphql.executor import execute

        return execute
    if name == "StoreContext":
        from docgraph.features.graphql.context import StoreContext

        return StoreContext
    if name == "StoreLink":
        from docgraph.features.graphql.link import StoreLink

        return StoreLink
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
