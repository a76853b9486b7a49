"""docgraph: GraphQL API synthesis over a document store.

Declare entities, get a Query/Mutation/Subscription schema whose resolvers
read, write and watch documents through a narrow store interface.
"""

from __future__ import annotations

from typing import Any

__version__ = "0.1.0"

__all__ = ["StoreContext", "build_schema", "build_schema_from_sdl", "execute"]


def __getattr__(name: str) -> Any:
    if name in ("build_schema", "build_schema_from_sdl"):
        from docgraph.features.graphql import schema as schema_module

        return getattr(schema_module, name)
    if name == "execute":
        from docgraph.features.graphql.executor import execute

        return execute
    if name == "StoreContext":
        from docgraph.features.graphql.context import StoreContext

        return StoreContext
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
