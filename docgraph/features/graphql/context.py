"""GraphQL context for request-scoped dependencies.

The context is created fresh for each operation and provides:
- Document store (for every generated resolver)
- Incoming request (optional, when served over HTTP)
- Correlation ID (for distributed tracing)

Plain mappings with a ``"store"`` key are accepted as well, so callers that
only need to bind a store can pass ``{"store": store}``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from docgraph.core.exceptions import DocGraphError

if TYPE_CHECKING:
    from graphql import GraphQLResolveInfo
    from starlette.requests import Request

    from docgraph.infra.store.protocol import DocumentStore


@dataclass
class StoreContext:
    """Request context for generated resolvers.

    Example usage in a resolver:
        async def resolve(root, info, id=None):
            store = get_store(info)
            return await store.get_document("Person", id)
    """

    store: DocumentStore
    request: Request | None = None
    correlation_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


def get_store(info: GraphQLResolveInfo) -> DocumentStore:
    """Return the document store bound to the executing operation.

    Raises:
        DocGraphError: If the context carries no store.
    """
    context = info.context
    if isinstance(context, Mapping):
        store = context.get("store")
    else:
        store = getattr(context, "store", None)
    if store is None:
        raise DocGraphError(
            detail="No document store bound to the operation context",
            code="CONTEXT_ERROR",
        )
    return store


__all__ = ["StoreContext", "get_store"]
