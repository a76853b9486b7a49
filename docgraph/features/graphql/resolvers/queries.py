"""Query resolvers for generated by-id lookups.

Provides one read operation per entity:
- {entity}(id): Get a single document by id, or null when it does not exist
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from docgraph.features.graphql.context import get_store
from docgraph.features.graphql.utils import merge_id, store_errors

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from graphql import GraphQLResolveInfo

logger = logging.getLogger(__name__)


def make_get_resolver(collection: str) -> Callable[..., Awaitable[dict[str, Any] | None]]:
    """Build the by-id resolver for one collection.

    Args:
        collection: Entity name, used as the store collection.

    Returns:
        Async resolver returning ``{id, ...attributes}`` or None.
    """

    async def resolve_get(
        _root: Any,
        info: GraphQLResolveInfo,
        id: str | None = None,
    ) -> dict[str, Any] | None:
        if id is None:
            return None

        store = get_store(info)
        with store_errors("get_document", collection, id):
            document = await store.get_document(collection, id)

        if document is None:
            logger.debug(
                "Document not found",
                extra={"collection": collection, "document_id": id},
            )
            return None
        return merge_id(id, document)

    resolve_get.__name__ = f"resolve_{collection.lower()}"
    return resolve_get


__all__ = ["make_get_resolver"]
