"""Document store factory.

Creates the configured store backend from StoreSettings.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docgraph.core.settings import get_store_settings
from docgraph.infra.store.memory import InMemoryDocumentStore
from docgraph.infra.store.redis import RedisDocumentStore

if TYPE_CHECKING:
    from docgraph.core.settings.store import StoreSettings
    from docgraph.infra.store.protocol import DocumentStore

logger = logging.getLogger(__name__)


def create_store(settings: StoreSettings | None = None) -> DocumentStore:
    """Create a document store for the configured backend.

    Args:
        settings: Store settings; loaded via get_store_settings() when omitted.

    Returns:
        A DocumentStore implementation.
    """
    settings = settings or get_store_settings()

    if settings.backend == "redis":
        logger.info("Using Redis document store", extra={"key_prefix": settings.key_prefix})
        return RedisDocumentStore.from_settings(settings)

    logger.info("Using in-memory document store")
    return InMemoryDocumentStore()


async def close_store(store: DocumentStore) -> None:
    """Release connections held by a store, when it has any."""
    close = getattr(store, "aclose", None)
    if close is not None:
        await close()
