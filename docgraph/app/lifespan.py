"""Application lifespan management.

Startup Order:
1. Core (logging) - always runs first
2. Document store - backend chosen by StoreSettings
3. GraphQL schema - built from the declarations file, when configured

Shutdown Order: Reverse of startup (open subscriptions end before the store
closes).
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from docgraph.core.settings import (
    get_app_settings,
    get_graphql_settings,
    get_logging_settings,
)
from docgraph.features.graphql.schema import build_schema_from_sdl
from docgraph.infra.logging.config import setup_logging
from docgraph.infra.store.factory import close_store, create_store

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

    from docgraph.core.settings import GraphQLSettings
    from docgraph.features.graphql.schema import StoreSchema

logger = logging.getLogger(__name__)


def load_schema(settings: GraphQLSettings | None = None) -> StoreSchema | None:
    """Build the schema from the configured declarations file.

    Returns:
        The schema, or None when GraphQL is disabled or no file is configured.

    Raises:
        DeclarationError: If the declarations are invalid.
        OSError: If the file cannot be read.
    """
    settings = settings or get_graphql_settings()
    if not settings.is_configured:
        logger.warning("GraphQL declarations not configured, schema not built")
        return None

    source = settings.declarations_path.read_text(encoding="utf-8")
    schema = build_schema_from_sdl(source, directive_name=settings.marker_directive)
    logger.info(
        "Loaded entity declarations",
        extra={"path": str(settings.declarations_path), "entities": len(schema.bindings)},
    )
    return schema


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start and stop the store and schema around the application's lifetime."""
    app_settings = get_app_settings()
    setup_logging(log_settings=get_logging_settings(), force=True)
    logger.info(
        "Application starting",
        extra={"service": app_settings.service_name, "environment": app_settings.environment},
    )

    schema = load_schema()
    store = create_store()
    app.state.store = store
    app.state.store_schema = schema

    try:
        yield
    finally:
        if schema is not None:
            await schema.pubsub.close()
        await close_store(store)
        logger.info("Application stopped", extra={"service": app_settings.service_name})
