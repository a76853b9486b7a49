"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docgraph.core.settings import get_graphql_settings
from docgraph.features.graphql.router import create_graphql_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from docgraph.core.settings.graphql import GraphQLSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, graphql_settings: GraphQLSettings | None = None) -> None:
    """Register all feature routers with the application.

    Args:
        app: FastAPI application instance.
        graphql_settings: Optional override controlling GraphQL availability.
    """
    graphql_settings = graphql_settings or get_graphql_settings()

    if graphql_settings.enabled:
        app.include_router(create_graphql_router(graphql_settings))
        logger.info("GraphQL endpoint enabled", extra={"path": graphql_settings.path})
    else:
        logger.info("GraphQL endpoint disabled")
