"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from docgraph.app.lifespan import lifespan
from docgraph.app.router import setup_routers
from docgraph.core.settings import get_settings


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Uses unified settings from core.settings for all configuration.
    Settings are loaded once and cached via LRU cache.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    app_settings = settings.app

    app = FastAPI(
        title=app_settings.title,
        version=app_settings.version,
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    setup_routers(app, settings.graphql)

    return app
