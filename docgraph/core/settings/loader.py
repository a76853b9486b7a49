"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Usage:
    from docgraph.core.settings.loader import get_graphql_settings

    settings = get_graphql_settings()  # First call: loads and validates
    settings = get_graphql_settings()  # Subsequent calls: returns cached instance

Testing:
    In tests, clear the cache to force reload:
    get_graphql_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .graphql import GraphQLSettings
from .logs import LoggingSettings
from .store import StoreSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings.

    Returns:
        Validated and frozen AppSettings instance.
    """
    return AppSettings()


@lru_cache(maxsize=1)
def get_graphql_settings() -> GraphQLSettings:
    """Get cached GraphQL engine settings.

    Returns:
        Validated and frozen GraphQLSettings instance.
    """
    return GraphQLSettings()


@lru_cache(maxsize=1)
def get_store_settings() -> StoreSettings:
    """Get cached document store settings.

    Returns:
        Validated and frozen StoreSettings instance.
    """
    return StoreSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


def clear_all_caches() -> None:
    """Clear every settings cache. Intended for tests."""
    get_app_settings.cache_clear()
    get_graphql_settings.cache_clear()
    get_store_settings.cache_clear()
    get_logging_settings.cache_clear()
    from .unified import get_settings

    get_settings.cache_clear()
