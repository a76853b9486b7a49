"""Modular Pydantic Settings v2 configuration.

Import settings via cached loaders:
    from docgraph.core.settings import get_graphql_settings

Or use unified settings for access to all domains:
    from docgraph.core.settings import get_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from .app import AppSettings
from .graphql import GraphQLSettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_graphql_settings,
    get_logging_settings,
    get_store_settings,
)
from .logs import LoggingSettings
from .store import StoreSettings
from .unified import Settings, get_settings

__all__ = [
    "AppSettings",
    "GraphQLSettings",
    "LoggingSettings",
    "Settings",
    "StoreSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_graphql_settings",
    "get_logging_settings",
    "get_settings",
    "get_store_settings",
]
