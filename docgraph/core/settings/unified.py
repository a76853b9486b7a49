"""Unified settings composition for convenient access.

Usage:
    from docgraph.core.settings import get_settings

    settings = get_settings()
    print(settings.app.environment)
    print(settings.store.backend)

Each nested settings class still respects its own env prefix.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field

from .app import AppSettings
from .graphql import GraphQLSettings
from .logs import LoggingSettings
from .store import StoreSettings


class Settings(BaseModel):
    """All settings domains in one object."""

    app: AppSettings = Field(default_factory=AppSettings)
    graphql: GraphQLSettings = Field(default_factory=GraphQLSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = ConfigDict(frozen=True)

    @property
    def environment(self) -> str:
        """Shortcut for the application environment."""
        return self.app.environment


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached unified settings."""
    return Settings()
