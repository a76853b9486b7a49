"""Document store configuration settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

StoreBackend = Literal["memory", "redis"]


class StoreSettings(BaseSettings):
    """Document store backend settings.

    Environment variables use STORE_ prefix.
    Example: STORE_BACKEND=redis, STORE_REDIS_URL="redis://localhost:6379/0"
    """

    backend: StoreBackend = Field(
        default="memory",
        description="Document store backend (memory|redis)",
    )

    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL used by the redis backend",
    )

    key_prefix: str = Field(
        default="docgraph:doc:",
        max_length=100,
        description="Prefix for document keys",
    )

    channel_prefix: str = Field(
        default="docgraph:changes:",
        max_length=100,
        description="Prefix for change-notification PubSub channels",
    )

    socket_timeout: float = Field(
        default=5.0,
        ge=0.1,
        le=60.0,
        description="Socket timeout for store connections in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @model_validator(mode="after")
    def validate_redis_url(self) -> StoreSettings:
        """Require a URL when the redis backend is selected."""
        if self.backend == "redis" and not self.redis_url:
            msg = "STORE_REDIS_URL is required when STORE_BACKEND=redis"
            raise ValueError(msg)
        return self

    @property
    def is_configured(self) -> bool:
        """Check if a networked store is configured."""
        return self.backend == "redis" and bool(self.redis_url)
