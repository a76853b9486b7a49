"""GraphQL engine configuration settings.

Controls the generated endpoint, the marker directive used to route
operations to the engine, subscriptions, and the declaration source.
Environment variables use GRAPHQL_ prefix.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GraphQLSettings(BaseSettings):
    """GraphQL engine configuration.

    Environment variables use GRAPHQL_ prefix.
    Example: GRAPHQL_ENABLED=true, GRAPHQL_DECLARATIONS_PATH=schema.graphql
    """

    # Enable/disable GraphQL
    enabled: bool = Field(
        default=True,
        description="Enable GraphQL endpoint",
    )

    # Endpoint configuration
    path: str = Field(
        default="/graphql",
        min_length=1,
        max_length=255,
        pattern=r"^/.*$",
        description="GraphQL endpoint path",
    )

    # Routing marker
    marker_directive: str = Field(
        default="store",
        min_length=1,
        max_length=64,
        pattern=r"^[_A-Za-z][_0-9A-Za-z]*$",
        description="Directive that marks an operation as destined for the document store",
    )

    # Entity declarations (SDL) loaded at startup
    declarations_path: Path | None = Field(
        default=None,
        description="Path to the SDL file holding entity declarations",
    )

    # Subscriptions
    subscriptions_enabled: bool = Field(
        default=True,
        description="Enable GraphQL subscriptions (Server-Sent Events)",
    )
    subscription_keepalive_interval: float = Field(
        default=15.0,
        ge=1.0,
        le=300.0,
        description="Keepalive comment interval for subscription streams in seconds",
    )

    # Introspection (security)
    introspection_enabled: bool = Field(
        default=True,
        description="Expose the generated SDL at {path}/schema",
    )

    model_config = SettingsConfigDict(
        env_prefix="GRAPHQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @field_validator("path")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the endpoint path so sub-routes join cleanly."""
        return v.rstrip("/") or "/"

    @property
    def is_configured(self) -> bool:
        """Check if GraphQL is enabled and has declarations to serve."""
        return self.enabled and self.declarations_path is not None
