"""Centralized application configuration."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EXPLORER_", env_file=".env", extra="ignore"
    )

    # Graph store connection (candidate URIs are tried in order)
    neo4j_uris: list[str] = Field(
        default_factory=lambda: [
            "neo4j://localhost:7687",
            "bolt://localhost:7687",
            "neo4j://127.0.0.1:7687",
            "bolt://127.0.0.1:7687",
        ]
    )
    neo4j_user: str = "neo4j"
    neo4j_password: str = ""
    neo4j_connection_timeout: float = 5.0

    # Minimum seconds between connection attempts
    connect_min_interval: float = 5.0

    # Query limits
    expand_limit: int = 20
    overview_node_limit: int = 50
    overview_star_limit: int = 10

    # Question-answering service
    qa_endpoint: str = "http://localhost:8010/query"
    qa_username: str | None = None
    qa_password: str | None = None
    qa_timeout: float | None = None  # None waits for the response

    # Query resolution
    default_center_id: str = "content_guidelines"

    # Layout
    root_node_type: str = "Category"
    canvas_width: float = 800.0
    canvas_height: float = 600.0
    layout_tier_offset: float = 200.0
    layout_child_spacing: float = 120.0
    layout_max_row_spacing: float | None = 300.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
