"""Runtime configuration for the series tracker."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrackerSettings(BaseSettings):
    """Environment-aware settings shared by the CLI, the engine and the API."""

    data_path: str = Field(
        default="./data/all.json", description="JSON file holding the tracked series."
    )
    base_url: str = Field(
        default="https://www.imdb.com", description="Base URL of the metadata source."
    )
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        description="Browser user agent sent with every scrape request.",
    )
    accept_language: str = Field(
        default="en-US,en;q=0.9", description="Accept-Language header for scrape requests."
    )
    request_timeout: float = Field(
        default=20.0, description="Per-request timeout in seconds."
    )
    request_delay: float = Field(
        default=0.6,
        ge=0.0,
        description="Pause in seconds after every external call during reconciliation passes.",
    )
    refresh_delay: float = Field(
        default=0.4,
        ge=0.0,
        description="Pause in seconds after every external call during rating refreshes.",
    )
    rules_path: str | None = Field(
        default=None,
        description="Optional JSON file extending the built-in correction tables.",
    )
    api_host: str = Field(default="0.0.0.0", description="Bind address for the query API.")
    api_port: int = Field(default=8000, description="Port for the query API.")

    model_config = SettingsConfigDict(
        env_prefix="TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
    )
