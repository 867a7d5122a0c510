"""Pydantic models exposed by the tracker API."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from backend.tracker.models import SeriesRecord


class HealthStatus(BaseModel):
    """Service health payload."""

    status: Literal["ok"] = Field(default="ok")
    version: str = Field(default="0.1.0", description="Semantic version of the API service.")


class SeriesListModel(BaseModel):
    """Result of a series query."""

    success: bool = Field(default=True)
    count: int = Field(description="Number of series in this response.")
    platform: str = Field(description="Platform filter that was applied, or 'all'.")
    series: list[SeriesRecord]


class SeriesMetricsModel(BaseModel):
    """Aggregate statistics over the stored collection."""

    total: int = Field(description="Total number of tracked series.")
    platform_counts: dict[str, int] = Field(
        default_factory=dict, description="Number of series per platform."
    )
    unrated: int = Field(description="Series whose rating has not been fetched yet.")
    ongoing: int = Field(description="Series whose year range is still open.")
    missing_posters: int = Field(description="Series without a poster URL.")
