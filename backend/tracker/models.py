"""Series record model and year-range helpers."""
from __future__ import annotations

import re
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, computed_field

Platform = Literal["netflix", "amazon", "apple", "hbo"]
PLATFORMS: tuple[str, ...] = get_args(Platform)

IMDB_BASE_URL = "https://www.imdb.com"
EN_DASH = "–"
YEAR_DASHES = (EN_DASH, "-")

YEAR_RANGE_RE = re.compile(r"(?P<start>\d{4})\s*(?P<dash>[–-])?\s*(?P<end>\d{4})?")
FIRST_YEAR_RE = re.compile(r"\d{4}")


def detail_url(external_id: str, base_url: str = IMDB_BASE_URL) -> str:
    """Return the canonical detail page URL for an identifier."""

    return f"{base_url.rstrip('/')}/title/{external_id}/"


def is_ongoing(year_range: str) -> bool:
    """A trailing dash with nothing after it marks a series that has not ended."""

    value = (year_range or "").strip()
    return bool(value) and value.endswith(YEAR_DASHES)


def first_year(year_range: str) -> int | None:
    match = FIRST_YEAR_RE.search(year_range or "")
    return int(match.group(0)) if match else None


def format_year_range(start: str, end: str | None = None, *, ongoing: bool = False) -> str:
    if end:
        return f"{start}{EN_DASH}{end}"
    if ongoing:
        return f"{start}{EN_DASH}"
    return start


def parse_year_range(text: str) -> str:
    """Parse ``2017``, ``2017–2023`` or ``2017–`` out of free text.

    A single year followed by a dash is treated as an ongoing series.
    Returns an empty string when no year is present.
    """

    match = YEAR_RANGE_RE.search(text or "")
    if not match:
        return ""
    return format_year_range(
        match.group("start"),
        match.group("end"),
        ongoing=match.group("dash") is not None,
    )


class SeriesRecord(BaseModel):
    """One tracked series as persisted in the dataset file."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    external_id: str = Field(alias="id", min_length=1, description="IMDb title identifier.")
    title: str = Field(min_length=1)
    year_range: str = Field(default="", alias="year")
    rating: float = Field(default=0.0, ge=0.0, le=10.0, description="0 means not yet fetched.")
    vote_count: int = Field(default=0, ge=0, alias="votes")
    poster_url: str = Field(default="", alias="poster")
    platform: Platform

    @computed_field(alias="imdbUrl")  # type: ignore[prop-decorator]
    @property
    def detail_url(self) -> str:
        return detail_url(self.external_id)

    @property
    def ongoing(self) -> bool:
        return is_ongoing(self.year_range)

    @property
    def start_year(self) -> int:
        return first_year(self.year_range) or 0

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
