"""
IMDb search scraper resolving free-text titles to title identifiers.
"""
from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

import requests
from bs4 import BeautifulSoup

from ..errors import FetchFailure
from ..http import build_session, fetch_soup
from ..models import IMDB_BASE_URL
from ..settings import TrackerSettings

logger = logging.getLogger(__name__)

TITLE_PATH_RE = re.compile(r"/title/(tt\d+)")

# Ordered from the current result list markup down to any title link at all.
RESULT_LINK_SELECTORS: Tuple[str, ...] = (
    ".ipc-metadata-list-summary-item__t",
    ".ipc-metadata-list-summary-item__link",
    ".find-result-item a",
    'a[href*="/title/tt"]',
)


def parse_external_id(href: str) -> Optional[str]:
    match = TITLE_PATH_RE.search(href or "")
    return match.group(1) if match else None


def first_result_id(soup: BeautifulSoup) -> Optional[str]:
    """Return the identifier of the first search hit, trying each selector in turn."""

    for selector in RESULT_LINK_SELECTORS:
        for link in soup.select(selector):
            external_id = parse_external_id(link.get("href", ""))
            if external_id:
                return external_id
    return None


class SearchResolver:
    """Best-effort, first-match lookup against the TV-series search endpoint."""

    def __init__(
        self,
        session: requests.Session,
        *,
        base_url: str = IMDB_BASE_URL,
        timeout: float = 20.0,
    ) -> None:
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(
        cls, settings: TrackerSettings, session: requests.Session | None = None
    ) -> "SearchResolver":
        return cls(
            session or build_session(settings),
            base_url=settings.base_url,
            timeout=settings.request_timeout,
        )

    @staticmethod
    def build_query(title: str, year_hint: str | int | None = None) -> str:
        title = title.strip()
        return f"{title} {year_hint}" if year_hint else title

    def resolve(self, title: str, year_hint: str | int | None = None) -> Optional[str]:
        """Return the first TV-series identifier for ``title`` or ``None`` when nothing matches."""

        query = self.build_query(title, year_hint)
        url = f"{self.base_url}/find"
        try:
            soup = fetch_soup(
                self.session,
                url,
                params={"q": query, "s": "tt", "ttype": "tv"},
                timeout=self.timeout,
            )
        except FetchFailure as exc:
            logger.warning("Search for %r failed: %s", query, exc)
            return None

        external_id = first_result_id(soup)
        if external_id is None:
            logger.info("Search for %r returned no usable result", query)
        return external_id
