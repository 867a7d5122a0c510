"""
IMDb title page scraper.

Every field is pulled through an ordered tuple of strategies; the first one
returning a usable value wins and a field nobody can find falls back to its
"unknown" sentinel instead of raising.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple, TypeVar

import requests
from bs4 import BeautifulSoup

from ..http import build_session, fetch_soup
from ..models import IMDB_BASE_URL, detail_url, parse_year_range
from ..settings import TrackerSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")
Strategy = Callable[[BeautifulSoup], Optional[T]]

HERO_SCORE_SELECTOR = '[data-testid="hero-rating-bar__aggregate-rating__score"]'
METADATA_SELECTORS = (
    '[data-testid="hero-title-block__metadata"]',
    'h1[data-testid="hero__pageTitle"] ~ ul',
)
TITLE_SELECTORS = (
    'h1[data-testid="hero-title-block__title"]',
    'h1[data-testid="hero__pageTitle"]',
    "h1",
)
TITLE_TAG_YEAR_RE = re.compile(r"\((?:TV (?:Mini )?Series\s*)?(\d{4}\s*[–-]?\s*(?:\d{4})?)\s*\)")
VOTE_COUNT_RE = re.compile(r"(\d[\d.,]*)\s*([KkMm])?")

POSTER_SIZE_RE = re.compile(r"\._V1_.*\.")
POSTER_SIZE_TOKEN = "._V1_QL75_UX280_CR0,3,280,414_."


@dataclass
class ExtractedFields:
    rating: float = 0.0
    vote_count: int = 0
    year_range: str = ""
    poster_url: str = ""


@dataclass
class TitlePage:
    external_id: str
    url: str
    title: str
    fields: ExtractedFields


def first_result(strategies: Iterable[Strategy[T]], soup: BeautifulSoup) -> Optional[T]:
    """Run strategies in order and return the first truthy value."""

    for strategy in strategies:
        value = strategy(soup)
        if value:
            return value
    return None


def normalize_poster_url(url: str) -> str:
    """Rewrite IMDb's image sizing segment so every poster renders at one size."""

    url = (url or "").strip()
    if "._V1_" in url:
        return POSTER_SIZE_RE.sub(POSTER_SIZE_TOKEN, url, count=1)
    return url


def parse_vote_count(text: str) -> int:
    match = VOTE_COUNT_RE.search(text or "")
    if not match:
        return 0
    number, suffix = match.groups()
    try:
        if suffix:
            scale = 1_000 if suffix.lower() == "k" else 1_000_000
            return int(round(float(number.replace(",", "")) * scale))
        return int(number.replace(",", "").replace(".", ""))
    except ValueError:
        return 0


def _json_ld_objects(soup: BeautifulSoup) -> Iterable[dict]:
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            payload = json.loads(script.string or script.get_text() or "")
        except (TypeError, ValueError):
            continue
        candidates = payload if isinstance(payload, list) else [payload]
        for candidate in candidates:
            if isinstance(candidate, dict):
                yield candidate


# ---------------------------------------------------------------------- #
# Rating / votes
# ---------------------------------------------------------------------- #


def _rating_from_json_ld(soup: BeautifulSoup) -> Optional[Tuple[float, int]]:
    for data in _json_ld_objects(soup):
        aggregate = data.get("aggregateRating")
        if not isinstance(aggregate, dict):
            continue
        try:
            rating = float(aggregate.get("ratingValue") or 0)
        except (TypeError, ValueError):
            continue
        if rating <= 0:
            continue
        try:
            votes = int(aggregate.get("ratingCount") or 0)
        except (TypeError, ValueError):
            votes = 0
        return rating, votes
    return None


def _rating_from_hero_score(soup: BeautifulSoup) -> Optional[Tuple[float, int]]:
    score = soup.select_one(f"{HERO_SCORE_SELECTOR} span")
    if score is None:
        return None
    try:
        rating = float(score.get_text(strip=True))
    except ValueError:
        return None
    if rating <= 0:
        return None
    return rating, _votes_from_hero(soup) or 0


def _votes_from_hero(soup: BeautifulSoup) -> Optional[int]:
    score = soup.select_one(HERO_SCORE_SELECTOR)
    if score is None:
        return None
    sibling = score.find_next_sibling("div")
    if sibling is None:
        return None
    return parse_vote_count(sibling.get_text(" ", strip=True)) or None


RATING_SOURCES: Tuple[Strategy[Tuple[float, int]], ...] = (
    _rating_from_json_ld,
    _rating_from_hero_score,
)
VOTE_SOURCES: Tuple[Strategy[int], ...] = (_votes_from_hero,)


# ---------------------------------------------------------------------- #
# Year range
# ---------------------------------------------------------------------- #


def _year_from_metadata(soup: BeautifulSoup) -> Optional[str]:
    for selector in METADATA_SELECTORS:
        block = soup.select_one(selector)
        if block is None:
            continue
        # Look at list items one by one so a rating badge such as "TV-MA" is
        # never read as the dash of an ongoing year range.
        items = block.find_all("li") or [block]
        for item in items:
            value = parse_year_range(item.get_text(" ", strip=True))
            if value:
                return value
    return None


def _year_from_title_tag(soup: BeautifulSoup) -> Optional[str]:
    if soup.title is None:
        return None
    match = TITLE_TAG_YEAR_RE.search(soup.title.get_text())
    if not match:
        return None
    return parse_year_range(match.group(1)) or None


YEAR_SOURCES: Tuple[Strategy[str], ...] = (_year_from_metadata, _year_from_title_tag)


# ---------------------------------------------------------------------- #
# Poster
# ---------------------------------------------------------------------- #


def _poster_from_gallery(soup: BeautifulSoup) -> Optional[str]:
    image = soup.select_one("img.ipc-image[srcset]")
    return image.get("src") if image else None


def _poster_from_social_preview(soup: BeautifulSoup) -> Optional[str]:
    meta = soup.select_one('meta[property="og:image"]')
    return meta.get("content") if meta else None


def _poster_from_media_container(soup: BeautifulSoup) -> Optional[str]:
    image = soup.select_one(".ipc-media img")
    return image.get("src") if image else None


POSTER_SOURCES: Tuple[Strategy[str], ...] = (
    _poster_from_gallery,
    _poster_from_social_preview,
    _poster_from_media_container,
)


# ---------------------------------------------------------------------- #
# Displayed title
# ---------------------------------------------------------------------- #


def _text_of(selector: str) -> Strategy[str]:
    def _extract(soup: BeautifulSoup) -> Optional[str]:
        node = soup.select_one(selector)
        return node.get_text(" ", strip=True) if node else None

    return _extract


TITLE_SOURCES: Tuple[Strategy[str], ...] = tuple(_text_of(selector) for selector in TITLE_SELECTORS)


def extract_fields(soup: BeautifulSoup) -> ExtractedFields:
    fields = ExtractedFields()

    rating = first_result(RATING_SOURCES, soup)
    if rating:
        fields.rating, fields.vote_count = rating
    else:
        logger.debug("No rating found on page")
    if not fields.vote_count:
        fields.vote_count = first_result(VOTE_SOURCES, soup) or 0

    fields.year_range = first_result(YEAR_SOURCES, soup) or ""
    fields.poster_url = normalize_poster_url(first_result(POSTER_SOURCES, soup) or "")
    if not fields.poster_url:
        logger.debug("No poster found on page")
    return fields


def parse_title_page(
    document: BeautifulSoup | str, *, external_id: str = "", url: str = ""
) -> TitlePage:
    """Parse an already-fetched title page."""

    soup = document if isinstance(document, BeautifulSoup) else BeautifulSoup(document, "html.parser")
    title = first_result(TITLE_SOURCES, soup) or ""
    return TitlePage(external_id=external_id, url=url, title=title, fields=extract_fields(soup))


class TitlePageExtractor:
    """Fetches IMDb detail pages and extracts the tracked fields."""

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
    ) -> "TitlePageExtractor":
        return cls(
            session or build_session(settings),
            base_url=settings.base_url,
            timeout=settings.request_timeout,
        )

    def url_for(self, external_id: str) -> str:
        return detail_url(external_id, self.base_url)

    def fetch_page(self, external_id: str) -> TitlePage:
        """Fetch and parse one detail page; raises ``FetchFailure`` when unreachable."""

        url = self.url_for(external_id)
        soup = fetch_soup(self.session, url, timeout=self.timeout)
        return parse_title_page(soup, external_id=external_id, url=url)

    def fetch(self, external_id: str) -> ExtractedFields:
        return self.fetch_page(external_id).fields
