"""HTTP plumbing shared by the IMDb scrapers."""
from __future__ import annotations

import logging
import time
from typing import Callable, Dict

import requests
from bs4 import BeautifulSoup

from .errors import FetchFailure
from .settings import TrackerSettings

logger = logging.getLogger(__name__)


def request_headers(settings: TrackerSettings) -> Dict[str, str]:
    # IMDb serves reduced markup to clients it does not recognise as browsers.
    return {
        "User-Agent": settings.user_agent,
        "Accept-Language": settings.accept_language,
        "Accept": "text/html,application/xhtml+xml",
    }


def build_session(settings: TrackerSettings) -> requests.Session:
    """Return a requests session carrying browser-like default headers."""

    session = requests.Session()
    session.headers.update(request_headers(settings))
    return session


def fetch_soup(
    session: requests.Session,
    url: str,
    *,
    params: Dict[str, str] | None = None,
    timeout: float = 20.0,
) -> BeautifulSoup:
    """GET ``url`` and parse the body, raising ``FetchFailure`` on any transport problem."""

    logger.debug("GET %s %s", url, params or "")
    try:
        response = session.get(url, params=params, timeout=timeout)
    except requests.RequestException as exc:
        raise FetchFailure(url, f"request failed: {exc}") from exc
    if not 200 <= response.status_code < 300:
        raise FetchFailure(url, f"HTTP {response.status_code}", status_code=response.status_code)
    text = response.text or ""
    if not text.strip():
        raise FetchFailure(url, "empty document", status_code=response.status_code)
    return BeautifulSoup(text, "html.parser")


class Throttle:
    """Fixed pause enforced after every external call."""

    def __init__(self, delay: float, *, sleep: Callable[[float], None] = time.sleep) -> None:
        self.delay = max(delay, 0.0)
        self._sleep = sleep
        self.calls = 0

    def pause(self) -> None:
        self.calls += 1
        if self.delay:
            self._sleep(self.delay)
