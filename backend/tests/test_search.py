"""Tests for the IMDb search scraper."""
from __future__ import annotations

import sys
from pathlib import Path

import requests

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.tracker.scrapers.search import SearchResolver, parse_external_id  # noqa: E402


class StubResponse:
    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text


class StubSession:
    def __init__(self, response: StubResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, dict | None]] = []

    def get(self, url: str, params: dict | None = None, timeout: float | None = None) -> StubResponse:
        self.calls.append((url, params))
        if self.error:
            raise self.error
        assert self.response is not None
        return self.response


RESULTS_PAGE = """
<html><body>
<ul>
  <li class="ipc-metadata-list-summary-item">
    <a class="ipc-metadata-list-summary-item__t" href="/title/tt11280740/?ref_=fn_tt_tt_1">Severance</a>
  </li>
  <li class="ipc-metadata-list-summary-item">
    <a class="ipc-metadata-list-summary-item__t" href="/title/tt0000002/?ref_=fn_tt_tt_2">Severance Pay</a>
  </li>
</ul>
</body></html>
"""

LEGACY_RESULTS_PAGE = """
<html><body>
<table><tr class="find-result-item"><td><a href="/name/nm0000001/">Someone</a>
<a href="/title/tt2249364/">Broadchurch</a></td></tr></table>
</body></html>
"""


def test_parse_external_id_extracts_identifier() -> None:
    assert parse_external_id("/title/tt0944947/?ref_=fn") == "tt0944947"
    assert parse_external_id("/name/nm0000001/") is None


def test_resolve_returns_first_tv_result_and_sends_query() -> None:
    session = StubSession(StubResponse(text=RESULTS_PAGE))
    resolver = SearchResolver(session, base_url="https://imdb.test")  # type: ignore[arg-type]

    external_id = resolver.resolve("Severance", "2022")

    assert external_id == "tt11280740"
    url, params = session.calls[0]
    assert url == "https://imdb.test/find"
    assert params == {"q": "Severance 2022", "s": "tt", "ttype": "tv"}


def test_resolve_skips_non_title_links_in_older_markup() -> None:
    session = StubSession(StubResponse(text=LEGACY_RESULTS_PAGE))

    assert SearchResolver(session).resolve("Broadchurch") == "tt2249364"  # type: ignore[arg-type]


def test_resolve_returns_none_without_results() -> None:
    session = StubSession(StubResponse(text="<html><body><p>No results</p></body></html>"))

    assert SearchResolver(session).resolve("Nothing Like This") is None  # type: ignore[arg-type]


def test_resolve_returns_none_when_search_fails() -> None:
    session = StubSession(error=requests.ConnectionError("offline"))

    assert SearchResolver(session).resolve("Severance") is None  # type: ignore[arg-type]
