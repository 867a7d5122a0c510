"""Tests for identifier validation."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.tracker.errors import FetchFailure  # noqa: E402
from backend.tracker.scrapers.title_page import ExtractedFields, TitlePage  # noqa: E402
from backend.tracker.validator import IdentifierValidator, titles_match  # noqa: E402


class StubExtractor:
    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages

    def fetch_page(self, external_id: str) -> TitlePage:
        if external_id not in self.pages:
            raise FetchFailure(f"https://imdb.test/title/{external_id}/", "HTTP 404", status_code=404)
        return TitlePage(
            external_id=external_id,
            url=f"https://imdb.test/title/{external_id}/",
            title=self.pages[external_id],
            fields=ExtractedFields(rating=8.1, vote_count=5000, poster_url="poster.jpg"),
        )


@pytest.mark.parametrize(
    ("observed", "expected"),
    [
        ("Bosch: Legacy (TV Series)", "Bosch: Legacy"),
        ("Legacy", "Bosch: Legacy"),
        ("SEVERANCE", "Severance"),
        ("Schmigadoon", "Schmigadoon!"),
        ("Mr & Mrs Smith", "Mr. & Mrs. Smith"),
    ],
)
def test_titles_match_is_tolerant(observed: str, expected: str) -> None:
    assert titles_match(observed, expected)


@pytest.mark.parametrize(
    ("observed", "expected"),
    [("The Crown", "Bosch: Legacy"), ("", "Bosch"), ("Bosch", "")],
)
def test_titles_match_rejects_unrelated_or_empty(observed: str, expected: str) -> None:
    assert not titles_match(observed, expected)


def test_validate_reports_page_details() -> None:
    validator = IdentifierValidator(StubExtractor({"tt0001": "Bosch: Legacy (TV Series)"}))  # type: ignore[arg-type]

    result = validator.validate("tt0001", "Bosch: Legacy")

    assert result.valid is True
    assert result.observed_title == "Bosch: Legacy (TV Series)"
    assert result.poster_url == "poster.jpg"
    assert result.fields.rating == pytest.approx(8.1)


def test_validate_treats_unreachable_page_as_invalid() -> None:
    validator = IdentifierValidator(StubExtractor({}))  # type: ignore[arg-type]

    result = validator.validate("tt0404", "Bosch")

    assert result.valid is False
    assert result.reachable is False
