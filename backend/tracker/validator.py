"""Checks that an identifier points at the series we expect."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .errors import FetchFailure
from .scrapers.title_page import ExtractedFields, TitlePageExtractor

logger = logging.getLogger(__name__)

NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def titles_match(observed: str, expected: str) -> bool:
    """Tolerant comparison of a page title against an expected series title.

    IMDb renders subtitles, punctuation and trailing qualifiers
    inconsistently, so any of containment in either direction, plain
    case-insensitive equality or equality after dropping punctuation counts.
    """

    observed_lower = (observed or "").strip().lower()
    expected_lower = (expected or "").strip().lower()
    if not observed_lower or not expected_lower:
        return False
    if expected_lower in observed_lower or observed_lower in expected_lower:
        return True
    if observed_lower == expected_lower:
        return True
    return NON_ALNUM_RE.sub("", observed_lower) == NON_ALNUM_RE.sub("", expected_lower)


@dataclass
class ValidationResult:
    external_id: str
    valid: bool
    observed_title: str = ""
    poster_url: str = ""
    fields: ExtractedFields = field(default_factory=ExtractedFields)
    reachable: bool = True


class IdentifierValidator:
    """Fetches a detail page and compares its displayed title."""

    def __init__(self, extractor: TitlePageExtractor) -> None:
        self.extractor = extractor

    def validate(self, external_id: str, expected_title: str) -> ValidationResult:
        try:
            page = self.extractor.fetch_page(external_id)
        except FetchFailure as exc:
            logger.warning("Could not validate %s: %s", external_id, exc)
            return ValidationResult(external_id=external_id, valid=False, reachable=False)

        return ValidationResult(
            external_id=external_id,
            valid=titles_match(page.title, expected_title),
            observed_title=page.title,
            poster_url=page.fields.poster_url,
            fields=page.fields,
        )
