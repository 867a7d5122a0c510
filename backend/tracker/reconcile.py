"""
Reconciliation passes over the stored series collection.

Every mode loads the store, walks a subset of records through one shared
loop and rewrites the file once at the end. A failure on one record is
logged and reported but never stops the pass; an interrupted pass writes
nothing, so the file on disk stays as it was.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

import requests

from .corrections import IDENTIFIER_RULES
from .curation import CorrectionTable, Reidentify, by_identifier, by_title, drop_duplicates, only
from .errors import FetchFailure, IdentifierConflict, NotFound, TrackerError, ValidationMismatch
from .http import Throttle, build_session
from .models import Platform, SeriesRecord, first_year
from .scrapers.search import SearchResolver
from .scrapers.title_page import ExtractedFields, TitlePageExtractor
from .settings import TrackerSettings
from .store import RecordStore
from .validator import IdentifierValidator, ValidationResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

RECOVERABLE_ERRORS = (TrackerError, requests.RequestException)
RATING_EPSILON = 0.05
VOTES_TOLERANCE = 0.05
# Posters pinned by hand are never replaced by the audit.
PINNED_POSTER_MARKERS = ("QRCode",)


@dataclass
class Change:
    title: str
    detail: str


@dataclass
class Failure:
    title: str
    reason: str


@dataclass
class PassReport:
    """Outcome of one pass: what was fixed, left alone or could not be fixed."""

    name: str
    total: int = 0
    fixed: List[Change] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    failed: List[Failure] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    saved: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.fixed or self.removed)

    def summary(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "fixed": len(self.fixed),
            "unchanged": len(self.unchanged),
            "failed": len(self.failed),
            "removed": len(self.removed),
        }


@dataclass
class Addition:
    """A series to add when it is not tracked yet."""

    title: str
    platform: Platform
    external_id: Optional[str] = None
    year_hint: Optional[str] = None


Unit = Callable[[List[SeriesRecord], SeriesRecord], Optional[str]]


def _owner(
    records: Iterable[SeriesRecord], external_id: str, exclude: SeriesRecord | None = None
) -> SeriesRecord | None:
    for record in records:
        if record is not exclude and record.external_id == external_id:
            return record
    return None


def _is_pinned(poster_url: str) -> bool:
    return any(marker in poster_url for marker in PINNED_POSTER_MARKERS)


def adopt_fields(record: SeriesRecord, fields: ExtractedFields) -> None:
    """Copy freshly scraped values onto a record; sentinel values never overwrite."""

    if fields.rating > 0:
        record.rating = fields.rating
    if fields.vote_count > 0:
        record.vote_count = fields.vote_count
    if fields.year_range:
        record.year_range = fields.year_range
    if fields.poster_url:
        record.poster_url = fields.poster_url


class ReconciliationEngine:
    """Runs validator, resolver and extractor over the stored collection."""

    def __init__(
        self,
        store: RecordStore,
        extractor: TitlePageExtractor,
        resolver: SearchResolver,
        validator: IdentifierValidator | None = None,
        *,
        throttle: Throttle | None = None,
    ) -> None:
        self.store = store
        self.extractor = extractor
        self.resolver = resolver
        self.validator = validator or IdentifierValidator(extractor)
        self.throttle = throttle or Throttle(0.0)

    @classmethod
    def from_settings(
        cls, settings: TrackerSettings, *, delay: float | None = None
    ) -> "ReconciliationEngine":
        session = build_session(settings)
        extractor = TitlePageExtractor.from_settings(settings, session)
        return cls(
            RecordStore(settings.data_path),
            extractor,
            SearchResolver.from_settings(settings, session),
            IdentifierValidator(extractor),
            throttle=Throttle(settings.request_delay if delay is None else delay),
        )

    # ------------------------------------------------------------------ #
    # Plumbing
    # ------------------------------------------------------------------ #

    def _call(self, func: Callable[..., T], *args: object) -> T:
        """Invoke an external call and always pause afterwards, even on failure."""

        try:
            return func(*args)
        finally:
            self.throttle.pause()

    def _run(
        self,
        report: PassReport,
        items: Sequence[T],
        label: Callable[[T], str],
        unit: Callable[[T], Optional[str]],
    ) -> None:
        report.total = len(items)
        for index, item in enumerate(items, 1):
            title = label(item)
            prefix = f"[{index:>3}/{report.total}] {title}"
            try:
                detail = unit(item)
            except RECOVERABLE_ERRORS as exc:
                report.failed.append(Failure(title, str(exc)))
                logger.warning("%s: could not fix: %s", prefix, exc)
                continue
            if detail:
                report.fixed.append(Change(title, detail))
                logger.info("%s: %s", prefix, detail)
            else:
                report.unchanged.append(title)
                logger.info("%s: unchanged", prefix)

    def _finish(self, report: PassReport, records: List[SeriesRecord]) -> PassReport:
        records, duplicates = drop_duplicates(records, by_identifier)
        report.removed.extend(duplicates)
        if report.changed:
            self.store.save(records)
            report.saved = True
        logger.info("%s finished: %s", report.name, report.summary())
        return report

    def _reconcile(
        self,
        name: str,
        select: Callable[[List[SeriesRecord]], List[SeriesRecord]],
        unit: Unit,
        prepare: Callable[[List[SeriesRecord], PassReport], List[SeriesRecord]] | None = None,
    ) -> PassReport:
        records = self.store.load()
        report = PassReport(name)
        if prepare is not None:
            records = prepare(records, report)
        targets = select(records)
        logger.info("%s: %d series to check", name, len(targets))
        self._run(report, targets, lambda record: record.title, lambda record: unit(records, record))
        return self._finish(report, records)

    def _assign_identifier(
        self, records: List[SeriesRecord], record: SeriesRecord, external_id: str
    ) -> None:
        owner = _owner(records, external_id, exclude=record)
        if owner is not None:
            raise IdentifierConflict(external_id, owner.title)
        record.external_id = external_id

    def _find_replacement(self, record: SeriesRecord, *, year_hint: bool) -> ValidationResult:
        hint = first_year(record.year_range) if year_hint else None
        candidate = self._call(self.resolver.resolve, record.title, hint)
        if candidate is None:
            raise NotFound(f"no search result for {record.title!r}")
        if candidate == record.external_id:
            raise NotFound(f"search only returned the current id {candidate}")
        result = self._call(self.validator.validate, candidate, record.title)
        if not result.valid:
            raise ValidationMismatch(candidate, record.title, result.observed_title)
        return result

    def _replace_identifier(
        self, records: List[SeriesRecord], record: SeriesRecord, *, year_hint: bool
    ) -> str:
        result = self._find_replacement(record, year_hint=year_hint)
        old_id = record.external_id
        self._assign_identifier(records, record, result.external_id)
        # A corrected identifier makes the old figures stale.
        adopt_fields(record, result.fields)
        return f"{old_id} → {result.external_id}"

    # ------------------------------------------------------------------ #
    # Modes
    # ------------------------------------------------------------------ #

    def correct_identifiers(self, rules: CorrectionTable = IDENTIFIER_RULES) -> PassReport:
        """Apply known-correct identifiers directly, then refresh their posters."""

        return self._reconcile(
            "correct-ids",
            lambda records: self._targeted(records, rules),
            lambda records, record: self._apply_known_identifier(records, record, rules),
        )

    def cleanup(self, rules: CorrectionTable = IDENTIFIER_RULES) -> PassReport:
        """Drop duplicate titles, then apply known-correct identifiers."""

        def prepare(records: List[SeriesRecord], report: PassReport) -> List[SeriesRecord]:
            kept, duplicates = drop_duplicates(records, by_title)
            for title in duplicates:
                logger.info("Dropping duplicate %s", title)
            report.removed.extend(duplicates)
            return kept

        return self._reconcile(
            "cleanup",
            lambda records: self._targeted(records, rules),
            lambda records, record: self._apply_known_identifier(records, record, rules),
            prepare=prepare,
        )

    @staticmethod
    def _targeted(records: List[SeriesRecord], rules: CorrectionTable) -> List[SeriesRecord]:
        targets: Dict[str, Reidentify] = only(rules, Reidentify)
        return [
            record
            for record in records
            if record.title in targets and record.external_id != targets[record.title].external_id
        ]

    def _apply_known_identifier(
        self, records: List[SeriesRecord], record: SeriesRecord, rules: CorrectionTable
    ) -> str:
        rule: Reidentify = only(rules, Reidentify)[record.title]
        old_id = record.external_id
        self._assign_identifier(records, record, rule.external_id)
        change = f"{old_id} → {record.external_id}"
        try:
            fields = self._call(self.extractor.fetch, record.external_id)
        except FetchFailure as exc:
            return f"{change} (poster not refreshed: {exc.reason})"
        if not fields.poster_url:
            return f"{change} (no poster)"
        record.poster_url = fields.poster_url
        return f"{change}, poster updated"

    def repair_identifiers(
        self,
        titles: Iterable[str],
        *,
        platform: Platform | None = None,
        check_current: bool = True,
        year_hint: bool = True,
    ) -> PassReport:
        """Search for a new identifier for each title whose current one is broken.

        With ``check_current`` disabled every title is searched, which is how
        ids known to be wrong are replaced.
        """

        wanted = set(titles)

        def select(records: List[SeriesRecord]) -> List[SeriesRecord]:
            return [
                record
                for record in records
                if record.title in wanted and (platform is None or record.platform == platform)
            ]

        def unit(records: List[SeriesRecord], record: SeriesRecord) -> Optional[str]:
            if check_current:
                current = self._call(self.validator.validate, record.external_id, record.title)
                if current.valid:
                    return None
            return self._replace_identifier(records, record, year_hint=year_hint)

        return self._reconcile("repair-ids", select, unit)

    def audit_platform(self, platform: Platform, *, worst_first: bool = True) -> PassReport:
        """Validate every record of a platform, fixing ids and refreshing figures and posters."""

        def select(records: List[SeriesRecord]) -> List[SeriesRecord]:
            subset = [record for record in records if record.platform == platform]
            if worst_first:
                subset.sort(key=lambda record: record.rating)
            return subset

        def unit(records: List[SeriesRecord], record: SeriesRecord) -> Optional[str]:
            result = self._call(self.validator.validate, record.external_id, record.title)
            if not result.valid:
                logger.info(
                    "%s: %s shows %r, searching",
                    record.title,
                    record.external_id,
                    result.observed_title or "unknown",
                )
                return self._replace_identifier(records, record, year_hint=True)

            changes: List[str] = []
            fields = result.fields
            votes_changed = fields.vote_count > 0 and fields.vote_count != record.vote_count
            if fields.rating > 0 and (fields.rating != record.rating or votes_changed):
                changes.append(f"rating {record.rating:.1f} → {fields.rating:.1f}")
                record.rating = fields.rating
                if fields.vote_count > 0:
                    record.vote_count = fields.vote_count
            if fields.year_range and not record.year_range:
                record.year_range = fields.year_range
                changes.append(f"year {fields.year_range}")
            if (
                result.poster_url
                and result.poster_url != record.poster_url
                and not _is_pinned(record.poster_url)
            ):
                record.poster_url = result.poster_url
                changes.append("poster updated")
            return ", ".join(changes) or None

        return self._reconcile(f"audit-{platform}", select, unit)

    def refresh_ratings(self) -> PassReport:
        """Re-fetch ratings and votes for every record and fill missing posters."""

        def unit(records: List[SeriesRecord], record: SeriesRecord) -> Optional[str]:
            fields = self._call(self.extractor.fetch, record.external_id)
            if fields.rating <= 0:
                raise NotFound(f"no rating found on {record.detail_url}")

            changes: List[str] = []
            rating_moved = abs(record.rating - fields.rating) >= RATING_EPSILON
            # A page without a vote count keeps the stored one.
            votes_moved = fields.vote_count > 0 and (
                abs(record.vote_count - fields.vote_count) / max(record.vote_count, 1)
                > VOTES_TOLERANCE
            )
            if rating_moved or votes_moved:
                old_rating = record.rating
                record.rating = fields.rating
                if fields.vote_count > 0:
                    record.vote_count = fields.vote_count
                changes.append(
                    f"{old_rating:.1f} → {fields.rating:.1f} ({fields.rating - old_rating:+.2f})"
                )
            if not record.poster_url and fields.poster_url:
                record.poster_url = fields.poster_url
                changes.append("poster added")
            return ", ".join(changes) or None

        return self._reconcile("refresh-ratings", list, unit)

    def refresh_poster(self, title: str) -> PassReport:
        """Fetch the current poster for a single title."""

        def unit(records: List[SeriesRecord], record: SeriesRecord) -> Optional[str]:
            fields = self._call(self.extractor.fetch, record.external_id)
            if not fields.poster_url:
                raise NotFound(f"no poster found on {record.detail_url}")
            if fields.poster_url == record.poster_url:
                return None
            record.poster_url = fields.poster_url
            return f"poster updated: {fields.poster_url}"

        return self._reconcile(
            "update-poster",
            lambda records: [record for record in records if record.title == title],
            unit,
        )

    def add_series(self, additions: Iterable[Addition]) -> PassReport:
        """Add series that are not tracked yet.

        Titles already present (case-insensitively) are skipped, and so are
        identifiers that already belong to another record.
        """

        records = self.store.load()
        report = PassReport("add-series")
        known_titles = {record.title.lower() for record in records}

        def unit(addition: Addition) -> Optional[str]:
            if addition.title.lower() in known_titles:
                logger.info("%s already exists, skipping", addition.title)
                return None

            external_id = addition.external_id
            if external_id:
                self._ensure_unclaimed(records, external_id)
                fields = self._call(self.extractor.fetch, external_id)
            else:
                external_id = self._call(self.resolver.resolve, addition.title, addition.year_hint)
                if external_id is None:
                    raise NotFound(f"no search result for {addition.title!r}")
                self._ensure_unclaimed(records, external_id)
                result = self._call(self.validator.validate, external_id, addition.title)
                if not result.valid:
                    raise ValidationMismatch(external_id, addition.title, result.observed_title)
                fields = result.fields

            if fields.rating <= 0:
                raise NotFound(f"no rating found for {external_id}")
            record = SeriesRecord(
                external_id=external_id,
                title=addition.title,
                year_range=fields.year_range or addition.year_hint or "",
                rating=fields.rating,
                vote_count=fields.vote_count,
                poster_url=fields.poster_url,
                platform=addition.platform,
            )
            records.append(record)
            known_titles.add(addition.title.lower())
            return f"added {external_id} ({fields.rating:.1f})"

        self._run(report, list(additions), lambda addition: addition.title, unit)
        return self._finish(report, records)

    @staticmethod
    def _ensure_unclaimed(records: List[SeriesRecord], external_id: str) -> None:
        owner = _owner(records, external_id)
        if owner is not None:
            raise IdentifierConflict(external_id, owner.title)
