"""Static correction rules applied over the whole collection."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, Iterable, List, Mapping, Tuple, Union

from .models import PLATFORMS, Platform, SeriesRecord
from .store import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Remove:
    """Title is not an original of any tracked platform."""


@dataclass(frozen=True)
class Relabel:
    """Title was tagged with the wrong platform."""

    platform: Platform

    def __post_init__(self) -> None:
        if self.platform not in PLATFORMS:
            raise ValueError(f"Unknown platform {self.platform!r}")


@dataclass(frozen=True)
class Reidentify:
    """Title is known to live under a specific identifier."""

    external_id: str


Correction = Union[Remove, Relabel, Reidentify]
CorrectionTable = Mapping[str, Correction]


def parse_correction(value: Any) -> Correction:
    """Decode a correction from its JSON form.

    Accepted shapes: ``"remove"``, a platform name, ``{"platform": ...}`` or
    ``{"id": ...}``.
    """

    if isinstance(value, str):
        if value == "remove":
            return Remove()
        return Relabel(value)  # type: ignore[arg-type]
    if isinstance(value, dict):
        if "platform" in value:
            return Relabel(value["platform"])
        if "id" in value and value["id"]:
            return Reidentify(str(value["id"]))
    raise ValueError(f"Unsupported correction value: {value!r}")


def load_correction_table(path: Path | str) -> Dict[str, Correction]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object mapping titles to corrections")
    return {str(title): parse_correction(value) for title, value in data.items()}


def only(rules: CorrectionTable, kind: type | Tuple[type, ...]) -> Dict[str, Any]:
    return {title: rule for title, rule in rules.items() if isinstance(rule, kind)}


@dataclass
class CurationReport:
    original_count: int = 0
    removed: List[str] = field(default_factory=list)
    relabeled: List[str] = field(default_factory=list)
    remaining: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.removed or self.relabeled)


def curate(
    records: Iterable[SeriesRecord], rules: CorrectionTable
) -> Tuple[List[SeriesRecord], CurationReport]:
    """Drop ``Remove`` titles and apply ``Relabel`` entries; other corrections are ignored.

    Running it twice gives the same result as running it once.
    """

    records = list(records)
    report = CurationReport(original_count=len(records))
    kept: List[SeriesRecord] = []
    for record in records:
        rule = rules.get(record.title)
        if isinstance(rule, Remove):
            report.removed.append(record.title)
            continue
        if isinstance(rule, Relabel) and rule.platform != record.platform:
            report.relabeled.append(f"{record.title}: {record.platform} → {rule.platform}")
            record.platform = rule.platform
        kept.append(record)
    report.remaining = len(kept)
    return kept, report


def by_title(record: SeriesRecord) -> Hashable:
    return record.title


def by_identifier(record: SeriesRecord) -> Hashable:
    return record.external_id


def drop_duplicates(
    records: Iterable[SeriesRecord],
    key: Callable[[SeriesRecord], Hashable] = by_title,
) -> Tuple[List[SeriesRecord], List[str]]:
    """Keep the first record for every key and report the titles dropped."""

    seen: set = set()
    kept: List[SeriesRecord] = []
    dropped: List[str] = []
    for record in records:
        value = key(record)
        if value in seen:
            dropped.append(record.title)
            continue
        seen.add(value)
        kept.append(record)
    return kept, dropped


def curate_store(store: RecordStore, rules: CorrectionTable) -> CurationReport:
    """Apply the curation rules to the stored collection and rewrite it once."""

    records, report = curate(store.load(), rules)
    for title in report.removed:
        logger.info("Removed %s", title)
    for line in report.relabeled:
        logger.info("Relabeled %s", line)
    if report.changed:
        store.save(records)
    return report
