"""Flat-file store for the tracked series collection."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from pydantic import ValidationError

from .errors import StoreUnavailable
from .models import SeriesRecord

logger = logging.getLogger(__name__)


def sort_by_rating(records: Iterable[SeriesRecord]) -> List[SeriesRecord]:
    """Return records ordered by rating, best first."""

    return sorted(records, key=lambda record: record.rating, reverse=True)


@dataclass(slots=True)
class RecordStore:
    """Reads and rewrites the whole collection as one JSON array.

    The store assumes a single writer: two passes running against the same
    file at once will overwrite each other's results.
    """

    path: Path

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> List[SeriesRecord]:
        """Return every valid record, raising when the file is unusable."""

        if not self.path.exists():
            raise StoreUnavailable(f"No data file found at {self.path}")
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StoreUnavailable(f"Failed to read {self.path}: {exc}") from exc
        if not isinstance(payload, list):
            raise StoreUnavailable(f"{self.path} must contain a JSON array")

        records: List[SeriesRecord] = []
        for index, item in enumerate(payload):
            try:
                records.append(SeriesRecord.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping invalid record #%d in %s: %s", index, self.path, exc)
        return records

    def save(self, records: Iterable[SeriesRecord]) -> List[SeriesRecord]:
        """Sort by rating and atomically replace the data file."""

        ordered = sort_by_rating(records)
        payload = [record.to_json() for record in ordered]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self.path)
        logger.info("Saved %d series to %s", len(ordered), self.path)
        return ordered
