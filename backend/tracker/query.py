"""Filtering, sorting and aggregate views over stored series."""
from __future__ import annotations

from collections import Counter
from typing import Callable, Dict, Iterable, List, Literal

from .models import PLATFORMS, SeriesRecord

SortField = Literal["rating", "votes", "year"]
SortOrder = Literal["asc", "desc"]

SORT_KEYS: Dict[str, Callable[[SeriesRecord], float]] = {
    "rating": lambda record: record.rating,
    "votes": lambda record: record.vote_count,
    "year": lambda record: record.start_year,
}


def query_series(
    records: Iterable[SeriesRecord],
    *,
    platform: str = "all",
    sort: SortField = "rating",
    order: SortOrder = "desc",
    limit: int = 0,
) -> List[SeriesRecord]:
    """Return records for ``platform`` (or every platform) sorted and trimmed to ``limit``.

    ``limit`` of zero or less returns everything.
    """

    if sort not in SORT_KEYS:
        raise ValueError(f"Unsupported sort field {sort!r}")
    selected = [
        record for record in records if platform == "all" or record.platform == platform
    ]
    selected.sort(key=SORT_KEYS[sort], reverse=order == "desc")
    if limit > 0:
        selected = selected[:limit]
    return selected


def collection_metrics(records: Iterable[SeriesRecord]) -> Dict[str, object]:
    records = list(records)
    per_platform = Counter(record.platform for record in records)
    return {
        "total": len(records),
        "platform_counts": {platform: per_platform.get(platform, 0) for platform in PLATFORMS},
        "unrated": sum(1 for record in records if record.rating <= 0),
        "ongoing": sum(1 for record in records if record.ongoing),
        "missing_posters": sum(1 for record in records if not record.poster_url),
    }
