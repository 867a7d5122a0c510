"""Series endpoints for querying the tracked collection."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.tracker.errors import StoreUnavailable
from backend.tracker.models import SeriesRecord
from backend.tracker.query import SortField, SortOrder, collection_metrics, query_series
from backend.tracker.store import RecordStore

from ..dependencies import get_record_store
from ..schemas import SeriesListModel, SeriesMetricsModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/series", tags=["series"])


def _load(store: RecordStore) -> List[SeriesRecord]:
    try:
        return store.load()
    except StoreUnavailable as exc:
        logger.error("Series data unavailable: %s", exc)
        raise HTTPException(status_code=503, detail="Series data unavailable") from exc


@router.get("", response_model=SeriesListModel)
def list_series(
    platform: str = Query(
        default="all",
        pattern="^(all|netflix|amazon|apple|hbo)$",
        description="Restrict results to one platform, or 'all'.",
    ),
    sort: SortField = Query(default="rating", description="Field to sort by."),
    order: SortOrder = Query(default="desc", description="Sort direction."),
    limit: int = Query(default=0, ge=0, description="Maximum number of results, 0 for all."),
    store: RecordStore = Depends(get_record_store),
) -> SeriesListModel:
    """Return stored series matching the filter, sorted and limited."""

    series = query_series(_load(store), platform=platform, sort=sort, order=order, limit=limit)
    return SeriesListModel(count=len(series), platform=platform, series=series)


@router.get("/metrics", response_model=SeriesMetricsModel)
def series_metrics(store: RecordStore = Depends(get_record_store)) -> SeriesMetricsModel:
    """Return aggregate collection statistics."""

    return SeriesMetricsModel(**collection_metrics(_load(store)))
