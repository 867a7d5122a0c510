"""IMDb scrapers used by the reconciliation pipeline."""

from .search import SearchResolver
from .title_page import ExtractedFields, TitlePage, TitlePageExtractor, normalize_poster_url

__all__ = [
    "ExtractedFields",
    "SearchResolver",
    "TitlePage",
    "TitlePageExtractor",
    "normalize_poster_url",
]
