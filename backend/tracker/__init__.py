"""
Series tracker core package.

Bundles the record store, the IMDb title/search scrapers, the identifier
validator and the reconciliation engine that keeps the dataset in shape.
"""

__all__ = [
    "corrections",
    "curation",
    "errors",
    "http",
    "models",
    "query",
    "reconcile",
    "scrapers",
    "settings",
    "store",
    "validator",
]
