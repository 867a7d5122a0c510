"""Router exports for the tracker API."""
from . import health, series

__all__ = ["health", "series"]
