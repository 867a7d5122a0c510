"""HTTP query API for the tracked series collection."""
from .app import create_app

__all__ = ["create_app"]
