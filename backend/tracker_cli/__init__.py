"""Command line interface for the series tracker."""
from .app import app

__all__ = ["app"]
