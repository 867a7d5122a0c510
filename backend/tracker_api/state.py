"""Shared state container for the tracker API."""
from __future__ import annotations

from dataclasses import dataclass

from backend.tracker.settings import TrackerSettings
from backend.tracker.store import RecordStore


@dataclass(slots=True)
class AppState:
    """Encapsulates application state shared across routers."""

    settings: TrackerSettings
    store: RecordStore

    def __init__(self, settings: TrackerSettings) -> None:
        self.settings = settings
        self.store = RecordStore(settings.data_path)
