"""FastAPI dependencies for the tracker API."""
from fastapi import Depends, Request

from backend.tracker.store import RecordStore

from .state import AppState


def get_app_state(request: Request) -> AppState:
    """Resolve the shared application state from the FastAPI request."""
    return request.app.state.app_state


def get_record_store(app_state: AppState = Depends(get_app_state)) -> RecordStore:
    return app_state.store
