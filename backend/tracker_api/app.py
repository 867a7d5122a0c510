"""Application factory for the series tracker API."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.tracker.settings import TrackerSettings

from .routers import health, series
from .state import AppState


def create_app(settings: TrackerSettings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""

    resolved_settings = settings or TrackerSettings()
    app_state = AppState(settings=resolved_settings)

    app = FastAPI(title="Series Tracker API", version="0.1.0")
    app.state.app_state = app_state
    app.state.settings = app_state.settings

    # The dataset is read-only over HTTP, any origin may query it.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    for router in (health.router, series.router):
        app.include_router(router)

    return app
