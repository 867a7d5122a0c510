"""CLI entry point for launching the tracker API with Uvicorn."""
import logging

import uvicorn

from backend.tracker.settings import TrackerSettings

from .app import create_app


def main() -> None:
    """Start a server for the tracker API."""
    logging.basicConfig(level=logging.INFO)
    settings = TrackerSettings()
    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
