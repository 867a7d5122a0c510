"""Command line interface for maintaining the tracked series dataset."""
from __future__ import annotations

import json
import logging
from typing import List, Optional

import httpx
import typer

from backend.tracker.corrections import (
    HBO_ADDITIONS,
    RECHECK_TITLES,
    RESEARCH_TITLES,
    load_identifier_rules,
    load_rules,
)
from backend.tracker.curation import curate_store
from backend.tracker.errors import StoreUnavailable
from backend.tracker.models import PLATFORMS
from backend.tracker.reconcile import Addition, PassReport, ReconciliationEngine
from backend.tracker.settings import TrackerSettings
from backend.tracker.store import RecordStore

from .client import create_client


DEFAULT_API_BASE = "http://localhost:8000"

app = typer.Typer(help="Keep the streaming originals dataset accurate.")


def _api_base_option() -> typer.Option:
    return typer.Option(
        DEFAULT_API_BASE,
        "--api-base",
        help="Base URL for the tracker API service.",
        show_default=True,
        envvar="TRACKER_API_BASE",
    )


def load_settings() -> TrackerSettings:
    return TrackerSettings()


def build_engine(settings: TrackerSettings, *, delay: float | None = None) -> ReconciliationEngine:
    return ReconciliationEngine.from_settings(settings, delay=delay)


def _check_platform(platform: str) -> str:
    if platform not in PLATFORMS:
        typer.echo(
            f"Unknown platform {platform!r}; expected one of {', '.join(PLATFORMS)}.", err=True
        )
        raise typer.Exit(code=1)
    return platform


def _echo_report(report: PassReport) -> None:
    for change in report.fixed:
        typer.echo(f"fixed   {change.title}: {change.detail}")
    for title in report.removed:
        typer.echo(f"removed {title}")
    for failure in report.failed:
        typer.echo(f"failed  {failure.title}: {failure.reason}")
    typer.echo(json.dumps(report.summary(), indent=2, ensure_ascii=False))


def _run_pass(action) -> PassReport:
    try:
        report = action()
    except StoreUnavailable as exc:
        typer.echo(f"Cannot open dataset: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    _echo_report(report)
    return report


@app.callback()
def main() -> None:
    """Configure logging for every command."""

    logging.basicConfig(level=logging.INFO)


@app.command("refresh-ratings")
def refresh_ratings() -> None:
    """Re-fetch rating and vote counts for every tracked series."""

    settings = load_settings()
    engine = build_engine(settings, delay=settings.refresh_delay)
    _run_pass(engine.refresh_ratings)


@app.command("repair-ids")
def repair_ids(
    titles: Optional[List[str]] = typer.Argument(
        None, help="Titles to repair; defaults to the built-in re-check list."
    ),
    research: bool = typer.Option(
        False,
        "--research/--no-research",
        help="Replace the ids of known-wrong Apple TV+ titles without checking them first.",
        show_default=True,
    ),
) -> None:
    """Find new identifiers for series whose current ones are broken."""

    engine = build_engine(load_settings())
    if research:
        _run_pass(
            lambda: engine.repair_identifiers(
                titles or RESEARCH_TITLES, platform="apple", check_current=False, year_hint=False
            )
        )
        return
    _run_pass(lambda: engine.repair_identifiers(titles or RECHECK_TITLES))


@app.command()
def audit(
    platform: str = typer.Argument("apple", help="Platform whose series are audited."),
    worst_first: bool = typer.Option(
        True,
        "--worst-first/--stored-order",
        help="Audit the lowest rated series first.",
        show_default=True,
    ),
) -> None:
    """Validate every series of a platform and fix what is wrong."""

    engine = build_engine(load_settings())
    _run_pass(lambda: engine.audit_platform(_check_platform(platform), worst_first=worst_first))


@app.command("correct-ids")
def correct_ids() -> None:
    """Apply identifiers known to be correct and refresh their posters."""

    settings = load_settings()
    engine = build_engine(settings)
    _run_pass(lambda: engine.correct_identifiers(load_identifier_rules(settings)))


@app.command()
def cleanup() -> None:
    """Drop duplicate titles, then apply known-correct identifiers."""

    settings = load_settings()
    engine = build_engine(settings)
    _run_pass(lambda: engine.cleanup(load_identifier_rules(settings)))


@app.command()
def curate() -> None:
    """Remove non-originals and fix platform labels."""

    settings = load_settings()
    try:
        report = curate_store(RecordStore(settings.data_path), load_rules(settings))
    except StoreUnavailable as exc:
        typer.echo(f"Cannot open dataset: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    for title in report.removed:
        typer.echo(f"removed   {title}")
    for line in report.relabeled:
        typer.echo(f"relabeled {line}")
    summary = {
        "original": report.original_count,
        "removed": len(report.removed),
        "relabeled": len(report.relabeled),
        "remaining": report.remaining,
    }
    typer.echo(json.dumps(summary, indent=2, ensure_ascii=False))


@app.command("update-poster")
def update_poster(title: str = typer.Argument(..., help="Exact title of the series.")) -> None:
    """Fetch the current poster for one series."""

    engine = build_engine(load_settings())
    report = _run_pass(lambda: engine.refresh_poster(title))
    if report.total == 0:
        typer.echo(f"Series not found: {title}", err=True)
        raise typer.Exit(code=1)
    if report.failed:
        raise typer.Exit(code=1)


@app.command("add-series")
def add_series(
    titles: Optional[List[str]] = typer.Argument(
        None, help="Titles to add; defaults to the built-in HBO list."
    ),
    platform: str = typer.Option("hbo", help="Platform the new series belong to."),
    external_id: Optional[str] = typer.Option(
        None, "--id", help="Known identifier, only valid with a single title."
    ),
    year: Optional[str] = typer.Option(None, help="First year, used to narrow the search."),
) -> None:
    """Add series that are not tracked yet."""

    platform = _check_platform(platform)
    if external_id and len(titles or []) != 1:
        typer.echo("--id requires exactly one title.", err=True)
        raise typer.Exit(code=1)

    if titles:
        additions = [
            Addition(title, platform, external_id=external_id, year_hint=year) for title in titles
        ]
    else:
        additions = [
            Addition(title, platform, external_id=known_id) for title, known_id in HBO_ADDITIONS
        ]

    engine = build_engine(load_settings())
    _run_pass(lambda: engine.add_series(additions))


@app.command("list")
def list_series(
    platform: str = typer.Option("all", help="Platform to list, or 'all'."),
    sort: str = typer.Option("rating", help="Sort by rating, votes or year.", show_default=True),
    order: str = typer.Option("desc", help="Sort direction, asc or desc.", show_default=True),
    limit: int = typer.Option(0, min=0, help="Maximum number of results, 0 for all."),
    api_base: str = _api_base_option(),
) -> None:
    """Display tracked series returned by the tracker API."""

    params: dict[str, object] = {"platform": platform, "sort": sort, "order": order}
    if limit:
        params["limit"] = limit

    with create_client(api_base) as client:
        response = client.get("/series", params=params)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            typer.echo(f"Request failed ({exc.response.status_code}): {exc.response.text}", err=True)
            raise typer.Exit(code=1) from exc
        typer.echo(json.dumps(response.json(), indent=2, ensure_ascii=False))
