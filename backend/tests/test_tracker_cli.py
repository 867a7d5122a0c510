"""Tests for the Typer-based tracker CLI."""
from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from typer.testing import CliRunner

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.tracker.corrections import RECHECK_TITLES, RESEARCH_TITLES  # noqa: E402
from backend.tracker.errors import StoreUnavailable  # noqa: E402
from backend.tracker.models import SeriesRecord  # noqa: E402
from backend.tracker.reconcile import Change, Failure, PassReport  # noqa: E402
from backend.tracker.settings import TrackerSettings  # noqa: E402
from backend.tracker.store import RecordStore  # noqa: E402
from backend.tracker_api import create_app  # noqa: E402
from backend.tracker_cli import app as cli_app  # noqa: E402
from backend.tracker_cli import client as client_module  # noqa: E402

cli_app_module = importlib.import_module("backend.tracker_cli.app")


class StubEngine:
    """Records the pass requested by each command."""

    def __init__(self, report: PassReport | None = None, error: Exception | None = None) -> None:
        self.report = report or PassReport("stub")
        self.error = error
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.delays: list[float | None] = []

    def _record(self, name: str, *args: Any, **kwargs: Any) -> PassReport:
        self.calls.append((name, args, kwargs))
        if self.error:
            raise self.error
        return self.report

    def refresh_ratings(self) -> PassReport:
        return self._record("refresh_ratings")

    def repair_identifiers(self, titles: Any, **kwargs: Any) -> PassReport:
        return self._record("repair_identifiers", *titles, **kwargs)

    def audit_platform(self, platform: str, **kwargs: Any) -> PassReport:
        return self._record("audit_platform", platform, **kwargs)

    def correct_identifiers(self, rules: Any) -> PassReport:
        return self._record("correct_identifiers", rules)

    def cleanup(self, rules: Any) -> PassReport:
        return self._record("cleanup", rules)

    def refresh_poster(self, title: str) -> PassReport:
        return self._record("refresh_poster", title)

    def add_series(self, additions: Any) -> PassReport:
        return self._record("add_series", *additions)


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TrackerSettings:
    resolved = TrackerSettings(data_path=str(tmp_path / "all.json"))
    monkeypatch.setattr(cli_app_module, "load_settings", lambda: resolved)
    return resolved


@pytest.fixture()
def engine(settings: TrackerSettings, monkeypatch: pytest.MonkeyPatch) -> StubEngine:
    stub = StubEngine(
        PassReport(
            "stub",
            total=2,
            fixed=[Change("Foo", "0.0 → 8.2")],
            failed=[Failure("Bar", "no search result for 'Bar'")],
        )
    )
    def _factory(resolved: TrackerSettings, *, delay: float | None = None) -> StubEngine:
        stub.delays.append(delay)
        return stub

    monkeypatch.setattr(cli_app_module, "build_engine", _factory)
    return stub


@pytest.fixture()
def cli_client(settings: TrackerSettings, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    """Provide a TestClient and patch the CLI HTTP client factory."""

    RecordStore(settings.data_path).save(
        [
            SeriesRecord(external_id="tt5753856", title="Dark", rating=8.7, platform="netflix"),
            SeriesRecord(external_id="tt11280740", title="Severance", rating=8.7, platform="apple"),
        ]
    )
    test_client = TestClient(create_app(settings=settings))

    def _factory(base_url: str, *, timeout: float = 10.0, transport: Any = None):  # type: ignore[override]
        return test_client

    monkeypatch.setattr(client_module, "create_client", _factory)
    monkeypatch.setattr(cli_app_module, "create_client", _factory)
    return test_client


def test_refresh_ratings_uses_refresh_delay_and_prints_report(
    runner: CliRunner, engine: StubEngine, settings: TrackerSettings
) -> None:
    result = runner.invoke(cli_app, ["refresh-ratings"])

    assert result.exit_code == 0
    assert engine.calls == [("refresh_ratings", (), {})]
    assert engine.delays == [settings.refresh_delay]
    assert "fixed   Foo: 0.0 → 8.2" in result.output
    assert "failed  Bar: no search result for 'Bar'" in result.output
    assert '"failed": 1' in result.output


def test_repair_ids_defaults_to_recheck_list(runner: CliRunner, engine: StubEngine) -> None:
    result = runner.invoke(cli_app, ["repair-ids"])

    assert result.exit_code == 0
    assert engine.calls == [("repair_identifiers", tuple(RECHECK_TITLES), {})]


def test_repair_ids_research_mode_skips_current_check(runner: CliRunner, engine: StubEngine) -> None:
    result = runner.invoke(cli_app, ["repair-ids", "--research"])

    assert result.exit_code == 0
    _, titles, kwargs = engine.calls[0]
    assert titles == tuple(RESEARCH_TITLES)
    assert kwargs == {"platform": "apple", "check_current": False, "year_hint": False}


def test_audit_validates_platform_argument(runner: CliRunner, engine: StubEngine) -> None:
    ok = runner.invoke(cli_app, ["audit", "hbo", "--stored-order"])
    bad = runner.invoke(cli_app, ["audit", "hulu"])

    assert ok.exit_code == 0
    assert engine.calls == [("audit_platform", ("hbo",), {"worst_first": False})]
    assert bad.exit_code == 1


def test_update_poster_fails_for_unknown_title(runner: CliRunner, engine: StubEngine) -> None:
    engine.report = PassReport("update-poster")

    result = runner.invoke(cli_app, ["update-poster", "Nope"])

    assert result.exit_code == 1
    assert engine.calls == [("refresh_poster", ("Nope",), {})]


def test_add_series_builds_additions(runner: CliRunner, engine: StubEngine) -> None:
    result = runner.invoke(
        cli_app, ["add-series", "Girls", "--platform", "hbo", "--id", "tt1723816", "--year", "2012"]
    )

    assert result.exit_code == 0
    (addition,) = engine.calls[0][1]
    assert (addition.title, addition.platform, addition.external_id, addition.year_hint) == (
        "Girls",
        "hbo",
        "tt1723816",
        "2012",
    )


def test_add_series_rejects_id_with_several_titles(runner: CliRunner, engine: StubEngine) -> None:
    result = runner.invoke(cli_app, ["add-series", "Girls", "Veep", "--id", "tt1723816"])

    assert result.exit_code == 1
    assert engine.calls == []


def test_store_errors_exit_with_failure(runner: CliRunner, engine: StubEngine) -> None:
    engine.error = StoreUnavailable("No data file found at all.json")

    result = runner.invoke(cli_app, ["cleanup"])

    assert result.exit_code == 1


def test_curate_rewrites_local_dataset(runner: CliRunner, settings: TrackerSettings) -> None:
    RecordStore(settings.data_path).save(
        [
            SeriesRecord(external_id="tt0108778", title="Friends", rating=8.9, platform="netflix"),
            SeriesRecord(external_id="tt1190634", title="The Boys", rating=8.7, platform="netflix"),
        ]
    )

    result = runner.invoke(cli_app, ["curate"])

    assert result.exit_code == 0
    assert "removed   Friends" in result.output
    remaining = RecordStore(settings.data_path).load()
    assert [(record.title, record.platform) for record in remaining] == [("The Boys", "amazon")]


def test_list_command_queries_the_api(runner: CliRunner, cli_client: TestClient) -> None:
    result = runner.invoke(cli_app, ["list", "--platform", "apple"])

    assert result.exit_code == 0
    assert '"count": 1' in result.output
    assert '"title": "Severance"' in result.output


def test_list_command_reports_http_errors(runner: CliRunner, cli_client: TestClient) -> None:
    result = runner.invoke(cli_app, ["list", "--platform", "hulu"])

    assert result.exit_code == 1
