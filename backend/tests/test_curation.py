"""Tests for the curation rules."""
from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.tracker.corrections import PLATFORM_RULES, load_identifier_rules, load_rules  # noqa: E402
from backend.tracker.curation import (  # noqa: E402
    Reidentify,
    Relabel,
    Remove,
    by_identifier,
    curate,
    curate_store,
    drop_duplicates,
    load_correction_table,
    parse_correction,
)
from backend.tracker.models import SeriesRecord  # noqa: E402
from backend.tracker.settings import TrackerSettings  # noqa: E402
from backend.tracker.store import RecordStore  # noqa: E402


def _record(title: str, platform: str, external_id: str = "tt1", rating: float = 7.0) -> SeriesRecord:
    return SeriesRecord(external_id=external_id, title=title, platform=platform, rating=rating)  # type: ignore[arg-type]


def test_curation_removes_non_originals(tmp_path: Path) -> None:
    store = RecordStore(tmp_path / "all.json")
    store.save([_record("Friends", "netflix", "tt0108778", 8.9), _record("Dark", "netflix", "tt5753856", 8.7)])

    report = curate_store(store, PLATFORM_RULES)

    titles = [record.title for record in store.load()]
    assert "Friends" not in titles
    assert titles == ["Dark"]
    assert report.removed == ["Friends"]
    assert report.original_count == 2
    assert report.remaining == 1


def test_curation_relabels_and_is_idempotent() -> None:
    records = [_record("The Boys", "netflix", "tt1190634"), _record("Breaking Bad", "netflix", "tt0903747")]

    once, first = curate(records, PLATFORM_RULES)
    twice, second = curate(once, PLATFORM_RULES)

    assert [(record.title, record.platform) for record in once] == [("The Boys", "amazon")]
    assert first.relabeled == ["The Boys: netflix → amazon"]
    assert [record.to_json() for record in twice] == [record.to_json() for record in once]
    assert not second.changed


def test_curate_store_skips_save_when_nothing_changes(tmp_path: Path) -> None:
    path = tmp_path / "all.json"
    store = RecordStore(path)
    store.save([_record("Dark", "netflix")])
    before = path.read_bytes()

    report = curate_store(store, {"Dark": Relabel("netflix")})

    assert not report.changed
    assert path.read_bytes() == before


def test_parse_correction_shapes() -> None:
    assert parse_correction("remove") == Remove()
    assert parse_correction("apple") == Relabel("apple")
    assert parse_correction({"platform": "hbo"}) == Relabel("hbo")
    assert parse_correction({"id": "tt123"}) == Reidentify("tt123")
    with pytest.raises(ValueError):
        parse_correction("hulu")
    with pytest.raises(ValueError):
        parse_correction(42)


def test_rules_file_overrides_builtin_table(tmp_path: Path) -> None:
    rules_path = tmp_path / "rules.json"
    rules_path.write_text(json.dumps({"Friends": "netflix", "Foo": "remove"}), encoding="utf-8")

    assert load_correction_table(rules_path)["Foo"] == Remove()
    rules = load_rules(TrackerSettings(rules_path=str(rules_path)))
    assert rules["Friends"] == Relabel("netflix")
    assert rules["Foo"] == Remove()
    assert rules["Dexter"] == Remove()


def test_drop_duplicates_keeps_first_occurrence() -> None:
    records = [_record("A", "hbo", "tt1"), _record("B", "hbo", "tt1"), _record("A", "hbo", "tt2")]

    kept, dropped = drop_duplicates(records)
    assert [record.external_id for record in kept] == ["tt1", "tt1"]
    assert dropped == ["A"]

    kept, dropped = drop_duplicates(records, by_identifier)
    assert [record.title for record in kept] == ["A", "A"]
    assert dropped == ["B"]


def test_rules_file_entries_only_reach_their_own_table(tmp_path: Path) -> None:
    rules_path = tmp_path / "rules.json"
    rules_path.write_text(
        json.dumps({"Succession": {"id": "tt0000777"}, "Foo": "remove"}), encoding="utf-8"
    )
    settings = TrackerSettings(rules_path=str(rules_path))

    curation_rules = load_rules(settings)
    identifier_rules = load_identifier_rules(settings)

    assert curation_rules["Succession"] == Relabel("hbo")
    assert curation_rules["Foo"] == Remove()
    assert identifier_rules["Succession"] == Reidentify("tt0000777")
    assert "Foo" not in identifier_rules
