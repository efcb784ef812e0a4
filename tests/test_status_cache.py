import datetime
import json
import logging
from pathlib import Path

from conftest import build_status
from readme_music.cache import load_cached_status, save_cached_status


def test_absent_cache_is_none(tmp_path: Path) -> None:
    assert load_cached_status(tmp_path / "missing.json") is None


def test_cache_roundtrip_creates_parent_dirs(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "dir" / "music.json"
    written_at = datetime.datetime(2026, 3, 1, 8, 30, tzinfo=datetime.UTC)
    status = build_status(album=None, is_live=True)

    save_cached_status(path, status, written_at)
    cached = load_cached_status(path)

    assert cached is not None
    assert cached.title == "Song A"
    assert cached.album is None
    assert cached.is_live is True
    assert cached.last_written_at_iso == "2026-03-01T08:30:00+00:00"


def test_cache_file_is_indented_json_without_observation_time(tmp_path: Path) -> None:
    path = tmp_path / "music.json"
    save_cached_status(path, build_status())

    raw = path.read_text(encoding="utf-8")
    payload = json.loads(raw)

    assert raw.startswith("{\n  ")
    assert "observed_at_epoch_ms" not in payload
    assert payload["artwork_url"] == "https://x/a.jpg"


def test_malformed_cache_is_treated_as_absent(tmp_path: Path, caplog) -> None:
    path = tmp_path / "music.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="readme_music.cache"):
        assert load_cached_status(path) is None

    assert "Malformed cache" in caplog.text


def test_cache_missing_fields_is_treated_as_absent(tmp_path: Path) -> None:
    path = tmp_path / "music.json"
    path.write_text(json.dumps({"title": "only a title"}), encoding="utf-8")

    assert load_cached_status(path) is None


def test_cache_save_overwrites_in_place(tmp_path: Path) -> None:
    path = tmp_path / "music.json"
    save_cached_status(path, build_status(title="First"))
    save_cached_status(path, build_status(title="Second"))

    cached = load_cached_status(path)
    assert cached is not None
    assert cached.title == "Second"


def test_truncated_multibyte_cache_is_treated_as_absent(tmp_path: Path, caplog) -> None:
    path = tmp_path / "music.json"
    path.write_bytes(b'{"title": "Caf\xc3')

    with caplog.at_level(logging.WARNING, logger="readme_music.cache"):
        assert load_cached_status(path) is None

    assert "Unable to read cache" in caplog.text
