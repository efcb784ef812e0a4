from pathlib import Path

import pytest

from readme_music.config.settings import Settings, load_settings
from readme_music.schemas.status import TrackStatus


REQUIRED_ENV = {
    "LASTFM_API_KEY": "lastfm-key",
    "LASTFM_USERNAME": "listener",
    "GITHUB_TOKEN": "gh-token",
    "GITHUB_OWNER": "octo",
    "GITHUB_REPO": "profile",
}


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path: Path) -> None:
    for name in (
        *REQUIRED_ENV,
        "GITHUB_BRANCH",
        "README_PATH",
        "MUSIC_PLACEHOLDER",
        "MUSIC_CACHE_FILE",
        "UPDATE_INTERVAL_MS",
        "CACHE_TTL_MS",
        "APP_USER_AGENT",
        "HTTP_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return load_settings(
        **REQUIRED_ENV,
        MUSIC_CACHE_FILE=str(tmp_path / "state" / "music.json"),
    )


def build_status(**overrides) -> TrackStatus:
    values = {
        "title": "Song A",
        "artist": "Artist X",
        "album": "Album Z",
        "artwork_url": "https://x/a.jpg",
        "is_live": False,
        "observed_at_epoch_ms": 1_700_000_000_000,
    }
    values.update(overrides)
    return TrackStatus(**values)
