from __future__ import annotations

import json
import time
from http.client import HTTPException
from typing import Any
from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from readme_music.config.settings import Settings
from readme_music.errors import FetchError
from readme_music.schemas.status import TrackStatus


_OPERATION = "Last.fm request"
_IMAGE_SIZES = ("extralarge", "large", "medium")

UNKNOWN_TRACK = "Unknown track"
UNKNOWN_ARTIST = "Unknown artist"


def _build_url(settings: Settings) -> str:
    params = {
        "method": "user.getrecenttracks",
        "api_key": settings.lastfm_api_key,
        "user": settings.lastfm_username,
        "format": "json",
        "limit": "1",
    }
    return f"{settings.lastfm_base_url}?{urlencode(params)}"


def _text(node: Any) -> str | None:
    if isinstance(node, dict):
        value = node.get("#text")
    else:
        value = node
    if isinstance(value, str) and value:
        return value
    return None


def _pick_artwork(images: Any) -> str | None:
    if not isinstance(images, list):
        return None
    for size in _IMAGE_SIZES:
        for image in images:
            if isinstance(image, dict) and image.get("size") == size:
                url = _text(image)
                if url:
                    return url
    return None


def _played_at_ms(track: dict[str, Any], now_ms: int) -> int:
    date = track.get("date")
    uts = date.get("uts") if isinstance(date, dict) else None
    if not uts:
        return now_ms
    try:
        return int(uts) * 1000
    except (TypeError, ValueError):
        return now_ms


def parse_recent_track(payload: Any, now_ms: int | None = None) -> TrackStatus | None:
    if not isinstance(payload, dict):
        raise FetchError(_OPERATION, "unexpected payload shape")
    if "error" in payload:
        message = payload.get("message") or "unknown error"
        raise FetchError(_OPERATION, f"Last.fm error {payload['error']}: {message}")

    recent = payload.get("recenttracks") or {}
    tracks = recent.get("track") if isinstance(recent, dict) else None
    # A single scrobble may come back as an object rather than a list.
    if isinstance(tracks, dict):
        tracks = [tracks]
    if not tracks or not isinstance(tracks, list) or not isinstance(tracks[0], dict):
        return None

    track = tracks[0]
    current_ms = int(time.time() * 1000) if now_ms is None else now_ms
    attrs = track.get("@attr")
    now_playing = isinstance(attrs, dict) and attrs.get("nowplaying") == "true"

    return TrackStatus(
        title=_text(track.get("name")) or UNKNOWN_TRACK,
        artist=_text(track.get("artist")) or UNKNOWN_ARTIST,
        album=_text(track.get("album")),
        artwork_url=_pick_artwork(track.get("image")),
        is_live=now_playing,
        observed_at_epoch_ms=_played_at_ms(track, current_ms),
    )


def fetch_recent_track(settings: Settings) -> TrackStatus | None:
    request = Request(_build_url(settings), headers={"User-Agent": settings.user_agent})
    kwargs: dict[str, Any] = {}
    if settings.http_timeout_seconds is not None:
        kwargs["timeout"] = settings.http_timeout_seconds
    try:
        with urlopen(request, **kwargs) as response:
            body = response.read().decode("utf-8")
        payload = json.loads(body)
    except HTTPError as exc:
        raise FetchError(_OPERATION, str(exc.reason), exc.code) from exc
    except (OSError, HTTPException) as exc:
        raise FetchError(_OPERATION, str(exc)) from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise FetchError(_OPERATION, f"malformed JSON: {exc}") from exc

    return parse_recent_track(payload)
