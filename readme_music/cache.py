from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from readme_music.errors import CacheReadError
from readme_music.schemas.status import CachedStatus, TrackStatus


logger = logging.getLogger("readme_music.cache")


def _read_cache(path: Path) -> CachedStatus | None:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as exc:
        raise CacheReadError(f"Unable to read cache {path}: {exc}") from exc

    try:
        payload = json.loads(raw)
        return CachedStatus(**payload)
    except (json.JSONDecodeError, TypeError, ValueError, ValidationError) as exc:
        raise CacheReadError(f"Malformed cache {path}: {exc}") from exc


def load_cached_status(path: Path) -> CachedStatus | None:
    try:
        return _read_cache(path)
    except CacheReadError as exc:
        logger.warning("%s; treating as absent", exc)
        return None


def save_cached_status(
    path: Path, status: TrackStatus, written_at: datetime.datetime | None = None
) -> CachedStatus:
    entry = CachedStatus.from_status(
        status, written_at or datetime.datetime.now(datetime.UTC)
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(entry.model_dump_json(indent=2), encoding="utf-8")
    return entry
