from __future__ import annotations

import datetime

from readme_music.schemas.status import CachedStatus, TrackStatus


def _parse_iso(value: str) -> datetime.datetime | None:
    try:
        parsed = datetime.datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.UTC)
    return parsed


def content_differs(status: TrackStatus, cached: CachedStatus) -> bool:
    return (
        cached.title != status.title
        or cached.artist != status.artist
        or cached.album != status.album
        or cached.artwork_url != status.artwork_url
        or cached.is_live != status.is_live
    )


def should_update(
    status: TrackStatus,
    cached: CachedStatus | None,
    ttl: datetime.timedelta,
    now: datetime.datetime | None = None,
) -> bool:
    """Decide whether the remote snippet needs rewriting.

    Content changes always win. Identical content is re-announced only once the
    last successful write is older than ``ttl``, so relative "played at" text
    does not go stale while writes stay bounded.
    """
    if cached is None:
        return True

    if content_differs(status, cached):
        return True

    last_written = _parse_iso(cached.last_written_at_iso)
    if last_written is None:
        return True

    current = now or datetime.datetime.now(datetime.UTC)
    return current - last_written > ttl
