from __future__ import annotations

import time

from readme_music.schemas.status import TrackStatus


ARTWORK_SIZE = 128
NOW_PLAYING = "<em>now playing</em>"


def _now_ms() -> int:
    return int(time.time() * 1000)


def time_ago(observed_at_epoch_ms: int, now_ms: int | None = None) -> str:
    current = _now_ms() if now_ms is None else now_ms
    seconds = (current - observed_at_epoch_ms) // 1000

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60} minutes ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    return f"{seconds // 86400} days ago"


def render(status: TrackStatus, now_ms: int | None = None) -> str:
    if status.artwork_url:
        lines = [
            f"<strong>{status.title}</strong>",
            f"by {status.artist}",
        ]
        if status.album:
            lines.append(f"from {status.album}")
        lines.append("")
        if status.is_live:
            lines.append(NOW_PLAYING)
        else:
            lines.append(time_ago(status.observed_at_epoch_ms, now_ms))

        info = "<br/>".join(lines)
        return (
            f'<img src="{status.artwork_url}" alt="" width="{ARTWORK_SIZE}" '
            f'height="{ARTWORK_SIZE}" align="left" /><samp>{info}</samp>'
        )

    # Album and time are not shown without artwork.
    return f"<samp><strong>{status.title}</strong><br/>by {status.artist}</samp>"
