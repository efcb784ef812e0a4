from __future__ import annotations

import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class TrackStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    artist: str
    album: Optional[str] = None
    artwork_url: Optional[str] = None
    is_live: bool = False
    observed_at_epoch_ms: int


class CachedStatus(BaseModel):
    title: str
    artist: str
    album: Optional[str] = None
    artwork_url: Optional[str] = None
    is_live: bool = False
    last_written_at_iso: str

    @classmethod
    def from_status(cls, status: TrackStatus, written_at: datetime.datetime) -> CachedStatus:
        return cls(
            title=status.title,
            artist=status.artist,
            album=status.album,
            artwork_url=status.artwork_url,
            is_live=status.is_live,
            last_written_at_iso=written_at.isoformat(),
        )
