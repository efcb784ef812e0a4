from __future__ import annotations

import string
from dataclasses import dataclass

from readme_music.errors import PatchTargetMissing


OPEN_TAG = "<span"
CLOSE_TAG = "</span>"
ZONE_ATTRIBUTE = "data-music"

# Length-preserving lowercase so offsets stay valid in the original text.
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


@dataclass(frozen=True)
class UpdateZone:
    start: int
    end: int


def wrap_zone(content: str) -> str:
    return f"{OPEN_TAG} {ZONE_ATTRIBUTE}>{content}{CLOSE_TAG}"


def _find_opening(lowered: str, position: int) -> tuple[int, int] | None:
    while True:
        tag_start = lowered.find(OPEN_TAG, position)
        if tag_start == -1:
            return None
        tag_end = lowered.find(">", tag_start)
        if tag_end == -1:
            return None
        follower = lowered[tag_start + len(OPEN_TAG)]
        tag = lowered[tag_start : tag_end + 1]
        if (follower.isspace() or follower in ">/") and ZONE_ATTRIBUTE in tag:
            return tag_start, tag_end + 1
        position = tag_end + 1


def find_update_zones(document: str) -> list[UpdateZone]:
    """Scan for tagged regions; each zone spans the text between its markers."""
    lowered = document.translate(_ASCII_LOWER)
    zones: list[UpdateZone] = []
    position = 0
    while True:
        opening = _find_opening(lowered, position)
        if opening is None:
            break
        _, content_start = opening
        close_start = lowered.find(CLOSE_TAG, content_start)
        if close_start == -1:
            break
        zones.append(UpdateZone(start=content_start, end=close_start))
        position = close_start + len(CLOSE_TAG)
    return zones


def apply_content(document: str, content: str, placeholder: str) -> str:
    zones = find_update_zones(document)
    if len(zones) == 1:
        zone = zones[0]
        return document[: zone.start] + content + document[zone.end :]
    if len(zones) > 1:
        raise PatchTargetMissing(
            f"Found {len(zones)} {ZONE_ATTRIBUTE} spans, expected exactly one"
        )

    occurrences = document.count(placeholder) if placeholder else 0
    if occurrences == 1:
        return document.replace(placeholder, wrap_zone(content), 1)
    if occurrences > 1:
        raise PatchTargetMissing(
            f"Placeholder {placeholder} appears {occurrences} times, expected exactly one"
        )
    raise PatchTargetMissing(
        f"Placeholder {placeholder} or {ZONE_ATTRIBUTE} span not found"
    )
