from __future__ import annotations

import datetime
import logging
import threading
import time
from typing import Callable, Literal, Optional

from pydantic import BaseModel

from readme_music.cache import load_cached_status, save_cached_status
from readme_music.config.settings import Settings
from readme_music.decision import should_update
from readme_music.patching.patcher import DocumentPatcher, RenderFn
from readme_music.rendering.snippet import render
from readme_music.schemas.document import DocumentLocator
from readme_music.schemas.status import TrackStatus


logger = logging.getLogger("readme_music.poll")

Stage = Literal["fetching", "deciding", "patching", "cache_updating"]
CycleStatus = Literal["nothing_found", "unchanged", "no_write", "updated", "error"]


class CycleResult(BaseModel):
    status: CycleStatus
    stage: Optional[Stage] = None
    detail: Optional[str] = None


class PollDriver:
    def __init__(
        self,
        settings: Settings,
        fetch_status: Callable[[], TrackStatus | None],
        patcher: DocumentPatcher,
        locator: DocumentLocator,
        render_fn: RenderFn = render,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime.datetime] = lambda: datetime.datetime.now(datetime.UTC),
    ) -> None:
        self.settings = settings
        self.fetch_status = fetch_status
        self.patcher = patcher
        self.locator = locator
        self.render_fn = render_fn
        self.clock = clock
        self.now = now

    def run_cycle(self) -> CycleResult:
        stage: Stage = "fetching"
        try:
            status = self.fetch_status()
            if status is None:
                logger.warning("No recent tracks found")
                return CycleResult(status="nothing_found")

            stage = "deciding"
            cached = load_cached_status(self.settings.cache_file)
            if not should_update(status, cached, self.settings.cache_ttl, self.now()):
                logger.info("No change (%s - %s)", status.title, status.artist)
                return CycleResult(status="unchanged")

            stage = "patching"
            if not self.patcher.patch(self.locator, self.render_fn, status):
                return CycleResult(status="no_write")

            stage = "cache_updating"
            save_cached_status(self.settings.cache_file, status, self.now())
            logger.info("README updated -> %s - %s", status.title, status.artist)
            return CycleResult(status="updated")
        except Exception as exc:
            logger.error("Tick failed while %s: %s", stage, exc)
            return CycleResult(status="error", stage=stage, detail=str(exc))

    def sleep_after(self, started_at: float) -> float:
        elapsed = self.clock() - started_at
        return max(0.0, self.settings.update_interval_seconds - elapsed)

    def run(self, stop: threading.Event, max_cycles: int | None = None) -> int:
        """Poll until ``stop`` is set; returns the number of completed cycles.

        The interval runs from cycle start to cycle start. Cycle time is
        subtracted from the wait, never going below zero.
        """
        logger.info(
            "Updater started - interval %ss", self.settings.update_interval_seconds
        )
        cycles = 0
        while not stop.is_set():
            started_at = self.clock()
            self.run_cycle()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            if stop.wait(self.sleep_after(started_at)):
                break
        return cycles
