"""
Background tracker.

Runs a bulk tracking cycle over every registered traveler, then sleeps for the
configured interval. `stop_tracking()` is honored between cycles: a running cycle
always finishes, so no traveler is left with a half-processed sample.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from tourguide.domain.traveler import Traveler
from tourguide.tracking.orchestrator import TrackingOrchestrator, TrackingOutcome

logger = logging.getLogger(__name__)


class Tracker(threading.Thread):
    def __init__(
        self,
        orchestrator: TrackingOrchestrator,
        travelers: Callable[[], list[Traveler]],
        *,
        interval_seconds: float = 300,
    ):
        super().__init__(name="tourguide-tracker", daemon=True)
        self._orchestrator = orchestrator
        self._travelers = travelers
        self._interval_seconds = float(interval_seconds)
        self._stop_event = threading.Event()
        self.cycles = 0
        self.last_outcomes: list[TrackingOutcome] = []

    def run(self) -> None:
        while not self._stop_event.is_set():
            travelers = self._travelers()
            logger.debug("Begin tracker cycle: tracking %d travelers.", len(travelers))
            t0 = time.monotonic()
            self.last_outcomes = self._orchestrator.track_all(travelers)
            self.cycles += 1
            logger.debug("Tracker cycle took %.2fs.", time.monotonic() - t0)
            self._stop_event.wait(self._interval_seconds)
        logger.debug("Tracker stopping.")

    def stop_tracking(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self.is_alive() and threading.current_thread() is not self:
            self.join(timeout)
