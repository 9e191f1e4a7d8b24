"""
Location tracking orchestration.

One tracking cycle for a traveler is: fetch a sample from the location source,
append it to the traveler's history, then run the rewards engine exactly once for
that sample. Bulk tracking fans one cycle per traveler out onto the tracking pool
(bounded, sized independently of the reward pool) and joins all of them.

Failure policy for bulk runs: every traveler gets a `TrackingOutcome`. A failed
fetch or an unexpected error is recorded on that traveler's outcome and logged;
it never stops the other travelers.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, wait
from dataclasses import dataclass, field
from typing import Iterable
from uuid import UUID

from tourguide.core.errors import SourceUnavailable
from tourguide.domain.models import LocationSample
from tourguide.domain.traveler import Traveler
from tourguide.ingestion.location_client import LocationSource
from tourguide.rewards.engine import RewardFailure, RewardRun, RewardsEngine

logger = logging.getLogger(__name__)


@dataclass
class TrackingOutcome:
    """Per-traveler result of a bulk tracking run."""

    traveler_id: UUID
    user_name: str
    sample: LocationSample | None = None
    error: Exception | None = None
    reward_failures: list[RewardFailure] = field(default_factory=list)
    rewards_awarded: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and not self.reward_failures


class TrackingOrchestrator:
    def __init__(self, *, location_source: LocationSource, engine: RewardsEngine, executor: Executor):
        if executor is engine.executor:
            # Cycles block on reward units; sharing one pool deadlocks once it is saturated.
            raise ValueError("Tracking executor must be distinct from the rewards engine executor.")
        self._location_source = location_source
        self._engine = engine
        self._executor = executor

    def _fetch(self, traveler: Traveler) -> LocationSample:
        try:
            sample = self._location_source.fetch_location(traveler.id)
        except SourceUnavailable:
            raise
        except Exception as exc:
            raise SourceUnavailable(traveler.id, message=str(exc) or type(exc).__name__) from exc
        traveler.record_location(sample)
        return sample

    def _cycle(self, traveler: Traveler) -> tuple[LocationSample, RewardRun]:
        """Fetch + append + concurrent reward calculation, waiting for the reward fan-in."""
        sample = self._fetch(traveler)
        run = self._engine.calculate_rewards_async(traveler).result()
        return sample, run

    def track_traveler(self, traveler: Traveler) -> LocationSample:
        """Blocking single-traveler cycle; raises `SourceUnavailable` if the fetch fails."""
        sample = self._fetch(traveler)
        self._engine.calculate_rewards(traveler)
        return sample

    def track_traveler_async(self, traveler: Traveler) -> Future[LocationSample]:
        """Run one cycle on the tracking pool.

        The future resolves with the new sample only after the reward calculation for
        it has finished.
        """
        return self._executor.submit(lambda: self._cycle(traveler)[0])

    def _outcome(self, traveler: Traveler) -> TrackingOutcome:
        outcome = TrackingOutcome(traveler_id=traveler.id, user_name=traveler.user_name)
        try:
            outcome.sample, run = self._cycle(traveler)
        except SourceUnavailable as exc:
            logger.warning("Tracking skipped for %s: %s", traveler.user_name, exc)
            outcome.error = exc
            return outcome
        outcome.reward_failures = list(run.failures)
        outcome.rewards_awarded = len(run.awarded)
        return outcome

    def track_all(self, travelers: Iterable[Traveler]) -> list[TrackingOutcome]:
        """Track every traveler on the bounded pool and block until all cycles are done.

        Outcomes are returned in input order.
        """
        travelers = list(travelers)
        futures = [self._executor.submit(self._outcome, t) for t in travelers]
        wait(futures)

        outcomes: list[TrackingOutcome] = []
        for traveler, f in zip(travelers, futures):
            exc = f.exception()
            if exc is None:
                outcomes.append(f.result())
                continue
            logger.error("Tracking failed for %s", traveler.user_name, exc_info=exc)
            outcomes.append(TrackingOutcome(traveler_id=traveler.id, user_name=traveler.user_name, error=exc))

        failed = sum(1 for o in outcomes if o.error is not None)
        logger.info("Tracked %d traveler(s), %d failed", len(outcomes), failed)
        return outcomes
