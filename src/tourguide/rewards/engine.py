"""
Rewards calculation engine.

Matches a traveler's location history against the attraction catalog and awards
points for every attraction visited within the reward radius.

Pipeline for one run:
1. snapshot history + ledger attraction ids (attractions already awarded are skipped)
2. scan history order, then catalog order (full cross product, no spatial index)
3. keep the first eligible sample per attraction, so the oracle is asked once per
   newly qualified attraction
4. ask the points oracle and `award` into the ledger

`calculate_rewards` does steps 3-4 inline; `calculate_rewards_async` turns each
qualified pair into a unit of work on the shared reward pool and returns a future
that resolves once every unit finished. The ledger's `award` is the real duplicate
guard; the pre-filter only saves oracle calls.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from typing import Sequence
from uuid import UUID

from tourguide.core.errors import OracleUnavailable
from tourguide.core.workers import when_all
from tourguide.domain.models import Attraction, LocationSample, RewardRecord
from tourguide.domain.traveler import Traveler
from tourguide.ingestion.points_client import PointsOracle
from tourguide.rewards.proximity import ProximityPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewardFailure:
    """A qualified pair whose points could not be fetched (never awarded)."""

    attraction_id: str
    sample: LocationSample
    error: OracleUnavailable


@dataclass
class RewardRun:
    """Outcome of one engine invocation for one traveler."""

    traveler_id: UUID
    awarded: list[RewardRecord] = field(default_factory=list)
    failures: list[RewardFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class RewardsEngine:
    def __init__(
        self,
        *,
        attractions: Sequence[Attraction],
        oracle: PointsOracle,
        policy: ProximityPolicy,
        executor: Executor,
    ):
        self._attractions = tuple(attractions)
        self._oracle = oracle
        self._policy = policy
        self._executor = executor

    @property
    def policy(self) -> ProximityPolicy:
        return self._policy

    @property
    def attractions(self) -> tuple[Attraction, ...]:
        return self._attractions

    @property
    def executor(self) -> Executor:
        """Pool that runs reward units for `calculate_rewards_async`."""
        return self._executor

    def points_for(self, attraction: Attraction, traveler: Traveler) -> int:
        """Ask the oracle; any failure surfaces as `OracleUnavailable`."""
        try:
            points = self._oracle.points_for(attraction.id, traveler.id)
        except OracleUnavailable:
            raise
        except Exception as exc:
            raise OracleUnavailable(attraction.id, traveler.id, message=str(exc) or type(exc).__name__) from exc
        if isinstance(points, bool) or not isinstance(points, int) or points < 0:
            raise OracleUnavailable(attraction.id, traveler.id, message=f"invalid points value {points!r}")
        return points

    def qualified_pairs(self, traveler: Traveler) -> list[tuple[LocationSample, Attraction]]:
        """First eligible sample per not-yet-awarded attraction, in history then catalog order."""
        skip = set(traveler.ledger.attraction_ids())
        pairs: list[tuple[LocationSample, Attraction]] = []
        for sample in traveler.history():
            for attraction in self._attractions:
                if attraction.id in skip:
                    continue
                if self._policy.is_reward_eligible(attraction, sample):
                    skip.add(attraction.id)
                    pairs.append((sample, attraction))
        return pairs

    def _evaluate(self, traveler: Traveler, sample: LocationSample, attraction: Attraction) -> RewardRecord | None:
        points = self.points_for(attraction, traveler)
        record = RewardRecord(sample=sample, attraction=attraction, points=points)
        if traveler.ledger.award(record):
            return record
        # Another run for this traveler awarded the attraction first.
        return None

    def calculate_rewards(self, traveler: Traveler) -> RewardRun:
        """Blocking mode: evaluate every qualified pair on the calling thread."""
        run = RewardRun(traveler_id=traveler.id)
        for sample, attraction in self.qualified_pairs(traveler):
            try:
                record = self._evaluate(traveler, sample, attraction)
            except OracleUnavailable as exc:
                run.failures.append(RewardFailure(attraction_id=attraction.id, sample=sample, error=exc))
                continue
            if record is not None:
                run.awarded.append(record)
        _log_run(traveler, run)
        return run

    def calculate_rewards_async(self, traveler: Traveler) -> Future[RewardRun]:
        """Concurrent mode: one unit per qualified pair on the reward pool, joined into one future."""
        pairs = self.qualified_pairs(traveler)
        futures = [
            self._executor.submit(self._evaluate, traveler, sample, attraction) for sample, attraction in pairs
        ]

        def _combine(done: Sequence[Future]) -> RewardRun:
            run = RewardRun(traveler_id=traveler.id)
            for (sample, attraction), f in zip(pairs, done):
                exc = f.exception()
                if isinstance(exc, OracleUnavailable):
                    run.failures.append(RewardFailure(attraction_id=attraction.id, sample=sample, error=exc))
                    continue
                if exc is not None:
                    raise exc
                record = f.result()
                if record is not None:
                    run.awarded.append(record)
            _log_run(traveler, run)
            return run

        return when_all(futures, _combine)


def _log_run(traveler: Traveler, run: RewardRun) -> None:
    for failure in run.failures:
        logger.warning("Reward not awarded for %s: %s", traveler.user_name, failure.error)
    if run.awarded:
        logger.debug("Awarded %d reward(s) to %s", len(run.awarded), traveler.user_name)
