"""
TourGuide service: the surface the API and CLI call.

`TourGuideService` takes every collaborator through its constructor (registry,
engine, orchestrator, finder, pricer). `build_service` is the one place that wires
them from settings, and it accepts injected collaborators so tests and demos stay
offline and deterministic.

Two bounded pools are created per service: one for tracking cycles, one for reward
units. Tracking cycles wait on reward units, never the other way around, so they
must not share a pool.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from tourguide.catalog.loader import load_attractions
from tourguide.config.settings import Settings, get_settings
from tourguide.core.rate_limit import TokenBucketRateLimiter
from tourguide.core.workers import build_executor
from tourguide.domain.internal import generate_internal_travelers
from tourguide.domain.models import Attraction, LocationSample, NearbyAttraction, Offer, RewardRecord
from tourguide.domain.traveler import Traveler, TravelerRegistry
from tourguide.ingestion.location_client import HttpLocationSource, LocationSource, SimulatedLocationSource
from tourguide.ingestion.points_client import HttpPointsOracle, PointsOracle, SimulatedPointsOracle
from tourguide.ingestion.pricer_client import HttpTripPricer, SimulatedTripPricer, TripPricer
from tourguide.recommender.nearby import NearbyAttractionFinder
from tourguide.rewards.engine import RewardsEngine
from tourguide.rewards.proximity import ProximityPolicy
from tourguide.tracking.orchestrator import TrackingOrchestrator, TrackingOutcome
from tourguide.tracking.tracker import Tracker

logger = logging.getLogger(__name__)


class TourGuideService:
    def __init__(
        self,
        *,
        registry: TravelerRegistry,
        engine: RewardsEngine,
        orchestrator: TrackingOrchestrator,
        finder: NearbyAttractionFinder,
        pricer: TripPricer,
        pricer_api_key: str,
        executors: Sequence[ThreadPoolExecutor] = (),
    ):
        self.registry = registry
        self.engine = engine
        self.orchestrator = orchestrator
        self.finder = finder
        self._pricer = pricer
        self._pricer_api_key = pricer_api_key
        self._executors = list(executors)
        self._tracker: Tracker | None = None

    # ---- travelers ----

    def add_traveler(self, traveler: Traveler) -> bool:
        return self.registry.add(traveler)

    def get_traveler(self, user_name: str) -> Traveler:
        return self.registry.get(user_name)

    def all_travelers(self) -> list[Traveler]:
        return self.registry.all()

    def get_rewards(self, user_name: str) -> list[RewardRecord]:
        return self.registry.get(user_name).ledger.all()

    def current_location(self, user_name: str) -> LocationSample:
        """Latest known sample, or a freshly tracked one if the history is empty."""
        traveler = self.registry.get(user_name)
        latest = traveler.latest_location()
        if latest is not None:
            return latest
        return self.orchestrator.track_traveler(traveler)

    # ---- tracking ----

    def track(self, user_name: str) -> LocationSample:
        return self.orchestrator.track_traveler(self.registry.get(user_name))

    def track_all(self) -> list[TrackingOutcome]:
        return self.orchestrator.track_all(self.registry.all())

    def start_tracker(self, interval_seconds: float) -> Tracker:
        if self._tracker is not None and self._tracker.is_alive():
            return self._tracker
        self._tracker = Tracker(self.orchestrator, self.registry.all, interval_seconds=interval_seconds)
        self._tracker.start()
        return self._tracker

    # ---- read models ----

    def nearby_attractions(self, user_name: str) -> list[NearbyAttraction]:
        traveler = self.registry.get(user_name)
        return self.finder.nearby_attractions(self.current_location(user_name), traveler)

    def trip_deals(self, user_name: str) -> list[Offer]:
        traveler = self.registry.get(user_name)
        offers = self._pricer.price_offers(
            self._pricer_api_key,
            traveler.id,
            traveler.preferences,
            traveler.ledger.total_points(),
        )
        traveler.trip_deals = list(offers)
        return offers

    # ---- proximity administration ----

    @property
    def reward_radius(self) -> float:
        return self.engine.policy.reward_radius

    def set_reward_radius(self, miles: float) -> None:
        self.engine.policy.set_reward_radius(miles)
        logger.info("Reward radius set to %.2f miles", miles)

    def reset_reward_radius(self) -> None:
        self.engine.policy.reset_reward_radius()
        logger.info("Reward radius reset to %.2f miles", self.engine.policy.reward_radius)

    def shutdown(self) -> None:
        if self._tracker is not None:
            self._tracker.stop_tracking()
        # Tracking pool first: its cycles may still be feeding the reward pool.
        for executor in self._executors:
            executor.shutdown(wait=True)


def build_service(
    settings: Settings | None = None,
    *,
    attractions: Sequence[Attraction] | None = None,
    location_source: LocationSource | None = None,
    oracle: PointsOracle | None = None,
    pricer: TripPricer | None = None,
    seed_internal_travelers: bool | None = None,
) -> TourGuideService:
    settings = settings or get_settings()

    if attractions is None:
        attractions = load_attractions(settings.catalog.path)

    http_mode = settings.ingestion.mode == "http"
    limiter = (
        TokenBucketRateLimiter(max_per_minute=settings.ingestion.max_requests_per_minute)
        if settings.ingestion.max_requests_per_minute
        else None
    )
    if location_source is None:
        if http_mode:
            location_source = HttpLocationSource.from_settings(settings)
            location_source.set_rate_limiter(limiter)
        else:
            location_source = SimulatedLocationSource()
    if oracle is None:
        if http_mode:
            oracle = HttpPointsOracle.from_settings(settings)
            oracle.set_rate_limiter(limiter)
        else:
            oracle = SimulatedPointsOracle()
    if pricer is None:
        pricer = HttpTripPricer.from_settings(settings) if http_mode else SimulatedTripPricer()

    tracking_pool = build_executor(settings.workers.tracking_pool_size, name="tracking")
    reward_pool = build_executor(settings.workers.reward_pool_size, name="rewards")

    engine = RewardsEngine(
        attractions=attractions,
        oracle=oracle,
        policy=ProximityPolicy.from_settings(settings.proximity),
        executor=reward_pool,
    )
    orchestrator = TrackingOrchestrator(location_source=location_source, engine=engine, executor=tracking_pool)

    registry = TravelerRegistry()
    if seed_internal_travelers is None:
        seed_internal_travelers = settings.app.test_mode
    if seed_internal_travelers:
        logger.info("Test mode enabled; initializing %d internal travelers", settings.internal_users.count)
        for traveler in generate_internal_travelers(
            settings.internal_users.count,
            history_size=settings.internal_users.history_size,
            history_days=settings.internal_users.history_days,
        ):
            registry.add(traveler)

    return TourGuideService(
        registry=registry,
        engine=engine,
        orchestrator=orchestrator,
        finder=NearbyAttractionFinder(engine=engine, result_limit=settings.nearby.result_limit),
        pricer=pricer,
        pricer_api_key=settings.ingestion.pricer.api_key,
        executors=[tracking_pool, reward_pool],
    )
