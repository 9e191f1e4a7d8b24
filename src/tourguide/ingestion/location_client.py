"""
Location source clients.

A location source returns the current position of a traveler as a `LocationSample`.
- `SimulatedLocationSource`: random position anywhere on the (Web Mercator) globe
- `HttpLocationSource`: asks a remote GPS service over HTTP

Failures are raised as `SourceUnavailable` so the orchestrator can abort one
traveler's cycle without touching the others.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import Any, Protocol
from uuid import UUID

import httpx

from tourguide.config.settings import Settings
from tourguide.core.errors import SourceUnavailable
from tourguide.core.geo import Coordinate
from tourguide.core.http import get_json
from tourguide.core.rate_limit import TokenBucketRateLimiter
from tourguide.core.time import parse_datetime, utc_now
from tourguide.domain.models import LocationSample

logger = logging.getLogger(__name__)

# Latitude bounds of the Web Mercator projection.
MAX_LATITUDE = 85.05112878


class LocationSource(Protocol):
    def fetch_location(self, traveler_id: UUID) -> LocationSample: ...


class SimulatedLocationSource:
    def __init__(self, *, rng: random.Random | None = None, latency_seconds: float = 0.0):
        self._rng = rng or random.Random()
        self._rng_lock = threading.Lock()
        self._latency_seconds = float(latency_seconds)

    def fetch_location(self, traveler_id: UUID) -> LocationSample:
        if self._latency_seconds > 0:
            time.sleep(self._latency_seconds)
        with self._rng_lock:
            lat = self._rng.uniform(-MAX_LATITUDE, MAX_LATITUDE)
            lon = self._rng.uniform(-180.0, 180.0)
        return LocationSample(
            traveler_id=traveler_id,
            coordinate=Coordinate(latitude=lat, longitude=lon),
            timestamp=utc_now(),
        )


class HttpLocationSource:
    """GET `{base_url}?userId=...` -> `{"latitude", "longitude", "timestamp"?}`."""

    def __init__(self, *, base_url: str, timeout_seconds: float = 15):
        self._base_url = base_url
        self._timeout_seconds = float(timeout_seconds)
        self._rate_limiter: TokenBucketRateLimiter | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpLocationSource":
        return cls(
            base_url=settings.ingestion.location.base_url,
            timeout_seconds=settings.app.http_timeout_seconds,
        )

    def set_rate_limiter(self, limiter: TokenBucketRateLimiter | None) -> None:
        self._rate_limiter = limiter

    def fetch_location(self, traveler_id: UUID) -> LocationSample:
        if self._rate_limiter is not None:
            self._rate_limiter.acquire()
        try:
            payload = get_json(
                self._base_url,
                params={"userId": str(traveler_id)},
                timeout_seconds=self._timeout_seconds,
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Location request failed for traveler=%s: %s", traveler_id, exc)
            raise SourceUnavailable(traveler_id) from exc
        return _parse_sample(payload, traveler_id=traveler_id)


def _parse_sample(payload: Any, *, traveler_id: UUID) -> LocationSample:
    if not isinstance(payload, dict):
        raise SourceUnavailable(traveler_id, message=f"invalid location payload {payload!r}")
    try:
        raw_ts = payload.get("timestamp")
        timestamp = parse_datetime(str(raw_ts)) if raw_ts else utc_now()
        return LocationSample(
            traveler_id=traveler_id,
            coordinate=Coordinate(
                latitude=float(payload["latitude"]),
                longitude=float(payload["longitude"]),
            ),
            timestamp=timestamp,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise SourceUnavailable(traveler_id, message=f"invalid location payload {payload!r}") from exc
