"""
Points oracle clients.

The oracle answers "how many points is this attraction worth to this traveler".
Two implementations share the `PointsOracle` protocol:
- `SimulatedPointsOracle`: in-process, random points in [1, 1000] (demo + load tests)
- `HttpPointsOracle`: calls a remote rewards service over HTTP

Both raise `OracleUnavailable` on failure; the engine contains that per pair.
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
from tourguide.core.errors import OracleUnavailable
from tourguide.core.http import get_json
from tourguide.core.rate_limit import TokenBucketRateLimiter

logger = logging.getLogger(__name__)


class PointsOracle(Protocol):
    def points_for(self, attraction_id: str, traveler_id: UUID) -> int: ...


class SimulatedPointsOracle:
    """Random reward points, optionally with an artificial per-call latency."""

    def __init__(self, *, rng: random.Random | None = None, latency_seconds: float = 0.0):
        self._rng = rng or random.Random()
        self._rng_lock = threading.Lock()
        self._latency_seconds = float(latency_seconds)

    def points_for(self, attraction_id: str, traveler_id: UUID) -> int:
        if self._latency_seconds > 0:
            time.sleep(self._latency_seconds)
        with self._rng_lock:
            return self._rng.randint(1, 1000)


class HttpPointsOracle:
    """GET `{base_url}?attractionId=...&userId=...` -> `{"points": int}` (or a bare int)."""

    def __init__(self, *, base_url: str, timeout_seconds: float = 15):
        self._base_url = base_url
        self._timeout_seconds = float(timeout_seconds)
        self._rate_limiter: TokenBucketRateLimiter | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpPointsOracle":
        return cls(
            base_url=settings.ingestion.points.base_url,
            timeout_seconds=settings.app.http_timeout_seconds,
        )

    def set_rate_limiter(self, limiter: TokenBucketRateLimiter | None) -> None:
        self._rate_limiter = limiter

    def points_for(self, attraction_id: str, traveler_id: UUID) -> int:
        if self._rate_limiter is not None:
            self._rate_limiter.acquire()
        try:
            payload = get_json(
                self._base_url,
                params={"attractionId": attraction_id, "userId": str(traveler_id)},
                timeout_seconds=self._timeout_seconds,
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Points request failed for attraction=%s: %s", attraction_id, exc)
            raise OracleUnavailable(attraction_id, traveler_id) from exc
        return _parse_points(payload, attraction_id=attraction_id, traveler_id=traveler_id)


def _parse_points(payload: Any, *, attraction_id: str, traveler_id: UUID) -> int:
    raw = payload.get("points") if isinstance(payload, dict) else payload
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise OracleUnavailable(attraction_id, traveler_id, message=f"invalid points payload {payload!r}")
    return raw
