"""
Travelers and the in-memory traveler registry.

A `Traveler` is the unit of concurrency: its history and ledger are guarded by
their own locks, so work for different travelers never contends. The registry is
the process-lifetime store keyed by user name.
"""

from __future__ import annotations

import logging
import threading
from uuid import UUID, uuid4

from tourguide.core.errors import NotFound
from tourguide.domain.models import LocationSample, Offer, TravelerPreferences
from tourguide.rewards.ledger import RewardLedger

logger = logging.getLogger(__name__)


class Traveler:
    def __init__(
        self,
        user_name: str,
        *,
        traveler_id: UUID | None = None,
        phone: str = "",
        email: str = "",
        preferences: TravelerPreferences | None = None,
    ):
        self.id = traveler_id or uuid4()
        self.user_name = user_name
        self.phone = phone
        self.email = email
        self.preferences = preferences or TravelerPreferences()
        self.ledger = RewardLedger()
        self.trip_deals: list[Offer] = []
        self._history: list[LocationSample] = []
        self._history_lock = threading.Lock()

    def record_location(self, sample: LocationSample) -> None:
        """Append a sample to the history (append-only)."""
        if sample.traveler_id != self.id:
            raise ValueError(
                f"Sample for traveler {sample.traveler_id} cannot be recorded on traveler {self.id}."
            )
        with self._history_lock:
            self._history.append(sample)

    def history(self) -> tuple[LocationSample, ...]:
        """Snapshot of the recorded samples, oldest first."""
        with self._history_lock:
            return tuple(self._history)

    def latest_location(self) -> LocationSample | None:
        with self._history_lock:
            return self._history[-1] if self._history else None

    def __repr__(self) -> str:
        return f"Traveler(user_name={self.user_name!r}, id={self.id})"


class TravelerRegistry:
    """Thread-safe, in-memory map of user name -> `Traveler`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._travelers: dict[str, Traveler] = {}

    def add(self, traveler: Traveler) -> bool:
        """Register `traveler`; an existing user name is left untouched. Returns True if added."""
        with self._lock:
            if traveler.user_name in self._travelers:
                logger.debug("Traveler %s already registered; keeping existing entry.", traveler.user_name)
                return False
            self._travelers[traveler.user_name] = traveler
            return True

    def get(self, user_name: str) -> Traveler:
        with self._lock:
            traveler = self._travelers.get(user_name)
        if traveler is None:
            raise NotFound(user_name)
        return traveler

    def all(self) -> list[Traveler]:
        with self._lock:
            return list(self._travelers.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._travelers)
