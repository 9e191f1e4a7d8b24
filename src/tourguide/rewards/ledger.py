"""
Per-traveler reward ledger.

The ledger is keyed by attraction id and only ever grows. `award` is the single
mutation and runs under the ledger's lock, so concurrent reward units for the same
traveler can race freely: exactly one of them wins per attraction.
"""

from __future__ import annotations

import threading

from tourguide.domain.models import RewardRecord


class RewardLedger:
    """Append-only, deduplicated collection of `RewardRecord`s for one traveler."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # dicts keep insertion order, so `all()` reports awards in the order they landed.
        self._records: dict[str, RewardRecord] = {}

    def award(self, record: RewardRecord) -> bool:
        """Insert `record` unless its attraction was already awarded; return True if inserted."""
        key = record.attraction.id
        with self._lock:
            if key in self._records:
                return False
            self._records[key] = record
            return True

    def all(self) -> list[RewardRecord]:
        with self._lock:
            return list(self._records.values())

    def attraction_ids(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._records)

    def total_points(self) -> int:
        with self._lock:
            return sum(r.points for r in self._records.values())

    def __contains__(self, attraction_id: object) -> bool:
        with self._lock:
            return attraction_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
