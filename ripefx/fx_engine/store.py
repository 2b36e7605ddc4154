"""
Rate store — the single owner of the current rate snapshot.

Snapshot, timestamp and source live in one immutable record that is
swapped in a single assignment, so readers always see a fully committed
snapshot and concurrent refreshes resolve as last-write-wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from ripefx.fx_engine.config import STALE_THRESHOLD_SECONDS
from ripefx.fx_engine.orchestrator import AcquiredRates, AllSourcesFailed
from ripefx.fx_engine.snapshot import RateSnapshot, default_snapshot

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "fallback"
FETCH_FAILED_MESSAGE = "Unable to fetch live rates"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class _StoreState:
    snapshot: RateSnapshot
    updated_at: datetime | None
    source: str


class RateStore:
    """Holds the latest ``RateSnapshot`` and derives staleness from its age."""

    def __init__(
        self,
        snapshot: RateSnapshot | None = None,
        stale_after_seconds: float = STALE_THRESHOLD_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._state = _StoreState(
            snapshot=snapshot or default_snapshot(),
            updated_at=None,
            source=DEFAULT_SOURCE,
        )
        self._stale_after = timedelta(seconds=stale_after_seconds)
        self._clock = clock
        self.last_error: str | None = None

    # --- Reads ---

    @property
    def snapshot(self) -> RateSnapshot:
        return self._state.snapshot

    def get_snapshot(self) -> RateSnapshot:
        return self._state.snapshot

    @property
    def source(self) -> str:
        return self._state.source

    def last_update_timestamp(self) -> datetime | None:
        return self._state.updated_at

    def now(self) -> datetime:
        return self._clock()

    def is_stale(self) -> bool:
        """True if never updated, or if the last update is older than the threshold."""
        updated_at = self._state.updated_at
        if updated_at is None:
            return True
        return self._clock() - updated_at > self._stale_after

    # --- Writes ---

    def update(self, acquired: AcquiredRates) -> None:
        """Replace snapshot, timestamp and source in one step."""
        self._state = _StoreState(
            snapshot=acquired.snapshot,
            updated_at=self._clock(),
            source=acquired.source_id,
        )
        self.last_error = None

    def record_failure(self, outcome: AllSourcesFailed) -> None:
        """Note a failed cycle; the previous snapshot stays authoritative."""
        self.last_error = FETCH_FAILED_MESSAGE
        logger.info(
            "Serving cached rates from %s (stale=%s) after failed refresh: %s",
            self._state.source, self.is_stale(), outcome.summary(),
        )

    def apply(self, outcome: AcquiredRates | AllSourcesFailed) -> bool:
        """Commit a refresh outcome. Returns True if the snapshot was replaced."""
        if isinstance(outcome, AcquiredRates):
            self.update(outcome)
            return True
        self.record_failure(outcome)
        return False
