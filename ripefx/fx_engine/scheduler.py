"""
Refresh scheduler — periodic and manual rate refreshes.

Runs one acquisition at startup and then one every
``REFRESH_INTERVAL_SECONDS`` on the running event loop. ``refresh_now()``
uses the same path and may overlap a scheduled run; both complete and
whichever finishes last owns the store.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ripefx.fx_engine.config import REFRESH_INTERVAL_SECONDS
from ripefx.fx_engine.orchestrator import AcquiredRates, AllSourcesFailed, FallbackOrchestrator
from ripefx.fx_engine.store import RateStore

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Drives ``FallbackOrchestrator.acquire_rates()`` into a ``RateStore``."""

    def __init__(
        self,
        orchestrator: FallbackOrchestrator,
        store: RateStore,
        interval_seconds: float = REFRESH_INTERVAL_SECONDS,
    ):
        self._orchestrator = orchestrator
        self._store = store
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh_now(self) -> AcquiredRates | AllSourcesFailed:
        """Acquire rates once and commit the outcome to the store."""
        outcome = await self._orchestrator.acquire_rates()
        self._store.apply(outcome)
        return outcome

    def start(self, run_immediately: bool = True) -> None:
        """Start the background loop on the current event loop (no-op if running)."""
        if self.running:
            return
        logger.info("Starting rate refresh loop every %.0fs", self._interval)
        self._task = asyncio.create_task(self._run(run_immediately), name="fx-rate-refresh")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Rate refresh loop stopped")

    async def _run(self, run_immediately: bool) -> None:
        if not run_immediately:
            await asyncio.sleep(self._interval)
        while True:
            try:
                await self.refresh_now()
            except Exception:
                logger.exception("Scheduled rate refresh failed")
            await asyncio.sleep(self._interval)
