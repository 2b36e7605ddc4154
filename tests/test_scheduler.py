"""Tests for the refresh scheduler."""

import asyncio

import pytest

from ripefx.fx_engine.orchestrator import AcquiredRates, AllSourcesFailed, FallbackOrchestrator
from ripefx.fx_engine.scheduler import RefreshScheduler
from ripefx.fx_engine.snapshot import RateSnapshot
from tests.conftest import LIVE_FIAT_RATES


def acquired(source_id):
    return AcquiredRates(source_id, RateSnapshot.from_fiat_rates(LIVE_FIAT_RATES))


class ScriptedOrchestrator:
    """Returns queued outcomes in call order, each after its own delay."""

    def __init__(self, steps):
        self.steps = list(steps)
        self.calls = 0

    async def acquire_rates(self):
        self.calls += 1
        delay, outcome = self.steps.pop(0)
        await asyncio.sleep(delay)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


async def wait_until(predicate, timeout=2.0):
    async def poll():
        while not predicate():
            await asyncio.sleep(0.005)
    await asyncio.wait_for(poll(), timeout)


class TestRefreshNow:

    @pytest.mark.asyncio
    async def test_applies_success(self, rate_store, make_ok_source):
        orchestrator = FallbackOrchestrator([make_ok_source("live")])
        scheduler = RefreshScheduler(orchestrator, rate_store, interval_seconds=60)

        outcome = await scheduler.refresh_now()

        assert isinstance(outcome, AcquiredRates)
        assert rate_store.source == "live"
        assert rate_store.is_stale() is False

    @pytest.mark.asyncio
    async def test_failure_keeps_cache(self, rate_store, make_failing_source):
        before = rate_store.get_snapshot()
        orchestrator = FallbackOrchestrator([make_failing_source("down")])
        scheduler = RefreshScheduler(orchestrator, rate_store, interval_seconds=60)

        outcome = await scheduler.refresh_now()

        assert isinstance(outcome, AllSourcesFailed)
        assert rate_store.get_snapshot() is before
        assert rate_store.last_error is not None

    @pytest.mark.asyncio
    async def test_overlapping_refreshes_last_write_wins(self, rate_store):
        """
        A slow scheduled refresh and a fast manual one overlap: both
        complete, and the one that finishes last owns the store.
        """
        orchestrator = ScriptedOrchestrator([
            (0.1, acquired("slow")),
            (0.0, acquired("fast")),
        ])
        scheduler = RefreshScheduler(orchestrator, rate_store, interval_seconds=60)

        slow, fast = await asyncio.gather(scheduler.refresh_now(), scheduler.refresh_now())

        assert slow.source_id == "slow"
        assert fast.source_id == "fast"
        assert rate_store.source == "slow"
        assert rate_store.get_snapshot() is slow.snapshot


class TestLoop:

    @pytest.mark.asyncio
    async def test_runs_immediately_on_start(self, rate_store, make_ok_source):
        source = make_ok_source("live")
        scheduler = RefreshScheduler(
            FallbackOrchestrator([source]), rate_store, interval_seconds=60,
        )

        scheduler.start()
        try:
            await wait_until(lambda: rate_store.source == "live")
            assert scheduler.running
            assert source.calls == 1
        finally:
            await scheduler.stop()

        assert not scheduler.running

    @pytest.mark.asyncio
    async def test_deferred_start_waits_for_interval(self, rate_store, make_ok_source):
        source = make_ok_source("live")
        scheduler = RefreshScheduler(
            FallbackOrchestrator([source]), rate_store, interval_seconds=60,
        )

        scheduler.start(run_immediately=False)
        await asyncio.sleep(0.05)
        await scheduler.stop()

        assert source.calls == 0
        assert rate_store.last_update_timestamp() is None

    @pytest.mark.asyncio
    async def test_refreshes_periodically(self, rate_store, make_ok_source):
        source = make_ok_source("live")
        scheduler = RefreshScheduler(
            FallbackOrchestrator([source]), rate_store, interval_seconds=0.01,
        )

        scheduler.start()
        try:
            await wait_until(lambda: source.calls >= 3)
        finally:
            await scheduler.stop()

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, rate_store, make_ok_source):
        scheduler = RefreshScheduler(
            FallbackOrchestrator([make_ok_source("live")]), rate_store, interval_seconds=60,
        )

        scheduler.start()
        task = scheduler._task
        scheduler.start()
        try:
            assert scheduler._task is task
        finally:
            await scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, rate_store, make_ok_source):
        scheduler = RefreshScheduler(FallbackOrchestrator([make_ok_source("live")]), rate_store)
        await scheduler.stop()
        assert not scheduler.running

    @pytest.mark.asyncio
    async def test_loop_survives_unexpected_error(self, rate_store):
        """An exception in one cycle is logged and the next cycle still runs."""
        orchestrator = ScriptedOrchestrator([
            (0.0, RuntimeError("boom")),
            (0.0, acquired("recovered")),
        ] + [(0.0, acquired("recovered"))] * 50)
        scheduler = RefreshScheduler(orchestrator, rate_store, interval_seconds=0.01)

        scheduler.start()
        try:
            await wait_until(lambda: rate_store.source == "recovered")
        finally:
            await scheduler.stop()

        assert orchestrator.calls >= 2
