"""
Shared test fixtures for Ripe FX Quote.

Provides stub rate sources, a controllable clock, a rate service wired
to stubs, and an async HTTP test client with the service overridden.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ripefx.api.deps import get_rate_service
from ripefx.fx_engine.errors import FetchErrorKind
from ripefx.fx_engine.orchestrator import FallbackOrchestrator
from ripefx.fx_engine.snapshot import default_snapshot
from ripefx.fx_engine.sources import ProviderResult
from ripefx.fx_engine.store import RateStore
from ripefx.services.rate_service import RateService


# --- Rate data ---


LIVE_FIAT_RATES = {
    "PHP": Decimal("58.00"),
    "THB": Decimal("36.00"),
    "IDR": Decimal("16000"),
    "MYR": Decimal("4.50"),
}


# --- Stub sources ---


class StubSource:
    """RateSource double: returns a fixed result, optionally after a delay."""

    def __init__(self, source_id, result=None, delay=0.0, raises=None):
        self.source_id = source_id
        self.result = result
        self.delay = delay
        self.raises = raises
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raises is not None:
            raise self.raises
        return self.result


def ok_source(source_id, rates=None, stablecoin_rates=None, **kwargs):
    return StubSource(
        source_id,
        ProviderResult.success(source_id, dict(rates or LIVE_FIAT_RATES), stablecoin_rates),
        **kwargs,
    )


def failing_source(source_id, kind=FetchErrorKind.NETWORK_ERROR, **kwargs):
    return StubSource(
        source_id, ProviderResult.failure(source_id, kind, "stubbed failure"), **kwargs,
    )


@pytest.fixture
def make_ok_source():
    return ok_source


@pytest.fixture
def make_failing_source():
    return failing_source


# --- Clock ---


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Controllable UTC clock for staleness tests."""
    return FakeClock(datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc))


# --- Core objects ---


@pytest.fixture
def snapshot():
    """Default snapshot: PHP interbank 59.0 / customer 58.5, etc."""
    return default_snapshot()


@pytest.fixture
def rate_store(clock):
    return RateStore(clock=clock)


@pytest.fixture
def rate_service(rate_store):
    """
    RateService over stub sources: the primary always fails and the backup
    answers with LIVE_FIAT_RATES. Until refreshed it serves the default snapshot.
    """
    orchestrator = FallbackOrchestrator(
        [failing_source("primary"), ok_source("backup")],
        primary_timeout=1.0,
        fallback_timeout=1.0,
    )
    return RateService(rate_store, orchestrator)


# --- HTTP client ---


@pytest_asyncio.fixture
async def client(rate_service):
    """
    Async HTTP test client with get_rate_service overridden to use the
    stub-backed service (the lifespan refresh loop is not started).
    """
    from ripefx.main import app

    async def override_get_rate_service():
        return rate_service

    app.dependency_overrides[get_rate_service] = override_get_rate_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
