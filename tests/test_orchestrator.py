"""Tests for the fallback orchestrator."""

from decimal import Decimal

import pytest

from ripefx.fx_engine.errors import FetchErrorKind
from ripefx.fx_engine.orchestrator import AcquiredRates, AllSourcesFailed, FallbackOrchestrator
from ripefx.fx_engine.sources import ProviderResult
from tests.conftest import LIVE_FIAT_RATES, StubSource


def make_orchestrator(sources, timeout=0.5):
    return FallbackOrchestrator(sources, primary_timeout=timeout, fallback_timeout=timeout)


class TestFallbackOrder:

    @pytest.mark.asyncio
    async def test_primary_success_stops_early(self, make_ok_source):
        """When the first source answers, no other source is called."""
        first = make_ok_source("s1")
        second = make_ok_source("s2")

        outcome = await make_orchestrator([first, second]).acquire_rates()

        assert isinstance(outcome, AcquiredRates)
        assert outcome.source_id == "s1"
        assert first.calls == 1
        assert second.calls == 0

    @pytest.mark.asyncio
    async def test_third_source_wins(self, make_ok_source, make_failing_source):
        """Sources 1 and 2 fail, 3 succeeds, 4 is never contacted."""
        sources = [
            make_failing_source("s1"),
            make_failing_source("s2", kind=FetchErrorKind.INVALID_DATA),
            make_ok_source("s3"),
            make_ok_source("s4"),
        ]

        outcome = await make_orchestrator(sources).acquire_rates()

        assert isinstance(outcome, AcquiredRates)
        assert outcome.source_id == "s3"
        assert [s.calls for s in sources] == [1, 1, 1, 0]

    @pytest.mark.asyncio
    async def test_all_sources_fail(self, make_failing_source):
        sources = [
            make_failing_source("s1", kind=FetchErrorKind.TIMEOUT),
            make_failing_source("s2", kind=FetchErrorKind.NETWORK_ERROR),
            make_failing_source("s3", kind=FetchErrorKind.PARSE_ERROR),
            make_failing_source("s4", kind=FetchErrorKind.INVALID_DATA),
        ]

        outcome = await make_orchestrator(sources).acquire_rates()

        assert isinstance(outcome, AllSourcesFailed)
        assert outcome.source_ids == ["s1", "s2", "s3", "s4"]
        assert [f.error for f in outcome.failures] == [
            FetchErrorKind.TIMEOUT,
            FetchErrorKind.NETWORK_ERROR,
            FetchErrorKind.PARSE_ERROR,
            FetchErrorKind.INVALID_DATA,
        ]
        assert "s1: timeout" in outcome.summary()

    def test_requires_a_source(self):
        with pytest.raises(ValueError):
            FallbackOrchestrator([])


class TestAttemptFailures:

    @pytest.mark.asyncio
    async def test_slow_source_times_out(self, make_ok_source):
        """A source exceeding its timeout is abandoned and the next one used."""
        slow = make_ok_source("slow", delay=1.0)
        fast = make_ok_source("fast")
        orchestrator = FallbackOrchestrator(
            [slow, fast], primary_timeout=0.05, fallback_timeout=0.5,
        )

        outcome = await orchestrator.acquire_rates()

        assert outcome.source_id == "fast"
        assert slow.calls == 1

    @pytest.mark.asyncio
    async def test_fallback_timeout_applies_after_primary(
        self, make_ok_source, make_failing_source,
    ):
        """Only index 0 gets the primary timeout; later sources get the fallback one."""
        sources = [
            make_failing_source("primary"),
            make_ok_source("fallback", delay=0.1),
        ]
        orchestrator = FallbackOrchestrator(
            sources, primary_timeout=0.5, fallback_timeout=0.01,
        )

        outcome = await orchestrator.acquire_rates()

        assert isinstance(outcome, AllSourcesFailed)
        assert outcome.failures[1].error == FetchErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_timeout_recorded(self, make_ok_source):
        orchestrator = make_orchestrator([make_ok_source("slow", delay=1.0)], timeout=0.05)

        outcome = await orchestrator.acquire_rates()

        assert isinstance(outcome, AllSourcesFailed)
        assert outcome.failures[0].error == FetchErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_raising_source_is_a_failure(self, make_ok_source):
        broken = StubSource("broken", raises=RuntimeError("boom"))

        outcome = await make_orchestrator([broken, make_ok_source("next")]).acquire_rates()

        assert outcome.source_id == "next"

    @pytest.mark.asyncio
    async def test_non_result_return_is_parse_error(self, make_ok_source):
        """A source handing back something other than a ProviderResult is skipped."""
        broken = StubSource("broken", result={"PHP": Decimal("58")})

        outcome = await make_orchestrator([broken, make_ok_source("next")]).acquire_rates()

        assert outcome.source_id == "next"

    @pytest.mark.asyncio
    async def test_none_return_recorded(self):
        outcome = await make_orchestrator([StubSource("broken", result=None)]).acquire_rates()

        assert isinstance(outcome, AllSourcesFailed)
        assert outcome.failures[0].source_id == "broken"
        assert outcome.failures[0].error == FetchErrorKind.PARSE_ERROR
        assert "NoneType" in outcome.failures[0].detail

    @pytest.mark.asyncio
    async def test_non_mapping_rates_rejected(self):
        bogus = ProviderResult("bogus", rates=[("PHP", Decimal("58"))])

        outcome = await make_orchestrator([StubSource("bogus", result=bogus)]).acquire_rates()

        assert isinstance(outcome, AllSourcesFailed)
        assert outcome.failures[0].error == FetchErrorKind.PARSE_ERROR

    @pytest.mark.asyncio
    async def test_partial_success_rejected(self, make_ok_source):
        """A source claiming success with a missing currency is treated as invalid."""
        partial = {k: v for k, v in LIVE_FIAT_RATES.items() if k != "IDR"}
        sources = [make_ok_source("partial", rates=partial), make_ok_source("full")]

        outcome = await make_orchestrator(sources).acquire_rates()

        assert outcome.source_id == "full"

    @pytest.mark.asyncio
    async def test_non_positive_rate_rejected(self, make_ok_source):
        bad = dict(LIVE_FIAT_RATES, THB=Decimal("0"))

        outcome = await make_orchestrator([make_ok_source("bad", rates=bad)]).acquire_rates()

        assert isinstance(outcome, AllSourcesFailed)
        assert outcome.failures[0].error == FetchErrorKind.INVALID_DATA


class TestAcquiredSnapshot:

    @pytest.mark.asyncio
    async def test_customer_rates_derived(self, make_ok_source):
        outcome = await make_orchestrator([make_ok_source("s1")]).acquire_rates()

        php = outcome.rates_by_currency["PHP"]
        assert php.interbank == Decimal("58.00")
        assert php.customer == Decimal("57.826")
        for rate in outcome.rates_by_currency.values():
            assert rate.customer <= rate.interbank

    @pytest.mark.asyncio
    async def test_fiat_only_source_derives_stablecoins(self, make_ok_source):
        """Without coin prices all stablecoins share the customer-rate map."""
        outcome = await make_orchestrator([make_ok_source("fiat")]).acquire_rates()

        coins = outcome.rates_by_stablecoin
        assert set(coins) == {"USDC", "USDT", "USDG"}
        assert coins["USDC"] == coins["USDT"] == coins["USDG"]
        assert coins["USDC"]["PHP"] == outcome.rates_by_currency["PHP"].customer
        assert coins["USDC"]["USD"] == Decimal("1.0")

    @pytest.mark.asyncio
    async def test_stablecoin_prices_kept(self):
        coin_map = dict(LIVE_FIAT_RATES, USD=Decimal("0.9998"))
        source = StubSource(
            "coins",
            ProviderResult.success(
                "coins", dict(LIVE_FIAT_RATES), {"USDC": coin_map, "USDG": coin_map},
            ),
        )

        outcome = await make_orchestrator([source]).acquire_rates()

        assert outcome.rates_by_stablecoin["USDC"]["USD"] == Decimal("0.9998")
        assert outcome.rates_by_stablecoin["USDT"]["USD"] == Decimal("1.0")
