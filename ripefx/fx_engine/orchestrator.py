"""
Fallback orchestrator — ordered, sequential rate acquisition.

Tries each rate source in priority order, bounding every attempt with a
timeout, and stops at the first result that passes full validation.
Attempts are never raced: the order encodes trust in each provider, and
stopping early avoids calls that would be thrown away.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Sequence

from ripefx.fx_engine.config import FALLBACK_TIMEOUT_SECONDS, PRIMARY_TIMEOUT_SECONDS
from ripefx.fx_engine.errors import FetchErrorKind, RateSourceError
from ripefx.fx_engine.snapshot import CurrencyRate, RateSnapshot
from ripefx.fx_engine.sources import ProviderResult, RateSource, parse_required_rates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcquiredRates:
    """A validated snapshot and the provider that supplied it."""
    source_id: str
    snapshot: RateSnapshot

    @property
    def rates_by_currency(self) -> Mapping[str, CurrencyRate]:
        return self.snapshot.currencies

    @property
    def rates_by_stablecoin(self) -> Mapping[str, Mapping[str, Decimal]]:
        return self.snapshot.stablecoins


@dataclass(frozen=True)
class AllSourcesFailed:
    """Every source in the priority list failed; ``failures`` is in attempt order."""
    failures: tuple[ProviderResult, ...]

    @property
    def source_ids(self) -> list[str]:
        return [f.source_id for f in self.failures]

    def summary(self) -> str:
        return "; ".join(
            f"{f.source_id}: {f.error.value if f.error else 'unknown'}" for f in self.failures
        )


class FallbackOrchestrator:
    """Runs the rate sources in order until one yields usable rates."""

    def __init__(
        self,
        sources: Sequence[RateSource],
        primary_timeout: float = PRIMARY_TIMEOUT_SECONDS,
        fallback_timeout: float = FALLBACK_TIMEOUT_SECONDS,
    ):
        if not sources:
            raise ValueError("at least one rate source is required")
        self.sources = list(sources)
        self.primary_timeout = primary_timeout
        self.fallback_timeout = fallback_timeout

    async def acquire_rates(self) -> AcquiredRates | AllSourcesFailed:
        """
        Try each source in priority order.

        Returns ``AcquiredRates`` from the first valid source, or
        ``AllSourcesFailed`` listing every failure. Never raises.
        """
        failures: list[ProviderResult] = []

        for index, source in enumerate(self.sources):
            timeout = self.primary_timeout if index == 0 else self.fallback_timeout
            logger.debug("Trying rate source %s (timeout %.1fs)", source.source_id, timeout)

            result = self._validate(await self._attempt(source, timeout))
            if result.ok:
                snapshot = RateSnapshot.from_fiat_rates(result.rates, result.stablecoin_rates)
                logger.info("Rates updated from %s", result.source_id)
                return AcquiredRates(source_id=result.source_id, snapshot=snapshot)

            logger.warning(
                "Rate source %s failed: %s %s",
                result.source_id,
                result.error.value if result.error else "unknown",
                result.detail,
            )
            failures.append(result)

        outcome = AllSourcesFailed(failures=tuple(failures))
        logger.error("All rate sources failed, keeping cached rates (%s)", outcome.summary())
        return outcome

    async def _attempt(self, source: RateSource, timeout: float) -> ProviderResult:
        try:
            result = await asyncio.wait_for(source.fetch(), timeout)
        except asyncio.TimeoutError:
            return ProviderResult.failure(
                source.source_id, FetchErrorKind.TIMEOUT, f"no response within {timeout}s",
            )
        except Exception as exc:
            # A source broke its never-raise contract; treat it as a transport failure.
            logger.exception("Rate source %s raised unexpectedly", source.source_id)
            return ProviderResult.failure(
                source.source_id, FetchErrorKind.NETWORK_ERROR, repr(exc),
            )

        if not isinstance(result, ProviderResult):
            logger.error(
                "Rate source %s returned %s instead of a ProviderResult",
                source.source_id, type(result).__name__,
            )
            return ProviderResult.failure(
                source.source_id,
                FetchErrorKind.PARSE_ERROR,
                f"unexpected result type {type(result).__name__}",
            )
        return result

    @staticmethod
    def _validate(result: ProviderResult) -> ProviderResult:
        """Re-check a reported success so no partial map reaches the store."""
        if not result.ok:
            return result
        if not isinstance(result.rates, Mapping):
            return ProviderResult.failure(
                result.source_id, FetchErrorKind.PARSE_ERROR, "rates is not a mapping",
            )
        try:
            rates = parse_required_rates(result.rates, result.source_id)
        except RateSourceError as exc:
            return ProviderResult.failure(result.source_id, exc.kind, str(exc))
        return ProviderResult.success(result.source_id, rates, result.stablecoin_rates)
