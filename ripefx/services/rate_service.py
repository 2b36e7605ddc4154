"""
FX quote service — wires rate acquisition to the conversion engine.

Owns the rate store, the fallback orchestrator and the refresh scheduler
for one process, and assembles full quotes (Ripe conversion, legacy
comparison, savings) for the API layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

import httpx

from ripefx.fx_engine.config import CURRENCIES, STABLECOINS
from ripefx.fx_engine.conversion import (
    ConversionResult,
    LegacyResult,
    SavingsResult,
    compute_savings,
    convert_forward,
    convert_legacy,
    convert_reverse,
    to_amount,
)
from ripefx.fx_engine.inputs import Direction, switch_direction
from ripefx.fx_engine.orchestrator import AcquiredRates, AllSourcesFailed, FallbackOrchestrator
from ripefx.fx_engine.scheduler import RefreshScheduler
from ripefx.fx_engine.snapshot import get_stablecoin_rate
from ripefx.fx_engine.sources import RateSource, build_rate_sources
from ripefx.fx_engine.store import RateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Quote:
    """Everything a caller needs to show one conversion."""
    direction: Direction
    currency: str
    stablecoin: str
    amount: Decimal
    primary: ConversionResult
    legacy: LegacyResult | None
    savings: SavingsResult | None
    stablecoin_rate: Decimal
    switch_amount: Decimal | None
    source: str
    is_stale: bool
    last_updated: datetime | None

    @property
    def stablecoin_amount(self) -> Decimal:
        """Stablecoin the sender pays, whichever direction was quoted."""
        if self.direction is Direction.RECEIVE:
            return self.primary.required_amount
        return self.amount


class RateService:
    """FX quote engine over a live, self-refreshing rate store."""

    def __init__(
        self,
        store: RateStore,
        orchestrator: FallbackOrchestrator,
        scheduler: RefreshScheduler | None = None,
    ):
        self.store = store
        self.orchestrator = orchestrator
        self.scheduler = scheduler or RefreshScheduler(orchestrator, store)

    # --- Rates ---

    async def refresh(self) -> AcquiredRates | AllSourcesFailed:
        """Manual refresh; safe to call while a scheduled refresh is in flight."""
        outcome = await self.scheduler.refresh_now()
        if isinstance(outcome, AllSourcesFailed):
            logger.warning("Manual refresh failed; serving cached rates from %s", self.store.source)
        return outcome

    def get_rates(self) -> dict:
        """Current snapshot plus freshness metadata."""
        return {
            "snapshot": self.store.get_snapshot(),
            "source": self.store.source,
            "last_updated": self.store.last_update_timestamp(),
            "is_stale": self.store.is_stale(),
            "error": self.store.last_error,
        }

    # --- Quotes ---

    def build_quote(
        self,
        amount: Any,
        currency: str,
        stablecoin: str = "USDC",
        direction: Direction | str = Direction.SEND,
        include_comparison: bool = True,
    ) -> Quote | None:
        """
        Quote a conversion against the current snapshot.

        In send mode ``amount`` is the stablecoin sent; in receive mode it
        is the fiat the recipient should get and the legacy comparison is
        run on the stablecoin amount that target requires.

        Raises ValueError for unsupported currency, stablecoin or direction.
        Returns None when the amount is not convertible (zero, negative,
        non-numeric or out of range).
        """
        currency = currency.upper()
        stablecoin = stablecoin.upper()
        if currency not in CURRENCIES:
            raise ValueError(f"Unsupported currency: {currency}")
        if stablecoin not in STABLECOINS:
            raise ValueError(f"Unsupported stablecoin: {stablecoin}")
        try:
            direction = Direction(direction.lower())
        except ValueError:
            raise ValueError(f"Unsupported direction: {direction}") from None

        # One read: every figure in the quote comes from the same snapshot.
        snapshot = self.store.get_snapshot()

        if direction is Direction.RECEIVE:
            primary = convert_reverse(amount, currency, snapshot)
        else:
            primary = convert_forward(amount, currency, snapshot)
        if primary is None:
            return None

        legacy = None
        if include_comparison:
            compare_amount = (
                primary.required_amount if direction is Direction.RECEIVE else amount
            )
            legacy = convert_legacy(compare_amount, currency, snapshot)
        savings = compute_savings(primary, legacy)

        other = Direction.SEND if direction is Direction.RECEIVE else Direction.RECEIVE

        return Quote(
            direction=direction,
            currency=currency,
            stablecoin=stablecoin,
            amount=primary.target_fiat if direction is Direction.RECEIVE else to_amount(amount),
            primary=primary,
            legacy=legacy,
            savings=savings,
            stablecoin_rate=get_stablecoin_rate(snapshot, stablecoin, currency),
            switch_amount=switch_direction(other, primary),
            source=self.store.source,
            is_stale=self.store.is_stale(),
            last_updated=self.store.last_update_timestamp(),
        )


def build_rate_service(
    client: httpx.AsyncClient | None = None,
    sources: list[RateSource] | None = None,
) -> RateService:
    """Assemble the production service: default snapshot, four sources, 120s refresh."""
    store = RateStore()
    orchestrator = FallbackOrchestrator(sources or build_rate_sources(client))
    return RateService(store, orchestrator)
