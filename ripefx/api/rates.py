"""
FX rate and quote endpoints.

Serves the current rate snapshot, full conversion quotes (send or
receive) with a legacy-provider comparison, and a manual refresh trigger.
All endpoints are public and read-only apart from the refresh.
"""

import dataclasses
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ripefx.api.deps import get_rate_service
from ripefx.fx_engine.config import (
    CURRENCIES,
    CUSTOMER_SPREAD_PERCENT,
    LEGACY_FEES,
    MAX_AMOUNT,
    MIN_AMOUNT,
    PRESET_AMOUNTS,
    REFRESH_INTERVAL_SECONDS,
    RIPE_FEES,
    STABLECOINS,
    STALE_THRESHOLD_SECONDS,
)
from ripefx.fx_engine.formatting import format_currency, last_updated_text
from ripefx.fx_engine.inputs import Direction, validate_amount
from ripefx.fx_engine.orchestrator import AllSourcesFailed
from ripefx.schemas.quote import ConversionData, LegacyData, QuoteResponse, SavingsData
from ripefx.schemas.rate import (
    CurrencyMeta,
    CurrencyRateData,
    FeeScheduleData,
    MetaResponse,
    RateData,
    RefreshResponse,
    StablecoinMeta,
)
from ripefx.services.rate_service import RateService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/current", response_model=RateData)
async def get_current_rates(svc: RateService = Depends(get_rate_service)):
    """
    Get the current rate snapshot.

    Always answers from the store: when every provider is down the last
    good snapshot is returned with ``is_stale`` / ``error`` set, so
    callers can show a cached-rates indicator instead of blocking.
    """
    rates = svc.get_rates()
    snapshot = rates["snapshot"]
    return RateData(
        currencies={
            code: CurrencyRateData(interbank=r.interbank, customer=r.customer)
            for code, r in snapshot.currencies.items()
        },
        stablecoins={coin: dict(coin_rates) for coin, coin_rates in snapshot.stablecoins.items()},
        source=rates["source"],
        last_updated=rates["last_updated"],
        last_updated_text=last_updated_text(svc.store),
        is_stale=rates["is_stale"],
        error=rates["error"],
    )


@router.get("/quote", response_model=QuoteResponse)
async def get_quote(
    amount: str = Query(
        ..., description="Stablecoin sent (send) or fiat to receive (receive)", examples=["100"],
    ),
    currency: str = Query(..., description="Payout currency", examples=["PHP"]),
    stablecoin: str = Query("USDC", description="Stablecoin sent", examples=["USDC"]),
    direction: str = Query("send", description="'send' or 'receive'", examples=["send"]),
    svc: RateService = Depends(get_rate_service),
):
    """
    Get a full conversion quote.

    Returns the fee breakdown, the legacy-provider comparison, savings and
    the freshness of the rates used. Stale rates still produce a quote.
    """
    max_amount = None if direction.lower() == Direction.RECEIVE.value else MAX_AMOUNT
    validation = validate_amount(amount, max_amount)
    if not validation.is_valid:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=validation.error,
        )

    try:
        quote = svc.build_quote(validation.value, currency, stablecoin, direction)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )

    if quote is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Amount must be greater than zero.",
        )

    primary = quote.primary
    return QuoteResponse(
        direction=quote.direction.value,
        currency=quote.currency,
        stablecoin=quote.stablecoin,
        amount=quote.amount,
        stablecoin_amount=quote.stablecoin_amount,
        stablecoin_rate=quote.stablecoin_rate,
        conversion=ConversionData(**dataclasses.asdict(primary)),
        legacy=LegacyData(**dataclasses.asdict(quote.legacy)) if quote.legacy else None,
        savings=SavingsData(**dataclasses.asdict(quote.savings)) if quote.savings else None,
        switch_amount=quote.switch_amount,
        net_display=format_currency(primary.net_fiat_received, quote.currency),
        total_fees_display=format_currency(primary.total_fees_fiat, quote.currency),
        source=quote.source,
        is_stale=quote.is_stale,
        last_updated=quote.last_updated,
    )


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_rates(svc: RateService = Depends(get_rate_service)):
    """
    Fetch fresh rates now.

    Returns 503 when every provider failed; the cached snapshot stays in
    use and ``/current`` keeps serving it.
    """
    outcome = await svc.refresh()
    if isinstance(outcome, AllSourcesFailed):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Unable to fetch live rates; serving cached rates.",
        )
    logger.info("Manual refresh served by %s", outcome.source_id)
    return RefreshResponse(
        status="ok",
        source=outcome.source_id,
        last_updated=svc.store.last_update_timestamp(),
    )


@router.get("/meta", response_model=MetaResponse)
async def get_meta():
    """Supported currencies, stablecoins, fee schedules and preset amounts."""
    return MetaResponse(
        currencies=[CurrencyMeta(**dataclasses.asdict(c)) for c in CURRENCIES.values()],
        stablecoins=[StablecoinMeta(**dataclasses.asdict(s)) for s in STABLECOINS.values()],
        fees=FeeScheduleData(**dataclasses.asdict(RIPE_FEES)),
        legacy_fees=FeeScheduleData(**dataclasses.asdict(LEGACY_FEES)),
        customer_spread_percent=CUSTOMER_SPREAD_PERCENT,
        preset_amounts=list(PRESET_AMOUNTS),
        min_amount=MIN_AMOUNT,
        max_amount=MAX_AMOUNT,
        refresh_interval_seconds=REFRESH_INTERVAL_SECONDS,
        stale_threshold_seconds=STALE_THRESHOLD_SECONDS,
    )
