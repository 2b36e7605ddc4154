"""
Pydantic schemas for rate snapshots and refresh results.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class CurrencyRateData(BaseModel):
    """Mid-market and customer rate for one currency (per 1 stablecoin)."""
    interbank: Decimal
    customer: Decimal


class RateData(BaseModel):
    """Current rate snapshot with freshness metadata."""
    currencies: dict[str, CurrencyRateData]
    stablecoins: dict[str, dict[str, Decimal]]
    source: str
    last_updated: datetime | None
    last_updated_text: str
    is_stale: bool
    error: str | None = None


class RefreshResponse(BaseModel):
    status: str
    source: str
    last_updated: datetime | None


class CurrencyMeta(BaseModel):
    code: str
    symbol: str
    decimals: int
    name: str


class StablecoinMeta(BaseModel):
    code: str
    name: str
    description: str


class FeeScheduleData(BaseModel):
    name: str
    transaction_fee_percent: Decimal
    network_fee_usd: Decimal
    minimum_fee: Decimal
    fx_spread_percent: Decimal


class MetaResponse(BaseModel):
    """Static configuration: supported currencies, stablecoins, fees, presets."""
    currencies: list[CurrencyMeta]
    stablecoins: list[StablecoinMeta]
    fees: FeeScheduleData
    legacy_fees: FeeScheduleData
    customer_spread_percent: Decimal
    preset_amounts: list[int]
    min_amount: Decimal
    max_amount: Decimal
    refresh_interval_seconds: float
    stale_threshold_seconds: float
