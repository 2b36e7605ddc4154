"""
Display helpers for amounts and rate freshness.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from ripefx.fx_engine.config import CURRENCIES
from ripefx.fx_engine.conversion import as_decimal
from ripefx.fx_engine.store import RateStore


def _fixed(value: Decimal, decimals: int) -> str:
    quantum = Decimal(1).scaleb(-decimals)
    return f"{abs(value).quantize(quantum, rounding=ROUND_HALF_UP):,.{decimals}f}"


def format_currency(amount: Any, currency: str) -> str:
    """``-₱1,234.50`` style, using the currency's own decimal places."""
    value = as_decimal(amount)
    info = CURRENCIES.get(currency.upper())
    if info is None:
        if value is None or not value.is_finite():
            return "0.00"
        return f"{value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}"
    if value is None or not value.is_finite():
        return f"{info.symbol}0"
    sign = "-" if value < 0 else ""
    return f"{sign}{info.symbol}{_fixed(value, info.decimals)}"


def format_stablecoin(amount: Any) -> str:
    value = as_decimal(amount)
    if value is None or not value.is_finite():
        return "0.00"
    return _fixed(value, 2)


def last_updated_text(store: RateStore, now: datetime | None = None) -> str:
    updated_at = store.last_update_timestamp()
    if updated_at is None:
        return "Fetching..."
    now = now or store.now()
    minutes = int((now - updated_at).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes == 1:
        return "1 min ago"
    if minutes < 60:
        return f"{minutes} mins ago"
    return updated_at.strftime("%H:%M:%S")
