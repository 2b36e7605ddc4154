"""
Conversion engine — fee-aware stablecoin -> fiat conversion.

All functions are pure: they read an explicit ``RateSnapshot`` and
``FeeSchedule`` and never touch the network or the rate store. Amounts
that are zero, negative, non-finite, out of range or unparseable produce
``None`` (nothing to convert yet), never an exception.

Forward (send):   stablecoin amount -> fiat received
Reverse (receive): fiat target -> stablecoin amount required
Legacy:           same inputs through the legacy provider's fees, for comparison
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from ripefx.fx_engine.config import (
    LEGACY_FEES,
    MAX_CONVERTIBLE_AMOUNT,
    MIN_CONVERTIBLE_AMOUNT,
    RIPE_FEES,
    STABLECOIN_QUANTUM,
    FeeSchedule,
)
from ripefx.fx_engine.snapshot import CurrencyRate, RateSnapshot

_HUNDRED = Decimal("100")
_ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConversionResult:
    """Full fee breakdown. Fees in stablecoin units unless suffixed ``_fiat``."""
    gross_fiat: Decimal
    transaction_fee: Decimal
    transaction_fee_fiat: Decimal
    network_fee_fiat: Decimal
    fx_spread_amount: Decimal
    fx_spread_percent: Decimal
    net_fiat_received: Decimal
    effective_rate: Decimal
    total_fees_fiat: Decimal
    total_fees_percent: Decimal
    customer_rate: Decimal
    interbank_rate: Decimal
    # Reverse mode only
    required_amount: Decimal | None = None
    target_fiat: Decimal | None = None


@dataclass(frozen=True)
class LegacyResult:
    net_fiat_received: Decimal
    total_fees_fiat: Decimal
    effective_rate: Decimal
    legacy_rate: Decimal
    transaction_fee_fiat: Decimal
    network_fee_fiat: Decimal


@dataclass(frozen=True)
class SavingsResult:
    amount: Decimal
    percent: Decimal
    primary_better: bool


# ---------------------------------------------------------------------------
# Input handling
# ---------------------------------------------------------------------------


def as_decimal(value: Any) -> Decimal | None:
    """Coerce int/float/str/Decimal to Decimal; None when not a number at all."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None


def to_amount(value: Any) -> Decimal | None:
    """
    A convertible amount: finite, strictly positive and within
    ``MIN_CONVERTIBLE_AMOUNT`` .. ``MAX_CONVERTIBLE_AMOUNT``.
    """
    amount = as_decimal(value)
    if amount is None or not amount.is_finite() or amount <= 0:
        return None
    if not MIN_CONVERTIBLE_AMOUNT <= amount <= MAX_CONVERTIBLE_AMOUNT:
        return None
    return amount


def _lookup(snapshot: RateSnapshot, currency: Any) -> CurrencyRate | None:
    if not isinstance(currency, str):
        return None
    return snapshot.rate_for(currency)


# ---------------------------------------------------------------------------
# Forward
# ---------------------------------------------------------------------------


def convert_forward(
    amount: Any,
    currency: str,
    snapshot: RateSnapshot,
    fees: FeeSchedule = RIPE_FEES,
) -> ConversionResult | None:
    """Fiat received for ``amount`` stablecoin sent."""
    qty = to_amount(amount)
    rates = _lookup(snapshot, currency)
    if qty is None or rates is None:
        return None

    customer = rates.customer
    interbank = rates.interbank

    gross_fiat = qty * customer
    transaction_fee = max(qty * fees.transaction_fee_percent / _HUNDRED, fees.minimum_fee)
    network_fee_fiat = fees.network_fee_usd * customer

    fx_spread_amount = qty * (interbank - customer)
    fx_spread_percent = (interbank - customer) / interbank * _HUNDRED

    transaction_fee_fiat = transaction_fee * customer
    net_fiat_received = gross_fiat - transaction_fee_fiat - network_fee_fiat
    effective_rate = net_fiat_received / qty

    total_fees_fiat = transaction_fee_fiat + network_fee_fiat
    total_fees_percent = total_fees_fiat / gross_fiat * _HUNDRED

    return ConversionResult(
        gross_fiat=gross_fiat,
        transaction_fee=transaction_fee,
        transaction_fee_fiat=transaction_fee_fiat,
        network_fee_fiat=network_fee_fiat,
        fx_spread_amount=fx_spread_amount,
        fx_spread_percent=fx_spread_percent,
        net_fiat_received=net_fiat_received,
        effective_rate=effective_rate,
        total_fees_fiat=total_fees_fiat,
        total_fees_percent=total_fees_percent,
        customer_rate=customer,
        interbank_rate=interbank,
    )


# ---------------------------------------------------------------------------
# Reverse
# ---------------------------------------------------------------------------


def required_stablecoin_amount(
    target_fiat: Decimal, rates: CurrencyRate, fees: FeeSchedule = RIPE_FEES,
) -> Decimal:
    """
    Invert the forward formula for ``net == target_fiat``.

    Two closed-form branches: the percentage fee, and the minimum-fee floor
    when the percentage fee on the estimate would fall below it. Both are
    specific to this fee shape and must be re-derived if it changes.
    Rounded half-up to the smallest stablecoin unit.
    """
    customer = rates.customer
    fee_fraction = fees.transaction_fee_percent / _HUNDRED
    network_fee_fiat = fees.network_fee_usd * customer

    required = (target_fiat + network_fee_fiat) / (customer * (1 - fee_fraction))
    if required * fee_fraction < fees.minimum_fee:
        required = (target_fiat + network_fee_fiat + fees.minimum_fee * customer) / customer

    return required.quantize(STABLECOIN_QUANTUM, rounding=ROUND_HALF_UP)


def convert_reverse(
    target_fiat: Any,
    currency: str,
    snapshot: RateSnapshot,
    fees: FeeSchedule = RIPE_FEES,
) -> ConversionResult | None:
    """
    Stablecoin amount needed to deliver ``target_fiat`` net of fees.

    The rounded amount is run back through ``convert_forward`` so every
    figure in the result is consistent; the recovered net may differ from
    the target by the rounding of the required amount.
    """
    target = to_amount(target_fiat)
    rates = _lookup(snapshot, currency)
    if target is None or rates is None:
        return None

    required = required_stablecoin_amount(target, rates, fees)
    forward = convert_forward(required, currency, snapshot, fees)
    if forward is None:
        return None
    return replace(forward, required_amount=required, target_fiat=target)


# ---------------------------------------------------------------------------
# Legacy comparison
# ---------------------------------------------------------------------------


def convert_legacy(
    amount: Any,
    currency: str,
    snapshot: RateSnapshot,
    fees: FeeSchedule = LEGACY_FEES,
) -> LegacyResult | None:
    """What a legacy remittance provider would pay out for the same amount."""
    qty = to_amount(amount)
    rates = _lookup(snapshot, currency)
    if qty is None or rates is None:
        return None

    legacy_rate = rates.interbank * (1 - fees.fx_spread_percent / _HUNDRED)
    gross_fiat = qty * legacy_rate
    transaction_fee = max(qty * fees.transaction_fee_percent / _HUNDRED, fees.minimum_fee)
    transaction_fee_fiat = transaction_fee * legacy_rate
    network_fee_fiat = fees.network_fee_usd * legacy_rate
    net_fiat_received = gross_fiat - transaction_fee_fiat - network_fee_fiat

    return LegacyResult(
        net_fiat_received=net_fiat_received,
        total_fees_fiat=transaction_fee_fiat + network_fee_fiat,
        effective_rate=net_fiat_received / qty,
        legacy_rate=legacy_rate,
        transaction_fee_fiat=transaction_fee_fiat,
        network_fee_fiat=network_fee_fiat,
    )


def compute_savings(
    primary: ConversionResult | None, legacy: LegacyResult | None,
) -> SavingsResult | None:
    """Difference in net payout; percent is relative to the legacy payout."""
    if primary is None or legacy is None:
        return None

    amount = primary.net_fiat_received - legacy.net_fiat_received
    if legacy.net_fiat_received > 0:
        percent = abs(amount / legacy.net_fiat_received * _HUNDRED)
    else:
        percent = _ZERO
    return SavingsResult(amount=amount, percent=percent, primary_better=amount > 0)
