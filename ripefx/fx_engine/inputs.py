"""
User input handling: amount validation and send/receive direction switching.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from ripefx.fx_engine.config import MAX_AMOUNT, MAX_CONVERTIBLE_AMOUNT, MAX_DECIMALS
from ripefx.fx_engine.conversion import ConversionResult, as_decimal

_ZERO = Decimal("0")


class Direction(str, enum.Enum):
    SEND = "send"        # amount is stablecoin sent
    RECEIVE = "receive"  # amount is fiat the recipient should get


@dataclass(frozen=True)
class AmountValidation:
    is_valid: bool
    value: Decimal
    error: str | None = None


def validate_amount(raw: Any, max_amount: Decimal | None = MAX_AMOUNT) -> AmountValidation:
    """
    Validate and sanitize a user-entered amount.

    Empty input is valid and means zero. Values above ``max_amount`` are
    rejected with the cap as the suggested value; pass None for fiat
    targets, which are bounded only by ``MAX_CONVERTIBLE_AMOUNT``.
    Anything else is rounded half-up to ``MAX_DECIMALS`` places.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return AmountValidation(is_valid=True, value=_ZERO)

    value = as_decimal(raw)
    if value is None or not value.is_finite():
        return AmountValidation(False, _ZERO, "Please enter a valid number")

    if value < 0:
        return AmountValidation(False, _ZERO, "Amount cannot be negative")

    if max_amount is not None and value > max_amount:
        return AmountValidation(False, max_amount, f"Maximum: {int(max_amount):,} USDC")

    if value > MAX_CONVERTIBLE_AMOUNT:
        return AmountValidation(False, MAX_CONVERTIBLE_AMOUNT, "Amount is too large")

    quantum = Decimal(1).scaleb(-MAX_DECIMALS)
    return AmountValidation(True, value.quantize(quantum, rounding=ROUND_HALF_UP))


def switch_direction(
    new_direction: Direction, result: ConversionResult | None,
) -> Decimal | None:
    """
    Amount to pre-fill when the user flips direction.

    send -> receive: the fiat the current send amount delivers, whole units.
    receive -> send: the stablecoin amount the current target requires.
    """
    if result is None:
        return None
    if new_direction is Direction.RECEIVE:
        return result.net_fiat_received.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return result.required_amount
