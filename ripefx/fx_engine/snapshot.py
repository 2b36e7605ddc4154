"""
Canonical rate snapshot types.

A ``RateSnapshot`` is built in one piece from a single provider response
and is never modified afterwards; refreshes replace it wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from ripefx.fx_engine.config import (
    CUSTOMER_SPREAD_PERCENT,
    DEFAULT_FX_RATES,
    DEFAULT_STABLECOIN_RATES,
    SUPPORTED_CURRENCIES,
    SUPPORTED_STABLECOINS,
)

_HUNDRED = Decimal("100")
_USD_REFERENCE = Decimal("1.0")


@dataclass(frozen=True)
class CurrencyRate:
    """Interbank (mid-market) and customer rate, stablecoin unit -> currency unit."""
    interbank: Decimal
    customer: Decimal

    def __post_init__(self):
        if self.customer > self.interbank:
            raise ValueError(
                f"customer rate {self.customer} exceeds interbank rate {self.interbank}"
            )

    @classmethod
    def from_interbank(
        cls, interbank: Decimal, spread_percent: Decimal = CUSTOMER_SPREAD_PERCENT,
    ) -> CurrencyRate:
        return cls(
            interbank=interbank,
            customer=interbank * (1 - spread_percent / _HUNDRED),
        )


@dataclass(frozen=True)
class RateSnapshot:
    """
    Per-currency rates plus per-stablecoin fiat rates.

    Both maps are copied into read-only views on construction, so a caller
    holding a snapshot cannot alter the one the store serves.
    """
    currencies: Mapping[str, CurrencyRate]
    stablecoins: Mapping[str, Mapping[str, Decimal]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "currencies", MappingProxyType(dict(self.currencies)))
        object.__setattr__(self, "stablecoins", MappingProxyType({
            coin: MappingProxyType(dict(rates)) for coin, rates in self.stablecoins.items()
        }))

    def rate_for(self, currency: str) -> CurrencyRate | None:
        return self.currencies.get(currency.upper())

    @classmethod
    def from_fiat_rates(
        cls,
        fiat_rates: dict[str, Decimal],
        stablecoin_rates: dict[str, dict[str, Decimal]] | None = None,
    ) -> RateSnapshot:
        """
        Build a snapshot from a validated {currency: interbank} map.

        Stablecoins missing from ``stablecoin_rates`` get the derived map:
        every coin is priced at the customer rate of the fiat data. This
        treats USDC/USDT/USDG as interchangeable when no coin-specific
        price is available.
        """
        currencies = {
            code: CurrencyRate.from_interbank(fiat_rates[code])
            for code in SUPPORTED_CURRENCIES
        }
        derived = derive_stablecoin_rates(currencies)
        coins: dict[str, dict[str, Decimal]] = {}
        for coin in SUPPORTED_STABLECOINS:
            provided = (stablecoin_rates or {}).get(coin)
            coins[coin] = dict(provided) if provided else dict(derived)
        return cls(currencies=currencies, stablecoins=coins)


def derive_stablecoin_rates(currencies: dict[str, CurrencyRate]) -> dict[str, Decimal]:
    rates = {code: rate.customer for code, rate in currencies.items()}
    rates["USD"] = _USD_REFERENCE
    return rates


def default_snapshot() -> RateSnapshot:
    """Snapshot served at process start, before any provider has answered."""
    currencies = {
        code: CurrencyRate(interbank=interbank, customer=customer)
        for code, (interbank, customer) in DEFAULT_FX_RATES.items()
    }
    coins = {coin: dict(DEFAULT_STABLECOIN_RATES) for coin in SUPPORTED_STABLECOINS}
    return RateSnapshot(currencies=currencies, stablecoins=coins)


def get_stablecoin_rate(snapshot: RateSnapshot, stablecoin: str, currency: str) -> Decimal:
    """
    Fiat rate for one stablecoin.

    Falls back to the currency's customer rate when the coin has no entry,
    and to 1 when the currency itself is unknown.
    """
    coin_rates = snapshot.stablecoins.get(stablecoin.upper()) or {}
    rate = coin_rates.get(currency.upper())
    if rate:
        return rate
    currency_rate = snapshot.rate_for(currency)
    if currency_rate is not None:
        return currency_rate.customer
    return Decimal("1")
