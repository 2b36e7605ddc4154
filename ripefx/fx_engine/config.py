"""
FX engine configuration constants.

Defines the supported currency and stablecoin sets, the fee schedules for
Ripe and the legacy comparison provider, and the default rates used until
the first successful fetch.
"""

from dataclasses import dataclass
from decimal import Decimal

from ripefx.config import settings


@dataclass(frozen=True)
class CurrencyInfo:
    """Display metadata for a payout currency."""
    code: str
    symbol: str
    decimals: int
    name: str


@dataclass(frozen=True)
class StablecoinInfo:
    code: str
    name: str
    description: str


@dataclass(frozen=True)
class FeeSchedule:
    """Fee constants for one provider. Percentages are in percent (0.5 == 0.5%)."""
    name: str
    transaction_fee_percent: Decimal
    network_fee_usd: Decimal
    minimum_fee: Decimal = Decimal("0")
    fx_spread_percent: Decimal = Decimal("0")


CURRENCIES: dict[str, CurrencyInfo] = {
    "PHP": CurrencyInfo("PHP", "₱", 2, "Philippine Peso"),
    "THB": CurrencyInfo("THB", "฿", 2, "Thai Baht"),
    "IDR": CurrencyInfo("IDR", "Rp", 0, "Indonesian Rupiah"),
    "MYR": CurrencyInfo("MYR", "RM", 2, "Malaysian Ringgit"),
}

SUPPORTED_CURRENCIES: tuple[str, ...] = tuple(CURRENCIES)

STABLECOINS: dict[str, StablecoinInfo] = {
    "USDC": StablecoinInfo("USDC", "USD Coin", "Circle's regulated stablecoin"),
    "USDT": StablecoinInfo("USDT", "Tether USD", "World's largest stablecoin"),
    "USDG": StablecoinInfo("USDG", "Global Dollar", "Paxos-issued stablecoin"),
}

SUPPORTED_STABLECOINS: tuple[str, ...] = tuple(STABLECOINS)

RIPE_FEES = FeeSchedule(
    name="ripe",
    transaction_fee_percent=Decimal("0.5"),
    network_fee_usd=Decimal("0.50"),
    minimum_fee=Decimal("0.10"),
)

LEGACY_FEES = FeeSchedule(
    name="legacy",
    transaction_fee_percent=Decimal("3.0"),
    network_fee_usd=Decimal("5.0"),
    fx_spread_percent=Decimal("2.5"),
)

# Customer rate = interbank * (1 - spread)
CUSTOMER_SPREAD_PERCENT = Decimal(str(settings.FX_CUSTOMER_SPREAD_PERCENT))

# Smallest representable stablecoin unit
STABLECOIN_QUANTUM = Decimal("0.01")

# Input limits for user-entered amounts
MAX_AMOUNT = Decimal("1000000")
MIN_AMOUNT = Decimal("0.01")
MAX_DECIMALS = 2

# Bounds on any amount the engine converts, fiat targets included; keeps
# every product and quantize within the default Decimal context
MAX_CONVERTIBLE_AMOUNT = Decimal("1e15")
MIN_CONVERTIBLE_AMOUNT = Decimal("1e-8")

PRESET_AMOUNTS: tuple[int, ...] = (10, 50, 100, 500, 1000)

# Refresh / staleness
REFRESH_INTERVAL_SECONDS = settings.FX_REFRESH_INTERVAL_SECONDS
STALE_THRESHOLD_SECONDS = settings.FX_STALE_THRESHOLD_SECONDS
PRIMARY_TIMEOUT_SECONDS = settings.FX_PRIMARY_TIMEOUT_SECONDS
FALLBACK_TIMEOUT_SECONDS = settings.FX_FALLBACK_TIMEOUT_SECONDS

# Served until the first successful fetch: (interbank, customer)
DEFAULT_FX_RATES: dict[str, tuple[Decimal, Decimal]] = {
    "PHP": (Decimal("59.0"), Decimal("58.5")),
    "THB": (Decimal("35.5"), Decimal("35.2")),
    "IDR": (Decimal("15800"), Decimal("15650")),
    "MYR": (Decimal("4.65"), Decimal("4.60")),
}

DEFAULT_STABLECOIN_RATES: dict[str, Decimal] = {
    "PHP": Decimal("59.0"),
    "THB": Decimal("35.5"),
    "IDR": Decimal("16700"),
    "MYR": Decimal("4.65"),
    "USD": Decimal("1.0"),
}
