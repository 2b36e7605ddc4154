"""Rate acquisition and fee-aware conversion core."""

from .config import (
    CURRENCIES,
    LEGACY_FEES,
    RIPE_FEES,
    STABLECOINS,
    SUPPORTED_CURRENCIES,
    SUPPORTED_STABLECOINS,
    CurrencyInfo,
    FeeSchedule,
    StablecoinInfo,
)
from .conversion import (
    ConversionResult,
    LegacyResult,
    SavingsResult,
    compute_savings,
    convert_forward,
    convert_legacy,
    convert_reverse,
)
from .errors import FetchErrorKind, RateSourceError
from .orchestrator import AcquiredRates, AllSourcesFailed, FallbackOrchestrator
from .scheduler import RefreshScheduler
from .snapshot import CurrencyRate, RateSnapshot, get_stablecoin_rate
from .sources import ProviderResult, RateSource, build_rate_sources
from .store import RateStore

__all__ = [
    "CURRENCIES",
    "LEGACY_FEES",
    "RIPE_FEES",
    "STABLECOINS",
    "SUPPORTED_CURRENCIES",
    "SUPPORTED_STABLECOINS",
    "CurrencyInfo",
    "FeeSchedule",
    "StablecoinInfo",
    "ConversionResult",
    "LegacyResult",
    "SavingsResult",
    "compute_savings",
    "convert_forward",
    "convert_legacy",
    "convert_reverse",
    "FetchErrorKind",
    "RateSourceError",
    "AcquiredRates",
    "AllSourcesFailed",
    "FallbackOrchestrator",
    "RefreshScheduler",
    "CurrencyRate",
    "RateSnapshot",
    "get_stablecoin_rate",
    "ProviderResult",
    "RateSource",
    "build_rate_sources",
    "RateStore",
]
