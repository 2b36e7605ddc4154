"""
Rate source adapters — one per external provider.

Every adapter issues a single unauthenticated GET against a fixed URL and
turns the JSON body into a canonical ``{currency: rate}`` map for the four
supported payout currencies. ``fetch()`` never raises: transport, decode
and validation problems all come back as a failed ``ProviderResult``.

Providers (in priority order):
  - CoinGecko: stablecoin prices (USDC, USDT) in each fiat currency
  - ExchangeRate-API, Open ER-API, Frankfurter: plain USD fiat rates
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

import httpx

from ripefx.config import settings
from ripefx.fx_engine.config import (
    FALLBACK_TIMEOUT_SECONDS,
    PRIMARY_TIMEOUT_SECONDS,
    SUPPORTED_CURRENCIES,
)
from ripefx.fx_engine.errors import FetchErrorKind, RateSourceError

logger = logging.getLogger(__name__)

_HEADERS = {"Accept": "application/json"}


# ---------------------------------------------------------------------------
# Result of one attempt
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of a single adapter attempt: a rate map or a failure reason."""
    source_id: str
    rates: dict[str, Decimal] | None = None
    stablecoin_rates: dict[str, dict[str, Decimal]] | None = None
    error: FetchErrorKind | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None and self.rates is not None

    @classmethod
    def success(
        cls,
        source_id: str,
        rates: dict[str, Decimal],
        stablecoin_rates: dict[str, dict[str, Decimal]] | None = None,
    ) -> ProviderResult:
        return cls(source_id=source_id, rates=rates, stablecoin_rates=stablecoin_rates)

    @classmethod
    def failure(cls, source_id: str, error: FetchErrorKind, detail: str) -> ProviderResult:
        return cls(source_id=source_id, error=error, detail=detail)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def parse_rate(value: Any) -> Decimal | None:
    """Return ``value`` as a finite positive Decimal, or None."""
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str, Decimal)):
        return None
    try:
        rate = Decimal(str(value))
    except InvalidOperation:
        return None
    if not rate.is_finite() or rate <= 0:
        return None
    return rate


def parse_required_rates(raw: dict[str, Any], source_id: str) -> dict[str, Decimal]:
    """
    Resolve every supported currency in ``raw`` to a valid rate.

    A single missing or invalid currency rejects the whole map.
    """
    rates: dict[str, Decimal] = {}
    for code in SUPPORTED_CURRENCIES:
        rate = parse_rate(raw.get(code))
        if rate is None:
            raise RateSourceError(
                FetchErrorKind.INVALID_DATA,
                f"{source_id}: missing or invalid rate for {code}: {raw.get(code)!r}",
            )
        rates[code] = rate
    return rates


# ---------------------------------------------------------------------------
# Adapter protocol and HTTP base
# ---------------------------------------------------------------------------


class RateSource(Protocol):
    source_id: str

    async def fetch(self) -> ProviderResult:
        """Fetch and parse the provider's rates. Never raises."""
        ...


class HTTPRateSource(abc.ABC):
    """GET a JSON document and hand it to ``parse()``."""

    source_id = "http"
    default_url = ""

    def __init__(
        self,
        url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = FALLBACK_TIMEOUT_SECONDS,
    ):
        self.url = url or self.default_url
        self._client = client
        self._timeout = timeout

    async def fetch(self) -> ProviderResult:
        try:
            payload = await self._get_json()
            return self.parse(payload)
        except RateSourceError as exc:
            logger.warning("%s failed (%s): %s", self.source_id, exc.kind.value, exc)
            return ProviderResult.failure(self.source_id, exc.kind, str(exc))

    async def _get_json(self) -> Any:
        try:
            if self._client is not None:
                resp = await self._client.get(self.url, headers=_HEADERS, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.get(self.url, headers=_HEADERS)
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            raise RateSourceError(
                FetchErrorKind.TIMEOUT, f"{self.source_id}: request timed out"
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise RateSourceError(
                FetchErrorKind.NETWORK_ERROR,
                f"{self.source_id}: HTTP {exc.response.status_code}",
            ) from exc
        except httpx.RequestError as exc:
            raise RateSourceError(
                FetchErrorKind.NETWORK_ERROR, f"{self.source_id}: {exc!r}"
            ) from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise RateSourceError(
                FetchErrorKind.PARSE_ERROR, f"{self.source_id}: response is not valid JSON"
            ) from exc

    @abc.abstractmethod
    def parse(self, payload: Any) -> ProviderResult:
        """Turn the decoded body into a result, raising ``RateSourceError`` on bad shapes."""


# ---------------------------------------------------------------------------
# CoinGecko: stablecoin prices
# ---------------------------------------------------------------------------


class CoinGeckoSource(HTTPRateSource):
    """
    Stablecoin prices from CoinGecko's simple/price endpoint.

    Response shape::

        {"usd-coin": {"php": 58.9, "thb": 35.4, "idr": 16650, "myr": 4.64, "usd": 1.0},
         "tether":   {...}}

    USDG has no listing and is priced as USDC (or USDT when USDC is absent).
    Fiat rates are taken from USDC, falling back to USDT.
    """

    source_id = "coingecko"
    default_url = settings.COINGECKO_URL

    COIN_IDS = {"USDC": "usd-coin", "USDT": "tether"}

    def parse(self, payload: Any) -> ProviderResult:
        if not isinstance(payload, dict):
            raise RateSourceError(
                FetchErrorKind.PARSE_ERROR, f"{self.source_id}: expected a JSON object"
            )
        if not any(isinstance(payload.get(cid), dict) for cid in self.COIN_IDS.values()):
            raise RateSourceError(
                FetchErrorKind.PARSE_ERROR, f"{self.source_id}: no stablecoin prices in response"
            )

        coins: dict[str, dict[str, Decimal]] = {}
        for coin, coin_id in self.COIN_IDS.items():
            entry = payload.get(coin_id)
            if not isinstance(entry, dict):
                continue
            raw = {code: entry.get(code.lower()) for code in SUPPORTED_CURRENCIES}
            try:
                rates = parse_required_rates(raw, f"{self.source_id}/{coin}")
            except RateSourceError as exc:
                logger.debug("Skipping %s prices: %s", coin, exc)
                continue
            rates["USD"] = parse_rate(entry.get("usd")) or Decimal("1.0")
            coins[coin] = rates

        primary = coins.get("USDC") or coins.get("USDT")
        if primary is None:
            raise RateSourceError(
                FetchErrorKind.INVALID_DATA,
                f"{self.source_id}: no stablecoin carries all of {', '.join(SUPPORTED_CURRENCIES)}",
            )
        coins["USDG"] = dict(primary)

        fiat = {code: primary[code] for code in SUPPORTED_CURRENCIES}
        return ProviderResult.success(self.source_id, fiat, coins)


# ---------------------------------------------------------------------------
# Generic fiat providers: {"rates": {"PHP": ..., ...}}
# ---------------------------------------------------------------------------


class FiatRatesSource(HTTPRateSource):
    """USD-based fiat rates under a top-level ``rates`` object."""

    def parse(self, payload: Any) -> ProviderResult:
        if not isinstance(payload, dict) or not isinstance(payload.get("rates"), dict):
            raise RateSourceError(
                FetchErrorKind.PARSE_ERROR, f"{self.source_id}: missing 'rates' object"
            )
        rates = parse_required_rates(payload["rates"], self.source_id)
        return ProviderResult.success(self.source_id, rates)


class ExchangeRateAPISource(FiatRatesSource):
    source_id = "exchangerate-api"
    default_url = settings.EXCHANGERATE_API_URL


class OpenERAPISource(FiatRatesSource):
    source_id = "open-er-api"
    default_url = settings.OPEN_ER_API_URL

    def parse(self, payload: Any) -> ProviderResult:
        if isinstance(payload, dict) and payload.get("result", "success") != "success":
            raise RateSourceError(
                FetchErrorKind.PARSE_ERROR,
                f"{self.source_id}: API error {payload.get('error-type', payload.get('result'))}",
            )
        return super().parse(payload)


class FrankfurterSource(FiatRatesSource):
    source_id = "frankfurter"
    default_url = settings.FRANKFURTER_URL


def build_rate_sources(client: httpx.AsyncClient | None = None) -> list[RateSource]:
    """The production adapter list, in priority order."""
    return [
        CoinGeckoSource(client=client, timeout=PRIMARY_TIMEOUT_SECONDS),
        ExchangeRateAPISource(client=client),
        OpenERAPISource(client=client),
        FrankfurterSource(client=client),
    ]
