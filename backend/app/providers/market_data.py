"""Market data providers feeding raw price and rate series to the core.

Every public fetch returns a list of :class:`~wager_tracker.models.PricePoint`
and raises :class:`RetrievalError` once retries and fallbacks are exhausted.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Iterable, Mapping, Sequence

import httpx

from app.config import AppSettings, get_settings
from wager_tracker.models import PricePoint

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json",
    "Accept-Language": "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7",
}
BINANCE_KLINES_LIMIT = 1000
# USD/BRL used until the first FX quote is seen when rebuilding BTC in BRL.
DEFAULT_USD_BRL = 5.50
_DAY_MS = 86_400_000


class RetrievalError(RuntimeError):
    """Raised when a raw series cannot be retrieved from any source."""


def _iso_from_timestamp(seconds: float) -> str:
    return datetime.fromtimestamp(seconds, tz=timezone.utc).date().isoformat()


def _bcb_date(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def _epoch_seconds(day: date) -> int:
    return int(datetime(day.year, day.month, day.day, tzinfo=timezone.utc).timestamp())


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: Mapping[str, Any] | None = None,
    retries: int = 3,
    backoff_seconds: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> httpx.Response:
    """GET ``url`` up to ``retries`` times.

    Rate limiting (403/429) and transport errors wait ``backoff * n`` before
    attempt ``n + 1``.  The last non-OK response is returned as is so
    callers can decide on a fallback; transport errors on the final attempt
    raise :class:`RetrievalError`.
    """

    for attempt in range(retries):
        last = attempt == retries - 1
        try:
            response = await client.get(url, params=params, headers=DEFAULT_HEADERS)
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed (attempt %d/%d): %s", url, attempt + 1, retries, exc)
            if last:
                raise RetrievalError(f"Request to {url} failed after {retries} attempts: {exc}") from exc
            await sleep(backoff_seconds * (attempt + 1))
            continue

        if response.is_success or last:
            return response
        if response.status_code in (403, 429):
            await sleep(backoff_seconds * (attempt + 1))
    raise RetrievalError(f"Request to {url} failed after {retries} attempts")


def _json_or_error(response: httpx.Response, source: str) -> Any:
    if not response.is_success:
        raise RetrievalError(f"{source} API error: {response.status_code}")
    try:
        return response.json()
    except ValueError as exc:
        raise RetrievalError(f"{source} returned invalid JSON payload") from exc


def parse_binance_klines(payload: Any) -> list[PricePoint]:
    """Close price of each daily kline ``[openTime, open, high, low, close, ...]``."""

    if not isinstance(payload, list):
        raise RetrievalError("Binance response is not a list of klines")
    points: list[PricePoint] = []
    for kline in payload:
        if not isinstance(kline, (list, tuple)) or len(kline) < 5:
            continue
        points.append(
            PricePoint(date=_iso_from_timestamp(float(kline[0]) / 1000), value=float(kline[4]))
        )
    return points


def parse_coingecko_prices(payload: Any) -> list[PricePoint]:
    if not isinstance(payload, dict) or not payload.get("prices"):
        raise RetrievalError("CoinGecko returned no prices data")
    return [
        PricePoint(date=_iso_from_timestamp(float(ts) / 1000), value=float(price))
        for ts, price in payload["prices"]
    ]


def parse_yahoo_chart(payload: Any) -> list[PricePoint]:
    """Daily closes from a Yahoo Finance chart payload, skipping null closes."""

    try:
        result = payload["chart"]["result"][0]
        timestamps = result.get("timestamp") or []
        closes = result["indicators"]["quote"][0].get("close") or []
    except (KeyError, IndexError, TypeError) as exc:
        raise RetrievalError("Yahoo Finance payload has no chart result") from exc
    points: list[PricePoint] = []
    for ts, close in zip(timestamps, closes):
        if close is None:
            continue
        points.append(PricePoint(date=_iso_from_timestamp(ts), value=float(close)))
    return points


def parse_bcb_series(payload: Any) -> list[PricePoint]:
    """BCB SGS rows ``{"data": "dd/MM/yyyy", "valor": "0.1234"}``."""

    if not isinstance(payload, list):
        raise RetrievalError("BCB response is not a list of observations")
    points: list[PricePoint] = []
    for item in payload:
        try:
            day, month, year = item["data"].split("/")
            value = float(item["valor"])
        except (KeyError, ValueError, AttributeError):
            continue
        points.append(PricePoint(date=f"{year}-{month}-{day}", value=value))
    return points


def combine_usd_quotes(btc_usd: Sequence[PricePoint], usd_brl: Sequence[PricePoint]) -> list[PricePoint]:
    """Convert BTC-USD closes to BRL with the last known USD/BRL quote."""

    fx_by_date = {point.date: point.value for point in usd_brl}
    last_rate = DEFAULT_USD_BRL
    prices: list[PricePoint] = []
    for point in sorted(btc_usd, key=lambda p: p.date):
        last_rate = fx_by_date.get(point.date, last_rate)
        if point.value:
            prices.append(PricePoint(date=point.date, value=point.value * last_rate))
    return prices


class MarketDataProvider:
    """Fetch every raw series the wager dashboard needs."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: AppSettings | None = None,
        *,
        today: Callable[[], date] = date.today,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._settings = settings or get_settings()
        self._today = today
        self._sleep = sleep

    @property
    def start(self) -> date:
        return date.fromisoformat(self._settings.start_date)

    async def _get(self, url: str, params: Mapping[str, Any] | None = None) -> httpx.Response:
        return await fetch_with_retry(
            self._client,
            url,
            params=params,
            retries=self._settings.fetch_retries,
            backoff_seconds=self._settings.fetch_backoff_seconds,
            sleep=self._sleep,
        )

    async def fetch_series(self, instrument_id: str) -> list[PricePoint]:
        """Dispatch to the fetcher of ``instrument_id``."""

        fetchers: dict[str, Callable[[], Awaitable[list[PricePoint]]]] = {
            "bitcoin": self.fetch_bitcoin,
            "ibovespa": lambda: self.fetch_yahoo(self._settings.yahoo_ibovespa_symbol),
            "ifix": lambda: self.fetch_yahoo(self._settings.yahoo_ifix_symbol),
            "cdi": lambda: self.fetch_bcb(self._settings.bcb_series_cdi),
            "ipca": lambda: self.fetch_bcb(self._settings.bcb_series_ipca),
            "dolar": lambda: self.fetch_bcb(self._settings.bcb_series_dolar),
            "poupanca": lambda: self.fetch_bcb(self._settings.bcb_series_poupanca),
        }
        if instrument_id not in fetchers:
            raise KeyError(f"Unknown instrument {instrument_id!r}")
        points = await fetchers[instrument_id]()
        logger.info("Fetched %d points for %s", len(points), instrument_id)
        return points

    async def fetch_bitcoin(self) -> list[PricePoint]:
        """BTC/BRL closes: Binance, then CoinGecko, then Yahoo BTC-USD x USD/BRL."""

        sources: list[tuple[str, Callable[[], Awaitable[list[PricePoint]]]]] = [
            ("Binance", self.fetch_bitcoin_binance),
            ("CoinGecko", self.fetch_bitcoin_coingecko),
            ("Yahoo Finance", self.fetch_bitcoin_yahoo),
        ]
        errors: list[str] = []
        for name, fetch in sources:
            try:
                points = await fetch()
            except RetrievalError as exc:
                logger.warning("%s bitcoin source failed, trying fallback: %s", name, exc)
                errors.append(f"{name}: {exc}")
                continue
            if points:
                return points
            errors.append(f"{name}: empty series")
        raise RetrievalError("All bitcoin sources failed (" + "; ".join(errors) + ")")

    async def fetch_bitcoin_binance(self) -> list[PricePoint]:
        url = f"{self._settings.binance_base_url}/klines"
        start_ms = _epoch_seconds(self.start) * 1000
        end_ms = _epoch_seconds(self._today() + timedelta(days=1)) * 1000
        points: list[PricePoint] = []
        # The klines endpoint caps each page, walk forward until today.
        while start_ms < end_ms:
            params = {
                "symbol": self._settings.binance_symbol,
                "interval": "1d",
                "startTime": start_ms,
                "endTime": end_ms,
                "limit": BINANCE_KLINES_LIMIT,
            }
            payload = _json_or_error(await self._get(url, params), "Binance")
            page = parse_binance_klines(payload)
            points.extend(page)
            if len(payload) < BINANCE_KLINES_LIMIT:
                break
            start_ms = int(payload[-1][0]) + _DAY_MS
        return points

    async def fetch_bitcoin_coingecko(self) -> list[PricePoint]:
        url = f"{self._settings.coingecko_base_url}/coins/bitcoin/market_chart/range"
        params = {
            "vs_currency": "brl",
            "from": _epoch_seconds(self.start),
            "to": _epoch_seconds(self._today() + timedelta(days=1)),
        }
        return parse_coingecko_prices(_json_or_error(await self._get(url, params), "CoinGecko"))

    async def fetch_bitcoin_yahoo(self) -> list[PricePoint]:
        btc_usd, usd_brl = await asyncio.gather(
            self.fetch_yahoo(self._settings.yahoo_btc_usd_symbol),
            self.fetch_yahoo(self._settings.yahoo_usd_brl_symbol),
        )
        return combine_usd_quotes(btc_usd, usd_brl)

    async def fetch_yahoo(self, symbol: str) -> list[PricePoint]:
        url = f"{self._settings.yahoo_chart_url}/{symbol}"
        params = {
            "period1": _epoch_seconds(self.start),
            "period2": _epoch_seconds(self._today() + timedelta(days=1)),
            "interval": "1d",
        }
        return parse_yahoo_chart(_json_or_error(await self._get(url, params), "Yahoo Finance"))

    async def fetch_bcb(self, series_id: int) -> list[PricePoint]:
        url = f"{self._settings.bcb_base_url}.{series_id}/dados"
        params = {
            "formato": "json",
            "dataInicial": _bcb_date(self.start),
            "dataFinal": _bcb_date(self._today()),
        }
        return parse_bcb_series(_json_or_error(await self._get(url, params), f"BCB {series_id}"))


async def fetch_all(
    provider: MarketDataProvider, instrument_ids: Iterable[str]
) -> dict[str, list[PricePoint]]:
    """Retrieve every series concurrently.

    The first failure propagates once the remaining fetches are cancelled
    and awaited, so none outlives the caller's HTTP client.
    """

    ids = list(instrument_ids)
    tasks = [asyncio.create_task(provider.fetch_series(i)) for i in ids]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return dict(zip(ids, results))


__all__ = [
    "MarketDataProvider",
    "RetrievalError",
    "combine_usd_quotes",
    "fetch_all",
    "fetch_with_retry",
    "parse_bcb_series",
    "parse_binance_klines",
    "parse_coingecko_prices",
    "parse_yahoo_chart",
]
