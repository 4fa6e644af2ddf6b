"""Quote providers: Finnhub, Alpha Vantage and Yahoo Finance.

Every provider maps its failures onto :class:`ProviderError` so callers can
classify them without reading message text:

    network / timeout           → FailureKind.NETWORK
    HTTP 429 / quota notices    → FailureKind.RATE_LIMITED
    empty or zero-price quote   → FailureKind.NOT_FOUND
    empty price history         → FailureKind.NO_DATA
"""

import time
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
import yfinance as yf

from stockdash.core.errors import FailureKind, ProviderError
from stockdash.core.logger import logger
from stockdash.core.retry import with_retries
from stockdash.models.datatypes import Quote
from stockdash.providers.base import QuoteProvider

_DEFAULT_TIMEOUT = 15.0


def get_json(
    session: requests.Session,
    url: str,
    params: Dict[str, Any],
    provider: str,
    timeout: float = _DEFAULT_TIMEOUT,
) -> Any:
    """GET ``url`` and decode JSON, translating every failure into a ProviderError."""
    try:
        resp = session.get(url, params=params, timeout=timeout)
    except requests.RequestException as exc:
        raise ProviderError(FailureKind.NETWORK, f"NetworkError: {provider} unreachable: {exc}") from exc

    if resp.status_code == 429:
        raise ProviderError(FailureKind.RATE_LIMITED, f"{provider} rate limit reached (HTTP 429)")
    if resp.status_code in (401, 403):
        raise ProviderError(FailureKind.UNKNOWN, f"{provider} rejected credentials (HTTP {resp.status_code})")
    if not 200 <= resp.status_code < 300:
        raise ProviderError(
            FailureKind.UNKNOWN,
            f"{provider} HTTP {resp.status_code}: {resp.text[:200]}",
        )
    try:
        return resp.json()
    except ValueError as exc:
        raise ProviderError(FailureKind.UNKNOWN, f"{provider} returned malformed JSON") from exc


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(str(value).replace("%", "").strip())
    except (TypeError, ValueError):
        return None


# ── Finnhub ───────────────────────────────────────────────────────────────────

class FinnhubProvider(QuoteProvider):
    """Finnhub REST provider. Free tier: 60 calls/minute."""

    min_interval = 1.1

    def __init__(
        self,
        api_key: str = "demo",
        base_url: str = "https://finnhub.io/api/v1",
        timeout: float = _DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key or "demo"
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str, **params: Any) -> Any:
        params["token"] = self.api_key
        data = get_json(self.session, f"{self.base_url}{path}", params, "Finnhub", self.timeout)
        if isinstance(data, dict) and data.get("error"):
            error = str(data["error"])
            kind = FailureKind.RATE_LIMITED if "limit" in error.lower() else FailureKind.UNKNOWN
            raise ProviderError(kind, f"API Error: {error}")
        return data

    def quote(self, symbol: str) -> Quote:
        symbol = symbol.upper()
        logger.info(f"FinnhubProvider: fetching quote for {symbol}")
        data = self._get("/quote", symbol=symbol)
        price = _to_float((data or {}).get("c"))
        if not price:
            raise ProviderError(
                FailureKind.NOT_FOUND,
                f"Stock {symbol} not found or no data available",
                data=data or {},
            )
        return Quote(
            symbol=symbol,
            name=symbol,
            price=price,
            change=_to_float(data.get("d")) or 0.0,
            change_percent=_to_float(data.get("dp")) or 0.0,
        )

    def profile_name(self, symbol: str) -> str:
        data = self._get("/stock/profile2", symbol=symbol.upper())
        return str((data or {}).get("name") or "")

    def recent_closes(self, symbol: str, window: int = 10) -> List[float]:
        now = int(time.time())
        # calendar days, padded so weekends still leave ``window`` sessions
        start = now - 86400 * (window * 2)
        data = self._get(
            "/stock/candle", symbol=symbol.upper(), resolution="D", **{"from": start, "to": now}
        )
        closes = (data or {}).get("c") or []
        if (data or {}).get("s") == "no_data" or not closes:
            raise ProviderError(FailureKind.NO_DATA, f"no data: no candles for {symbol}")
        return [float(c) for c in closes][-window:]


# ── Alpha Vantage ─────────────────────────────────────────────────────────────

class AlphaVantageProvider(QuoteProvider):
    """Alpha Vantage provider. Free tier: 5 calls/minute, hence the 12 s spacing."""

    min_interval = 12.0

    def __init__(
        self,
        api_key: str = "demo",
        base_url: str = "https://www.alphavantage.co/query",
        timeout: float = _DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key or "demo"
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, function: str, symbol: str, **params: Any) -> Dict[str, Any]:
        params.update({"function": function, "symbol": symbol, "apikey": self.api_key})
        data = get_json(self.session, self.base_url, params, "AlphaVantage", self.timeout) or {}
        # Quota notices arrive as HTTP 200 with a "Note" or "Information" body.
        notice = data.get("Note") or data.get("Information")
        if notice:
            raise ProviderError(FailureKind.RATE_LIMITED, str(notice))
        if data.get("Error Message"):
            raise ProviderError(FailureKind.NOT_FOUND, str(data["Error Message"]))
        return data

    def quote(self, symbol: str) -> Quote:
        symbol = symbol.upper()
        logger.info(f"AlphaVantageProvider: fetching quote for {symbol}")
        data = self._get("GLOBAL_QUOTE", symbol)
        raw = data.get("Global Quote") or {}
        price = _to_float(raw.get("05. price"))
        if not raw or not price:
            raise ProviderError(FailureKind.NOT_FOUND, f"Stock {symbol} not found", data=raw)
        volume = _to_float(raw.get("06. volume"))
        return Quote(
            symbol=str(raw.get("01. symbol") or symbol).upper(),
            name=symbol,
            price=price,
            change=_to_float(raw.get("09. change")) or 0.0,
            change_percent=_to_float(raw.get("10. change percent")) or 0.0,
            volume=int(volume) if volume is not None else None,
        )

    def profile_name(self, symbol: str) -> str:
        data = self._get("OVERVIEW", symbol.upper())
        return str(data.get("Name") or "")

    def recent_closes(self, symbol: str, window: int = 10) -> List[float]:
        data = self._get("TIME_SERIES_DAILY", symbol.upper(), outputsize="compact")
        series = data.get("Time Series (Daily)") or {}
        if not series:
            raise ProviderError(FailureKind.NO_DATA, f"no data: empty daily series for {symbol}")
        dates = sorted(series)[-window:]
        return [float(series[d]["4. close"]) for d in dates]


# ── Yahoo Finance ─────────────────────────────────────────────────────────────

class YFinanceProvider(QuoteProvider):
    """Yahoo Finance implementation via ``yfinance``; no API key needed."""

    min_interval = 1.0

    @with_retries(max_retries=2, initial_delay=1, retry_on=(requests.RequestException,))
    def _history(self, symbol: str, period: str) -> pd.DataFrame:
        return yf.Ticker(symbol).history(period=period)

    def _fetch(self, symbol: str, period: str) -> pd.DataFrame:
        try:
            hist = self._history(symbol, period)
        except requests.RequestException as exc:
            raise ProviderError(FailureKind.NETWORK, f"NetworkError: Yahoo unreachable: {exc}") from exc
        except Exception as exc:
            raise ProviderError(FailureKind.UNKNOWN, f"Yahoo history failed for {symbol}: {exc}") from exc
        if hist is None or hist.empty:
            raise ProviderError(FailureKind.NOT_FOUND, f"Stock {symbol} not found or no data available")
        return hist

    def quote(self, symbol: str) -> Quote:
        symbol = symbol.upper()
        logger.info(f"YFinanceProvider: fetching quote for {symbol}")
        hist = self._fetch(symbol, "5d")
        closes = pd.to_numeric(hist["Close"], errors="coerce").dropna()
        if closes.empty or float(closes.iloc[-1]) == 0:
            raise ProviderError(FailureKind.NOT_FOUND, f"Stock {symbol} not found or no data available")

        price = float(closes.iloc[-1])
        prev = float(closes.iloc[-2]) if len(closes) > 1 else price
        change = price - prev
        change_pct = (change / prev * 100.0) if prev else 0.0
        volume = None
        if "Volume" in hist.columns:
            volume = int(pd.to_numeric(hist["Volume"], errors="coerce").fillna(0).iloc[-1])
        return Quote(
            symbol=symbol,
            name=symbol,
            price=round(price, 4),
            change=round(change, 4),
            change_percent=round(change_pct, 4),
            volume=volume,
        )

    def profile_name(self, symbol: str) -> str:
        info: dict = yf.Ticker(symbol.upper()).info or {}
        return str(info.get("longName") or info.get("shortName") or "").strip()

    def recent_closes(self, symbol: str, window: int = 10) -> List[float]:
        hist = self._fetch(symbol.upper(), "1mo")
        closes = pd.to_numeric(hist["Close"], errors="coerce").dropna()
        return [float(c) for c in closes.tail(window)]


def build_quote_provider(settings) -> QuoteProvider:
    """Instantiate the quote provider named in ``settings.quote_provider``."""
    name = settings.quote_provider.lower()
    if name == "finnhub":
        return FinnhubProvider(settings.finnhub_api_key, settings.finnhub_base_url, settings.timeout_seconds)
    if name == "alphavantage":
        return AlphaVantageProvider(
            settings.alpha_vantage_api_key, settings.alpha_vantage_base_url, settings.timeout_seconds
        )
    if name == "yahoo":
        return YFinanceProvider()
    raise ValueError(f"Unknown quote provider: {settings.quote_provider}")
