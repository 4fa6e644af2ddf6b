"""Dashboard engine — wires providers, store and analytics behind the UI actions.

Flow per symbol (add / refresh):
  1. Quote     — QuoteOrchestrator.fetch_quote (name from profile lookup)
  2. News      — QuoteOrchestrator.fetch_news (providers → placeholder)
  3. Analysis  — analyze_stock → BUY / SELL / HOLD
  4. Forecast  — ForecastEstimator → 1 day / 1 week / 1 month

Quote failures surface as :class:`StockOperationError` carrying a classified
:class:`StockError`; news and forecast problems degrade silently. During a
refresh a failing symbol is logged and skipped.
"""

import csv
import logging
import os
import random
from typing import Dict, List, Optional, Tuple

from stockdash.core.cache import ResponseCache
from stockdash.core.config import Settings
from stockdash.core.currency import ExchangeRateCache, convert_to_eur
from stockdash.core.errors import AlreadyExistsError, StockOperationError, classify_error
from stockdash.core.logger import LogEntry, RingBufferHandler, logger
from stockdash.core.rate_limit import RateLimiter
from stockdash.core.symbols import SymbolMatch, search_stocks
from stockdash.models.datatypes import PortfolioSummary, Recommendation, StockView, WatchlistEntry
from stockdash.pipeline.forecast import ForecastEstimator, HeuristicForecaster
from stockdash.pipeline.orchestrator import QuoteOrchestrator
from stockdash.pipeline.portfolio import aggregate_portfolio
from stockdash.pipeline.ranker import RecommendationRanker, analyze_stock
from stockdash.providers.currency import ExchangeRateApiProvider
from stockdash.providers.market import build_quote_provider
from stockdash.providers.news import build_news_providers
from stockdash.providers.sentiment import build_sentiment_provider
from stockdash.storage.watchlist import WatchlistStore, build_watchlist_store

_CSV_HEADER = [
    "Symbol", "Name", "Price", "Change", "Change_Pct",
    "Recommendation", "News_Count", "Forecast_1d", "Forecast_1w", "Forecast_1m",
]


class DashboardEngine:
    """Owns every piece of state one dashboard session needs.

    The exchange-rate cache and the debug log buffer live on the instance,
    so separate engines (e.g. in tests) never share them.

    Args:
        store: Watchlist persistence.
        orchestrator: Quote/news fetcher.
        forecaster: Forecast strategy.
        ranker: Recommendation ranker.
        fx_cache: USD→EUR rate cache.
        log_capacity: Size of the in-memory debug log.
    """

    def __init__(
        self,
        store: WatchlistStore,
        orchestrator: QuoteOrchestrator,
        forecaster: ForecastEstimator,
        ranker: RecommendationRanker,
        fx_cache: ExchangeRateCache,
        log_capacity: int = 100,
    ) -> None:
        self.store = store
        self.orchestrator = orchestrator
        self.forecaster = forecaster
        self.ranker = ranker
        self.fx_cache = fx_cache
        self.views: Dict[str, StockView] = {}

        self.debug_log = RingBufferHandler(capacity=log_capacity, level=logging.INFO)
        logger.addHandler(self.debug_log)

    @classmethod
    def from_settings(cls, settings: Settings, rng: Optional[random.Random] = None) -> "DashboardEngine":
        """Build a fully wired engine from :class:`Settings`."""
        rng = rng or random.Random()
        cache = (
            ResponseCache(settings.news_cache_db, ttl_seconds=settings.news_cache_ttl_seconds)
            if settings.news_cache_db else None
        )
        quote_provider = build_quote_provider(settings)
        orchestrator = QuoteOrchestrator(
            quote_provider=quote_provider,
            news_providers=build_news_providers(settings, cache),
            sentiment=build_sentiment_provider(settings),
            limiter=RateLimiter(settings.call_interval),
            rng=rng,
        )
        fx_cache = ExchangeRateCache(
            ExchangeRateApiProvider(settings.exchange_rate_base_url, settings.timeout_seconds),
            ttl_seconds=settings.exchange_rate_ttl_seconds,
            fallback_rate=settings.exchange_rate_fallback,
        )
        return cls(
            store=build_watchlist_store(settings),
            orchestrator=orchestrator,
            forecaster=HeuristicForecaster(quote_provider, rng),
            ranker=RecommendationRanker(
                orchestrator, settings.candidates, settings.candidates_per_request, rng
            ),
            fx_cache=fx_cache,
        )

    # ── public ────────────────────────────────────────────────────────────────

    def watchlist(self) -> List[WatchlistEntry]:
        return self.store.list()

    def search(self, query: str) -> List[SymbolMatch]:
        """Resolve a ticker or company name to candidate symbols for :meth:`add_stock`."""
        return search_stocks(query)

    def add_stock(self, symbol: str) -> StockView:
        """Fetch, analyse and persist a new symbol.

        Raises:
            AlreadyExistsError: The symbol is already on the watchlist.
            StockOperationError: The quote could not be fetched.
        """
        key = symbol.strip().upper()
        existing = self.store.get(key)
        if existing is not None:
            logger.warning(f"Engine: {key} already in watchlist")
            raise AlreadyExistsError(key)

        logger.info(f"Engine: adding {key}")
        view = self._build_view(key, context="adding stock")
        self.store.add(key, view.quote.name)
        self.views[key] = view
        logger.info(f"Engine: added {key} at {view.quote.price}")
        return view

    def remove_stock(self, symbol: str) -> None:
        key = symbol.strip().upper()
        self.store.remove(key)
        self.views.pop(key, None)

    def refresh(self) -> List[StockView]:
        """Rebuild the view of every active symbol, one after another."""
        entries = self.store.list()
        logger.info(f"Engine: refreshing {len(entries)} symbols")
        refreshed: Dict[str, StockView] = {}
        for entry in entries:
            self.orchestrator.limiter.acquire()
            try:
                refreshed[entry.symbol] = self._build_view(entry.symbol, context="refreshing stocks")
            except StockOperationError as exc:
                logger.error(f"Engine: refresh failed for {entry.symbol}: {exc.error.type.value} — {exc}")
        self.views = refreshed
        return list(refreshed.values())

    def portfolio(self) -> PortfolioSummary:
        active = {e.symbol for e in self.store.list()}
        return aggregate_portfolio(v.quote for s, v in self.views.items() if s in active)

    def portfolio_in_eur(self) -> Tuple[float, float]:
        """Return ``(total_value, total_change)`` converted to EUR."""
        summary = self.portfolio()
        return (
            convert_to_eur(summary.total_value, self.fx_cache),
            convert_to_eur(summary.total_change, self.fx_cache),
        )

    def recommendations(self, max_price: Optional[float] = None) -> List[Recommendation]:
        return self.ranker.rank(max_price)

    def logs(self) -> List[LogEntry]:
        return self.debug_log.entries()

    def close(self) -> None:
        logger.removeHandler(self.debug_log)

    def export_snapshot(self, output_dir: str = "output") -> str:
        """Write the current views to ``<output_dir>/dashboard_snapshot.csv`` (overwrites)."""
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, "dashboard_snapshot.csv")
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=_CSV_HEADER)
            writer.writeheader()
            for view in self.views.values():
                forecast = {p.period.value: round(p.prediction, 2) for p in view.forecast}
                writer.writerow({
                    "Symbol": view.quote.symbol,
                    "Name": view.quote.name,
                    "Price": view.quote.price,
                    "Change": view.quote.change,
                    "Change_Pct": view.quote.change_percent,
                    "Recommendation": view.analysis.recommendation.value if view.analysis else "",
                    "News_Count": len(view.news),
                    "Forecast_1d": forecast.get("1d", ""),
                    "Forecast_1w": forecast.get("1w", ""),
                    "Forecast_1m": forecast.get("1m", ""),
                })
        logger.info(f"Engine: wrote {len(self.views)} rows to {path}")
        return path

    # ── internal ──────────────────────────────────────────────────────────────

    def _build_view(self, symbol: str, context: str) -> StockView:
        try:
            quote = self.orchestrator.fetch_quote(symbol)
        except Exception as exc:
            error = classify_error(exc, context)
            logger.error(f"Engine: quote for {symbol} failed [{error.type.value}]: {exc}")
            raise StockOperationError(error, exc) from exc

        news = self.orchestrator.fetch_news(symbol)
        analysis = analyze_stock(news)
        forecast = self.forecaster.forecast(symbol, quote.price)
        return StockView(quote=quote, news=news, analysis=analysis, forecast=forecast)
