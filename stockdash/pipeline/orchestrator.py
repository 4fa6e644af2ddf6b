"""Quote/news fetch orchestration.

Flow per symbol:
  1. Quote     — quote provider, then a best-effort profile lookup for the name
  2. News      — each configured news provider in turn → sentiment per article
  3. Fallback  — placeholder news when no provider returns anything

Multi-symbol work is strictly sequential and paced by a shared
:class:`RateLimiter`. A failure on one symbol is logged and skipped; the
batch always continues with the next symbol.
"""

import random
from typing import List, Optional, Sequence

from stockdash.core.errors import FailureKind, ProviderError
from stockdash.core.logger import logger
from stockdash.core.rate_limit import RateLimiter
from stockdash.core.symbols import company_name, strip_suffix
from stockdash.models.datatypes import NewsItem, Quote
from stockdash.providers.base import NewsProvider, QuoteProvider, SentimentProvider
from stockdash.providers.news import placeholder_news

MAX_ARTICLES = 5


class QuoteOrchestrator:
    """Fetches quotes and news for the dashboard.

    Args:
        quote_provider: Source of quotes, profiles and price history.
        news_providers: Tried in order; the first non-empty result wins.
        sentiment: Classifier applied to every real article.
        limiter: Shared pacing; defaults to the quote provider's ``min_interval``.
        rng: Randomness for placeholder news.
    """

    def __init__(
        self,
        quote_provider: QuoteProvider,
        news_providers: Sequence[NewsProvider],
        sentiment: SentimentProvider,
        limiter: Optional[RateLimiter] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.quote_provider = quote_provider
        self.news_providers = list(news_providers)
        self.sentiment = sentiment
        self.limiter = limiter or RateLimiter(quote_provider.min_interval)
        self.rng = rng or random.Random()

    # ── quotes ────────────────────────────────────────────────────────────────

    def fetch_quote(self, symbol: str) -> Quote:
        """Fetch one quote.

        Raises:
            ProviderError: NOT_FOUND for an empty or zero-price quote, or
                whatever the provider reported.
        """
        symbol = symbol.strip().upper()
        quote = self.quote_provider.quote(symbol)
        if quote is None or not quote.price:
            raise ProviderError(FailureKind.NOT_FOUND, f"Stock {symbol} not found or no data available")

        try:
            name = self.quote_provider.profile_name(symbol)
            if name:
                quote.name = name
        except Exception as exc:
            logger.debug(f"QuoteOrchestrator: profile lookup failed for {symbol}: {exc}")
        if not quote.name:
            quote.name = symbol
        return quote

    def fetch_many(self, symbols: Sequence[str]) -> List[Quote]:
        """Fetch quotes one after another; failed symbols are left out."""
        results: List[Quote] = []
        for symbol in symbols:
            self.limiter.acquire()
            try:
                results.append(self.fetch_quote(symbol))
            except Exception as exc:
                logger.error(f"QuoteOrchestrator: failed to fetch {symbol}: {exc}")
        logger.info(f"QuoteOrchestrator: fetched {len(results)}/{len(symbols)} quotes")
        return results

    # ── news ──────────────────────────────────────────────────────────────────

    def fetch_news(self, symbol: str) -> List[NewsItem]:
        """Return up to five classified articles, or placeholder news.

        Never raises: a missing key, a rate limit, an error or an empty
        result from every provider all end in :func:`placeholder_news`.
        """
        symbol = symbol.strip().upper()
        name = strip_suffix(company_name(symbol))
        query = f'"{symbol}" OR "{name}"' if name != symbol else f'"{symbol}"'

        for provider in self.news_providers:
            try:
                articles = provider.articles(query, limit=10)
            except ProviderError as exc:
                if exc.kind == FailureKind.RATE_LIMITED:
                    logger.warning(f"NEWS [{symbol}] {provider.name} rate limited: {exc}")
                else:
                    logger.error(f"NEWS [{symbol}] {provider.name} failed ({exc.kind.value}): {exc}")
                continue
            except Exception as exc:
                logger.error(f"NEWS [{symbol}] {provider.name} raised: {exc}")
                continue

            if not articles:
                logger.info(f"NEWS [{symbol}] {provider.name} returned no articles")
                continue

            items = [
                NewsItem(
                    title=a.title,
                    summary=a.description or a.title,
                    url=a.url,
                    published=a.published_at,
                    sentiment=self.sentiment.classify(f"{a.title} {a.description or ''}"),
                    source=a.source,
                )
                for a in articles[:MAX_ARTICLES]
            ]
            logger.info(f"NEWS [{symbol}] source={provider.name} | {len(items)} articles")
            return items

        logger.warning(f"NEWS [{symbol}] source=placeholder | no provider returned articles")
        return placeholder_news(symbol, self.rng)
