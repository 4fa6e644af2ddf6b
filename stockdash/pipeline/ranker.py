"""News-sentiment recommendations and per-stock BUY/SELL/HOLD analysis."""

import random
from typing import List, Optional, Sequence

from stockdash.core.config import DEFAULT_CANDIDATES
from stockdash.core.logger import logger
from stockdash.core.symbols import company_name
from stockdash.models.datatypes import (
    NewsItem,
    Recommendation,
    Sentiment,
    Signal,
    StockAnalysis,
)
from stockdash.pipeline.orchestrator import QuoteOrchestrator


def _counts(news: Sequence[NewsItem]) -> tuple[int, int, int]:
    pos = sum(1 for n in news if n.sentiment == Sentiment.POSITIVE)
    neg = sum(1 for n in news if n.sentiment == Sentiment.NEGATIVE)
    return pos, neg, len(news) - pos - neg


def analyze_stock(news: Sequence[NewsItem]) -> StockAnalysis:
    """
    Label a stock from its news mix.

    BUY needs a net score of at least +2 over 3+ articles, SELL at most -2
    over 3+ articles; anything else is HOLD.
    """
    pos, neg, neutral = _counts(news)
    score = pos - neg
    total = len(news)

    if score >= 2 and total >= 3:
        return StockAnalysis(
            Signal.BUY,
            f"Strong bullish sentiment with {pos} positive articles vs {neg} negative. "
            f"Market confidence appears high with recent positive developments.",
        )
    if score <= -2 and total >= 3:
        return StockAnalysis(
            Signal.SELL,
            f"Bearish sentiment detected with {neg} negative articles vs {pos} positive. "
            f"Consider reducing exposure due to negative market sentiment.",
        )
    if total < 2:
        return StockAnalysis(
            Signal.HOLD,
            f"Limited news coverage ({total} articles) makes sentiment analysis inconclusive. "
            f"Monitor for more market signals before making position changes.",
        )
    return StockAnalysis(
        Signal.HOLD,
        f"Mixed sentiment signals with {pos} positive, {neg} negative, and {neutral} neutral articles. "
        f"Wait for clearer directional indicators.",
    )


class RecommendationRanker:
    """Scores a fixed candidate list from live quotes and news sentiment.

    Best effort: a candidate whose quote cannot be fetched is logged and
    left out, and whatever was gathered is returned.

    Args:
        orchestrator: Shared fetcher (and its rate limiter).
        candidates: Trending symbols to consider.
        per_request: How many candidates are processed per call.
        rng: Randomness for upside and confidence jitter.
    """

    def __init__(
        self,
        orchestrator: QuoteOrchestrator,
        candidates: Sequence[str] = DEFAULT_CANDIDATES,
        per_request: int = 3,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.candidates = [c.upper() for c in candidates]
        self.per_request = per_request
        self.rng = rng or random.Random()

    def rank(self, max_price: Optional[float] = None) -> List[Recommendation]:
        batch = self.candidates[:self.per_request]
        logger.info(f"Recommendations: evaluating {', '.join(batch)} (max_price={max_price})")
        results: List[Recommendation] = []

        for symbol in batch:
            try:
                self.orchestrator.limiter.acquire()
                quote = self.orchestrator.fetch_quote(symbol)
                news = self.orchestrator.fetch_news(symbol)
            except Exception as exc:
                logger.error(f"Recommendations: skipping {symbol}: {exc}")
                continue

            pos, neg, _ = _counts(news)
            news_score = pos - neg
            upside = 5 + self.rng.random() * 15
            target = quote.price * (1 + upside / 100)
            confidence = min(100.0, max(50.0, 70 + news_score * 5 + self.rng.random() * 15))

            if max_price is not None and quote.price > max_price:
                logger.info(f"Recommendations: {symbol} at {quote.price} above max_price {max_price}")
                continue

            if news_score > 0:
                impact = Sentiment.POSITIVE
            elif news_score < 0:
                impact = Sentiment.NEGATIVE
            else:
                impact = Sentiment.NEUTRAL

            results.append(Recommendation(
                symbol=quote.symbol,
                name=quote.name if quote.name and quote.name != quote.symbol else company_name(symbol),
                current_price=quote.price,
                target_price=round(target, 2),
                upside=round(upside, 1),
                confidence=confidence,
                reason=(
                    f"Market analysis indicates {upside:.1f}% upside potential. "
                    f"News sentiment: {pos} positive vs {neg} negative recent articles."
                ),
                news_impact=impact,
            ))

        logger.info(f"Recommendations: generated {len(results)} ({', '.join(r.symbol for r in results)})")
        return results
