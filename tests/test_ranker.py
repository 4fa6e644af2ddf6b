"""Tests for recommendations and per-stock analysis."""

import random

import pytest

from fakes import FakeNewsProvider, make_article
from stockdash.core.rate_limit import RateLimiter
from stockdash.models.datatypes import NewsItem, Sentiment, Signal
from stockdash.pipeline.orchestrator import QuoteOrchestrator
from stockdash.pipeline.ranker import RecommendationRanker, analyze_stock
from stockdash.providers.sentiment import KeywordSentimentProvider


def _news(*sentiments):
    return [
        NewsItem(title=f"t{i}", summary="", url="#", published="", sentiment=s, source="x")
        for i, s in enumerate(sentiments)
    ]


P, N, Z = Sentiment.POSITIVE, Sentiment.NEGATIVE, Sentiment.NEUTRAL


class TestAnalyzeStock:
    @pytest.mark.parametrize(
        "sentiments,signal",
        [
            ((P, P, P), Signal.BUY),
            ((P, P, Z), Signal.BUY),
            ((P, P, P, N, Z), Signal.BUY),
            ((N, N, N), Signal.SELL),
            ((N, N, Z, Z), Signal.SELL),
            ((P, P), Signal.HOLD),
            ((P, N, Z), Signal.HOLD),
            ((P,), Signal.HOLD),
            ((), Signal.HOLD),
        ],
    )
    def test_thresholds(self, sentiments, signal):
        assert analyze_stock(_news(*sentiments)).recommendation == signal

    def test_limited_coverage_insight(self):
        assert "Limited news coverage (1 articles)" in analyze_stock(_news(P)).insight

    def test_mixed_insight_counts(self):
        insight = analyze_stock(_news(P, N, Z, Z)).insight
        assert "1 positive, 1 negative, and 2 neutral" in insight


class TestRecommendationRanker:
    def test_failed_candidate_is_omitted(self, orchestrator, rng):
        recs = RecommendationRanker(orchestrator, ["NVDA", "TSLA", "AAPL"], rng=rng).rank()
        assert [r.symbol for r in recs] == ["NVDA", "AAPL"]
        assert recs[0].name == "NVIDIA Corporation"
        assert recs[1].name == "Apple Inc"

    def test_only_first_batch_is_evaluated(self, orchestrator, quote_provider, rng):
        RecommendationRanker(orchestrator, ["AAPL", "MSFT", "NVDA"], per_request=2, rng=rng).rank()
        assert quote_provider.calls == ["AAPL", "MSFT"]

    def test_max_price_filter(self, orchestrator, rng):
        recs = RecommendationRanker(orchestrator, ["NVDA", "MSFT", "AAPL"], rng=rng).rank(max_price=500)
        assert [r.symbol for r in recs] == ["MSFT", "AAPL"]
        assert all(r.current_price <= 500 for r in recs)

    def test_value_ranges(self, orchestrator):
        for seed in range(50):
            ranker = RecommendationRanker(orchestrator, ["AAPL", "MSFT"], rng=random.Random(seed))
            for rec in ranker.rank():
                assert 5.0 <= rec.upside <= 20.0
                assert 50.0 <= rec.confidence <= 100.0
                assert rec.target_price == pytest.approx(rec.current_price * (1 + rec.upside / 100), abs=0.25)
                assert rec.target_price > rec.current_price

    def test_news_impact_follows_score(self, quote_provider, no_wait_limiter, rng):
        bad_news = FakeNewsProvider(articles=[
            make_article("Shares decline", "bearish tone"),
            make_article("Analyst downgrade", "weak outlook"),
            make_article("Revenue miss", "sell-off deepens"),
        ])
        orch = QuoteOrchestrator(quote_provider, [bad_news], KeywordSentimentProvider(), no_wait_limiter, rng)
        rec = RecommendationRanker(orch, ["MSFT"], rng=rng).rank()[0]

        assert rec.news_impact == Sentiment.NEGATIVE
        assert rec.confidence >= 50.0
        assert "0 positive vs 3 negative" in rec.reason

    def test_calls_share_the_rate_limiter(self, quote_provider, clock, rng):
        limiter = RateLimiter(1.1, clock=clock, sleep=clock.sleep)
        orch = QuoteOrchestrator(quote_provider, [], KeywordSentimentProvider(), limiter, rng)
        RecommendationRanker(orch, ["AAPL", "MSFT", "NVDA"], rng=rng).rank()
        assert len(clock.sleeps) == 2

    def test_candidates_are_uppercased(self, orchestrator, rng):
        ranker = RecommendationRanker(orchestrator, ["aapl"], rng=rng)
        assert ranker.candidates == ["AAPL"]
        assert [r.symbol for r in ranker.rank()] == ["AAPL"]
