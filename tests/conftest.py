"""Shared fixtures for stockdash tests."""

import random
import sqlite3

import pytest

from fakes import FakeClock, FakeQuoteProvider, make_quote
from stockdash.core.rate_limit import RateLimiter
from stockdash.pipeline.orchestrator import QuoteOrchestrator
from stockdash.providers.sentiment import KeywordSentimentProvider


@pytest.fixture
def clock():
    return FakeClock(start=1000.0)


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def no_wait_limiter(clock):
    return RateLimiter(0.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def quote_provider():
    return FakeQuoteProvider(
        quotes={
            "AAPL": make_quote("AAPL", 190.0, 1.5, 0.8),
            "MSFT": make_quote("MSFT", 410.0, -2.0, -0.5),
            "NVDA": make_quote("NVDA", 880.0, 12.0, 1.4),
        },
        names={"AAPL": "Apple Inc", "MSFT": "Microsoft Corporation"},
        closes={"AAPL": [100, 100, 100, 100, 100, 110, 110, 110, 110, 110]},
    )


@pytest.fixture
def orchestrator(quote_provider, no_wait_limiter, rng):
    return QuoteOrchestrator(
        quote_provider=quote_provider,
        news_providers=[],
        sentiment=KeywordSentimentProvider(),
        limiter=no_wait_limiter,
        rng=rng,
    )


@pytest.fixture
def opened_connections(monkeypatch):
    """Records every connection handed out by ``sqlite3.connect``."""
    opened = []
    real_connect = sqlite3.connect

    def tracking_connect(*args, **kwargs):
        conn = real_connect(*args, **kwargs)
        opened.append(conn)
        return conn

    monkeypatch.setattr(sqlite3, "connect", tracking_connect)
    return opened
