"""Tests for news providers and placeholder news."""

import random
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests

from stockdash.core.cache import ResponseCache
from stockdash.core.config import Settings
from stockdash.core.errors import FailureKind, ProviderError
from stockdash.models.datatypes import Sentiment
from stockdash.providers.news import (
    GoogleNewsProvider,
    NewsApiProvider,
    NewsDataProvider,
    build_news_providers,
    placeholder_news,
    _CachedProvider,
)

NEWSDATA_BODY = {
    "status": "success",
    "results": [
        {
            "title": "Apple rallies on record iPhone sales",
            "description": "Shares rose after a strong quarter.",
            "link": "https://news.test/apple",
            "pubDate": "2024-05-02 14:00:00",
            "source_id": "reuters",
        },
        {"title": "   ", "description": "blank title is dropped"},
        {"title": "Apple supplier update", "content": "Body text " * 40},
    ],
}

NEWSAPI_BODY = {
    "status": "ok",
    "articles": [
        {
            "title": "Microsoft beats estimates",
            "description": None,
            "url": "https://news.test/msft",
            "publishedAt": "2024-05-02T14:00:00Z",
            "source": {"id": None, "name": "Bloomberg"},
        },
        {"title": "[Removed]", "url": "https://removed.com"},
    ],
}


def _session(payload, status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.text = ""
    resp.json.return_value = payload
    session = MagicMock()
    session.get.return_value = resp
    return session


class TestNewsDataProvider:
    def test_normalizes_results(self):
        session = _session(NEWSDATA_BODY)
        articles = NewsDataProvider("key", "https://nd.test/api/1", session=session).articles('"AAPL"', limit=10)

        assert [a.title for a in articles] == [
            "Apple rallies on record iPhone sales",
            "Apple supplier update",
        ]
        assert articles[0].source == "reuters"
        assert articles[0].url == "https://news.test/apple"
        assert articles[1].description == ("Body text " * 40)[:200]
        assert articles[1].source == "NewsData"

        args, kwargs = session.get.call_args
        assert args[0] == "https://nd.test/api/1/news"
        assert kwargs["params"]["q"] == '"AAPL"'
        assert kwargs["params"]["apikey"] == "key"

    def test_missing_key(self):
        session = MagicMock()
        with pytest.raises(ProviderError):
            NewsDataProvider("", session=session).articles("AAPL")
        session.get.assert_not_called()

    def test_rate_limit_status(self):
        provider = NewsDataProvider("key", session=_session({}, status=429))
        with pytest.raises(ProviderError) as exc_info:
            provider.articles("AAPL")
        assert exc_info.value.kind == FailureKind.RATE_LIMITED

    def test_cache_hit_skips_request(self, clock):
        cache = ResponseCache(":memory:", ttl_seconds=900, clock=clock)
        session = _session(NEWSDATA_BODY)
        provider = NewsDataProvider("key", cache=cache, session=session)

        first = provider.articles("AAPL")
        second = provider.articles("AAPL")
        assert [a.title for a in first] == [a.title for a in second]
        assert session.get.call_count == 1

        clock.advance(901)
        provider.articles("AAPL")
        assert session.get.call_count == 2


class TestNewsApiProvider:
    def test_normalizes_and_skips_removed(self):
        articles = NewsApiProvider("key", session=_session(NEWSAPI_BODY)).articles("MSFT")
        assert len(articles) == 1
        assert articles[0].source == "Bloomberg"
        assert articles[0].description == "Microsoft beats estimates"

    @pytest.mark.parametrize(
        "code,kind",
        [("rateLimited", FailureKind.RATE_LIMITED), ("apiKeyInvalid", FailureKind.UNKNOWN)],
    )
    def test_error_status(self, code, kind):
        body = {"status": "error", "code": code, "message": "nope"}
        with pytest.raises(ProviderError) as exc_info:
            NewsApiProvider("key", session=_session(body)).articles("MSFT")
        assert exc_info.value.kind == kind


def _feed_session(content=b"<rss/>", status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.content = content
    session = MagicMock()
    session.get.return_value = resp
    return session


class TestGoogleNewsProvider:
    @patch("stockdash.providers.news.feedparser.parse")
    def test_parses_feed(self, mock_parse):
        mock_parse.return_value = SimpleNamespace(
            bozo=False,
            entries=[
                SimpleNamespace(
                    title="Nvidia shares climb",
                    summary="Chip demand stays strong",
                    link="https://news.test/nvda",
                    published_parsed=(2024, 5, 2, 14, 0, 0, 3, 123, 0),
                    source={"title": "CNBC"},
                ),
                SimpleNamespace(title="No date or source"),
            ],
        )
        session = _feed_session(b"<rss>nvda</rss>")
        articles = GoogleNewsProvider(timeout=7.0, session=session).articles('"NVDA"', limit=5)

        assert [a.title for a in articles] == ["Nvidia shares climb", "No date or source"]
        assert articles[0].published_at == "2024-05-02T14:00:00+00:00"
        assert articles[0].source == "CNBC"
        assert articles[1].source == "Google News"

        args, kwargs = session.get.call_args
        assert "when%3A3d" in args[0]
        assert kwargs["timeout"] == 7.0
        mock_parse.assert_called_once_with(b"<rss>nvda</rss>")

    @patch("stockdash.providers.news.feedparser.parse")
    def test_unreadable_feed(self, mock_parse):
        mock_parse.return_value = SimpleNamespace(bozo=True, bozo_exception="bad xml", entries=[])
        with pytest.raises(ProviderError) as exc_info:
            GoogleNewsProvider(session=_feed_session()).articles("x")
        assert exc_info.value.kind == FailureKind.UNKNOWN

    @pytest.mark.parametrize("error", [requests.ConnectionError("refused"), requests.Timeout("slow")])
    def test_transport_failure_is_network(self, error):
        session = MagicMock()
        session.get.side_effect = error
        with pytest.raises(ProviderError) as exc_info:
            GoogleNewsProvider(session=session).articles("AAPL")
        assert exc_info.value.kind == FailureKind.NETWORK

    @pytest.mark.parametrize("status,kind", [(429, FailureKind.RATE_LIMITED), (503, FailureKind.UNKNOWN)])
    def test_http_error_status(self, status, kind):
        with pytest.raises(ProviderError) as exc_info:
            GoogleNewsProvider(session=_feed_session(status=status)).articles("AAPL")
        assert exc_info.value.kind == kind

    def test_abstract_base_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            _CachedProvider()


class TestPlaceholderNews:
    def test_between_two_and_four_items(self):
        for seed in range(40):
            news = placeholder_news("AAPL", random.Random(seed))
            assert 2 <= len(news) <= 4
            assert news[0].sentiment == Sentiment.POSITIVE

    def test_dated_within_last_three_days(self):
        now = datetime(2024, 5, 2, 12, 0, tzinfo=timezone.utc)
        for seed in range(20):
            for item in placeholder_news("MSFT", random.Random(seed), now=lambda: now):
                published = datetime.fromisoformat(item.published)
                assert now - timedelta(hours=72) <= published <= now

    def test_reproducible_with_seed(self):
        now = datetime(2024, 5, 2, tzinfo=timezone.utc)
        first = placeholder_news("TSLA", random.Random(5), now=lambda: now)
        second = placeholder_news("TSLA", random.Random(5), now=lambda: now)
        assert first == second


class TestBuildNewsProviders:
    def test_key_providers_skipped_without_keys(self):
        providers = build_news_providers(Settings())
        assert [p.name for p in providers] == ["google"]

    def test_all_configured(self):
        settings = Settings(newsdata_api_key="a", news_api_key="b")
        assert [p.name for p in build_news_providers(settings)] == ["newsdata", "newsapi", "google"]

    def test_timeout_reaches_every_provider(self):
        settings = Settings(newsdata_api_key="a", news_api_key="b", timeout_seconds=4.0)
        assert [p.timeout for p in build_news_providers(settings)] == [4.0, 4.0, 4.0]

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            build_news_providers(Settings(news_providers=["twitter"]))
