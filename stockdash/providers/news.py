"""News feed providers and the placeholder-news generator.

Providers, in the order the orchestrator normally tries them:
  1. NewsDataProvider   — NewsData.io ``/news`` (API key, 200 credits/day)
  2. NewsApiProvider    — NewsAPI.org ``/everything`` (API key)
  3. GoogleNewsProvider — Google News RSS (no key)

Each returns normalized :class:`RawArticle` lists and raises
:class:`ProviderError` on HTTP/network failure. Raw responses go through an
optional :class:`ResponseCache` so repeated refreshes do not burn quota.
When every provider comes back empty the orchestrator falls back to
:func:`placeholder_news`.
"""

import random
import urllib.parse
from abc import abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import feedparser
import requests

from stockdash.core.cache import ResponseCache
from stockdash.core.errors import FailureKind, ProviderError
from stockdash.core.logger import logger
from stockdash.models.datatypes import NewsItem, RawArticle, Sentiment
from stockdash.providers.base import NewsProvider
from stockdash.providers.market import get_json

_GOOGLE_RSS_BASE = "https://news.google.com/rss/search"


class _CachedProvider(NewsProvider):
    """Shared cache-aware plumbing: ``_fetch_raw`` results are cached per query."""

    def __init__(self, cache: Optional[ResponseCache] = None) -> None:
        self.cache = cache

    def articles(self, query: str, limit: int = 10) -> List[RawArticle]:
        cache_key = f"{self.name}:{query}:{limit}"
        raw = self.cache.get(cache_key) if self.cache else None
        if raw is None:
            raw = self._fetch_raw(query, limit)
            if self.cache is not None:
                self.cache.set(cache_key, raw)
        else:
            logger.debug(f"{type(self).__name__}: cache hit for {query!r}")
        return [a for a in (self._normalize(r) for r in raw) if a is not None][:limit]

    @abstractmethod
    def _fetch_raw(self, query: str, limit: int) -> List[dict]:
        pass

    @abstractmethod
    def _normalize(self, raw: dict) -> Optional[RawArticle]:
        pass


# ── NewsData.io ───────────────────────────────────────────────────────────────

class NewsDataProvider(_CachedProvider):
    """NewsData.io provider (business + technology categories, English)."""

    name = "newsdata"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://newsdata.io/api/1",
        timeout: float = 15.0,
        cache: Optional[ResponseCache] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(cache)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _fetch_raw(self, query: str, limit: int) -> List[dict]:
        if not self.api_key:
            raise ProviderError(FailureKind.UNKNOWN, "NewsData API key missing")
        logger.info(f"NewsDataProvider: fetching q={query!r}")
        params = {
            "apikey": self.api_key,
            "q": query,
            "category": "business,technology",
            "language": "en",
            "size": limit,
        }
        data = get_json(self.session, f"{self.base_url}/news", params, "NewsData", self.timeout)
        return list((data or {}).get("results") or [])

    def _normalize(self, raw: dict) -> Optional[RawArticle]:
        title = (raw.get("title") or "").strip()
        if not title:
            return None
        content = raw.get("content") or ""
        return RawArticle(
            title=title,
            description=raw.get("description") or content[:200],
            url=raw.get("link") or "#",
            published_at=raw.get("pubDate") or datetime.now(timezone.utc).isoformat(),
            source=raw.get("source_id") or "NewsData",
        )


# ── NewsAPI.org ───────────────────────────────────────────────────────────────

class NewsApiProvider(_CachedProvider):
    """NewsAPI.org ``/everything`` provider, newest first."""

    name = "newsapi"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://newsapi.org/v2",
        timeout: float = 15.0,
        cache: Optional[ResponseCache] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(cache)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _fetch_raw(self, query: str, limit: int) -> List[dict]:
        if not self.api_key:
            raise ProviderError(FailureKind.UNKNOWN, "NewsAPI key missing")
        logger.info(f"NewsApiProvider: fetching q={query!r}")
        params = {
            "q": query,
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": limit,
            "apiKey": self.api_key,
        }
        data = get_json(self.session, f"{self.base_url}/everything", params, "NewsAPI", self.timeout)
        if (data or {}).get("status") == "error":
            code = str(data.get("code") or "")
            kind = FailureKind.RATE_LIMITED if code == "rateLimited" else FailureKind.UNKNOWN
            raise ProviderError(kind, f"NewsAPI error: {data.get('message') or code}")
        return list((data or {}).get("articles") or [])

    def _normalize(self, raw: dict) -> Optional[RawArticle]:
        title = (raw.get("title") or "").strip()
        if not title or title == "[Removed]":
            return None
        source = raw.get("source") or {}
        return RawArticle(
            title=title,
            description=raw.get("description") or title,
            url=raw.get("url") or "#",
            published_at=raw.get("publishedAt") or datetime.now(timezone.utc).isoformat(),
            source=(source.get("name") if isinstance(source, dict) else str(source)) or "NewsAPI",
        )


# ── Google News RSS ───────────────────────────────────────────────────────────

class GoogleNewsProvider(_CachedProvider):
    """Google News RSS provider. ``when:3d`` limits results server-side."""

    name = "google"

    def __init__(
        self,
        cache: Optional[ResponseCache] = None,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(cache)
        self.timeout = timeout
        self.session = session or requests.Session()

    def _fetch_raw(self, query: str, limit: int) -> List[dict]:
        encoded = urllib.parse.quote(f"{query} when:3d")
        url = f"{_GOOGLE_RSS_BASE}?q={encoded}&hl=en-US&gl=US&ceid=US:en"
        logger.info(f"GoogleNewsProvider: fetching q={query!r}")

        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProviderError(FailureKind.NETWORK, f"NetworkError: Google News RSS unreachable: {exc}") from exc
        if resp.status_code == 429:
            raise ProviderError(FailureKind.RATE_LIMITED, "Google News RSS rate limit reached (HTTP 429)")
        if not 200 <= resp.status_code < 300:
            raise ProviderError(FailureKind.UNKNOWN, f"Google News RSS HTTP {resp.status_code}")

        feed = feedparser.parse(resp.content)
        if feed.bozo and not feed.entries:
            raise ProviderError(
                FailureKind.UNKNOWN,
                f"Google News RSS unreadable: {getattr(feed, 'bozo_exception', 'unknown error')}",
            )

        entries = []
        for entry in feed.entries[:limit]:
            pub_parsed = getattr(entry, "published_parsed", None)
            pub_str = (
                datetime(*pub_parsed[:6], tzinfo=timezone.utc).isoformat()
                if pub_parsed else ""
            )
            source_raw = getattr(entry, "source", {})
            source = (
                source_raw.get("title", "Google News")
                if isinstance(source_raw, dict)
                else str(source_raw) or "Google News"
            )
            entries.append({
                "title": getattr(entry, "title", ""),
                "summary": getattr(entry, "summary", ""),
                "link": getattr(entry, "link", ""),
                "published_at": pub_str,
                "source": source,
            })
        logger.info(f"GoogleNewsProvider: {len(entries)} entries for {query!r}")
        return entries

    def _normalize(self, raw: dict) -> Optional[RawArticle]:
        title = (raw.get("title") or "").strip()
        if not title:
            return None
        return RawArticle(
            title=title,
            description=raw.get("summary") or title,
            url=raw.get("link") or "#",
            published_at=raw.get("published_at") or datetime.now(timezone.utc).isoformat(),
            source=raw.get("source") or "Google News",
        )


# ── Placeholder news ──────────────────────────────────────────────────────────

def placeholder_news(
    symbol: str,
    rng: Optional[random.Random] = None,
    now: Optional[Callable[[], datetime]] = None,
) -> List[NewsItem]:
    """Generate 2–4 plausible stand-in articles dated within the last 3 days.

    Used whenever real news is unavailable so the dashboard always has
    something to show and analyse.
    """
    rng = rng or random.Random()
    current = (now or (lambda: datetime.now(timezone.utc)))()

    def _ago(max_hours: int) -> str:
        return (current - timedelta(seconds=rng.random() * max_hours * 3600)).isoformat()

    items = [
        NewsItem(
            title=f"{symbol} Shows Strong Market Performance",
            summary=f"Recent trading activity for {symbol} indicates positive investor sentiment and strong fundamentals.",
            url="#",
            published=_ago(24),
            sentiment=Sentiment.POSITIVE,
            source="Market Watch",
        ),
        NewsItem(
            title=f"Analysts Update {symbol} Price Target",
            summary=f"Investment analysts have revised their outlook for {symbol} based on recent quarterly performance.",
            url="#",
            published=_ago(48),
            sentiment=Sentiment.NEUTRAL,
            source="Financial Times",
        ),
        NewsItem(
            title=f"{symbol} Market Analysis and Trends",
            summary=f"Technical analysis suggests continued interest in {symbol} with moderate volatility expected.",
            url="#",
            published=_ago(72),
            sentiment=Sentiment.POSITIVE if rng.random() > 0.3 else Sentiment.NEUTRAL,
            source="Bloomberg",
        ),
        NewsItem(
            title=f"Sector Rotation Puts {symbol} in Focus",
            summary=f"Institutional flows into the sector keep {symbol} on investor watchlists.",
            url="#",
            published=_ago(72),
            sentiment=Sentiment.NEUTRAL if rng.random() > 0.5 else Sentiment.NEGATIVE,
            source="Reuters",
        ),
    ]
    return items[:rng.randint(2, 4)]


def build_news_providers(settings, cache: Optional[ResponseCache] = None) -> List[NewsProvider]:
    """Instantiate the news providers listed in ``settings.news_providers``.

    Key-based providers without a key are skipped.
    """
    providers: List[NewsProvider] = []
    for name in settings.news_providers:
        name = name.lower()
        if name == "newsdata":
            if settings.newsdata_api_key:
                providers.append(NewsDataProvider(
                    settings.newsdata_api_key, settings.newsdata_base_url, settings.timeout_seconds, cache
                ))
            else:
                logger.warning("build_news_providers: NEWSDATA_API_KEY not set — NewsData disabled")
        elif name == "newsapi":
            if settings.news_api_key:
                providers.append(NewsApiProvider(
                    settings.news_api_key, settings.news_api_base_url, settings.timeout_seconds, cache
                ))
            else:
                logger.warning("build_news_providers: NEWS_API_KEY not set — NewsAPI disabled")
        elif name == "google":
            providers.append(GoogleNewsProvider(cache, settings.timeout_seconds))
        else:
            raise ValueError(f"Unknown news provider: {name}")
    return providers
