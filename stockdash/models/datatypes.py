"""Data structures for the stock dashboard core."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class Sentiment(str, Enum):
    """Three-way tone of a news text."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


class Horizon(str, Enum):
    ONE_DAY = "1d"
    ONE_WEEK = "1w"
    ONE_MONTH = "1m"


class Signal(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class StockErrorType(str, Enum):
    NETWORK = "NETWORK"
    API_LIMIT = "API_LIMIT"
    INVALID_SYMBOL = "INVALID_SYMBOL"
    NO_DATA = "NO_DATA"
    UNKNOWN = "UNKNOWN"


@dataclass
class Quote:
    """
    A point-in-time price snapshot for one ticker. Never persisted.
    """
    symbol: str
    name: str
    price: float
    change: float
    change_percent: float
    volume: Optional[int] = None
    market_cap: Optional[str] = None


@dataclass
class RawArticle:
    """
    Represents a normalized news article fetched from any news provider,
    before sentiment has been assigned.
    """
    title: str
    description: str
    url: str
    published_at: str  # ISO 8601 timestamp
    source: str


@dataclass
class NewsItem:
    title: str
    summary: str
    url: str
    published: str
    sentiment: Sentiment
    source: str


@dataclass
class ForecastPoint:
    period: Horizon
    label: str
    prediction: float
    confidence: float
    trend: Trend
    reasoning: str = ""


@dataclass(frozen=True)
class StockError:
    """User-facing description of a failure, with a remediation hint."""
    type: StockErrorType
    message: str
    solution: str
    can_retry: bool


@dataclass
class Recommendation:
    symbol: str
    name: str
    current_price: float
    target_price: float
    upside: float
    confidence: float
    reason: str
    news_impact: Sentiment


@dataclass
class StockAnalysis:
    recommendation: Signal
    insight: str


@dataclass
class StockView:
    """Everything the dashboard shows for one symbol."""
    quote: Quote
    news: List[NewsItem] = field(default_factory=list)
    analysis: Optional[StockAnalysis] = None
    forecast: List[ForecastPoint] = field(default_factory=list)


@dataclass
class PortfolioSummary:
    total_value: float
    total_change: float
    total_change_percent: float
    stock_count: int


@dataclass
class WatchlistEntry:
    """
    The only persisted record: one row per tracked symbol. Removal flips
    ``is_active`` instead of deleting the row.
    """
    id: int
    symbol: str
    name: str
    added_at: datetime
    is_active: bool = True


@dataclass
class ExchangeRateCacheEntry:
    rate: float
    timestamp: float
