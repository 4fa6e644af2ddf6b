"""Abstract base classes for data providers."""

from abc import ABC, abstractmethod
from typing import Dict, List

from stockdash.models.datatypes import Quote, RawArticle, Sentiment


class QuoteProvider(ABC):
    """Abstract interface for price quotes, company profiles and recent closes.

    Implementations raise :class:`stockdash.core.errors.ProviderError` on failure.
    """

    #: Seconds to leave between consecutive calls to stay under the provider's quota.
    min_interval: float = 1.0

    @abstractmethod
    def quote(self, symbol: str) -> Quote:
        """
        Fetch the latest quote for a symbol.

        Args:
            symbol (str): The ticker symbol.

        Returns:
            Quote: Price snapshot; ``name`` is the symbol until a profile lookup fills it.
        """
        pass

    @abstractmethod
    def profile_name(self, symbol: str) -> str:
        """
        Fetch the company display name for a symbol.

        Returns:
            str: Company name, or an empty string if the provider has none.
        """
        pass

    @abstractmethod
    def recent_closes(self, symbol: str, window: int = 10) -> List[float]:
        """
        Fetch the most recent daily closing prices.

        Args:
            symbol (str): The ticker symbol.
            window (int): Number of sessions wanted.

        Returns:
            List[float]: Closes ordered oldest → newest, at most ``window`` long.
        """
        pass


class NewsProvider(ABC):
    """Abstract interface for fetching company-specific news articles."""

    name: str = "news"

    @abstractmethod
    def articles(self, query: str, limit: int = 10) -> List[RawArticle]:
        """
        Search for articles matching a query.

        Args:
            query (str): Provider search expression, e.g. ``'"AAPL" OR "Apple"'``.
            limit (int): Maximum number of articles wanted.

        Returns:
            List[RawArticle]: Normalized articles, possibly empty.
        """
        pass


class SentimentProvider(ABC):
    """Abstract interface for classifying financial text sentiment.

    Implementations never raise: on any failure they answer ``NEUTRAL``.
    """

    @abstractmethod
    def classify(self, text: str) -> Sentiment:
        """
        Classify the tone of a text.

        Args:
            text (str): Headline and/or summary.

        Returns:
            Sentiment: positive, negative or neutral.
        """
        pass


class ExchangeRateProvider(ABC):
    """Abstract interface for currency rates."""

    @abstractmethod
    def latest_rates(self, base: str = "USD") -> Dict[str, float]:
        """Return the latest rates keyed by currency code, relative to ``base``."""
        pass
