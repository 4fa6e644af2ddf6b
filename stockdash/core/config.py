"""Configuration module for loading project settings and environment variables."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_CANDIDATES = ["NVDA", "TSLA", "AAPL", "MSFT", "GOOGL"]

# Seconds between consecutive calls, sized to each provider's free-tier quota.
PROVIDER_INTERVALS = {
    "finnhub": 1.1,      # 60 calls/minute
    "yahoo": 1.0,
    "alphavantage": 12.0,  # 5 calls/minute
}


def load_config(config_path: str | Path = "config.yaml") -> Dict[str, Any]:
    """
    Load configuration from the specified YAML file.

    Args:
        config_path (str | Path): Path to the configuration file. Defaults to "config.yaml".

    Returns:
        Dict[str, Any]: A dictionary containing the configuration settings.
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    with open(config_file, "r", encoding="utf-8") as file:
        config_data = yaml.safe_load(file)

    if not config_data:
        raise ValueError(f"Configuration file {config_path} is empty or invalid.")

    return config_data


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


@dataclass
class Settings:
    """Typed view over ``config.yaml`` plus API keys from the environment.

    Every API key is optional; each consumer documents what it does when
    its key is missing.
    """
    quote_provider: str = "finnhub"
    news_providers: List[str] = field(default_factory=lambda: ["newsdata", "newsapi", "google"])
    sentiment_strategy: str = "keyword"
    sentiment_model: str = "cardiffnlp/twitter-roberta-base-sentiment-latest"
    candidates: List[str] = field(default_factory=lambda: list(DEFAULT_CANDIDATES))
    candidates_per_request: int = 3
    call_interval_seconds: Optional[float] = None
    timeout_seconds: float = 15.0
    exchange_rate_ttl_seconds: float = 3600.0
    exchange_rate_fallback: float = 0.85
    watchlist_db: Optional[str] = None
    news_cache_db: Optional[str] = "output/.cache.db"
    news_cache_ttl_seconds: float = 900.0

    finnhub_api_key: str = ""
    alpha_vantage_api_key: str = ""
    newsdata_api_key: str = ""
    news_api_key: str = ""
    hugging_face_api_key: str = ""

    finnhub_base_url: str = "https://finnhub.io/api/v1"
    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"
    newsdata_base_url: str = "https://newsdata.io/api/1"
    news_api_base_url: str = "https://newsapi.org/v2"
    hugging_face_base_url: str = "https://api-inference.huggingface.co/models"
    exchange_rate_base_url: str = "https://api.exchangerate-api.com/v4/latest"

    @property
    def call_interval(self) -> float:
        """Pacing between quote-provider calls (explicit override wins)."""
        if self.call_interval_seconds is not None:
            return float(self.call_interval_seconds)
        return PROVIDER_INTERVALS.get(self.quote_provider, 1.1)

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "Settings":
        """Build settings from a parsed config dict and the current environment.

        Args:
            config: Parsed ``config.yaml`` (may be ``None`` or partial).

        Returns:
            Settings: Populated settings object.
        """
        config = config or {}
        providers = config.get("providers", {})
        sentiment = config.get("sentiment", {})
        recs = config.get("recommendations", {})
        http = config.get("http", {})
        fx = config.get("exchange_rate", {})
        storage = config.get("storage", {})
        defaults = cls()

        return cls(
            quote_provider=providers.get("quote", defaults.quote_provider),
            news_providers=list(providers.get("news", defaults.news_providers)),
            sentiment_strategy=sentiment.get("strategy", defaults.sentiment_strategy),
            sentiment_model=sentiment.get("model", defaults.sentiment_model),
            candidates=[s.upper() for s in recs.get("candidates", defaults.candidates)],
            candidates_per_request=int(recs.get("per_request", defaults.candidates_per_request)),
            call_interval_seconds=http.get("call_interval_seconds"),
            timeout_seconds=float(http.get("timeout_seconds", defaults.timeout_seconds)),
            exchange_rate_ttl_seconds=float(fx.get("ttl_seconds", defaults.exchange_rate_ttl_seconds)),
            exchange_rate_fallback=float(fx.get("fallback_rate", defaults.exchange_rate_fallback)),
            watchlist_db=storage.get("watchlist_db", defaults.watchlist_db),
            news_cache_db=storage.get("news_cache_db", defaults.news_cache_db),
            news_cache_ttl_seconds=float(storage.get("news_cache_ttl_seconds", defaults.news_cache_ttl_seconds)),
            finnhub_api_key=_env("FINNHUB_API_KEY"),
            alpha_vantage_api_key=_env("ALPHA_VANTAGE_API_KEY"),
            newsdata_api_key=_env("NEWSDATA_API_KEY"),
            news_api_key=_env("NEWS_API_KEY"),
            hugging_face_api_key=_env("HUGGING_FACE_API_KEY"),
            finnhub_base_url=_env("FINNHUB_BASE_URL", defaults.finnhub_base_url),
            alpha_vantage_base_url=_env("ALPHA_VANTAGE_BASE_URL", defaults.alpha_vantage_base_url),
            newsdata_base_url=_env("NEWSDATA_BASE_URL", defaults.newsdata_base_url),
            news_api_base_url=_env("NEWS_API_BASE_URL", defaults.news_api_base_url),
            hugging_face_base_url=_env("HUGGING_FACE_BASE_URL", defaults.hugging_face_base_url),
            exchange_rate_base_url=_env("EXCHANGE_RATE_BASE_URL", defaults.exchange_rate_base_url),
        )
