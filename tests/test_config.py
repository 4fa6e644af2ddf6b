"""Tests for configuration loading."""

import pytest
import yaml

from stockdash.core.config import PROVIDER_INTERVALS, Settings, load_config

_KEY_VARS = [
    "FINNHUB_API_KEY",
    "ALPHA_VANTAGE_API_KEY",
    "NEWSDATA_API_KEY",
    "NEWS_API_KEY",
    "HUGGING_FACE_API_KEY",
    "FINNHUB_BASE_URL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for var in _KEY_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


def test_load_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"providers": {"quote": "yahoo"}}), encoding="utf-8")
    assert load_config(path) == {"providers": {"quote": "yahoo"}}


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_load_config_empty_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_defaults(clean_env):
    settings = Settings.from_config(None)
    assert settings.quote_provider == "finnhub"
    assert settings.news_providers == ["newsdata", "newsapi", "google"]
    assert settings.exchange_rate_ttl_seconds == 3600.0
    assert settings.exchange_rate_fallback == 0.85
    assert settings.finnhub_api_key == ""
    assert settings.watchlist_db is None


def test_from_config_sections(clean_env):
    settings = Settings.from_config({
        "providers": {"quote": "alphavantage", "news": ["google"]},
        "sentiment": {"strategy": "remote", "model": "ProsusAI/finbert"},
        "recommendations": {"candidates": ["amd", "intc"], "per_request": 2},
        "http": {"timeout_seconds": 5, "call_interval_seconds": 0.5},
        "exchange_rate": {"ttl_seconds": 60, "fallback_rate": 0.9},
        "storage": {"watchlist_db": "w.db", "news_cache_db": None, "news_cache_ttl_seconds": 30},
    })
    assert settings.quote_provider == "alphavantage"
    assert settings.news_providers == ["google"]
    assert settings.sentiment_strategy == "remote"
    assert settings.sentiment_model == "ProsusAI/finbert"
    assert settings.candidates == ["AMD", "INTC"]
    assert settings.candidates_per_request == 2
    assert settings.timeout_seconds == 5.0
    assert settings.call_interval == 0.5
    assert settings.exchange_rate_ttl_seconds == 60.0
    assert settings.exchange_rate_fallback == 0.9
    assert settings.watchlist_db == "w.db"
    assert settings.news_cache_db is None
    assert settings.news_cache_ttl_seconds == 30.0


def test_api_keys_and_base_urls_from_environment(clean_env):
    clean_env.setenv("FINNHUB_API_KEY", "  fh-key  ")
    clean_env.setenv("NEWS_API_KEY", "na-key")
    clean_env.setenv("FINNHUB_BASE_URL", "http://localhost:9000/api/v1")

    settings = Settings.from_config({})
    assert settings.finnhub_api_key == "fh-key"
    assert settings.news_api_key == "na-key"
    assert settings.finnhub_base_url == "http://localhost:9000/api/v1"
    assert settings.newsdata_api_key == ""


@pytest.mark.parametrize("provider", sorted(PROVIDER_INTERVALS))
def test_call_interval_follows_provider(provider):
    assert Settings(quote_provider=provider).call_interval == PROVIDER_INTERVALS[provider]
