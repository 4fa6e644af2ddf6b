"""News sentiment classifiers.

Three interchangeable strategies share one contract — text in, one of
positive / negative / neutral out, never an exception:

    KeywordSentimentProvider     fixed word lists, no I/O
    HuggingFaceSentimentProvider hosted inference API over HTTP
    FinBERTSentimentProvider     local ``ProsusAI/finbert`` pipeline (CPU)

Remote and local model strategies fail open: no key, an HTTP error, a
timeout or an unreadable response all yield ``NEUTRAL``.
"""

from typing import Any, Iterable, List, Optional

import requests

from stockdash.core.logger import logger
from stockdash.models.datatypes import Sentiment
from stockdash.providers.base import SentimentProvider

POSITIVE_KEYWORDS = (
    "growth", "profit", "strong", "positive", "increase", "bullish",
    "outperform", "buy", "upgrade", "beat", "exceed",
)
NEGATIVE_KEYWORDS = (
    "loss", "decline", "weak", "negative", "decrease", "bearish",
    "underperform", "sell", "downgrade", "miss", "below",
)

# Model label → canonical sentiment. cardiffnlp roberta emits LABEL_0..2.
_LABEL_MAP = {
    "label_0": Sentiment.NEGATIVE,
    "label_1": Sentiment.NEUTRAL,
    "label_2": Sentiment.POSITIVE,
    "negative": Sentiment.NEGATIVE,
    "neutral": Sentiment.NEUTRAL,
    "positive": Sentiment.POSITIVE,
}


def _best_label(scores: Iterable[dict]) -> Sentiment:
    """Pick the highest-scoring label from ``[{label, score}, ...]``."""
    best: Optional[dict] = None
    for item in scores:
        if best is None or float(item["score"]) > float(best["score"]):
            best = item
    if best is None:
        return Sentiment.NEUTRAL
    return _LABEL_MAP.get(str(best["label"]).lower(), Sentiment.NEUTRAL)


class KeywordSentimentProvider(SentimentProvider):
    """Counts which positive and negative keywords occur in the text.

    Each keyword counts once however often it appears; matching is a
    case-insensitive substring test, so "profitable" counts as "profit".
    """

    def __init__(
        self,
        positive: Iterable[str] = POSITIVE_KEYWORDS,
        negative: Iterable[str] = NEGATIVE_KEYWORDS,
    ) -> None:
        self.positive = tuple(k.lower() for k in positive)
        self.negative = tuple(k.lower() for k in negative)

    def classify(self, text: str) -> Sentiment:
        lower = (text or "").lower()
        pos = sum(1 for k in self.positive if k in lower)
        neg = sum(1 for k in self.negative if k in lower)
        if pos > neg:
            return Sentiment.POSITIVE
        if neg > pos:
            return Sentiment.NEGATIVE
        return Sentiment.NEUTRAL


class HuggingFaceSentimentProvider(SentimentProvider):
    """Hosted text-classification inference (Hugging Face Inference API).

    Args:
        api_key: Bearer token; when empty every call answers ``NEUTRAL``.
        model: Model id appended to ``base_url``.
        base_url: Inference endpoint root.
        timeout: Seconds before the request is abandoned.
    """

    def __init__(
        self,
        api_key: str = "",
        model: str = "cardiffnlp/twitter-roberta-base-sentiment-latest",
        base_url: str = "https://api-inference.huggingface.co/models",
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/{model}"
        self.timeout = timeout
        self.session = session or requests.Session()

    def classify(self, text: str) -> Sentiment:
        if not self.api_key:
            return Sentiment.NEUTRAL
        try:
            resp = self.session.post(
                self.url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"inputs": text},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error(f"HuggingFaceSentimentProvider: request failed: {exc}")
            return Sentiment.NEUTRAL

        if not resp.ok:
            logger.warning(f"HuggingFaceSentimentProvider: HTTP {resp.status_code} — neutral")
            return Sentiment.NEUTRAL

        try:
            payload: Any = resp.json()
            # [[{label, score}, ...]] for a single input; some models return the flat list
            scores: List[dict] = payload[0] if payload and isinstance(payload[0], list) else payload
            return _best_label(scores or [])
        except (ValueError, KeyError, TypeError, IndexError) as exc:
            logger.error(f"HuggingFaceSentimentProvider: unreadable response: {exc}")
            return Sentiment.NEUTRAL


class FinBERTSentimentProvider(SentimentProvider):
    """Local CPU financial sentiment using ``ProsusAI/finbert``.

    The underlying HuggingFace pipeline is loaded lazily on the first call to
    :meth:`classify` so that importing this module has zero cost.
    """

    def __init__(self, model_name: str = "ProsusAI/finbert") -> None:
        self.model_name = model_name
        self._pipeline = None

    def classify(self, text: str) -> Sentiment:
        text = (text or "").strip()
        if not text:
            return Sentiment.NEUTRAL
        try:
            raw = self._get_pipeline()(text, truncation=True, max_length=512)
            result = raw[0]
            if isinstance(result, list):
                result = result[0]
        except Exception as exc:
            logger.error(f"FinBERTSentimentProvider: inference failed for {text[:60]!r}: {exc}")
            return Sentiment.NEUTRAL
        return _best_label([result])

    def _get_pipeline(self):
        """Lazy-load the HuggingFace pipeline on first call."""
        if self._pipeline is None:
            from transformers import pipeline as hf_pipeline
            logger.info(f"FinBERTSentimentProvider: loading model '{self.model_name}' on CPU")
            self._pipeline = hf_pipeline(
                task="text-classification",
                model=self.model_name,
                device=-1,
            )
        return self._pipeline


def build_sentiment_provider(settings) -> SentimentProvider:
    """Pick the sentiment strategy named in ``settings.sentiment_strategy``."""
    strategy = settings.sentiment_strategy.lower()
    if strategy == "keyword":
        return KeywordSentimentProvider()
    if strategy == "remote":
        return HuggingFaceSentimentProvider(
            api_key=settings.hugging_face_api_key,
            model=settings.sentiment_model,
            base_url=settings.hugging_face_base_url,
            timeout=settings.timeout_seconds,
        )
    if strategy == "finbert":
        return FinBERTSentimentProvider()
    raise ValueError(f"Unknown sentiment strategy: {settings.sentiment_strategy}")
