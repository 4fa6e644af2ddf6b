"""Three-horizon price forecast heuristic.

This is a placeholder estimator, not a model:

  1. Trend      — mean of the recent half of ~10 closes vs. the prior half
                  (> +2% up, < -2% down, otherwise neutral)
  2. Volatility — mean absolute day-over-day relative change
  3. Project    — price × (1 + U(-0.5, 0.5) × volatility × scale) for
                  1 day (×0.5), 1 week (×2) and 1 month (×4)

Without price history it assumes a neutral trend and 5% volatility. If the
estimate itself cannot be produced (no usable current price, unexpected
error) fixed 3% / 10% / 20% ranges with a random direction per horizon are
used instead. Confidences are clamped to [0, 100].
"""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from stockdash.core.logger import logger
from stockdash.models.datatypes import ForecastPoint, Horizon, Trend
from stockdash.providers.base import QuoteProvider

HISTORY_WINDOW = 10
DEFAULT_VOLATILITY = 0.05
TREND_BAND = 0.02


@dataclass(frozen=True)
class _HorizonParams:
    period: Horizon
    label: str
    scale: float
    confidence_offset: float
    confidence_spread: float


HORIZONS = (
    _HorizonParams(Horizon.ONE_DAY, "1 Day", 0.5, 0.0, 15.0),
    _HorizonParams(Horizon.ONE_WEEK, "1 Week", 2.0, -10.0, 15.0),
    _HorizonParams(Horizon.ONE_MONTH, "1 Month", 4.0, -20.0, 20.0),
)

# (range, base confidence, confidence spread, P(up)) used when no estimate is possible
_FALLBACK = {
    Horizon.ONE_DAY: (0.03, 70.0, 20.0, 0.5),
    Horizon.ONE_WEEK: (0.10, 60.0, 25.0, 0.6),
    Horizon.ONE_MONTH: (0.20, 50.0, 30.0, 0.7),
}

_FALLBACK_REASONING = {
    Horizon.ONE_DAY: (
        "Limited historical data available. Prediction based on general market patterns "
        "and expected daily volatility of 3%. Consider this a rough estimate."
    ),
    Horizon.ONE_WEEK: (
        "Weekly forecast uses statistical modeling with 10% volatility assumption. Actual "
        "performance may vary significantly based on market events and company news."
    ),
    Horizon.ONE_MONTH: (
        "Monthly projection has high uncertainty due to limited data. Based on 20% monthly "
        "volatility range. Recommend monitoring news and fundamentals for better accuracy."
    ),
}


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def volatility_bucket(volatility: float) -> str:
    if volatility > 0.1:
        return "high"
    if volatility > 0.05:
        return "moderate"
    return "low"


def estimate_trend(closes: Sequence[float]) -> Tuple[Trend, float]:
    """
    Derive trend and volatility from closes ordered oldest → newest.

    Args:
        closes: Recent daily closes; fewer than two points yields the defaults.

    Returns:
        Tuple[Trend, float]: ``(trend, volatility)``.
    """
    prices = [float(p) for p in closes if p is not None]
    if len(prices) < 2:
        return Trend.NEUTRAL, DEFAULT_VOLATILITY

    half = len(prices) // 2
    recent = prices[-half:]
    prior = prices[-2 * half:-half]
    recent_mean = sum(recent) / len(recent)
    prior_mean = sum(prior) / len(prior)

    if recent_mean > prior_mean * (1 + TREND_BAND):
        trend = Trend.UP
    elif recent_mean < prior_mean * (1 - TREND_BAND):
        trend = Trend.DOWN
    else:
        trend = Trend.NEUTRAL

    changes = [abs(cur - prev) / prev for prev, cur in zip(prices, prices[1:]) if prev]
    volatility = sum(changes) / len(changes) if changes else DEFAULT_VOLATILITY
    return trend, volatility


def project(
    current_price: float,
    trend: Trend,
    volatility: float,
    rng: random.Random,
) -> List[ForecastPoint]:
    """Project the three horizons from one shared trend/volatility estimate."""
    base_confidence = 60.0 if trend == Trend.NEUTRAL else 75.0
    bucket = volatility_bucket(volatility)
    points: List[ForecastPoint] = []

    for horizon in HORIZONS:
        prediction = current_price * (1 + (rng.random() - 0.5) * volatility * horizon.scale)
        move_pct = (prediction - current_price) / current_price * 100
        confidence = base_confidence + horizon.confidence_offset + rng.random() * horizon.confidence_spread

        if horizon.period == Horizon.ONE_DAY:
            reasoning = (
                f"Based on recent intraday patterns and {bucket} volatility ({volatility * 100:.1f}%), "
                f"short-term price movement expected around {move_pct:.1f}%. "
                f"Current {trend.value} trend influences directional bias."
            )
        elif horizon.period == Horizon.ONE_WEEK:
            reasoning = (
                f"Weekly forecast considers recent {trend.value} trend momentum and {bucket} volatility. "
                f"Historical volatility suggests a {'wider' if volatility > 0.08 else 'tighter'} price range "
                f"around a {move_pct:.1f}% move."
            )
        else:
            reasoning = (
                f"Monthly outlook: the {move_pct:.1f}% projected move reflects the current {trend.value} "
                f"bias and {bucket} volatility, with increased uncertainty over the longer timeframe."
            )

        points.append(ForecastPoint(
            period=horizon.period,
            label=horizon.label,
            prediction=prediction,
            confidence=_clamp(confidence),
            trend=trend,
            reasoning=reasoning,
        ))
    return points


def fallback_forecast(current_price: float, rng: random.Random) -> List[ForecastPoint]:
    """Fixed-assumption forecast; trend drawn independently per horizon."""
    points: List[ForecastPoint] = []
    for horizon in HORIZONS:
        spread, base, conf_spread, p_up = _FALLBACK[horizon.period]
        price = current_price if current_price and current_price > 0 else 0.0
        points.append(ForecastPoint(
            period=horizon.period,
            label=horizon.label,
            prediction=price * (1 + (rng.random() - 0.5) * spread),
            confidence=_clamp(base + rng.random() * conf_spread),
            trend=Trend.UP if rng.random() < p_up else Trend.DOWN,
            reasoning=_FALLBACK_REASONING[horizon.period],
        ))
    return points


class ForecastEstimator(ABC):
    """Swappable forecast strategy."""

    @abstractmethod
    def forecast(self, symbol: str, current_price: float) -> List[ForecastPoint]:
        """Return exactly three points: 1 day, 1 week, 1 month."""
        pass


class HeuristicForecaster(ForecastEstimator):
    """Trend/volatility heuristic over the last :data:`HISTORY_WINDOW` closes.

    Args:
        quote_provider: Source of ``recent_closes``.
        rng: Randomness source (seed it for reproducible output).
    """

    def __init__(self, quote_provider: QuoteProvider, rng: Optional[random.Random] = None) -> None:
        self.quote_provider = quote_provider
        self.rng = rng or random.Random()

    def forecast(self, symbol: str, current_price: float) -> List[ForecastPoint]:
        if not current_price or current_price <= 0:
            logger.warning(f"Forecast [{symbol}]: no usable current price — fixed assumptions")
            return fallback_forecast(current_price, self.rng)

        try:
            closes = self.quote_provider.recent_closes(symbol, HISTORY_WINDOW)
        except Exception as exc:
            logger.warning(f"Forecast [{symbol}]: price history unavailable ({exc}) — defaults")
            closes = []

        try:
            trend, volatility = estimate_trend(closes)
            points = project(current_price, trend, volatility, self.rng)
        except Exception as exc:
            logger.error(f"Forecast [{symbol}]: estimation failed: {exc}")
            return fallback_forecast(current_price, self.rng)

        logger.info(f"Forecast [{symbol}]: trend={trend.value} volatility={volatility:.4f}")
        return points
