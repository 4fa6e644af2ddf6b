"""USD→EUR conversion backed by a one-entry, time-boxed rate cache."""

import threading
import time
from typing import Callable, Optional

from stockdash.core.logger import logger
from stockdash.models.datatypes import ExchangeRateCacheEntry
from stockdash.providers.base import ExchangeRateProvider

CACHE_TTL_SECONDS = 3600.0
FALLBACK_USD_EUR = 0.85


class ExchangeRateCache:
    """Memoizes the USD→EUR rate for ``ttl_seconds``.

    A failed refresh returns ``fallback_rate`` and leaves any existing entry
    as it was, so a transient outage neither poisons later calls nor stores
    a failure marker. Expiry is the only way an entry goes away.

    Args:
        provider: Source of the latest rates.
        ttl_seconds: Lifetime of a cached rate.
        fallback_rate: Returned whenever the provider fails.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        provider: ExchangeRateProvider,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        fallback_rate: float = FALLBACK_USD_EUR,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.provider = provider
        self.ttl_seconds = ttl_seconds
        self.fallback_rate = fallback_rate
        self._clock = clock
        self._entry: Optional[ExchangeRateCacheEntry] = None
        self._lock = threading.Lock()

    @property
    def entry(self) -> Optional[ExchangeRateCacheEntry]:
        return self._entry

    def get_rate(self) -> float:
        """Return the cached rate, refreshing it from the provider once expired."""
        with self._lock:
            now = self._clock()
            if self._entry is not None and (now - self._entry.timestamp) < self.ttl_seconds:
                return self._entry.rate

            try:
                rates = self.provider.latest_rates("USD")
                rate = float(rates["EUR"])
            except Exception as exc:
                logger.error(f"ExchangeRateCache: rate refresh failed, using fallback {self.fallback_rate}: {exc}")
                return self.fallback_rate

            self._entry = ExchangeRateCacheEntry(rate=rate, timestamp=now)
            logger.info(f"ExchangeRateCache: USD→EUR = {rate}")
            return rate


def convert_to_eur(usd_amount: float, cache: ExchangeRateCache) -> float:
    return usd_amount * cache.get_rate()


def format_eur(amount: float) -> str:
    """Format an amount the way a German locale shows euros, e.g. ``1.234,56 €``."""
    grouped = f"{abs(amount):,.2f}"
    grouped = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if amount < 0 and round(abs(amount), 2) != 0 else ""
    return f"{sign}{grouped} €"
