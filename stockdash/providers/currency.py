"""Currency rates from exchangerate-api.com (free, no key required)."""

from typing import Dict, Optional

import requests

from stockdash.core.errors import FailureKind, ProviderError
from stockdash.core.logger import logger
from stockdash.providers.base import ExchangeRateProvider
from stockdash.providers.market import get_json


class ExchangeRateApiProvider(ExchangeRateProvider):
    """``GET <base_url>/<BASE>`` → ``{"rates": {"EUR": 0.92, ...}}``."""

    def __init__(
        self,
        base_url: str = "https://api.exchangerate-api.com/v4/latest",
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def latest_rates(self, base: str = "USD") -> Dict[str, float]:
        logger.info(f"ExchangeRateApiProvider: fetching rates for {base}")
        data = get_json(self.session, f"{self.base_url}/{base.upper()}", {}, "ExchangeRate-API", self.timeout)
        rates = (data or {}).get("rates")
        if not isinstance(rates, dict) or not rates:
            raise ProviderError(FailureKind.NO_DATA, f"no data: rate table missing for {base}", data=data or {})
        return {code: float(value) for code, value in rates.items()}
