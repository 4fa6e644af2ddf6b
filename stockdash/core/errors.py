"""Exception hierarchy and the user-facing error classifier.

Provider adapters raise :class:`ProviderError` tagged with a
:class:`FailureKind`; :func:`classify_error` maps that tag to a
:class:`StockError` for display. Anything else that reaches the classifier
(third-party exceptions, plain dicts from callers) is sniffed by message
text, first match wins:

    1. "Failed to fetch" / "NetworkError"       → NETWORK        (retry)
    2. "API call frequency" / "rate limit"      → API_LIMIT      (retry)
    3. "not found" / "Invalid API call"         → INVALID_SYMBOL
    4. "no data" / empty ``data`` payload       → NO_DATA
    5. anything else                            → UNKNOWN        (retry)
"""

from enum import Enum
from typing import Any, Mapping, Optional

import requests

from stockdash.models.datatypes import StockError, StockErrorType


class FailureKind(str, Enum):
    """Why a provider call failed."""
    NETWORK = "network"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    NO_DATA = "no_data"
    UNKNOWN = "unknown"


class StockdashError(Exception):
    """Base exception for stockdash errors."""

    pass


class ProviderError(StockdashError):
    """Raised by provider adapters when an external call fails."""

    def __init__(self, kind: FailureKind, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.data = data


class AlreadyExistsError(StockdashError):
    """Raised by a watchlist store when an active entry already holds the symbol."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Stock {symbol} already exists")
        self.symbol = symbol


class StockOperationError(StockdashError):
    """Raised by the dashboard engine with the classified, user-facing error attached."""

    def __init__(self, error: StockError, cause: Optional[BaseException] = None) -> None:
        super().__init__(error.message)
        self.error = error
        self.cause = cause


_NETWORK = StockError(
    type=StockErrorType.NETWORK,
    message="Unable to connect to stock data service",
    solution="Check your internet connection and try again",
    can_retry=True,
)
_API_LIMIT = StockError(
    type=StockErrorType.API_LIMIT,
    message="Too many requests - API limit reached",
    solution="Please wait a few minutes before trying again",
    can_retry=True,
)
_INVALID_SYMBOL = StockError(
    type=StockErrorType.INVALID_SYMBOL,
    message="Stock symbol not found",
    solution="Check the stock symbol or try searching by company name",
    can_retry=False,
)
_NO_DATA = StockError(
    type=StockErrorType.NO_DATA,
    message="No stock data available",
    solution="This stock may not be actively traded or may be delisted",
    can_retry=False,
)

_BY_KIND = {
    FailureKind.NETWORK: _NETWORK,
    FailureKind.RATE_LIMITED: _API_LIMIT,
    FailureKind.NOT_FOUND: _INVALID_SYMBOL,
    FailureKind.NO_DATA: _NO_DATA,
}


def _unknown(context: str) -> StockError:
    return StockError(
        type=StockErrorType.UNKNOWN,
        message=f"Unexpected error in {context}",
        solution="Please try again or contact support if the problem persists",
        can_retry=True,
    )


def _message_and_data(raw_error: Any) -> tuple[str, Any]:
    if isinstance(raw_error, Mapping):
        return str(raw_error.get("message") or ""), raw_error.get("data")
    return str(raw_error or ""), getattr(raw_error, "data", None)


def classify_error(raw_error: Any, context: str) -> StockError:
    """
    Map a caught failure to a user-facing :class:`StockError`.

    Args:
        raw_error: A :class:`ProviderError`, any other exception, or a mapping
            with ``message`` (and optionally ``data``) keys.
        context: Short description of the failed operation, e.g. ``"adding stock"``.

    Returns:
        StockError: Deterministic classification; never raises.
    """
    if isinstance(raw_error, ProviderError):
        if raw_error.kind in _BY_KIND:
            return _BY_KIND[raw_error.kind]
        return _unknown(context)

    if isinstance(raw_error, (requests.ConnectionError, requests.Timeout)):
        return _NETWORK

    message, data = _message_and_data(raw_error)

    if "Failed to fetch" in message or "NetworkError" in message:
        return _NETWORK
    if "API call frequency" in message or "rate limit" in message:
        return _API_LIMIT
    if "not found" in message or "Invalid API call" in message:
        return _INVALID_SYMBOL
    if "no data" in message or (isinstance(data, Mapping) and len(data) == 0):
        return _NO_DATA
    return _unknown(context)
