"""Portfolio totals over the current quotes."""

from typing import Iterable

from stockdash.models.datatypes import PortfolioSummary, Quote

# Placeholder position size: every tracked symbol counts as 100 shares.
ASSUMED_SHARE_COUNT = 100


def aggregate_portfolio(quotes: Iterable[Quote], share_count: int = ASSUMED_SHARE_COUNT) -> PortfolioSummary:
    quotes = list(quotes)
    count = len(quotes)
    return PortfolioSummary(
        total_value=sum(q.price * share_count for q in quotes),
        total_change=sum(q.change * share_count for q in quotes),
        total_change_percent=(sum(q.change_percent for q in quotes) / count) if count else 0.0,
        stock_count=count,
    )
