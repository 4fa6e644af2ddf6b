"""Tests for portfolio aggregation."""

import pytest

from fakes import make_quote
from stockdash.pipeline.portfolio import aggregate_portfolio


def test_totals_assume_one_hundred_shares():
    summary = aggregate_portfolio([make_quote("A", 10, 1, 2), make_quote("B", 20, -2, 3)])
    assert summary.total_value == pytest.approx(3000)
    assert summary.total_change == pytest.approx(-100)
    assert summary.total_change_percent == pytest.approx(2.5)
    assert summary.stock_count == 2


def test_empty_portfolio_is_all_zero():
    summary = aggregate_portfolio([])
    assert (summary.total_value, summary.total_change, summary.total_change_percent, summary.stock_count) == (
        0, 0, 0.0, 0
    )


def test_change_percent_is_unweighted_mean():
    quotes = [make_quote("BIG", 1000, 0, 1.0), make_quote("SMALL", 1, 0, 5.0)]
    assert aggregate_portfolio(quotes).total_change_percent == pytest.approx(3.0)


def test_custom_share_count():
    assert aggregate_portfolio([make_quote("A", 10, 1)], share_count=5).total_value == pytest.approx(50)


def test_accepts_a_generator():
    summary = aggregate_portfolio(make_quote(s, 1.0) for s in "XYZ")
    assert summary.stock_count == 3
