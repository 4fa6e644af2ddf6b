"""Tests for ticker search and company names."""

import pytest

from stockdash.core.symbols import company_name, search_stocks, strip_suffix


@pytest.mark.parametrize(
    "long_name,short",
    [
        ("Apple Inc", "Apple"),
        ("Apple Inc.", "Apple"),
        ("Microsoft Corporation", "Microsoft"),
        ("Barclays PLC", "Barclays"),
        ("Toyota Motor Corp.", "Toyota Motor"),
        ("Meta Platforms", "Meta Platforms"),
    ],
)
def test_strip_suffix(long_name, short):
    assert strip_suffix(long_name) == short


def test_company_name():
    assert company_name("aapl") == "Apple Inc"
    assert company_name("XYZ") == "XYZ"


class TestSearchStocks:
    def test_empty_query(self):
        assert search_stocks("   ") == []

    def test_ticker_like_query(self):
        [match] = search_stocks("msft")
        assert (match.symbol, match.match) == ("MSFT", "symbol")

    @pytest.mark.parametrize(
        "query,symbol",
        [("tesla", "TSLA"), ("Apple", "AAPL"), ("intel", "INTC"), ("sony", "SONY"), ("ford", "F")],
    )
    def test_short_company_name_is_not_taken_as_ticker(self, query, symbol):
        matches = search_stocks(query)
        assert matches[0].symbol == symbol
        assert matches[0].match == "exact"

    def test_capitalised_query_stays_a_ticker(self):
        [match] = search_stocks("FORD")
        assert (match.symbol, match.match) == ("FORD", "symbol")

    def test_exact_company(self):
        matches = search_stocks("Coca Cola")
        assert matches[0].symbol == "KO"
        assert matches[0].match == "exact"

    def test_partial_company_returns_all_share_classes(self):
        matches = search_stocks("google inc")
        assert [m.symbol for m in matches][:2] == ["GOOGL", "GOOG"]
        assert matches[0].match == "partial"

    def test_exact_sorted_before_weaker_matches(self):
        matches = search_stocks("general motors")
        assert matches[0].symbol == "GM"
        assert matches[0].match == "exact"
        order = {"exact": 0, "partial": 1, "fuzzy": 2}
        ranks = [order[m.match] for m in matches]
        assert ranks == sorted(ranks)

    def test_no_duplicate_symbols(self):
        symbols = [m.symbol for m in search_stocks("fiat stellantis")]
        assert len(symbols) == len(set(symbols))

    def test_fallback(self):
        [match] = search_stocks("qqqq zzzz xxxx")
        assert match.match == "fallback"
        assert match.symbol == "QQQQ ZZZZ XXXX"
        assert match.company_name == "Unknown Company"
