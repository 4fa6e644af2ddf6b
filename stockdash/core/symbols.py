"""Ticker lookup helpers — company-name search and display names."""

import re
from dataclasses import dataclass
from typing import Dict, List

# Corporate suffixes stripped before constructing news search queries.
CORPORATE_SUFFIXES = [
    "inc", "inc.", "corporation", "corp", "corp.", "limited", "ltd", "ltd.", "plc", "co.",
]

COMPANY_NAMES: Dict[str, str] = {
    "AAPL": "Apple Inc",
    "GOOGL": "Alphabet Google",
    "MSFT": "Microsoft Corporation",
    "TSLA": "Tesla Inc",
    "NVDA": "NVIDIA Corporation",
    "AMZN": "Amazon.com Inc",
    "META": "Meta Platforms",
    "NFLX": "Netflix Inc",
}

COMPANY_SEARCH_MAP: Dict[str, List[str]] = {
    # US tech
    "apple": ["AAPL"],
    "microsoft": ["MSFT"],
    "alphabet": ["GOOGL", "GOOG"],
    "google": ["GOOGL", "GOOG"],
    "amazon": ["AMZN"],
    "tesla": ["TSLA"],
    "nvidia": ["NVDA"],
    "meta": ["META"],
    "netflix": ["NFLX"],
    "intel": ["INTC"],
    "amd": ["AMD"],
    # US traditional
    "disney": ["DIS"],
    "coca cola": ["KO"],
    "pepsi": ["PEP"],
    "walmart": ["WMT"],
    "johnson": ["JNJ"],
    "visa": ["V"],
    "mastercard": ["MA"],
    "ford": ["F"],
    "general motors": ["GM"],
    "boeing": ["BA"],
    "caterpillar": ["CAT"],
    "mcdonalds": ["MCD"],
    "starbucks": ["SBUX"],
    # European ADRs
    "nestle": ["NSRGY"],
    "asml": ["ASML"],
    "sap": ["SAP"],
    "unilever": ["UL", "UN"],
    "shell": ["SHEL"],
    "bp": ["BP"],
    "total": ["TTE"],
    "siemens": ["SIEGY"],
    "volkswagen": ["VWAGY"],
    "bmw": ["BMWYY"],
    "mercedes": ["DDAIF"],
    "bayer": ["BAYRY"],
    "basf": ["BASFY"],
    "airbus": ["EADSY"],
    "nokia": ["NOK"],
    "ericsson": ["ERIC"],
    "spotify": ["SPOT"],
    # Italian
    "ferrari": ["RACE"],
    "stellantis": ["STLA"],
    "fiat": ["STLA"],
    "eni": ["E"],
    "telecom italia": ["TIIAY"],
    "unicredit": ["UNCFF"],
    "intesa sanpaolo": ["ISNPY"],
    "generali": ["ARZGY"],
    "enel": ["ENLAY"],
    "leonardo": ["FINMY"],
    "luxottica": ["EXX"],
    # Asian
    "toyota": ["TM"],
    "sony": ["SONY"],
    "nintendo": ["NTDOY"],
    "samsung": ["SSNLF"],
    "tsmc": ["TSM"],
    "alibaba": ["BABA"],
    "tencent": ["TCEHY"],
    "baidu": ["BIDU"],
    # Other
    "shopify": ["SHOP"],
    "uber": ["UBER"],
    "zoom": ["ZM"],
    "salesforce": ["CRM"],
    "oracle": ["ORCL"],
    "adobe": ["ADBE"],
    "paypal": ["PYPL"],
    "square": ["SQ"],
}

_MATCH_ORDER = {"symbol": 0, "exact": 0, "partial": 1, "fuzzy": 2, "fallback": 3}
_TICKER_RE = re.compile(r"^[A-Z]{1,5}$")


@dataclass
class SymbolMatch:
    symbol: str
    company_name: str
    match: str  # symbol | exact | partial | fuzzy | fallback


def strip_suffix(long_name: str) -> str:
    """Remove trailing corporate suffixes from a company name.

    Examples:
        ``"Apple Inc"`` → ``"Apple"``
        ``"Microsoft Corporation"`` → ``"Microsoft"``
    """
    pattern = r"[\s,]+(" + "|".join(re.escape(s) for s in CORPORATE_SUFFIXES) + r")[\s.]*$"
    return re.sub(pattern, "", long_name, flags=re.IGNORECASE).strip()


def company_name(symbol: str) -> str:
    """Return a known display name for ``symbol``, or the symbol itself."""
    return COMPANY_NAMES.get(symbol.upper(), symbol.upper())


def search_stocks(query: str) -> List[SymbolMatch]:
    """Resolve free text (ticker or company name) to candidate symbols.

    A query typed as 1–5 capital letters is taken as a ticker, as is any
    other 1–5 letter query that is not a known company name ("tesla" finds
    TSLA, "msft" stays MSFT). Otherwise companies are matched exactly, then
    by substring either way, then word-by-word. Results are de-duplicated by
    symbol and ordered exact → partial → fuzzy. With no match the
    upper-cased query comes back as a ``fallback`` entry.
    """
    normalized = query.lower().strip()
    upper = query.strip().upper()
    if not normalized:
        return []

    if _TICKER_RE.match(query.strip()) or (
        _TICKER_RE.match(upper) and normalized not in COMPANY_SEARCH_MAP
    ):
        return [SymbolMatch(symbol=upper, company_name=upper, match="symbol")]

    matches: List[SymbolMatch] = []
    query_words = normalized.split()
    for company, symbols in COMPANY_SEARCH_MAP.items():
        if company == normalized:
            kind = "exact"
        elif company in normalized or normalized in company:
            kind = "partial"
        else:
            company_words = company.split()
            word_matches = sum(
                1 for qw in query_words
                if any(cw in qw or qw in cw for cw in company_words)
            )
            threshold = min(len(query_words) * 0.6, len(company_words) * 0.5)
            if not (word_matches > 0 and word_matches >= threshold):
                continue
            kind = "fuzzy"
        matches.extend(SymbolMatch(symbol=s, company_name=company, match=kind) for s in symbols)

    unique: Dict[str, SymbolMatch] = {}
    for m in matches:
        unique[m.symbol] = m
    ordered = sorted(unique.values(), key=lambda m: _MATCH_ORDER[m.match])
    if ordered:
        return ordered
    return [SymbolMatch(symbol=upper, company_name="Unknown Company", match="fallback")]
