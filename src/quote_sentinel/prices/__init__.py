"""Price retrieval: providers, stream window extraction, formatting.

Architecture
------------
    QuoteProvider   → ProviderQuote
    HistoryProvider → lines → StreamWindowExtractor → window text
                            → ResponseFormatter → list[PricePoint]

Built-in implementations:

- ``YahooQuoteProvider``: latest quotes from the Yahoo Finance chart API.
- ``AlphaVantageHistoryProvider``: streamed full daily series from Alpha Vantage.
"""

from quote_sentinel.prices.alpha_vantage import AlphaVantageHistoryProvider
from quote_sentinel.prices.extractor import (
    NOT_FOUND_MARKER,
    ScanPhase,
    ScanState,
    ScanWindow,
    StreamWindowExtractor,
    advance,
)
from quote_sentinel.prices.formatter import ResponseFormatter
from quote_sentinel.prices.provider import HistoryProvider, QuoteProvider
from quote_sentinel.prices.yahoo import YahooQuoteProvider

__all__ = [
    # Protocols
    "QuoteProvider",
    "HistoryProvider",
    # Extraction
    "NOT_FOUND_MARKER",
    "ScanPhase",
    "ScanState",
    "ScanWindow",
    "StreamWindowExtractor",
    "advance",
    "ResponseFormatter",
    # Providers
    "YahooQuoteProvider",
    "AlphaVantageHistoryProvider",
]
