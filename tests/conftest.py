"""Shared pytest fixtures for quote-sentinel."""

from __future__ import annotations

import pytest

from quote_sentinel.core.exceptions import NOT_FOUND_CODE, ProviderError
from quote_sentinel.core.models import ProviderQuote
from quote_sentinel.service import QuoteService

# 2000-01-01T00:00:00Z
QUOTE_TIMESTAMP = 946684800

# Trimmed TIME_SERIES_DAILY response for IBM. 2022-11-18 is the last record
# of the document, so its closing brace has no trailing comma.
IBM_HISTORY = """{
    "Meta Data": {
        "1. Information": "Daily Prices (open, high, low, close) and Volumes",
        "2. Symbol": "IBM",
        "3. Last Refreshed": "2022-11-22",
        "4. Output Size": "Full size",
        "5. Time Zone": "US/Eastern"
    },
    "Time Series (Daily)": {
        "2022-11-22": {
            "1. open": "147.6000",
            "2. high": "149.3500",
            "3. low": "147.0200",
            "4. close": "149.1000",
            "5. volume": "4102425"
        },
        "2022-11-21": {
            "1. open": "147.5500",
            "2. high": "147.9280",
            "3. low": "146.4500",
            "4. close": "146.6800",
            "5. volume": "3985447"
        },
        "2022-11-18": {
            "1. open": "146.5600",
            "2. high": "148.3100",
            "3. low": "145.9400",
            "4. close": "147.6400",
            "5. volume": "4470534"
        }
    }
}"""

ERROR_HISTORY = """{
    "Error Message": "Invalid API call. Please retry or visit the documentation (https://www.alphavantage.co/documentation/) for TIME_SERIES_DAILY."
}"""


class FakeQuoteProvider:
    """In-memory QuoteProvider. Unknown symbols raise a not-found ProviderError."""

    def __init__(
        self,
        quotes: dict[str, ProviderQuote] | None = None,
        errors: dict[str, Exception] | None = None,
    ) -> None:
        self.quotes = quotes or {}
        self.errors = errors or {}
        self.calls: list[str] = []

    async def get_quote(self, symbol: str) -> ProviderQuote:
        self.calls.append(symbol)
        if symbol in self.errors:
            raise self.errors[symbol]
        if symbol.upper() in self.quotes:
            return self.quotes[symbol.upper()]
        raise ProviderError(f"No quote for {symbol}", code=NOT_FOUND_CODE)


class FakeHistoryProvider:
    """In-memory HistoryProvider streaming a document line by line.

    Symbols without a document get the provider's error document.
    """

    def __init__(
        self,
        documents: dict[str, str] | None = None,
        errors: dict[str, Exception] | None = None,
    ) -> None:
        self.documents = documents or {}
        self.errors = errors or {}
        self.calls: list[str] = []
        self.lines_read = 0
        self.closed = 0

    async def stream_history(self, symbol: str):
        self.calls.append(symbol)
        try:
            if symbol in self.errors:
                raise self.errors[symbol]
            document = self.documents.get(symbol.upper(), ERROR_HISTORY)
            for line in document.splitlines():
                self.lines_read += 1
                yield line
        finally:
            self.closed += 1


@pytest.fixture
def ibm_quote() -> ProviderQuote:
    return ProviderQuote(symbol="IBM", price=12.02, timestamp_seconds=QUOTE_TIMESTAMP)


@pytest.fixture
def quote_provider(ibm_quote: ProviderQuote) -> FakeQuoteProvider:
    return FakeQuoteProvider(
        quotes={
            "IBM": ibm_quote,
            "AAPL": ProviderQuote(symbol="AAPL", price=151.29, timestamp_seconds=QUOTE_TIMESTAMP),
        }
    )


@pytest.fixture
def history_provider() -> FakeHistoryProvider:
    return FakeHistoryProvider(documents={"IBM": IBM_HISTORY})


@pytest.fixture
def service(
    quote_provider: FakeQuoteProvider,
    history_provider: FakeHistoryProvider,
) -> QuoteService:
    return QuoteService(quote_provider=quote_provider, history_provider=history_provider)


@pytest.fixture
def ibm_history() -> str:
    return IBM_HISTORY


@pytest.fixture
def error_history() -> str:
    return ERROR_HISTORY
