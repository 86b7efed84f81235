"""Provider protocols, the source-agnostic interface layer.

Architecture
------------
Two independent providers feed the service:

    QuoteProvider   → ProviderQuote                      → QuoteService
    HistoryProvider → lines → StreamWindowExtractor
                            → ResponseFormatter → PricePoints → QuoteService

- **QuoteProvider** returns the latest quote for one symbol. An unknown
  symbol is reported as ``ProviderError`` with ``code == NOT_FOUND_CODE``;
  every other fault is a ``ProviderError`` without that code.

- **HistoryProvider** returns the provider's daily series as a stream of
  text lines, newest date first. An unknown symbol shows up as a line
  carrying the provider's error marker, not as an exception.

The service depends only on these protocols; tests substitute in-memory
fakes.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from quote_sentinel.core.models import ProviderQuote


@runtime_checkable
class QuoteProvider(Protocol):
    """Fetches the latest quote for a symbol."""

    async def get_quote(self, symbol: str) -> ProviderQuote: ...


@runtime_checkable
class HistoryProvider(Protocol):
    """Streams a symbol's full daily price history as text lines.

    Implementations are async generators so the caller can stop reading
    early and close the underlying response with ``aclose()``.
    """

    def stream_history(self, symbol: str) -> AsyncIterator[str]: ...
