"""Alpha Vantage history provider streaming the full daily series.

``outputsize=full`` returns twenty-odd years of daily records in a single
pretty-printed JSON document. The provider hands the body over line by line
so the extractor can stop as soon as it has the requested window.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx
from aiolimiter import AsyncLimiter

from quote_sentinel.core.config import AlphaVantageConfig
from quote_sentinel.core.exceptions import ProviderError

logger = logging.getLogger(__name__)

_FUNCTION = "TIME_SERIES_DAILY"
_PROVIDER = "alpha_vantage"


class AlphaVantageHistoryProvider:
    """Streams daily price history from Alpha Vantage.

    Requests are paced with an ``AsyncLimiter`` to the configured
    requests-per-minute allowance. Use via ``async with`` or ``close()``.
    """

    def __init__(self, config: AlphaVantageConfig) -> None:
        self._config = config
        self._limiter = AsyncLimiter(max_rate=config.requests_per_minute, time_period=60.0)
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.request_timeout),
            follow_redirects=True,
        )

    async def __aenter__(self) -> AlphaVantageHistoryProvider:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def stream_history(self, symbol: str) -> AsyncIterator[str]:
        """Yield the response body of the daily series one line at a time.

        Closing the generator early closes the HTTP response.

        Raises:
            ProviderError: Transport failure or non-200 status.
        """
        params = {
            "function": _FUNCTION,
            "symbol": symbol,
            "outputsize": "full",
            "apikey": self._config.api_key,
        }
        context: dict[str, Any] = {"provider": _PROVIDER, "symbol": symbol}

        await self._limiter.acquire()
        try:
            async with self._client.stream("GET", self._config.base_url, params=params) as resp:
                if resp.status_code != 200:
                    logger.error(
                        "Alpha Vantage HTTP error for %s: %s", symbol, resp.status_code
                    )
                    raise ProviderError(
                        f"Alpha Vantage returned HTTP {resp.status_code} for {symbol}",
                        context={**context, "status_code": resp.status_code},
                    )
                async for line in resp.aiter_lines():
                    yield line
        except httpx.HTTPError as e:
            logger.error("Alpha Vantage request error for %s: %s", symbol, e)
            raise ProviderError(
                f"Alpha Vantage request failed for {symbol}: {e}",
                context=context,
            ) from e
