"""Yahoo Finance quote provider over plain HTTP.

Uses the unauthenticated ``/v8/finance/chart/`` endpoint via httpx. The
``meta`` block of a one-day chart carries the latest traded price and its
epoch-seconds timestamp, which is all a quote needs.

Unknown symbols come back as HTTP 404 with
``{"chart": {"error": {"code": "Not Found", ...}}}``; that code is passed
through on the raised ``ProviderError``.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from aiolimiter import AsyncLimiter

from quote_sentinel.core.config import YahooConfig
from quote_sentinel.core.exceptions import NOT_FOUND_CODE, ProviderError
from quote_sentinel.core.models import ProviderQuote

logger = logging.getLogger(__name__)

_CHART_PATH = "/v8/finance/chart"
_USER_AGENT = "Mozilla/5.0 (compatible; quote-sentinel/0.1)"
_PROVIDER = "yahoo"


class YahooQuoteProvider:
    """Fetches latest quotes from Yahoo Finance's chart API.

    Use via ``async with YahooQuoteProvider(config) as provider:`` or call
    ``close()`` when done.
    """

    def __init__(self, config: YahooConfig) -> None:
        self._config = config
        self._limiter = AsyncLimiter(max_rate=config.rate_limit, time_period=1.0)
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={"User-Agent": _USER_AGENT},
            timeout=httpx.Timeout(config.request_timeout),
        )

    async def __aenter__(self) -> YahooQuoteProvider:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def get_quote(self, symbol: str) -> ProviderQuote:
        """Fetch the latest quote for ``symbol``.

        Raises:
            ProviderError: ``code == NOT_FOUND_CODE`` for unknown symbols,
                no code for transport or response-shape failures.
        """
        chart = await self._fetch_chart(symbol)
        return self._adapt(chart.get("meta") or {}, symbol)

    async def _fetch_chart(self, symbol: str) -> dict[str, Any]:
        """Fetch the ``chart.result[0]`` object for a symbol."""
        context: dict[str, Any] = {"provider": _PROVIDER, "symbol": symbol}
        url = f"{_CHART_PATH}/{quote(symbol, safe='')}"

        await self._limiter.acquire()
        try:
            resp = await self._client.get(url, params={"interval": "1d", "range": "1d"})
        except httpx.RequestError as e:
            logger.error("Yahoo Finance request error for %s: %s", symbol, e)
            raise ProviderError(
                f"Yahoo Finance request failed for {symbol}: {e}",
                context=context,
            ) from e

        context["status_code"] = resp.status_code
        try:
            data = resp.json()
        except ValueError:
            data = None
        chart: dict[str, Any] = {}
        if isinstance(data, dict):
            chart = data.get("chart") or {}

        if chart.get("error"):
            err = chart["error"]
            logger.warning(
                "Yahoo Finance API error for %s: %s (%s)",
                symbol,
                err.get("code"),
                err.get("description"),
            )
            raise ProviderError(
                f"Yahoo Finance error for {symbol}: {err.get('description')}",
                code=err.get("code"),
                context=context,
            )

        if resp.status_code != 200:
            logger.error(
                "Yahoo Finance HTTP error for %s: %s %s",
                symbol,
                resp.status_code,
                resp.text[:200],
            )
            raise ProviderError(
                f"Yahoo Finance returned HTTP {resp.status_code} for {symbol}",
                code=NOT_FOUND_CODE if resp.status_code == 404 else None,
                context=context,
            )

        results = chart.get("result")
        if not results:
            raise ProviderError(
                f"Yahoo Finance returned no results for {symbol}",
                code=NOT_FOUND_CODE,
                context=context,
            )

        return results[0]

    def _adapt(self, meta: dict[str, Any], symbol: str) -> ProviderQuote:
        price = meta.get("regularMarketPrice")
        timestamp = meta.get("regularMarketTime")
        if price is None or timestamp is None:
            raise ProviderError(
                f"Yahoo Finance quote for {symbol} is missing price or time",
                context={"provider": _PROVIDER, "symbol": symbol},
            )
        return ProviderQuote(
            symbol=meta.get("symbol") or symbol.upper(),
            price=float(price),
            timestamp_seconds=int(timestamp),
        )
