"""QuoteService: turns provider calls into typed Success/Failure results.

Every public coroutine validates its inputs first, then calls providers,
then converts any exception into errors inside a ``Failure``. Nothing
raised by a provider, the extractor or the formatter escapes this module.

Failure precedence, highest first:
1. Validation errors, returned verbatim before any provider call.
2. Provider errors, classified as NotFound or Unknown.
3. In ``project_gains``, a history failure wins over a quote failure. The
   history lookup is the query-specific half of the projection.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from contextlib import aclosing
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from quote_sentinel.core.config import QuoteSentinelConfig
from quote_sentinel.core.exceptions import (
    DateNotFoundError,
    ProviderError,
    StockNotFoundError,
)
from quote_sentinel.core.models import (
    ComparisonResult,
    GainsProjection,
    HistoryWindow,
    PricePoint,
    Quote,
)
from quote_sentinel.core.results import (
    Failure,
    InvalidParameter,
    NotFound,
    Success,
    Unknown,
    failure,
    success,
)
from quote_sentinel.core.validation import (
    ValidationType,
    get_validation_errors,
    parse_date,
    parse_positive_number,
)
from quote_sentinel.prices.extractor import StreamWindowExtractor
from quote_sentinel.prices.formatter import ResponseFormatter
from quote_sentinel.prices.provider import HistoryProvider, QuoteProvider

logger = logging.getLogger(__name__)

SYMBOL_FIELD = "symbol"
SYMBOLS_FIELD = "symbols"
FROM_FIELD = "from"
TO_FIELD = "to"
AMOUNT_FIELD = "amount"
PURCHASE_DATE_FIELD = "purchase_date"

_CENT = Decimal("0.01")


class QuoteService:
    """Quotes, comparisons, history windows and gains projections.

    Build one instance at startup and pass it to whatever serves requests.
    The service keeps no per-request state, so concurrent calls are safe.
    """

    def __init__(
        self,
        quote_provider: QuoteProvider,
        history_provider: HistoryProvider,
        formatter: ResponseFormatter | None = None,
    ) -> None:
        self._quotes = quote_provider
        self._history = history_provider
        self._formatter = formatter or ResponseFormatter()

    async def close(self) -> None:
        """Close providers that hold network resources."""
        for provider in (self._quotes, self._history):
            close = getattr(provider, "close", None)
            if close is not None:
                await close()

    # --- Quotes ---

    async def get_quote(self, symbol: str) -> Success[Quote] | Failure:
        errors = get_validation_errors((ValidationType.STRING, SYMBOL_FIELD, symbol))
        if errors:
            return Failure(errors=errors)

        symbol = symbol.strip()
        try:
            raw = await self._quotes.get_quote(symbol)
            quote = Quote.from_provider(raw)
        except ProviderError as e:
            if e.is_not_found:
                logger.info("Quote not found for %s", symbol)
                return failure(NotFound(field=SYMBOL_FIELD, value=symbol))
            logger.warning("Quote provider failed for %s: %s", symbol, e)
            return failure(Unknown())
        except Exception:
            logger.exception("Unexpected error fetching quote for %s", symbol)
            return failure(Unknown())

        return success(quote)

    async def compare_quotes(self, symbols: Sequence[str]) -> Success[ComparisonResult] | Failure:
        """Quote each symbol in turn.

        Calls are made one at a time, in input order. A bare string is one
        symbol. If any symbol fails, the result carries every symbol's errors
        in input order.
        """
        if isinstance(symbols, str):
            symbols = [symbols]
        if not symbols:
            return failure(
                InvalidParameter(
                    field=SYMBOLS_FIELD,
                    value="",
                    reason="must contain at least one symbol",
                )
            )

        quotes: list[Quote] = []
        errors: list[NotFound | Unknown | InvalidParameter] = []
        for symbol in symbols:
            result = await self.get_quote(symbol)
            if result.kind == "failure":
                errors.extend(result.errors)
            else:
                quotes.append(result.value)

        if errors:
            return Failure(errors=errors)
        return success(ComparisonResult(quotes=quotes))

    # --- History ---

    async def get_history_window(
        self,
        symbol: str,
        from_date: str,
        to_date: str,
    ) -> Success[HistoryWindow] | Failure:
        """Daily prices for ``symbol`` between two dates, inclusive, newest first.

        When the window cannot be found the result names both dates: the
        scan cannot tell which boundary was missing.
        """
        errors = get_validation_errors(
            (ValidationType.STRING, SYMBOL_FIELD, symbol),
            (ValidationType.DATE, FROM_FIELD, from_date),
            (ValidationType.DATE, TO_FIELD, to_date),
            (ValidationType.IS_NOT_WEEKEND, FROM_FIELD, from_date),
            (ValidationType.IS_NOT_WEEKEND, TO_FIELD, to_date),
            (ValidationType.NOT_TODAY_OR_AFTER, FROM_FIELD, from_date),
            (ValidationType.NOT_TODAY_OR_AFTER, TO_FIELD, to_date),
            (ValidationType.DATE_INTERVAL, "interval", (from_date, to_date)),
        )
        if errors:
            return Failure(errors=errors)

        symbol = symbol.strip()
        start, end = parse_date(from_date), parse_date(to_date)
        try:
            prices = await self._fetch_window(symbol, start, end)
        except StockNotFoundError:
            logger.info("History not found for %s", symbol)
            return failure(NotFound(field=SYMBOL_FIELD, value=symbol))
        except DateNotFoundError:
            logger.info("No history for %s between %s and %s", symbol, from_date, to_date)
            return failure(
                NotFound(field=FROM_FIELD, value=from_date),
                NotFound(field=TO_FIELD, value=to_date),
            )
        except ProviderError as e:
            logger.warning("History provider failed for %s: %s", symbol, e)
            return failure(Unknown())
        except Exception:
            logger.exception("Unexpected error fetching history for %s", symbol)
            return failure(Unknown())

        return success(HistoryWindow(symbol=symbol, prices=prices))

    async def _fetch_window(self, symbol: str, start: date, end: date) -> list[PricePoint]:
        extractor = StreamWindowExtractor(start, end)
        async with aclosing(self._history.stream_history(symbol)) as lines:
            window_text = await extractor.aextract(lines)
        return self._formatter.format(window_text)

    # --- Gains ---

    async def project_gains(
        self,
        symbol: str,
        amount: str | float,
        purchase_date: str,
    ) -> Success[GainsProjection] | Failure:
        """Gains on ``amount`` shares bought at ``purchase_date``'s close, valued now.

        The current quote and the purchase-day price are fetched
        concurrently.
        """
        errors = get_validation_errors(
            (ValidationType.STRING, SYMBOL_FIELD, symbol),
            (ValidationType.POSITIVE_NUMBER, AMOUNT_FIELD, amount),
            (ValidationType.DATE, PURCHASE_DATE_FIELD, purchase_date),
            (ValidationType.IS_NOT_WEEKEND, PURCHASE_DATE_FIELD, purchase_date),
            (ValidationType.NOT_TODAY_OR_AFTER, PURCHASE_DATE_FIELD, purchase_date),
        )
        if errors:
            return Failure(errors=errors)

        quantity = parse_positive_number(amount)
        quote_result, history_result = await asyncio.gather(
            self.get_quote(symbol),
            self.get_history_window(symbol, purchase_date, purchase_date),
        )

        if history_result.kind == "failure":
            return _collapse_single_day(history_result, purchase_date)
        if quote_result.kind == "failure":
            return quote_result

        prices = history_result.value.prices
        if not prices:
            return failure(NotFound(field=PURCHASE_DATE_FIELD, value=purchase_date))

        current_price = quote_result.value.last_price
        historical_price = prices[0].close_price
        return success(
            GainsProjection(
                symbol=symbol.strip(),
                current_price=current_price,
                price_at_purchase_date=historical_price,
                purchased_amount=quantity,
                purchase_date=prices[0].date,
                capital_gains=capital_gains(quantity, current_price, historical_price),
            )
        )


def capital_gains(amount: float, current_price: float, purchase_price: float) -> float:
    """``amount × (current − purchase)``, rounded half-up to cents."""
    gains = Decimal(str(amount)) * (Decimal(str(current_price)) - Decimal(str(purchase_price)))
    return float(gains.quantize(_CENT, rounding=ROUND_HALF_UP))


def _collapse_single_day(result: Failure, purchase_date: str) -> Failure:
    """Report a missing single-day window as the one date the caller gave."""
    fields = [getattr(e, "field", None) for e in result.errors]
    if result.only_not_found() and fields == [FROM_FIELD, TO_FIELD]:
        return failure(NotFound(field=PURCHASE_DATE_FIELD, value=purchase_date))
    return result


def build_service(config: QuoteSentinelConfig) -> QuoteService:
    """Create the service with the configured HTTP providers."""
    from quote_sentinel.prices.alpha_vantage import AlphaVantageHistoryProvider
    from quote_sentinel.prices.yahoo import YahooQuoteProvider

    return QuoteService(
        quote_provider=YahooQuoteProvider(config.yahoo),
        history_provider=AlphaVantageHistoryProvider(config.alpha_vantage),
    )
