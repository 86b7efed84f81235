"""API-specific request/response schemas (Pydantic v2).

Timestamps are rendered as ISO-8601 UTC instants with millisecond
precision, e.g. ``2022-11-22T00:00:00.000Z``.
"""

from __future__ import annotations

from datetime import UTC, datetime, time
from typing import Any

from pydantic import BaseModel

from quote_sentinel.core.models import (
    ComparisonResult,
    GainsProjection,
    HistoryWindow,
    PricePoint,
    Quote,
    to_iso_instant,
)
from quote_sentinel.core.results import Failure


# -- Error --


class ErrorListResponse(BaseModel):
    """Failure envelope: a non-empty ordered list of typed errors."""

    errors: list[dict[str, Any]]

    @classmethod
    def from_failure(cls, result: Failure) -> ErrorListResponse:
        return cls(errors=[e.model_dump() for e in result.errors])


class ErrorResponse(BaseModel):
    """Unexpected server-side error."""

    error: str
    detail: str | None = None


# -- Quotes --


class QuoteResponse(BaseModel):
    symbol: str
    last_price: float
    priced_at: str

    @classmethod
    def from_model(cls, quote: Quote) -> QuoteResponse:
        return cls(
            symbol=quote.symbol,
            last_price=quote.last_price,
            priced_at=to_iso_instant(quote.as_of),
        )


class QuoteEnvelope(BaseModel):
    result: QuoteResponse


class ComparisonResponse(BaseModel):
    last_prices: list[QuoteResponse]

    @classmethod
    def from_model(cls, comparison: ComparisonResult) -> ComparisonResponse:
        return cls(last_prices=[QuoteResponse.from_model(q) for q in comparison.quotes])


class ComparisonEnvelope(BaseModel):
    result: ComparisonResponse


# -- History --


class PriceResponse(BaseModel):
    opening: float
    high: float
    low: float
    closing: float
    priced_at: str

    @classmethod
    def from_model(cls, point: PricePoint) -> PriceResponse:
        return cls(
            opening=point.open_price,
            high=point.high_price,
            low=point.low_price,
            closing=point.close_price,
            priced_at=to_iso_instant(point.priced_at),
        )


class HistoryResponse(BaseModel):
    symbol: str
    prices: list[PriceResponse]

    @classmethod
    def from_model(cls, window: HistoryWindow) -> HistoryResponse:
        return cls(
            symbol=window.symbol,
            prices=[PriceResponse.from_model(p) for p in window.prices],
        )


class HistoryEnvelope(BaseModel):
    result: HistoryResponse


# -- Gains --


class GainsResponse(BaseModel):
    symbol: str
    last_price: float
    price_at_date: float
    purchased_amount: float
    purchased_at: str
    capital_gains: float

    @classmethod
    def from_model(cls, projection: GainsProjection) -> GainsResponse:
        return cls(
            symbol=projection.symbol,
            last_price=projection.current_price,
            price_at_date=projection.price_at_purchase_date,
            purchased_amount=projection.purchased_amount,
            purchased_at=to_iso_instant(
                datetime.combine(projection.purchase_date, time.min, tzinfo=UTC)
            ),
            capital_gains=projection.capital_gains,
        )


class GainsEnvelope(BaseModel):
    result: GainsResponse


# -- Health --


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    status: str = "ok"
    version: str
