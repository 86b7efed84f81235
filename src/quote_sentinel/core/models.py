"""Pydantic data models — the system's type contracts."""

from __future__ import annotations

from datetime import UTC, date, datetime, time

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# --- Type Aliases ---

Symbol = str


def to_iso_instant(value: datetime) -> str:
    """Render a datetime as an ISO-8601 UTC instant with millisecond precision.

    ``datetime(2022, 11, 22, tzinfo=UTC)`` -> ``"2022-11-22T00:00:00.000Z"``.
    Naive datetimes are treated as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


# --- Price Models ---


class PricePoint(BaseModel):
    """One trading day's OHLC record."""

    model_config = ConfigDict(frozen=True)

    date: date
    open_price: float
    high_price: float
    low_price: float
    close_price: float

    @model_validator(mode="after")
    def high_gte_low(self) -> PricePoint:
        if self.high_price < self.low_price:
            raise ValueError(
                f"high_price ({self.high_price}) must be >= low_price ({self.low_price})"
            )
        return self

    @property
    def priced_at(self) -> datetime:
        """The trading day as a UTC midnight instant."""
        return datetime.combine(self.date, time.min, tzinfo=UTC)


class HistoryWindow(BaseModel):
    """Price points for one symbol over an inclusive date interval.

    ``prices`` keeps the provider's order, newest first. Calendar days the
    provider has no record for (weekends, holidays) are simply absent.
    """

    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    prices: list[PricePoint]

    @field_validator("symbol")
    @classmethod
    def symbol_upper(cls, v: str) -> str:
        return v.upper()


# --- Quote Models ---


class ProviderQuote(BaseModel):
    """Raw quote as returned by a quote provider."""

    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    price: float
    timestamp_seconds: int


class Quote(BaseModel):
    """Latest traded price for a symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    last_price: float
    as_of: datetime

    @classmethod
    def from_provider(cls, raw: ProviderQuote) -> Quote:
        """Build a Quote, converting epoch seconds to a UTC instant."""
        millis = raw.timestamp_seconds * 1000
        return cls(
            symbol=raw.symbol,
            last_price=raw.price,
            as_of=datetime.fromtimestamp(millis / 1000, tz=UTC),
        )


class ComparisonResult(BaseModel):
    """Quotes for several symbols, in the order they were requested."""

    model_config = ConfigDict(frozen=True)

    quotes: list[Quote]


class GainsProjection(BaseModel):
    """Capital gains of a position bought on ``purchase_date`` if sold now."""

    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    current_price: float
    price_at_purchase_date: float
    purchased_amount: float
    purchase_date: date
    capital_gains: float

    @field_validator("symbol")
    @classmethod
    def symbol_upper(cls, v: str) -> str:
        return v.upper()
