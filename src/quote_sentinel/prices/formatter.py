"""Turns an extracted history window into PricePoint records."""

from __future__ import annotations

import json
from datetime import date
from typing import Any

from pydantic import ValidationError

from quote_sentinel.core.exceptions import ResponseFormatError
from quote_sentinel.core.models import PricePoint

# Alpha Vantage daily record labels
OPEN_KEY = "1. open"
HIGH_KEY = "2. high"
LOW_KEY = "3. low"
CLOSE_KEY = "4. close"


class ResponseFormatter:
    """Parses the window text and maps each date record to a PricePoint.

    Points come out in the key order of the text. The extractor keeps the
    provider's newest-first order, so nothing is re-sorted here.
    """

    def format(self, window_text: str) -> list[PricePoint]:
        try:
            raw = json.loads(window_text)
        except json.JSONDecodeError as e:
            raise ResponseFormatError(
                f"Extracted window is not valid JSON: {e}",
                context={"key": None, "reason": "invalid_json"},
            ) from e

        if not isinstance(raw, dict):
            raise ResponseFormatError(
                f"Extracted window must be an object, got {type(raw).__name__}",
                context={"key": None, "reason": "not_an_object"},
            )

        return [self.to_price_point(key, record) for key, record in raw.items()]

    def to_price_point(self, key: str, record: Any) -> PricePoint:
        try:
            return PricePoint(
                date=_parse_day(key),
                open_price=float(record[OPEN_KEY]),
                high_price=float(record[HIGH_KEY]),
                low_price=float(record[LOW_KEY]),
                close_price=float(record[CLOSE_KEY]),
            )
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise ResponseFormatError(
                f"Malformed price record for {key!r}: {e}",
                context={"key": key, "reason": type(e).__name__},
            ) from e


def _parse_day(key: str) -> date:
    """Date keys may carry a time part; only the calendar day is kept."""
    return date.fromisoformat(key.strip()[:10])
