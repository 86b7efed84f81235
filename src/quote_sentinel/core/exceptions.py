"""Custom exception hierarchy for quote-sentinel.

These exceptions are internal. ``QuoteService`` converts every one of them
into a typed error inside a ``Failure`` envelope before returning.
"""

from typing import Any

NOT_FOUND_CODE = "Not Found"


class QuoteSentinelError(Exception):
    """Base exception for all quote-sentinel errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(QuoteSentinelError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field: str — the config field that failed validation
        value: Any — the invalid value (redacted for secrets)
    """


class ProviderError(QuoteSentinelError):
    """A data provider call failed.

    ``code`` is the provider's fault code. ``NOT_FOUND_CODE`` means the
    requested symbol does not exist upstream; anything else is classified
    as an unknown failure.

    Context keys:
        provider: str — "yahoo" or "alpha_vantage"
        symbol: str — the symbol being requested
        status_code: int | None — HTTP status code if applicable
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context)
        self.code = code

    @property
    def is_not_found(self) -> bool:
        return self.code == NOT_FOUND_CODE


class ExtractionError(QuoteSentinelError):
    """The history stream could not be turned into a price window."""


class StockNotFoundError(ExtractionError):
    """The history stream carried the provider's error marker.

    Context keys:
        line_number: int — the line where the marker was seen
    """


class DateNotFoundError(ExtractionError):
    """The stream ended before the requested window was closed.

    Either no data overlaps the interval or only one boundary matched; the
    scan cannot tell which.

    Context keys:
        open_boundary: str — the later date
        close_boundary: str — the earlier date
        phase: str — the scan phase when the stream ended
    """


class ResponseFormatError(ExtractionError):
    """The extracted window did not have the expected record shape.

    Context keys:
        key: str | None — the date key being formatted
        reason: str — why formatting failed
    """
