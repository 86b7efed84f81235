"""quote_sentinel.core — Foundation types, config, results, and exceptions."""

from quote_sentinel.core.config import (
    AlphaVantageConfig,
    APIConfig,
    QuoteSentinelConfig,
    YahooConfig,
    load_config,
)
from quote_sentinel.core.exceptions import (
    NOT_FOUND_CODE,
    ConfigError,
    DateNotFoundError,
    ExtractionError,
    ProviderError,
    QuoteSentinelError,
    ResponseFormatError,
    StockNotFoundError,
)
from quote_sentinel.core.models import (
    ComparisonResult,
    GainsProjection,
    HistoryWindow,
    PricePoint,
    ProviderQuote,
    Quote,
    Symbol,
    to_iso_instant,
)
from quote_sentinel.core.results import (
    Error,
    Failure,
    InvalidParameter,
    NotFound,
    Success,
    Unknown,
    failure,
    success,
)

__all__ = [
    # Type aliases
    "Symbol",
    # Models
    "PricePoint",
    "HistoryWindow",
    "ProviderQuote",
    "Quote",
    "ComparisonResult",
    "GainsProjection",
    "to_iso_instant",
    # Results
    "Error",
    "NotFound",
    "Unknown",
    "InvalidParameter",
    "Success",
    "Failure",
    "success",
    "failure",
    # Config
    "QuoteSentinelConfig",
    "YahooConfig",
    "AlphaVantageConfig",
    "APIConfig",
    "load_config",
    # Exceptions
    "NOT_FOUND_CODE",
    "QuoteSentinelError",
    "ConfigError",
    "ProviderError",
    "ExtractionError",
    "StockNotFoundError",
    "DateNotFoundError",
    "ResponseFormatError",
]
