"""quote-sentinel: stock quotes, historical price windows and gains projections."""

__version__ = "0.1.0"
