"""quote_sentinel.api — FastAPI REST surface over QuoteService."""

from quote_sentinel.api.app import create_app

__all__ = ["create_app"]
