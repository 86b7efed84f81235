"""Tests for quote_sentinel.core.exceptions."""

import pytest

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


class TestExceptionHierarchy:
    """Verify the exception class hierarchy."""

    def test_config_is_subclass(self):
        assert issubclass(ConfigError, QuoteSentinelError)

    def test_provider_is_subclass(self):
        assert issubclass(ProviderError, QuoteSentinelError)

    def test_extraction_is_subclass(self):
        assert issubclass(ExtractionError, QuoteSentinelError)

    def test_stock_not_found_is_subclass_of_extraction(self):
        assert issubclass(StockNotFoundError, ExtractionError)
        assert issubclass(StockNotFoundError, QuoteSentinelError)

    def test_date_not_found_is_subclass_of_extraction(self):
        assert issubclass(DateNotFoundError, ExtractionError)

    def test_response_format_is_subclass_of_extraction(self):
        assert issubclass(ResponseFormatError, ExtractionError)


class TestExceptionContext:
    """Verify context dict behavior."""

    def test_context_preserved(self):
        exc = StockNotFoundError("unknown symbol", context={"line_number": 2})
        assert exc.context["line_number"] == 2

    def test_default_context_is_empty_dict(self):
        exc = QuoteSentinelError("test error")
        assert exc.context == {}

    def test_str_returns_message(self):
        exc = ConfigError("invalid field")
        assert str(exc) == "invalid field"

    def test_context_none_becomes_empty_dict(self):
        exc = DateNotFoundError("no window", context=None)
        assert exc.context == {}

    def test_exception_can_be_caught_as_base(self):
        with pytest.raises(QuoteSentinelError):
            raise ProviderError("down", context={"provider": "yahoo"})

    def test_exception_can_be_caught_as_parent(self):
        with pytest.raises(ExtractionError):
            raise ResponseFormatError("bad record", context={"key": "2022-11-22"})


class TestProviderError:
    def test_not_found_code(self):
        exc = ProviderError("missing", code=NOT_FOUND_CODE)
        assert exc.is_not_found
        assert exc.code == "Not Found"

    def test_other_code_is_not_not_found(self):
        assert not ProviderError("boom", code="Internal Server Error").is_not_found

    def test_no_code(self):
        exc = ProviderError("timeout", context={"symbol": "IBM"})
        assert exc.code is None
        assert not exc.is_not_found
        assert exc.context == {"symbol": "IBM"}
