"""Request field validation, run before any provider is called."""

from __future__ import annotations

import math
import re
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

from quote_sentinel.core.results import InvalidParameter

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ValidationType(StrEnum):
    """Checks understood by get_validation_errors()."""

    STRING = "string"
    DATE = "date"
    IS_NOT_WEEKEND = "is_not_weekend"
    NOT_TODAY_OR_AFTER = "not_today_or_after"
    DATE_INTERVAL = "date_interval"
    POSITIVE_NUMBER = "positive_number"


Check = tuple[ValidationType, str, Any]


def parse_date(value: Any) -> date | None:
    """Parse a ``YYYY-MM-DD`` string. Returns None if it is not one."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def parse_positive_number(value: Any) -> float | None:
    """Parse a finite number greater than zero. Returns None otherwise."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def get_validation_errors(
    *checks: Check,
    today: date | None = None,
) -> list[InvalidParameter] | None:
    """Run checks in order and collect every failure.

    Each check is ``(ValidationType, field_name, value)``. For
    ``DATE_INTERVAL`` the value is a ``(from, to)`` pair. Date checks that
    depend on a parseable date are skipped when the date itself is invalid,
    since the DATE check already reports it.

    Returns:
        The ordered list of errors, or None when every check passed.
    """
    today = today or datetime.now(UTC).date()
    errors: list[InvalidParameter] = []

    for check_type, field_name, value in checks:
        reason = _run_check(check_type, value, today)
        if reason is not None:
            errors.append(
                InvalidParameter(field=field_name, value=_render(value), reason=reason)
            )

    return errors or None


def _run_check(check_type: ValidationType, value: Any, today: date) -> str | None:
    """Return a failure reason, or None if the value passes."""
    if check_type == ValidationType.STRING:
        if not isinstance(value, str) or not value.strip():
            return "must be a non-empty string"
        return None

    if check_type == ValidationType.POSITIVE_NUMBER:
        if parse_positive_number(value) is None:
            return "must be a positive number"
        return None

    if check_type == ValidationType.DATE:
        if parse_date(value) is None:
            return "must be a date formatted as YYYY-MM-DD"
        return None

    if check_type == ValidationType.IS_NOT_WEEKEND:
        parsed = parse_date(value)
        if parsed is not None and parsed.weekday() >= 5:
            return "must not fall on a weekend"
        return None

    if check_type == ValidationType.NOT_TODAY_OR_AFTER:
        parsed = parse_date(value)
        if parsed is not None and parsed >= today:
            return "must be a date before today"
        return None

    if check_type == ValidationType.DATE_INTERVAL:
        start, end = value
        parsed_start, parsed_end = parse_date(start), parse_date(end)
        if parsed_start is not None and parsed_end is not None and parsed_start > parsed_end:
            return "start date must not be after end date"
        return None

    raise ValueError(f"Unknown validation type: {check_type!r}")


def _render(value: Any) -> str:
    if isinstance(value, tuple):
        return "/".join(str(v) for v in value)
    return "" if value is None else str(value)
