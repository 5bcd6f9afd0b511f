"""Input validation shared by the search adapter and the filter engine."""

from __future__ import annotations

import re
from datetime import date, datetime

from .exceptions import InvalidDateError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_date_format(value: str) -> bool:
    """True for a real calendar date written as ``YYYY-MM-DD``."""
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def parse_date_filter(value: str | None, param_name: str) -> date | None:
    """
    Parse an optional ``YYYY-MM-DD`` filter value.

    Empty values mean "no bound".

    Raises:
        InvalidDateError: Malformed or impossible date
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not is_valid_date_format(value):
        raise InvalidDateError(param_name, value)
    return datetime.strptime(value, "%Y-%m-%d").date()
