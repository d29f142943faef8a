"""Parsing and formatting of ``MM-YYYY`` billing months."""
from __future__ import annotations

import re
from datetime import date

from .errors import ValidationError

MONTH_FORMAT = "MM-YYYY"

_MONTH_PATTERN = re.compile(r"(0[1-9]|1[0-2])-([0-9]{4})")


def parse_month(value: str, *, label: str = "date") -> date:
    """Return the first day of the month described by ``value``.

    Only the exact ``MM-YYYY`` form is accepted: a zero-padded month between
    01 and 12 followed by a four digit year.
    """

    match = _MONTH_PATTERN.fullmatch(value or "")
    if match is None or int(match.group(2)) < 1:
        raise ValidationError(f"bad {label}: expected {MONTH_FORMAT}, got {value!r}")
    return date(int(match.group(2)), int(match.group(1)), 1)


def format_month(value: date) -> str:
    return f"{value.month:02d}-{value.year:04d}"


__all__ = ["MONTH_FORMAT", "format_month", "parse_month"]
