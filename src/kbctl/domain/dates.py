"""Date coercion shared by validation and query evaluation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any


def to_date(value: Any) -> date | None:
    """Coerce a YAML date, datetime or ISO string to a :class:`date`.

    Returns None when *value* cannot be read as a calendar date.

    Examples:
        >>> to_date("2024-03-01")
        datetime.date(2024, 3, 1)
        >>> to_date("March 1st") is None
        True
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None
