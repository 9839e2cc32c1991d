"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime


def today_iso() -> str:
    """Today's date as YYYY-MM-DD."""
    return datetime.now(UTC).strftime("%Y-%m-%d")


def now_iso() -> str:
    """Current UTC time as standard ISO 8601 (snapshot timestamps)."""
    return datetime.now(UTC).isoformat()


def parse_assignment(raw: str) -> tuple[str, str]:
    """Split a ``key=value`` CLI argument.

    Examples:
        >>> parse_assignment("status=evergreen")
        ('status', 'evergreen')
        >>> parse_assignment("title = A = B")
        ('title', 'A = B')
    """
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        msg = f"Expected key=value, got {raw!r}"
        raise ValueError(msg)
    return key.strip(), value.strip()
