"""Publish date coercion."""

from __future__ import annotations

from datetime import UTC, date, datetime, tzinfo
from typing import Any

from dateutil import parser as dateutil_parser

from quire.exceptions import MalformedDateError

# Two defaults that disagree on every date component: a string that leaves
# any of year, month or day unspecified parses differently against each.
_PROBE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def normalize_timezone(dt: datetime, *, default_timezone: tzinfo = UTC) -> datetime:
    """Make naive datetimes aware in ``default_timezone`` and convert aware ones to it."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=default_timezone)
    return dt.astimezone(default_timezone)


def parse_publish_date(value: Any, source: str) -> datetime:
    """Coerce a frontmatter date value to a UTC datetime with day precision.

    Accepts the ``date``/``datetime`` objects YAML produces as well as free-form
    strings understood by ``dateutil``.

    Raises:
        MalformedDateError: If the value cannot be parsed or does not pin down
            the year, month and day.

    """
    if isinstance(value, datetime):
        return normalize_timezone(value)
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time(), tzinfo=UTC)
    if isinstance(value, bool) or not isinstance(value, str | int):
        raise MalformedDateError(source, value)

    raw = str(value).strip()
    try:
        first, second = (dateutil_parser.parse(raw, default=default) for default in _PROBE_DEFAULTS)
    except (ValueError, OverflowError) as exc:
        raise MalformedDateError(source, value) from exc

    if first.date() != second.date():
        raise MalformedDateError(source, value)
    return normalize_timezone(first)
