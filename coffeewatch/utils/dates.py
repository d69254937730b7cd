"""Datetime helpers."""

from __future__ import annotations

from datetime import datetime

import pendulum

DEFAULT_TZ = "UTC"


def parse_timestamp(value: str) -> pendulum.DateTime:
    parsed = pendulum.parse(value)
    if not isinstance(parsed, pendulum.DateTime):
        raise ValueError(f"Not a timestamp: {value!r}")
    return parsed


def format_long_date(value: datetime, tz: str = DEFAULT_TZ) -> str:
    """Render e.g. ``March 5, 2024 UTC`` in the given timezone."""
    local = pendulum.instance(value).in_timezone(tz)
    return f"{local.format('MMMM D, YYYY')} {local.tzname()}"
