"""
Calendar-day helpers for the business's civil timezone.

All reminder decisions are made on whole calendar days in a single fixed
timezone (Asia/Seoul), independent of the server's own timezone.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Union

import pytz

from .config import ConfigurationError

DEFAULT_TIMEZONE = "Asia/Seoul"
SECONDS_PER_DAY = 24 * 60 * 60

DateLike = Union[date, str]


def get_timezone(timezone_name: str):
    try:
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError as exc:
        raise ConfigurationError(f"Unknown timezone: {timezone_name}") from exc


def parse_civil_date(value: DateLike) -> date:
    """Return a calendar date from a ``date``/``datetime`` or a ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError as exc:
            raise ValueError(f"Invalid calendar date '{value}', expected YYYY-MM-DD") from exc
    raise ValueError(f"Unsupported date value: {value!r}")


def resolve_today(
    timezone_name: str = DEFAULT_TIMEZONE,
    override: Optional[DateLike] = None,
    now: Optional[datetime] = None,
) -> date:
    """
    Work out "today" in the civil timezone.

    An explicit override wins and is treated exactly like a real date. ``now``
    defaults to the current instant; naive values are taken as UTC.
    """
    tz = get_timezone(timezone_name)
    if override is not None and override != "":
        return parse_civil_date(override)

    current = now or datetime.now(pytz.UTC)
    if current.tzinfo is None:
        current = pytz.UTC.localize(current)
    return current.astimezone(tz).date()


def days_between(today: DateLike, expected: DateLike, timezone_name: str = DEFAULT_TIMEZONE) -> int:
    """
    Signed number of calendar days from ``today`` to ``expected``.

    Both sides are localized to midnight in the civil timezone before the
    instants are subtracted, so the result never drifts on DST transitions.
    """
    tz = get_timezone(timezone_name)
    start = tz.localize(datetime.combine(parse_civil_date(today), time.min))
    end = tz.localize(datetime.combine(parse_civil_date(expected), time.min))
    return int(round((end - start).total_seconds() / SECONDS_PER_DAY))
