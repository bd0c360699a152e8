"""
Date handling for fills and timestamps.

Fill dates are calendar days. They travel through the application as
UTC-midnight ``datetime`` values so MongoDB can store and sort them, and are
rendered back as ``YYYY-MM-DD``. Every helper here is tolerant: input that
cannot be understood yields ``None`` rather than an exception, so one bad
record never breaks a whole list or chart.
"""

import logging
from datetime import UTC, date, datetime

from dateutil import parser

logger = logging.getLogger(__name__)

# Sort position of fills whose date is missing or unreadable.
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def get_current_utc_time() -> datetime:
    """Now, as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to naive values and convert aware ones to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_timestamp(ts: str | datetime) -> datetime | None:
    """
    Read an ISO 8601 string (or pass a datetime through) as aware UTC.

    Naive input is taken to be UTC.

    Args:
        ts: ISO 8601 text such as ``2024-03-01`` or
            ``2024-03-01T08:30:00+02:00``, or a datetime.

    Returns:
        The UTC datetime, or None when ``ts`` is empty or unreadable.
    """
    if not ts:
        return None
    if isinstance(ts, datetime):
        return ensure_utc(ts)
    try:
        return ensure_utc(parser.isoparse(ts))
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug("Unreadable timestamp %r: %s", ts, e)
        return None


def normalize_to_utc_datetime(value: object) -> datetime | None:
    """UTC datetime for a datetime, a date or an ISO string; otherwise None."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, str):
        return parse_timestamp(value.strip())
    return None


def to_fill_day(value: object) -> datetime | None:
    """UTC midnight of the calendar day ``value`` falls on."""
    moment = normalize_to_utc_datetime(value)
    if moment is None:
        return None
    return datetime(moment.year, moment.month, moment.day, tzinfo=UTC)


def normalize_calendar_date(value: object) -> str | None:
    """``YYYY-MM-DD`` for a date-like value, or None."""
    moment = normalize_to_utc_datetime(value)
    return moment.date().isoformat() if moment else None


def month_key(value: object) -> str | None:
    """``YYYY-MM`` label of a date-like value, or None."""
    moment = normalize_to_utc_datetime(value)
    if moment is None:
        return None
    return f"{moment.year:04d}-{moment.month:02d}"
