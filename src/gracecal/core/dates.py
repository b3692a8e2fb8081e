"""Calendar dates vs. instants - parsing and conversion helpers, no I/O.

A calendar date is a plain ``date`` (no time zone). An instant is an aware
``datetime``. Everything entering the core goes through these parsers, so a
malformed value fails here with a readable message instead of turning into
a wrong day somewhere downstream.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo

from .errors import InvalidDateError


def parse_calendar_date(value: str | date, field: str = "date") -> date:
    """Parse 'YYYY-MM-DD' (or the date part of an ISO timestamp)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(field, value)
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        raise InvalidDateError(field, value) from None


def parse_instant(value: str | datetime, tz: tzinfo | None = None, field: str = "timestamp") -> datetime:
    """
    Parse an ISO timestamp into an aware datetime.

    A trailing 'Z' means UTC. Naive values are wall-clock time in ``tz``
    (system local zone when ``tz`` is None). A bare date means local midnight.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time(0, 0))
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidDateError(field, value) from None
    else:
        raise InvalidDateError(field, value)

    if parsed.tzinfo is None:
        return attach_local(parsed, tz)
    return parsed


def attach_local(naive: datetime, tz: tzinfo | None = None) -> datetime:
    """Interpret a naive datetime as wall-clock time in ``tz``."""
    if tz is None:
        return naive.astimezone()
    return naive.replace(tzinfo=tz)


def to_utc(instant: datetime) -> datetime:
    """Convert an aware datetime to UTC."""
    if instant.tzinfo is None:
        raise ValueError("naive datetime has no defined instant")
    return instant.astimezone(timezone.utc)


def local_date(instant: datetime, tz: tzinfo | None = None) -> date:
    """Calendar date of an instant in local wall-clock terms."""
    return instant.astimezone(tz).date()


def same_day_in_year(original: date, year: int) -> date:
    """
    Month/day of ``original`` in ``year``.

    Feb 29 in a non-leap year overflows to Mar 1, the way a plain
    year/month/day constructor with day overflow behaves.
    """
    try:
        return original.replace(year=year)
    except ValueError:
        return date(year, 2, 28) + timedelta(days=1)


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)
