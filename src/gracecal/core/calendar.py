"""Pure calendar domain logic - no I/O dependencies."""

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum

from .dates import local_date, parse_calendar_date, parse_instant
from .errors import InvalidDateError, InvalidRecordError
from .recurrence import Frequency, RecurrenceRule, rule_for

DEFAULT_DURATION = timedelta(hours=1)


class EventCategory(str, Enum):
    SERVICE = "service"
    MEETING = "meeting"
    EVENT = "event"
    SMALL_GROUP = "small-group"
    HOLIDAY = "holiday"
    OTHER = "other"

    @classmethod
    def parse(cls, value: "str | EventCategory | None") -> "EventCategory":
        if isinstance(value, EventCategory):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class Event:
    """
    A scheduled church calendar event.

    All-day events hold plain dates in ``start``/``end`` (``end`` is the last
    day, inclusive). Timed events hold aware datetimes.
    """

    id: str
    title: str
    start: date | datetime
    end: date | datetime | None = None
    all_day: bool = False
    description: str = ""
    location: str = ""
    category: EventCategory = EventCategory.EVENT
    recurrence: Frequency = Frequency.NONE
    recurrence_end: date | None = None
    series_id: str | None = None

    def __post_init__(self):
        if self.all_day:
            # Time of day means nothing on an all-day event
            if isinstance(self.start, datetime):
                object.__setattr__(self, "start", self.start.date())
            if isinstance(self.end, datetime):
                object.__setattr__(self, "end", self.end.date())
        else:
            for name in ("start", "end"):
                value = getattr(self, name)
                if value is None and name == "end":
                    continue
                if not isinstance(value, datetime) or value.tzinfo is None:
                    raise InvalidDateError(name, value)
        if self.end is not None and self.end < self.start:
            raise InvalidRecordError(f"Event {self.id} ends before it starts")

    @property
    def recurrence_rule(self) -> RecurrenceRule | None:
        return rule_for(self.recurrence, self.recurrence_end)

    @property
    def is_recurring(self) -> bool:
        return self.recurrence_rule is not None

    def day(self, tz: tzinfo | None = None) -> date:
        """Calendar date the event starts on, in local wall-clock terms."""
        if self.all_day:
            return self.start
        return local_date(self.start, tz)

    def last_day(self) -> date:
        """Nominal (inclusive) last day of an all-day event."""
        if not self.all_day:
            raise ValueError("last_day applies to all-day events only")
        return self.end or self.start

    def effective_end(self) -> datetime:
        """End instant of a timed event; one hour after start if not stored."""
        if self.all_day:
            raise ValueError("effective_end applies to timed events only")
        return self.end or self.start + DEFAULT_DURATION

    def format_time(self, tz: tzinfo | None = None) -> str:
        """Format the event time for display, in ``tz`` (system local when None)."""
        if self.all_day:
            return "All day"
        return self.start.astimezone(tz).strftime("%H:%M")

    @classmethod
    def from_record(cls, data: dict, tz: tzinfo | None = None) -> "Event":
        """Create Event from a stored row (snake_case columns)."""
        event_id = data.get("id")
        if not event_id or not data.get("title"):
            raise InvalidRecordError(f"Event record missing id or title: {data!r}")
        all_day = bool(data.get("all_day", False))
        try:
            if all_day:
                start = parse_calendar_date(data.get("start_date"), "start_date")
                end = parse_calendar_date(data["end_date"], "end_date") if data.get("end_date") else None
            else:
                start = parse_instant(data.get("start_date"), tz, "start_date")
                end = parse_instant(data["end_date"], tz, "end_date") if data.get("end_date") else None
            until = (
                parse_calendar_date(data["recurrence_end_date"], "recurrence_end_date")
                if data.get("recurrence_end_date")
                else None
            )
            return cls(
                id=str(event_id),
                title=data["title"],
                start=start,
                end=end,
                all_day=all_day,
                description=data.get("description") or "",
                location=data.get("location") or "",
                category=EventCategory.parse(data.get("category")),
                recurrence=Frequency.parse(data.get("recurrence")),
                recurrence_end=until,
                series_id=data.get("series_id"),
            )
        except InvalidDateError as e:
            raise InvalidRecordError(f"Event {event_id}: {e}") from e


@dataclass(frozen=True)
class CalendarFilter:
    """
    What to show on the calendar.

    ``categories`` of None means every category. Applied before bucketing so
    counts reflect the filtered set.
    """

    categories: frozenset[EventCategory] | None = None
    show_events: bool = True
    show_birthdays: bool = True
    show_anniversaries: bool = True

    def apply(self, events: list[Event]) -> list[Event]:
        if not self.show_events:
            return []
        if self.categories is None:
            return list(events)
        return [e for e in events if e.category in self.categories]


def filter_events_by_date(
    events: list[Event],
    start_date: date,
    end_date: date | None = None,
    tz: tzinfo | None = None,
) -> list[Event]:
    """
    Filter events to those starting within a date range.

    Pure function - no I/O.
    """
    end_date = end_date or start_date
    return [e for e in events if start_date <= e.day(tz) <= end_date]


def sort_events_by_start(events: list[Event], tz: tzinfo | None = None) -> list[Event]:
    """Sort by day, all-day events first, then start time."""

    def sort_key(e: Event):
        if e.all_day:
            return (e.day(tz), 0, datetime.min.time())
        return (e.day(tz), 1, e.start.astimezone(tz).time())

    return sorted(events, key=sort_key)


def expand_event(
    event: Event,
    window_start: date,
    window_end: date,
    tz: tzinfo | None = None,
) -> list[Event]:
    """
    Concrete instances of an event inside [window_start, window_end].

    Instances are numbered from the series start, so an instance keeps its id
    whichever window it is listed in. Timed events repeat at the same local
    wall-clock time.
    """
    rule = event.recurrence_rule
    if rule is None:
        return [event] if window_start <= event.day(tz) <= window_end else []

    if event.all_day:
        dtstart = datetime.combine(event.start, datetime.min.time())
        length = event.last_day() - event.start
    else:
        dtstart = event.start.astimezone(tz)
        length = event.end - event.start if event.end else None
    horizon = datetime.combine(window_end, datetime.max.time(), tzinfo=dtstart.tzinfo)

    instances = []
    for index, occurrence in enumerate(rule.occurrences(dtstart, horizon)):
        if event.all_day:
            start = occurrence.date()
            end = start + length if event.end else None
        else:
            start = occurrence.astimezone(event.start.tzinfo)
            end = start + length if length is not None else None
        day = start if event.all_day else local_date(start, tz)
        if day < window_start:
            continue
        instances.append(
            replace(event, id=f"{event.id}_{index}", start=start, end=end, series_id=event.id)
        )
    return instances


def expand_events(
    events: list[Event],
    window_start: date,
    window_end: date,
    tz: tzinfo | None = None,
) -> list[Event]:
    """Expand every event into its instances inside the window, sorted."""
    expanded = []
    for event in events:
        expanded.extend(expand_event(event, window_start, window_end, tz))
    return sort_events_by_start(expanded, tz)
