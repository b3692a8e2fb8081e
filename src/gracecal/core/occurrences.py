"""Birthdays, membership anniversaries and events on one date-indexed calendar.

Pure functions. Two rollover policies exist because the month grid and the
upcoming list want different answers for a date that already passed this
year: the grid keeps this year's date, the upcoming list moves it to next
year.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta, tzinfo
from enum import Enum

from .calendar import CalendarFilter, Event, sort_events_by_start
from .dates import parse_calendar_date, same_day_in_year
from .errors import InvalidDateError, InvalidRecordError

DAY_CELL_LIMIT = 3
UPCOMING_DAYS = 30


class OccurrenceKind(str, Enum):
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"


class RolloverPolicy(str, Enum):
    CALENDAR_YEAR = "calendar-year"
    NEXT_OCCURRENCE = "next-occurrence"


@dataclass(frozen=True)
class Person:
    """The slice of a person record the calendar cares about."""

    id: str
    name: str
    birth_date: date | None = None
    join_date: date | None = None

    @classmethod
    def from_record(cls, data: dict) -> "Person":
        person_id = data.get("id")
        if not person_id:
            raise InvalidRecordError(f"Person record missing id: {data!r}")
        name = data.get("name") or " ".join(
            part for part in (data.get("first_name"), data.get("last_name")) if part
        )
        try:
            birth = parse_calendar_date(data["birth_date"], "birth_date") if data.get("birth_date") else None
            joined = parse_calendar_date(data["join_date"], "join_date") if data.get("join_date") else None
        except InvalidDateError as e:
            raise InvalidRecordError(f"Person {person_id}: {e}") from e
        return cls(id=str(person_id), name=name, birth_date=birth, join_date=joined)


@dataclass(frozen=True)
class DerivedOccurrence:
    """A birthday or anniversary landing on a concrete date."""

    kind: OccurrenceKind
    person: Person
    date: date
    years: int

    @property
    def source_date(self) -> date:
        if self.kind is OccurrenceKind.BIRTHDAY:
            return self.person.birth_date
        return self.person.join_date

    def in_year(self, year: int) -> "DerivedOccurrence":
        source = self.source_date
        return DerivedOccurrence(self.kind, self.person, same_day_in_year(source, year), year - source.year)

    def describe(self) -> str:
        if self.kind is OccurrenceKind.BIRTHDAY:
            return f"{self.person.name} turns {self.years}"
        unit = "year" if self.years == 1 else "years"
        return f"{self.person.name} - {self.years} {unit} as a member"


def _occurrence_in_year(person: Person, kind: OccurrenceKind, year: int) -> DerivedOccurrence | None:
    source = person.birth_date if kind is OccurrenceKind.BIRTHDAY else person.join_date
    if source is None:
        return None
    return DerivedOccurrence(kind, person, same_day_in_year(source, year), year - source.year)


def derive_occurrences(
    people: list[Person],
    kind: OccurrenceKind,
    reference_date: date,
    policy: RolloverPolicy = RolloverPolicy.CALENDAR_YEAR,
) -> list[DerivedOccurrence]:
    """
    Project each person's birthday or join date onto the calendar.

    CALENDAR_YEAR: the date in ``reference_date.year``, passed or not.
    NEXT_OCCURRENCE: the first occurrence on or after ``reference_date``.
    People without the relevant date are skipped; anniversaries of zero or
    fewer years are dropped.
    """
    result = []
    for person in people:
        occurrence = _occurrence_in_year(person, kind, reference_date.year)
        if occurrence is None:
            continue
        if policy is RolloverPolicy.NEXT_OCCURRENCE and occurrence.date < reference_date:
            occurrence = occurrence.in_year(reference_date.year + 1)
        if kind is OccurrenceKind.ANNIVERSARY and occurrence.years <= 0:
            continue
        result.append(occurrence)
    return result


def derive_birthdays(people: list[Person], reference_year: int) -> list[DerivedOccurrence]:
    """Birthdays in ``reference_year``; age = reference_year - birth year."""
    return derive_occurrences(people, OccurrenceKind.BIRTHDAY, date(reference_year, 1, 1))


def derive_anniversaries(people: list[Person], reference_year: int) -> list[DerivedOccurrence]:
    """Membership anniversaries in ``reference_year``, one year or more only."""
    return derive_occurrences(people, OccurrenceKind.ANNIVERSARY, date(reference_year, 1, 1))


@dataclass
class DayBucket:
    """Everything falling on one calendar day."""

    events: list[Event] = field(default_factory=list)
    birthdays: list[DerivedOccurrence] = field(default_factory=list)
    anniversaries: list[DerivedOccurrence] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.events) + len(self.birthdays) + len(self.anniversaries)

    def display_items(self, limit: int = DAY_CELL_LIMIT) -> list[Event | DerivedOccurrence]:
        """Items shown in a grid cell: birthdays, then anniversaries, then events."""
        ordered = [*self.birthdays, *self.anniversaries, *self.events]
        return ordered[:limit]

    def overflow(self, limit: int = DAY_CELL_LIMIT) -> int:
        """How many items didn't fit (the '+N more' count)."""
        return max(0, self.total - limit)


def bucket_by_date(
    events: list[Event],
    birthdays: list[DerivedOccurrence],
    anniversaries: list[DerivedOccurrence],
    tz: tzinfo | None = None,
) -> dict[date, DayBucket]:
    """Group everything by local calendar date, ignoring time of day."""
    buckets: dict[date, DayBucket] = {}
    for event in sort_events_by_start(events, tz):
        buckets.setdefault(event.day(tz), DayBucket()).events.append(event)
    for occurrence in birthdays:
        buckets.setdefault(occurrence.date, DayBucket()).birthdays.append(occurrence)
    for occurrence in anniversaries:
        buckets.setdefault(occurrence.date, DayBucket()).anniversaries.append(occurrence)
    return buckets


def item_date(item: Event | DerivedOccurrence, tz: tzinfo | None = None) -> date:
    if isinstance(item, Event):
        return item.day(tz)
    return item.date


def days_until(item: Event | DerivedOccurrence, reference_date: date, tz: tzinfo | None = None) -> int:
    return (item_date(item, tz) - reference_date).days


def days_label(days: int) -> str:
    if days == 0:
        return "Today!"
    if days == 1:
        return "Tomorrow"
    return f"In {days} days"


def upcoming(
    items: list[Event | DerivedOccurrence],
    window_days: int,
    reference_date: date,
    tz: tzinfo | None = None,
) -> list[Event | DerivedOccurrence]:
    """
    Items dated within [reference_date, reference_date + window_days], soonest first.

    Birthdays and anniversaries before ``reference_date`` are first moved to
    next year. Events keep their stored date.
    """
    window_end = reference_date + timedelta(days=window_days)
    selected = []
    for item in items:
        if isinstance(item, DerivedOccurrence) and item.date < reference_date:
            item = item.in_year(reference_date.year)
            if item.date < reference_date:
                item = item.in_year(reference_date.year + 1)
        if reference_date <= item_date(item, tz) <= window_end:
            selected.append(item)
    return sorted(selected, key=lambda i: item_date(i, tz))


def month_view(
    year: int,
    month: int,
    events: list[Event],
    people: list[Person],
    calendar_filter: CalendarFilter | None = None,
    tz: tzinfo | None = None,
) -> dict[date, DayBucket]:
    """Day buckets for one month of the grid (calendar-year rollover)."""
    calendar_filter = calendar_filter or CalendarFilter()
    reference = date(year, 1, 1)
    birthdays = (
        derive_occurrences(people, OccurrenceKind.BIRTHDAY, reference)
        if calendar_filter.show_birthdays
        else []
    )
    anniversaries = (
        derive_occurrences(people, OccurrenceKind.ANNIVERSARY, reference)
        if calendar_filter.show_anniversaries
        else []
    )
    buckets = bucket_by_date(calendar_filter.apply(events), birthdays, anniversaries, tz)
    return {d: b for d, b in sorted(buckets.items()) if d.year == year and d.month == month}


def upcoming_agenda(
    events: list[Event],
    people: list[Person],
    reference_date: date,
    window_days: int = UPCOMING_DAYS,
    calendar_filter: CalendarFilter | None = None,
    tz: tzinfo | None = None,
) -> list[Event | DerivedOccurrence]:
    """Upcoming events, birthdays and anniversaries (next-occurrence rollover)."""
    calendar_filter = calendar_filter or CalendarFilter()
    items: list[Event | DerivedOccurrence] = list(calendar_filter.apply(events))
    if calendar_filter.show_birthdays:
        items.extend(
            derive_occurrences(people, OccurrenceKind.BIRTHDAY, reference_date, RolloverPolicy.NEXT_OCCURRENCE)
        )
    if calendar_filter.show_anniversaries:
        items.extend(
            derive_occurrences(people, OccurrenceKind.ANNIVERSARY, reference_date, RolloverPolicy.NEXT_OCCURRENCE)
        )
    return upcoming(items, window_days, reference_date, tz)
