"""Tests for birthday/anniversary derivation, day buckets and upcoming lists."""

from datetime import date, datetime, timezone

import pytest

from gracecal.core.calendar import CalendarFilter, Event, EventCategory
from gracecal.core.errors import InvalidRecordError
from gracecal.core.occurrences import (
    DayBucket,
    DerivedOccurrence,
    OccurrenceKind,
    Person,
    RolloverPolicy,
    bucket_by_date,
    days_label,
    derive_anniversaries,
    derive_birthdays,
    derive_occurrences,
    month_view,
    upcoming,
    upcoming_agenda,
)


@pytest.fixture
def today():
    return date(2025, 6, 10)


@pytest.fixture
def people():
    return [
        Person(id="p1", name="Ruth Miller", birth_date=date(1990, 6, 5), join_date=date(2015, 6, 20)),
        Person(id="p2", name="Amos Lee", birth_date=date(1985, 6, 25)),
        Person(id="p3", name="Naomi Park", join_date=date(2025, 3, 1)),
        Person(id="p4", name="Eli Stone"),
    ]


def all_day(event_id: str, day: date, category=EventCategory.EVENT) -> Event:
    return Event(id=event_id, title=f"Event {event_id}", start=day, all_day=True, category=category)


class TestDerive:
    def test_birthdays_skip_missing(self, people):
        birthdays = derive_birthdays(people, 2025)
        assert [b.person.id for b in birthdays] == ["p1", "p2"]

    def test_birthday_age(self, people):
        ruth = derive_birthdays(people, 2025)[0]
        assert ruth.date == date(2025, 6, 5)
        assert ruth.years == 35
        assert ruth.kind is OccurrenceKind.BIRTHDAY

    def test_anniversaries_exclude_zero_years(self, people):
        anniversaries = derive_anniversaries(people, 2025)
        assert [a.person.id for a in anniversaries] == ["p1"]
        assert anniversaries[0].years == 10

    def test_anniversary_negative_excluded(self):
        future = Person(id="f", name="Future", join_date=date(2027, 1, 1))
        assert derive_anniversaries([future], 2025) == []

    def test_leap_day_birthday_in_common_year(self):
        leap = Person(id="l", name="Leap", birth_date=date(2000, 2, 29))
        assert derive_birthdays([leap], 2025)[0].date == date(2025, 3, 1)
        assert derive_birthdays([leap], 2028)[0].date == date(2028, 2, 29)

    def test_next_occurrence_policy_rolls(self, people, today):
        birthdays = derive_occurrences(people, OccurrenceKind.BIRTHDAY, today, RolloverPolicy.NEXT_OCCURRENCE)
        by_id = {b.person.id: b for b in birthdays}
        assert by_id["p1"].date == date(2026, 6, 5)
        assert by_id["p1"].years == 36
        assert by_id["p2"].date == date(2025, 6, 25)

    def test_next_occurrence_anniversary_after_first_year(self):
        joined = Person(id="j", name="Joined", join_date=date(2025, 1, 5))
        result = derive_occurrences(
            [joined], OccurrenceKind.ANNIVERSARY, date(2025, 12, 20), RolloverPolicy.NEXT_OCCURRENCE
        )
        assert result[0].date == date(2026, 1, 5)
        assert result[0].years == 1


class TestGridVersusUpcoming:
    def test_passed_birthday_stays_on_grid_but_leaves_upcoming(self, today):
        ruth = Person(id="p1", name="Ruth", birth_date=date(1990, 6, 5))

        grid = derive_birthdays([ruth], today.year)
        assert grid[0].date == date(2025, 6, 5)

        soon = upcoming(grid, 30, today)
        assert soon == []

        agenda = upcoming_agenda([], [ruth], today, 30)
        assert agenda == []


class TestBucketByDate:
    def test_groups_by_local_date(self, people):
        late = Event(
            id="late",
            title="Late",
            start=datetime(2025, 6, 5, 23, 30, tzinfo=timezone.utc),
        )
        buckets = bucket_by_date([late], derive_birthdays(people, 2025), [], timezone.utc)
        assert buckets[date(2025, 6, 5)].events == [late]
        assert buckets[date(2025, 6, 5)].birthdays[0].person.id == "p1"

    def test_empty(self):
        assert bucket_by_date([], [], []) == {}


class TestDayBucket:
    @pytest.fixture
    def busy_day(self, people):
        ruth, amos = derive_birthdays(people, 2025)
        anniversary = derive_anniversaries(people, 2025)[0]
        return DayBucket(
            events=[all_day("e1", date(2025, 6, 5)), all_day("e2", date(2025, 6, 5))],
            birthdays=[ruth, amos],
            anniversaries=[anniversary],
        )

    def test_priority_order_and_cap(self, busy_day):
        items = busy_day.display_items()
        assert len(items) == 3
        assert [type(i) for i in items] == [DerivedOccurrence, DerivedOccurrence, DerivedOccurrence]
        assert items[2].kind is OccurrenceKind.ANNIVERSARY

    def test_overflow(self, busy_day):
        assert busy_day.total == 5
        assert busy_day.overflow() == 2
        assert busy_day.overflow(limit=10) == 0

    def test_events_fill_remaining(self):
        bucket = DayBucket(events=[all_day("e1", date(2025, 1, 1)), all_day("e2", date(2025, 1, 1))])
        assert [e.id for e in bucket.display_items()] == ["e1", "e2"]
        assert bucket.overflow() == 0


class TestUpcoming:
    def test_window_inclusive_and_sorted(self, today):
        events = [
            all_day("far", date(2025, 7, 11)),
            all_day("edge", date(2025, 7, 10)),
            all_day("now", today),
            all_day("past", date(2025, 6, 9)),
        ]
        assert [e.id for e in upcoming(events, 30, today)] == ["now", "edge"]

    def test_events_not_rolled(self, today):
        assert upcoming([all_day("old", date(2025, 1, 1))], 365, today) == []

    def test_timed_event_ignores_time_of_day(self, today):
        morning = Event(id="m", title="Prayer", start=datetime(2025, 6, 10, 6, 0, tzinfo=timezone.utc))
        assert upcoming([morning], 0, today, timezone.utc) == [morning]

    def test_mixed_sorted(self, people, today):
        items = upcoming_agenda([all_day("picnic", date(2025, 6, 21))], people, today, 30)
        assert [(type(i).__name__, i.date if isinstance(i, DerivedOccurrence) else i.start) for i in items] == [
            ("DerivedOccurrence", date(2025, 6, 20)),
            ("Event", date(2025, 6, 21)),
            ("DerivedOccurrence", date(2025, 6, 25)),
        ]

    def test_days_label(self):
        assert days_label(0) == "Today!"
        assert days_label(1) == "Tomorrow"
        assert days_label(12) == "In 12 days"


class TestFiltersAppliedFirst:
    def test_month_view_counts_reflect_filter(self, people):
        events = [
            all_day("svc", date(2025, 6, 5), EventCategory.SERVICE),
            all_day("mtg", date(2025, 6, 5), EventCategory.MEETING),
        ]
        f = CalendarFilter(categories=frozenset({EventCategory.SERVICE}), show_birthdays=False)
        buckets = month_view(2025, 6, events, people, f)

        assert buckets[date(2025, 6, 5)].total == 1
        assert buckets[date(2025, 6, 5)].events[0].id == "svc"
        assert date(2025, 6, 20) in buckets  # anniversary still shown

    def test_month_view_only_that_month(self, people):
        buckets = month_view(2025, 6, [all_day("jul", date(2025, 7, 1))], people)
        assert all(d.month == 6 for d in buckets)
        assert list(buckets) == sorted(buckets)

    def test_upcoming_hide_birthdays(self, people, today):
        items = upcoming_agenda([], people, today, 30, CalendarFilter(show_birthdays=False))
        assert all(i.kind is OccurrenceKind.ANNIVERSARY for i in items)


class TestPersonRecord:
    def test_name_from_parts(self):
        person = Person.from_record(
            {"id": "p1", "first_name": "Ruth", "last_name": "Miller", "birth_date": "1990-06-05", "join_date": None}
        )
        assert person.name == "Ruth Miller"
        assert person.birth_date == date(1990, 6, 5)
        assert person.join_date is None

    def test_bad_birth_date(self):
        with pytest.raises(InvalidRecordError, match="birth_date"):
            Person.from_record({"id": "p1", "first_name": "Ruth", "birth_date": "05/06/1990"})
