"""Tests for core calendar logic."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from gracecal.core.calendar import (
    CalendarFilter,
    Event,
    EventCategory,
    expand_event,
    expand_events,
    filter_events_by_date,
    sort_events_by_start,
)
from gracecal.core.errors import InvalidDateError, InvalidRecordError
from gracecal.core.recurrence import Frequency

CHICAGO = ZoneInfo("America/Chicago")


@pytest.fixture
def make_event():
    """Factory for timed events in Chicago local time."""

    def _make(event_id: str, day: date, hour: int, category=EventCategory.EVENT, **kwargs) -> Event:
        return Event(
            id=event_id,
            title=f"Event {event_id}",
            start=datetime(day.year, day.month, day.day, hour, 0, tzinfo=CHICAGO),
            category=category,
            **kwargs,
        )

    return _make


class TestEvent:
    def test_all_day_drops_time(self):
        event = Event(id="e1", title="Picnic", start=datetime(2025, 6, 1, 13, 30), all_day=True)
        assert event.start == date(2025, 6, 1)
        assert type(event.start) is date

    def test_timed_requires_aware_start(self):
        with pytest.raises(InvalidDateError):
            Event(id="e1", title="Service", start=datetime(2025, 6, 1, 10, 0))

    def test_end_before_start_rejected(self):
        with pytest.raises(InvalidRecordError):
            Event(id="e1", title="x", start=date(2025, 6, 2), end=date(2025, 6, 1), all_day=True)

    def test_default_one_hour(self, make_event):
        event = make_event("e1", date(2025, 6, 1), 10)
        assert (event.effective_end() - event.start).total_seconds() == 3600

    def test_day_uses_local_wall_clock(self):
        # 02:30 UTC on June 2 is still June 1 in Chicago
        event = Event(id="e1", title="Late", start=datetime(2025, 6, 2, 2, 30, tzinfo=timezone.utc))
        assert event.day(CHICAGO) == date(2025, 6, 1)
        assert event.day(timezone.utc) == date(2025, 6, 2)

    def test_format_time_in_zone(self):
        event = Event(id="e1", title="Vespers", start=datetime(2025, 6, 11, 2, 0, tzinfo=timezone.utc))
        assert event.day(CHICAGO) == date(2025, 6, 10)
        assert event.format_time(CHICAGO) == "21:00"
        assert event.format_time(timezone.utc) == "02:00"

    def test_format_time_all_day(self):
        event = Event(id="e1", title="Holiday", start=date(2025, 12, 25), all_day=True)
        assert event.format_time() == "All day"

    def test_recurrence_rule(self):
        event = Event(
            id="e1",
            title="Bible Study",
            start=date(2025, 1, 1),
            all_day=True,
            recurrence=Frequency.WEEKLY,
            recurrence_end=date(2025, 3, 1),
        )
        assert event.recurrence_rule.to_rrule() == "FREQ=WEEKLY;UNTIL=20250301"


class TestEventFromRecord:
    def test_timed_utc(self):
        event = Event.from_record(
            {
                "id": "e1",
                "title": "Sunday Service",
                "start_date": "2025-01-05T16:00:00Z",
                "end_date": "2025-01-05T17:30:00Z",
                "all_day": False,
                "category": "service",
                "location": "Main Sanctuary",
            }
        )
        assert event.start == datetime(2025, 1, 5, 16, 0, tzinfo=timezone.utc)
        assert event.category is EventCategory.SERVICE
        assert event.location == "Main Sanctuary"

    def test_naive_is_local(self):
        event = Event.from_record({"id": "e1", "title": "x", "start_date": "2025-01-05T10:00:00"}, CHICAGO)
        assert event.start.utcoffset().total_seconds() == -6 * 3600

    def test_all_day(self):
        event = Event.from_record(
            {"id": "e1", "title": "Retreat", "start_date": "2025-03-07", "end_date": "2025-03-09", "all_day": True}
        )
        assert event.start == date(2025, 3, 7)
        assert event.last_day() == date(2025, 3, 9)

    def test_unknown_category_is_other(self):
        event = Event.from_record(
            {"id": "e1", "title": "x", "start_date": "2025-03-07", "all_day": True, "category": "wedding"}
        )
        assert event.category is EventCategory.OTHER

    def test_malformed_date_rejected(self):
        with pytest.raises(InvalidRecordError, match="e9"):
            Event.from_record({"id": "e9", "title": "x", "start_date": "March 7th", "all_day": True})

    def test_missing_title_rejected(self):
        with pytest.raises(InvalidRecordError):
            Event.from_record({"id": "e9", "start_date": "2025-03-07"})


class TestFilters:
    def test_category_filter(self, make_event):
        events = [
            make_event("1", date(2025, 1, 5), 10, EventCategory.SERVICE),
            make_event("2", date(2025, 1, 6), 19, EventCategory.MEETING),
        ]
        f = CalendarFilter(categories=frozenset({EventCategory.SERVICE}))
        assert [e.id for e in f.apply(events)] == ["1"]

    def test_hide_events(self, make_event):
        f = CalendarFilter(show_events=False)
        assert f.apply([make_event("1", date(2025, 1, 5), 10)]) == []

    def test_filter_by_date(self, make_event):
        events = [make_event(str(d), date(2025, 1, d), 10) for d in (4, 5, 6, 7)]
        result = filter_events_by_date(events, date(2025, 1, 5), date(2025, 1, 6), CHICAGO)
        assert [e.id for e in result] == ["5", "6"]

    def test_sort_all_day_first(self, make_event):
        timed = make_event("t", date(2025, 1, 5), 9)
        all_day = Event(id="a", title="Fast", start=date(2025, 1, 5), all_day=True)
        assert [e.id for e in sort_events_by_start([timed, all_day], CHICAGO)] == ["a", "t"]


class TestExpandEvent:
    def test_non_repeating_in_window(self, make_event):
        event = make_event("1", date(2025, 1, 5), 10)
        assert expand_event(event, date(2025, 1, 1), date(2025, 1, 31), CHICAGO) == [event]
        assert expand_event(event, date(2025, 2, 1), date(2025, 2, 28), CHICAGO) == []

    def test_weekly_instances_keep_series_numbering(self, make_event):
        event = make_event("svc", date(2025, 1, 5), 10, recurrence=Frequency.WEEKLY)
        instances = expand_event(event, date(2025, 1, 15), date(2025, 1, 31), CHICAGO)

        assert [i.id for i in instances] == ["svc_2", "svc_3"]
        assert all(i.series_id == "svc" for i in instances)

    def test_weekly_days(self, make_event):
        event = make_event("svc", date(2025, 1, 5), 10, recurrence=Frequency.WEEKLY)
        instances = expand_event(event, date(2025, 1, 1), date(2025, 1, 31), CHICAGO)
        assert [i.day(CHICAGO) for i in instances] == [
            date(2025, 1, 5),
            date(2025, 1, 12),
            date(2025, 1, 19),
            date(2025, 1, 26),
        ]

    def test_stops_at_recurrence_end(self, make_event):
        event = make_event(
            "svc", date(2025, 1, 5), 10, recurrence=Frequency.WEEKLY, recurrence_end=date(2025, 1, 19)
        )
        instances = expand_event(event, date(2025, 1, 1), date(2025, 3, 31), CHICAGO)
        assert [i.day(CHICAGO) for i in instances][-1] == date(2025, 1, 19)
        assert len(instances) == 3

    def test_keeps_local_time_across_dst(self, make_event):
        event = make_event("svc", date(2025, 3, 2), 10, recurrence=Frequency.WEEKLY)
        instances = expand_event(event, date(2025, 3, 1), date(2025, 3, 16), CHICAGO)
        assert [i.start.astimezone(CHICAGO).hour for i in instances] == [10, 10, 10]

    def test_all_day_quarterly(self):
        event = Event(
            id="q",
            title="Members Meeting",
            start=date(2025, 1, 12),
            all_day=True,
            recurrence=Frequency.QUARTERLY,
        )
        instances = expand_event(event, date(2025, 1, 1), date(2025, 12, 31))
        assert [i.start for i in instances] == [
            date(2025, 1, 12),
            date(2025, 4, 12),
            date(2025, 7, 12),
            date(2025, 10, 12),
        ]

    def test_expand_events_sorted(self, make_event):
        weekly = make_event("w", date(2025, 1, 6), 19, recurrence=Frequency.WEEKLY)
        single = make_event("s", date(2025, 1, 8), 9)
        result = expand_events([single, weekly], date(2025, 1, 6), date(2025, 1, 13), CHICAGO)
        assert [e.id for e in result] == ["w_0", "s", "w_1"]
