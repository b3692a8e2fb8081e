"""'Add to calendar' links for Google Calendar and Outlook.com."""

from datetime import timedelta, timezone
from enum import Enum
from urllib.parse import urlencode

from .calendar import Event
from .ical import format_date, format_datetime

GOOGLE_URL = "https://calendar.google.com/calendar/render"
OUTLOOK_URL = "https://outlook.live.com/calendar/0/deeplink/compose"


class Provider(str, Enum):
    GOOGLE = "google"
    OUTLOOK = "outlook"


def _date_range(event: Event, fmt) -> tuple[str, str]:
    if event.all_day:
        return format_date(event.start), format_date(event.last_day() + timedelta(days=1))
    return fmt(event.start), fmt(event.effective_end())


def _iso_utc(value) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _optional_params(event: Event, description_key: str) -> dict[str, str]:
    params = {}
    if event.description:
        params[description_key] = event.description
    if event.location:
        params["location"] = event.location
    rule = event.recurrence_rule
    if rule:
        params["recur"] = f"RRULE:{rule.to_rrule()}"
    return params


def google_calendar_url(event: Event) -> str:
    start, end = _date_range(event, format_datetime)
    params = {
        "action": "TEMPLATE",
        "text": event.title,
        "dates": f"{start}/{end}",
        **_optional_params(event, "details"),
    }
    return f"{GOOGLE_URL}?{urlencode(params)}"


def outlook_url(event: Event) -> str:
    start, end = _date_range(event, _iso_utc)
    params = {
        "path": "/calendar/action/compose",
        "rru": "addevent",
        "subject": event.title,
        "startdt": start,
        "enddt": end,
        "allday": "true" if event.all_day else "false",
        **_optional_params(event, "body"),
    }
    return f"{OUTLOOK_URL}?{urlencode(params)}"


def add_event_url(event: Event, provider: Provider | str) -> str:
    """Single-event add link for the given provider. Only formats a string."""
    provider = Provider(provider)
    if provider is Provider.GOOGLE:
        return google_calendar_url(event)
    return outlook_url(event)
