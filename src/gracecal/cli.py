"""gracecal CLI - church calendar engine."""

import json
import logging
import sys
from datetime import date
from pathlib import Path

import click

from . import workflows
from .adapters.errors import DataStoreError
from .config import load_config
from .core.calendar import CalendarFilter, Event, EventCategory
from .core.errors import InvalidRecordError
from .core.ical import webcal_url
from .core.links import Provider
from .core.occurrences import DerivedOccurrence, days_label, days_until

CATEGORY_CHOICES = [c.value for c in EventCategory]


@click.group()
@click.version_option(package_name="gracecal")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """gracecal - Church calendar, birthdays, RSVPs and recurring tasks."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _calendar_filter(categories: tuple[str, ...], events: bool, birthdays: bool, anniversaries: bool) -> CalendarFilter:
    return CalendarFilter(
        categories=frozenset(EventCategory(c) for c in categories) if categories else None,
        show_events=events,
        show_birthdays=birthdays,
        show_anniversaries=anniversaries,
    )


def filter_options(f):
    f = click.option("--anniversaries/--no-anniversaries", default=True, help="Show membership anniversaries")(f)
    f = click.option("--birthdays/--no-birthdays", default=True, help="Show birthdays")(f)
    f = click.option("--events/--no-events", default=True, help="Show events")(f)
    f = click.option(
        "--category", "-c", "categories", multiple=True, type=click.Choice(CATEGORY_CHOICES),
        help="Only these event categories (repeatable)",
    )(f)
    return f


def _serialize(item: Event | DerivedOccurrence, reference: date | None = None, tz=None) -> dict:
    if isinstance(item, DerivedOccurrence):
        data = {
            "kind": item.kind.value,
            "date": item.date.isoformat(),
            "person_id": item.person.id,
            "name": item.person.name,
            "years": item.years,
        }
    else:
        data = {
            "kind": "event",
            "id": item.id,
            "title": item.title,
            "start": item.start.isoformat(),
            "end": item.end.isoformat() if item.end else None,
            "all_day": item.all_day,
            "location": item.location,
            "category": item.category.value,
            "recurrence": item.recurrence.value,
        }
    if reference is not None:
        data["days_until"] = days_until(item, reference, tz)
    return data


def _line(item: Event | DerivedOccurrence, tz=None) -> str:
    if isinstance(item, DerivedOccurrence):
        icon = "🎂" if item.kind.value == "birthday" else "💍"
        return f"{icon} {item.describe()}"
    loc = f" @ {item.location}" if item.location else ""
    return f"{item.format_time(tz):8} {item.title}{loc}"


@main.command()
@click.option("--year", type=int, default=None, help="Year (default: this year)")
@click.option("--month", type=click.IntRange(1, 12), default=None, help="Month 1-12 (default: this month)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@filter_options
def month(year, month, as_json, categories, events, birthdays, anniversaries):
    """Show a month of events, birthdays and anniversaries."""
    config = load_config()
    today = date.today()
    year = year or today.year
    month = month or today.month
    try:
        buckets = workflows.build_month(
            config, year, month, _calendar_filter(categories, events, birthdays, anniversaries)
        )
    except (DataStoreError, InvalidRecordError) as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                {
                    d.isoformat(): {
                        "items": [_serialize(i) for i in bucket.display_items(config.day_cell_limit)],
                        "overflow": bucket.overflow(config.day_cell_limit),
                        "total": bucket.total,
                    }
                    for d, bucket in buckets.items()
                },
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    click.echo(f"### {date(year, month, 1).strftime('%B %Y')}")
    if not buckets:
        click.echo("Nothing scheduled.")
        return
    for d, bucket in buckets.items():
        click.echo(f"\n{d.strftime('%a %d')}")
        for item in bucket.display_items(config.day_cell_limit):
            click.echo(f"  {_line(item, config.tzinfo)}")
        if bucket.overflow(config.day_cell_limit):
            click.echo(f"  +{bucket.overflow(config.day_cell_limit)} more")


@main.command()
@click.option("--days", "-d", type=click.IntRange(min=0), default=None, help="Window in days (default from config)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@filter_options
def upcoming(days, as_json, categories, events, birthdays, anniversaries):
    """List what's coming up."""
    config = load_config()
    today = date.today()
    try:
        items = workflows.build_upcoming(
            config, today, days, _calendar_filter(categories, events, birthdays, anniversaries)
        )
    except (DataStoreError, InvalidRecordError) as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([_serialize(i, today, config.tzinfo) for i in items], indent=2, ensure_ascii=False))
        return
    if not items:
        click.echo("Nothing coming up.")
        return
    for item in items:
        click.echo(f"{days_label(days_until(item, today, config.tzinfo)):12} {_line(item, config.tzinfo)}")


@main.command()
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="File to write (default: <church-name>-calendar.ics)")
@click.option("--event", "event_ids", multiple=True, help="Only export these event ids (repeatable)")
def export(output, event_ids):
    """Export events to an .ics file."""
    config = load_config()
    try:
        path = workflows.export_calendar(config, output, list(event_ids) or None)
    except (DataStoreError, InvalidRecordError) as e:
        _fail(e)
    click.echo(f"✓ Calendar saved to {path}")


@main.command()
@click.argument("url")
def webcal(url):
    """Turn a hosted .ics URL into a webcal:// subscription link."""
    click.echo(webcal_url(url))


@main.command()
@click.argument("event_id")
@click.option("--provider", "-p", type=click.Choice([p.value for p in Provider]), default="google")
def link(event_id, provider):
    """Print an 'add to calendar' link for one event."""
    config = load_config()
    try:
        click.echo(workflows.event_link(config, event_id, provider))
    except (DataStoreError, InvalidRecordError) as e:
        _fail(e)


@main.group()
def rsvp():
    """Record and summarize event RSVPs."""
    pass


def _echo_summary(event_id: str, summary) -> None:
    click.echo(f"RSVPs for {event_id}")
    click.echo(f"  Yes:   {summary.yes}")
    click.echo(f"  Maybe: {summary.maybe}")
    click.echo(f"  No:    {summary.no}")
    click.echo(f"  Total attending (with guests): {summary.total_attending}")


@rsvp.command("set")
@click.argument("event_id")
@click.argument("person_id")
@click.argument("status", type=click.Choice(["yes", "no", "maybe"]))
@click.option("--guests", "-g", type=click.IntRange(min=0), default=0, help="Guests besides the person")
def rsvp_set(event_id, person_id, status, guests):
    """Record PERSON_ID's answer for EVENT_ID (replaces any earlier answer)."""
    config = load_config()
    try:
        summary = workflows.record_rsvp(config, event_id, person_id, status, guests)
    except (DataStoreError, InvalidRecordError) as e:
        _fail(e)
    _echo_summary(event_id, summary)


@rsvp.command("summary")
@click.argument("event_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def rsvp_summary(event_id, as_json):
    """Show RSVP counts for an event."""
    config = load_config()
    try:
        summary = workflows.rsvp_summary(config, event_id)
    except (DataStoreError, InvalidRecordError) as e:
        _fail(e)
    if as_json:
        click.echo(
            json.dumps(
                {
                    "yes": summary.yes,
                    "no": summary.no,
                    "maybe": summary.maybe,
                    "total_attending": summary.total_attending,
                },
                indent=2,
            )
        )
        return
    _echo_summary(event_id, summary)


@main.group()
def task():
    """Recurring follow-up tasks."""
    pass


@task.command("complete")
@click.argument("task_id")
def task_complete(task_id):
    """Complete a task, scheduling the next one if it repeats."""
    config = load_config()
    try:
        completed, following = workflows.finish_task(config, task_id)
    except (DataStoreError, InvalidRecordError) as e:
        _fail(e)
    click.echo(f"✓ Completed: {completed.title}")
    if following:
        click.echo(f"  Next ({following.recurrence.label.lower()}): due {following.due_date.isoformat()}")


@task.command("chain")
@click.argument("task_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def task_chain(task_id, as_json):
    """Show every instance of a recurring task."""
    config = load_config()
    try:
        chain = workflows.task_chain(config, task_id)
    except (DataStoreError, InvalidRecordError) as e:
        _fail(e)
    if as_json:
        click.echo(json.dumps({"root_id": chain.root_id, "instances": [t.to_record() for t in chain.instances]}, indent=2))
        return
    click.echo(f"Chain {chain.root_id} ({chain.completed_count}/{len(chain)} done)")
    for t in chain.instances:
        mark = "x" if t.completed else " "
        click.echo(f"  [{mark}] {t.due_date.isoformat()}  {t.title}")


if __name__ == "__main__":
    main()
