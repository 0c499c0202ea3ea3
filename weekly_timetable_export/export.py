"""
Export a parsed Calendar to ICS, CSV, and JSON.
"""
from __future__ import annotations

import csv
import json
import logging
from datetime import datetime, timedelta
from pathlib import Path

import icalendar
import pytz

from .models import Calendar, Event

log = logging.getLogger(__name__)

# Every exported calendar carries this one zone, whatever the page says
TZ_BERLIN = "Europe/Berlin"

# (dtstart, offset from, offset to, name, rrule)
CET_STANDARD = (
    datetime(1970, 10, 25, 3, 0, 0),
    timedelta(hours=2),
    timedelta(hours=1),
    "CET",
    {"freq": "yearly", "bymonth": 10, "byday": "-1SU"},
)
CEST_DAYLIGHT = (
    datetime(1970, 3, 29, 2, 0, 0),
    timedelta(hours=1),
    timedelta(hours=2),
    "CEST",
    {"freq": "yearly", "bymonth": 3, "byday": "-1SU"},
)

CSV_FIELDS = ["date", "start", "end", "title", "location"]


def _timezone_component() -> icalendar.Timezone:
    """VTIMEZONE for CET/CEST with yearly last-Sunday transitions."""
    tz = icalendar.Timezone()
    tz.add("tzid", TZ_BERLIN)
    for cls, (start, offset_from, offset_to, name, rrule) in (
        (icalendar.TimezoneDaylight, CEST_DAYLIGHT),
        (icalendar.TimezoneStandard, CET_STANDARD),
    ):
        sub = cls()
        sub.add("dtstart", start)
        sub.add("tzoffsetfrom", offset_from)
        sub.add("tzoffsetto", offset_to)
        sub.add("tzname", name)
        sub.add("rrule", rrule)
        tz.add_component(sub)
    return tz


def _local_stamp(event: Event, which: str) -> str:
    """'20200203T090000' for the event's date and its start or end time."""
    t = event.start if which == "start" else event.end
    return f"{event.date:%Y%m%d}T{t:%H%M}00"


def event_uid(event: Event) -> str:
    """
    Stable id: start stamp plus title with spaces as hyphens.

    Two sessions with the same title and start get the same id.
    """
    return f"{_local_stamp(event, 'start')}_{event.title.replace(' ', '-')}"


def _event_component(event: Event, tz) -> icalendar.Event:
    start = datetime.combine(event.date, event.start)
    end = datetime.combine(event.date, event.end)

    ev = icalendar.Event()
    ev.add("uid", event_uid(event))
    # DTSTAMP mirrors the start so repeated exports are byte-identical
    ev.add("dtstamp", start)
    ev.add("dtstart", tz.localize(start))
    ev.add("dtend", tz.localize(end))
    ev.add("summary", event.title)
    if event.location is not None:
        ev.add("location", event.location)
    return ev


def to_ics(calendar: Calendar) -> icalendar.Calendar:
    """Build the iCalendar document: one VTIMEZONE, then one VEVENT per event."""
    cal = icalendar.Calendar()
    cal.add("prodid", calendar.name)
    cal.add("version", "2.0")
    cal.add("x-wr-calname", calendar.name)
    cal.add("x-wr-timezone", TZ_BERLIN)
    cal.add_component(_timezone_component())

    berlin = pytz.timezone(TZ_BERLIN)
    for event in calendar.events:
        cal.add_component(_event_component(event, berlin))
    return cal


def export_ics(calendar: Calendar, out_path: str | Path) -> None:
    """Export to iCalendar (.ics) for Apple/Google/Outlook calendar."""
    Path(out_path).write_text(to_ics(calendar).to_ical().decode("utf-8"), encoding="utf-8")


def export_csv(calendar: Calendar, out_path: str | Path) -> None:
    """Export events to CSV, one row per event."""
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        w.writeheader()
        w.writerows(e.to_dict() for e in calendar.events)


def export_json(calendar: Calendar, out_path: str | Path) -> None:
    """Export to JSON: {"name": ..., "events": [...]}."""
    Path(out_path).write_text(
        json.dumps(calendar.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
    )


def export(calendar: Calendar, out_path: str | Path, fmt: str) -> None:
    """Export to the given format: ics, csv, or json."""
    fmt = fmt.lower()
    if fmt == "ics":
        export_ics(calendar, out_path)
    elif fmt == "csv":
        export_csv(calendar, out_path)
    elif fmt == "json":
        export_json(calendar, out_path)
    else:
        raise ValueError(f"Unsupported format: {fmt}. Use ics, csv, or json.")
    log.info("Wrote %d event(s) as %s to %s", len(calendar.events), fmt, out_path)
