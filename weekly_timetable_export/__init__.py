"""
Convert a weekly timetable HTML page into dated events and export them to
ICS, JSON, or CSV.
"""
from __future__ import annotations

__version__ = "0.1.0"

from .models import Calendar, Event
from .week_html import (
    DEFAULT_SELECTORS,
    PageSelectors,
    TimetableParseError,
    parse_calendar_html,
    parse_event_cell,
)

__all__ = [
    "Calendar",
    "Event",
    "DEFAULT_SELECTORS",
    "PageSelectors",
    "TimetableParseError",
    "parse_calendar_html",
    "parse_event_cell",
]
