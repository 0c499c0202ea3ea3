"""
Calendar and event values produced by the week table parser.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Dict, Optional, Tuple


def _format_time(t: time) -> str:
    return f"{t.hour:02d}:{t.minute:02d}"


@dataclass(frozen=True)
class Event:
    """One timetabled session on a concrete day."""

    date: date
    start: time
    end: time
    title: str
    location: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Render as plain strings: ISO date and zero-padded HH:MM times."""
        return {
            "date": self.date.isoformat(),
            "start": _format_time(self.start),
            "end": _format_time(self.end),
            "title": self.title,
            "location": self.location,
        }


@dataclass(frozen=True)
class Calendar:
    """
    A named, ordered list of events.

    Events keep the order they were read from the page (week by week, row by
    row). Weeks follow each other by date, but rows are time slots, so a later
    row of the same week can hold an earlier weekday. They are not re-sorted.
    """

    name: str
    events: Tuple[Event, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any iterable but always store a tuple
        object.__setattr__(self, "events", tuple(self.events))

    def __len__(self) -> int:
        return len(self.events)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "events": [e.to_dict() for e in self.events],
        }
