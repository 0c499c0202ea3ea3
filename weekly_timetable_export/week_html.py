"""
Parse a weekly timetable page (saved from the browser or fetched elsewhere)
into a dated Calendar.

The page never states the date of a session directly. It is rebuilt from
the layout:
- Each week table (``div.calendar > table.week_table``) is one week. Its
  ``th.week_number`` reads e.g. "KW 6" and its ``td.week_header`` reads the
  Monday of that week without a year, e.g. "Mo 3.2.".
- The year comes from the selected ``<option>`` of the year dropdown and is
  only valid for the first week; a later week numbered 1 means the timetable
  crossed into the next year.
- Inside a data row, every cell whose class starts with
  ``week_separatorcell`` starts the next day column. Cells classed
  ``week_block`` are sessions; everything else is padding.
- A session cell holds one link whose lines (split by ``<br>``) are
  "09:00&nbsp;-10:30" and the title, plus up to two ``span.resource``
  elements. The second one is the room.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import List, Optional

from bs4 import BeautifulSoup, Comment, Tag  # type: ignore[import]

from .models import Calendar, Event

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageSelectors:
    """CSS selectors and class markers describing the timetable page."""

    title: str = "title"
    start_year: str = "select[name=year] > option[selected]"
    weeks: str = "div.calendar > table.week_table"
    week_number: str = "th.week_number"
    start_date: str = "tr > td.week_header > nobr"
    rows: str = "tr"
    columns: str = "td"
    resource: str = "span.resource"
    anchor: str = "a"
    separator_class: str = "week_separatorcell"
    block_class: str = "week_block"


DEFAULT_SELECTORS = PageSelectors()


class TimetableParseError(ValueError):
    """The page does not have the expected timetable shape."""

    def __init__(self, message: str, field: str, week: int | None = None):
        super().__init__(message)
        self.field = field
        self.week = week


_UNSIGNED_RE = re.compile(r"[0-9]+")
_SIGNED_RE = re.compile(r"-?[0-9]+")
_TIME_RANGE_RE = re.compile(r"^\s*(\d{1,2}:\d{2})\xa0-(\d{1,2}:\d{2})\s*$")


# ──────────────────────────────────────────────────────────────────
#  Small field parsers
# ──────────────────────────────────────────────────────────────────

def _where(week: int | None) -> str:
    return f" in week block {week}" if week is not None else ""


def _parse_unsigned(text: str, field: str, week: int | None = None) -> int:
    if not _UNSIGNED_RE.fullmatch(text):
        raise TimetableParseError(
            f"{field} is not a number{_where(week)}: {text!r}", field, week
        )
    return int(text)


def _parse_clock(text: str, field: str) -> time:
    try:
        return datetime.strptime(text, "%H:%M").time()
    except ValueError:
        raise TimetableParseError(
            f"{field} time is not HH:MM: {text!r}", field
        ) from None


def _parse_week_number(label: str, week: int) -> int:
    """'KW 6' -> 6"""
    parts = label.split()
    if len(parts) < 2:
        raise TimetableParseError(
            f"week number label has no number in week block {week}: {label!r}",
            "week_number",
            week,
        )
    return _parse_unsigned(parts[1], "week_number", week)


def _parse_day_month(label: str, week: int) -> tuple[int, int]:
    """'Mo 3.2.' -> (3, 2). Anything after the month is ignored."""
    parts = label.split()
    if len(parts) < 2:
        raise TimetableParseError(
            f"week header has no date in week block {week}: {label!r}",
            "start_date",
            week,
        )
    day_month = parts[1].rstrip(".").split(".")
    if len(day_month) < 2:
        raise TimetableParseError(
            f"week header date is not D.M.{_where(week)}: {label!r}",
            "start_date",
            week,
        )
    day = _parse_unsigned(day_month[0], "start_day", week)
    month = _parse_unsigned(day_month[1], "start_month", week)
    return day, month


def _anchor_lines(anchor: Tag) -> List[str]:
    """Text of a link split at its <br> elements (entities already decoded)."""
    lines = [""]
    for node in anchor.children:
        if isinstance(node, Comment):
            continue
        if isinstance(node, Tag):
            if node.name == "br":
                lines.append("")
            else:
                lines[-1] += node.get_text()
        else:
            lines[-1] += str(node)
    return lines


# ──────────────────────────────────────────────────────────────────
#  Session cell
# ──────────────────────────────────────────────────────────────────

def parse_event_cell(
    cell: Tag,
    day: date,
    selectors: PageSelectors = DEFAULT_SELECTORS,
) -> Event:
    """
    Build the Event for one ``week_block`` cell already assigned to ``day``.

    Raises TimetableParseError when the link, the time range or the title is
    missing or malformed.
    """
    anchor = cell.select_one(selectors.anchor)
    if anchor is None:
        raise TimetableParseError("session cell has no link", "anchor")

    lines = _anchor_lines(anchor)
    if len(lines) < 2:
        raise TimetableParseError(
            f"session link has no title line: {anchor.get_text()!r}", "title"
        )

    # "09:00\xa0-10:30": the hyphen must follow a non-breaking space
    m = _TIME_RANGE_RE.match(lines[0])
    if not m:
        raise TimetableParseError(
            f"session time range is not HH:MM -HH:MM: {lines[0]!r}", "time_range"
        )
    start = _parse_clock(m.group(1), "start")
    end = _parse_clock(m.group(2), "end")

    title = lines[1].strip()
    if not title:
        raise TimetableParseError("session title is empty", "title")

    # The first resource is not a room
    resources = cell.select(selectors.resource)
    location = resources[1].get_text().strip() if len(resources) > 1 else None

    return Event(date=day, start=start, end=end, title=title, location=location)


# ──────────────────────────────────────────────────────────────────
#  Whole page
# ──────────────────────────────────────────────────────────────────

def _week_blocks(soup: BeautifulSoup, selectors: PageSelectors) -> List[Tag]:
    """
    One block per <tbody> of each week table. html.parser does not insert
    a <tbody> when the page omits it; the table itself is the block then.
    """
    blocks: List[Tag] = []
    for table in soup.select(selectors.weeks):
        bodies = table.find_all("tbody", recursive=False)
        blocks.extend(bodies if bodies else [table])
    return blocks


def _load_soup(
    html: str | BeautifulSoup | None, html_path: str | Path | None
) -> BeautifulSoup:
    if isinstance(html, BeautifulSoup):
        return html
    if html is None:
        if html_path is None:
            raise ValueError("Provide either html_path or html.")
        html = Path(html_path).read_text(encoding="utf-8", errors="ignore")
    return BeautifulSoup(html, "html.parser")


def _select_text(scope: Tag, selector: str, field: str, week: int | None = None) -> str:
    el = scope.select_one(selector)
    if el is None:
        raise TimetableParseError(
            f"missing {field} ({selector}){_where(week)}", field, week
        )
    return el.get_text()


def parse_calendar_html(
    html: str | BeautifulSoup | None = None,
    html_path: str | Path | None = None,
    selectors: PageSelectors = DEFAULT_SELECTORS,
) -> Calendar:
    """
    Parse a timetable page into a Calendar.

    :param html: Raw HTML text or an already parsed BeautifulSoup document.
    :param html_path: Path to a saved HTML file. Used when ``html`` is omitted.
    :param selectors: Page selectors; the defaults match the timetable site.
    :returns: Calendar with events in page order.
    :raises TimetableParseError: on the first missing or malformed field.
        No partial calendar is returned.
    """
    soup = _load_soup(html, html_path)

    name = _select_text(soup, selectors.title, "title").strip()

    year_text = _select_text(soup, selectors.start_year, "start_year").strip()
    if not _SIGNED_RE.fullmatch(year_text):
        raise TimetableParseError(
            f"selected year is not a number: {year_text!r}", "start_year"
        )
    year = int(year_text)

    events: List[Event] = []
    for idx, week in enumerate(_week_blocks(soup, selectors)):
        week_number = _parse_week_number(
            _select_text(week, selectors.week_number, "week_number", idx), idx
        )
        # Week 1 after the first block: the schedule went past new year
        if week_number == 1 and idx > 0:
            year += 1

        day, month = _parse_day_month(
            _select_text(week, selectors.start_date, "start_date", idx), idx
        )
        try:
            monday = date(year, month, day)
        except ValueError:
            raise TimetableParseError(
                f"week header date {day}.{month}.{year} is not a valid date"
                f"{_where(idx)}",
                "start_date",
                idx,
            ) from None
        log.debug("week %d: number %d, starts %s", idx, week_number, monday)

        for row_idx, row in enumerate(week.select(selectors.rows)[1:], start=1):
            day_index = 0
            for col_idx, column in enumerate(row.select(selectors.columns)):
                classes = column.get("class") or []
                if not classes:
                    raise TimetableParseError(
                        f"cell {col_idx} in row {row_idx} has no CSS class"
                        f"{_where(idx)}",
                        "cell_class",
                        idx,
                    )
                cls = classes[0]

                if cls.startswith(selectors.separator_class):
                    day_index += 1
                if cls != selectors.block_class:
                    continue

                try:
                    session_day = monday + timedelta(days=day_index)
                except OverflowError:
                    raise TimetableParseError(
                        f"{monday} + {day_index} days is out of range"
                        f"{_where(idx)}",
                        "start_date",
                        idx,
                    ) from None
                try:
                    event = parse_event_cell(column, session_day, selectors)
                except TimetableParseError as e:
                    raise TimetableParseError(
                        f"week block {idx}, row {row_idx}, cell {col_idx}: {e}",
                        e.field,
                        idx,
                    ) from e
                log.debug("event %s %s %s", event.date, event.start, event.title)
                events.append(event)

    log.info("Parsed calendar %r with %d event(s)", name, len(events))
    return Calendar(name=name, events=events)
