"""
Command-line interface: parse a saved timetable page and export to file.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .export import export
from .models import Calendar
from .week_html import TimetableParseError, parse_calendar_html


def _read_calendar(html_arg: str) -> Calendar:
    if html_arg == "-":
        return parse_calendar_html(html=sys.stdin.read())
    return parse_calendar_html(html_path=html_arg)


def _print_events(calendar: Calendar) -> None:
    print(calendar.name)
    print("-" * 60)
    for e in calendar.events:
        line = f"{e.date.isoformat()} {e.start:%H:%M}-{e.end:%H:%M} {e.title}"
        if e.location:
            line += f" @ {e.location}"
        print(line)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Export a weekly timetable HTML page to ICS / CSV / JSON.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "html",
        metavar="HTML_PATH",
        help="Timetable page saved from the browser, or - to read HTML from stdin.",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="timetable",
        help="Output path (without extension). Default: timetable",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["ics", "csv", "json"],
        default="ics",
        help="Export format. Default: ics",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the parsed events (date, time, title, room) and exit without writing a file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log each parsed week and event.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        calendar = _read_calendar(args.html)
    except (TimetableParseError, OSError) as e:
        print(f"Error parsing timetable HTML: {e}", file=sys.stderr)
        return 1

    if args.list:
        _print_events(calendar)
        return 0

    ext = {"ics": ".ics", "csv": ".csv", "json": ".json"}[args.format]
    out_path = Path(args.output).with_suffix(ext) if Path(args.output).suffix else Path(args.output + ext)
    try:
        export(calendar, out_path, args.format)
    except OSError as e:
        print(f"Error writing {out_path}: {e}", file=sys.stderr)
        return 1
    print(f"Exported {len(calendar.events)} event(s) to {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
