"""Command-line access to the portal timetable and student progress.

Works against the configured document store (PORTAL_API_URL, or
PORTAL_DATA_FILE for a local JSON document). Routine edits run as an
admin session; no login is performed.

Run with: python scripts/portal.py calendar --month 2024-03
Next:     python scripts/portal.py calendar --month 2024-03 --offset 1
JSON:     python scripts/portal.py calendar --month 2024-03 --json
Toggle:   python scripts/portal.py toggle 2024-03-04 s1 Alice
Progress: python scripts/portal.py progress
Slots:    python scripts/portal.py add-slot Monday --start 09:00 --end 10:00 --subject Math --student Alice
          python scripts/portal.py remove-slot Monday s1
Students: python scripts/portal.py add-student Alice
          python scripts/portal.py set-days Alice 45

Exit codes:
  0 = success
  1 = error (message on stderr)
"""

import argparse
import json
import os
import sys
import tempfile
from datetime import date

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.portal.config import get_config  # noqa: E402
from src.portal.errors import PortalError  # noqa: E402
from src.portal.logging import setup_logging  # noqa: E402
from src.portal.models import WEEKDAYS  # noqa: E402
from src.portal.projector import MONTH_NAMES, CalendarProjector, shift_month  # noqa: E402
from src.portal.routine import new_slot  # noqa: E402
from src.portal.session import SessionContext  # noqa: E402
from src.portal.storage import build_store  # noqa: E402
from src.portal.students import StudentRoster  # noqa: E402
from src.portal.timetable import TimetableService  # noqa: E402

_DAY_ABBR = [d[:3] for d in WEEKDAYS]


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _parse_month(value: str) -> tuple[int, int]:
    try:
        year, month = (int(part) for part in value.split("-"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got {value!r}")
    if not 1 <= month <= 12:
        raise argparse.ArgumentTypeError(f"month must be 01-12, got {value!r}")
    return year, month


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Portal timetable and progress tools.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    cal = sub.add_parser("calendar", help="Show a month of the timetable.")
    cal.add_argument(
        "--month",
        type=_parse_month,
        default=(date.today().year, date.today().month),
        help="Month as YYYY-MM (default: current month).",
    )
    cal.add_argument(
        "--offset",
        type=int,
        default=0,
        help="Months to move from --month, e.g. 1 for the next month.",
    )
    cal.add_argument("--json", action="store_true", help="Print cells as JSON.")

    toggle = sub.add_parser("toggle", help="Flip a slot's completion on a date.")
    toggle.add_argument("date", type=date.fromisoformat, help="YYYY-MM-DD")
    toggle.add_argument("slot_id")
    toggle.add_argument("student")

    sub.add_parser("progress", help="Show each student's cycle progress.")

    add_slot = sub.add_parser("add-slot", help="Add a recurring slot.")
    add_slot.add_argument("day", choices=WEEKDAYS)
    add_slot.add_argument("--start", help="HH:MM (default: 09:00)")
    add_slot.add_argument("--end", help="HH:MM (default: 10:00)")
    add_slot.add_argument("--subject", help="Default: New Subject")
    add_slot.add_argument("--student", help="Default: the first student on the roster")

    remove_slot = sub.add_parser("remove-slot", help="Remove a recurring slot.")
    remove_slot.add_argument("day", choices=WEEKDAYS)
    remove_slot.add_argument("slot_id")

    add_student = sub.add_parser("add-student", help="Add a student.")
    add_student.add_argument("name")

    set_days = sub.add_parser("set-days", help="Set a student's cycle length.")
    set_days.add_argument("name")
    set_days.add_argument("days", type=int)

    return parser.parse_args(argv)


def _print_calendar(weeks, year: int, month: int) -> None:
    print(f"{MONTH_NAMES[month - 1]} {year}")
    print(" ".join(f"{d:>5}" for d in _DAY_ABBR))
    for week in weeks:
        row = []
        for cell in week:
            if cell.empty:
                row.append(" " * 5)
            else:
                done = sum(1 for s in cell.slots if s.completed)
                mark = f"{done}/{len(cell.slots)}" if cell.slots else ""
                row.append(f"{cell.day:>2}{mark:>3}")
        print(" ".join(row).rstrip())


def _run(args: argparse.Namespace, config, state_dir: str) -> int:
    store = build_store(config)
    session = SessionContext(state_dir=state_dir)
    session.start({"username": "cli", "name": "CLI", "role": "admin"})
    timetable = TimetableService(store, session, CalendarProjector())
    roster = StudentRoster(store, session, config.default_days_to_complete)

    try:
        if args.command == "calendar":
            year, month = shift_month(*args.month, args.offset)
            if not timetable.load():
                _log(f"Error: {timetable.load_error}")
                return 1
            if args.json:
                cells = timetable.month_view(year, month)
                print(json.dumps([c.model_dump(mode="json") for c in cells], indent=2))
            else:
                _print_calendar(timetable.month_weeks(year, month), year, month)

        elif args.command == "toggle":
            if not timetable.load():
                _log(f"Error: {timetable.load_error}")
                return 1
            completed = timetable.toggle_task(args.date, args.slot_id, args.student)
            print(f"{args.date} {args.slot_id}: {'done' if completed else 'not done'}")

        elif args.command == "progress":
            for p in roster.progress():
                print(
                    f"{p.name:<20} {p.current_cycle_completed:>3}/{p.days_to_complete:<3} "
                    f"{p.percentage:>3}%  cycles={p.cycles}"
                )

        elif args.command in ("add-slot", "remove-slot"):
            if not timetable.load():
                _log(f"Error: {timetable.load_error}")
                return 1
            if args.command == "add-slot":
                overrides = {
                    field: getattr(args, field)
                    for field in ("start", "end", "subject", "student")
                    if getattr(args, field) is not None
                }
                slot = new_slot(roster.students(), **overrides)
                timetable.save_routine(timetable.routine.add_slot(args.day, slot))
                print(slot.id)
            else:
                timetable.save_routine(timetable.routine.remove_slot(args.day, args.slot_id))

        elif args.command == "add-student":
            roster.add(args.name)

        elif args.command == "set-days":
            roster.set_days_to_complete(args.name, args.days)

    except PortalError as e:
        _log(f"Error: {e}")
        return 1
    finally:
        for notice in session.notifier.notices:
            _log(f"[{notice.type}] {notice.title}: {notice.message}")
        session.end()

    return 0


def main(argv=None) -> int:
    args = _parse_args(argv)
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    # Scratch state dir: the CLI never resumes or persists a login
    with tempfile.TemporaryDirectory(prefix="portal-cli-") as state_dir:
        return _run(args, config, state_dir)


if __name__ == "__main__":
    sys.exit(main())
