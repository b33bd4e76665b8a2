"""CalendarProjector - month grid derived from the weekly routine.

The routine is keyed by weekday, completion is keyed by calendar date. A
projection joins the two for one month:

  [blank] * first_weekday  +  [day 1 .. day N]
    each day -> routine.days[weekday name]   (same slots every week)
             -> completion["YYYY-MM-DD"]     (per-date flags, sparse)

Nothing is cached; every call recomputes from its inputs.
"""

import calendar
from datetime import date
from typing import Mapping

from src.portal.errors import ValidationError
from src.portal.models import WEEKDAYS, CalendarCell, CalendarSlot
from src.portal.routine import RoutineStore

CompletionMap = Mapping[str, Mapping[str, bool]]

MONTH_NAMES: tuple[str, ...] = tuple(calendar.month_name)[1:]


def date_key(d: date) -> str:
    """Zero-padded local calendar date, e.g. ``2024-03-04``."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def weekday_name(d: date) -> str:
    # date.weekday() is Monday=0; shift to Sunday=0
    return WEEKDAYS[(d.weekday() + 1) % 7]


def month_bounds(year: int, month: int) -> tuple[int, int]:
    """Return (leading blanks in a Sunday-first week, days in month)."""
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be 1..12, got {month}")
    monday_based, days_in_month = calendar.monthrange(year, month)
    return (monday_based + 1) % 7, days_in_month


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move ``offset`` months from (year, month), rolling the year as needed."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


class CalendarProjector:
    """Projects a RoutineStore and a completion map onto a month grid."""

    def project(
        self,
        routine: RoutineStore,
        completion: CompletionMap,
        year: int,
        month: int,
    ) -> list[CalendarCell]:
        first_weekday, days_in_month = month_bounds(year, month)

        cells = [CalendarCell(empty=True) for _ in range(first_weekday)]
        for day in range(1, days_in_month + 1):
            cells.append(self.day_view(routine, completion, date(year, month, day)))
        return cells

    def day_view(
        self, routine: RoutineStore, completion: CompletionMap, d: date
    ) -> CalendarCell:
        """Single cell for ``d``: that weekday's slots with this date's flags."""
        name = weekday_name(d)
        key = date_key(d)
        done = completion.get(key) or {}
        slots = [
            CalendarSlot(**slot.model_dump(), completed=bool(done.get(slot.id)))
            for slot in routine.slots_for(name)
        ]
        return CalendarCell(day=d.day, date=d, date_key=key, weekday=name, slots=slots)

    def weeks(
        self,
        routine: RoutineStore,
        completion: CompletionMap,
        year: int,
        month: int,
    ) -> list[list[CalendarCell]]:
        """The projection split into Sunday-first rows of seven.

        The last row is padded with blanks.
        """
        cells = self.project(routine, completion, year, month)
        if len(cells) % 7:
            cells.extend(CalendarCell(empty=True) for _ in range(7 - len(cells) % 7))
        return [cells[i : i + 7] for i in range(0, len(cells), 7)]
