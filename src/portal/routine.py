"""RoutineStore - the weekly recurring timetable.

Maps each weekday to an ordered list of slots. The store never mutates in
place: every edit deep-copies the current routine and returns a new store,
so anything still holding the old value keeps a consistent snapshot.
"""

import secrets
import string
import time
from typing import Any, Iterable

import pydantic

from src.portal.errors import ValidationError
from src.portal.logging import get_logger
from src.portal.models import WEEKDAYS, Routine, Slot, Student

log = get_logger(__name__)

# Slot fields an editor may change; the id is fixed at creation
EDITABLE_FIELDS: frozenset[str] = frozenset({"start", "end", "subject", "student"})

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_slot_id() -> str:
    """Millisecond timestamp plus a random suffix, e.g. ``1709546400000k3j9x0a``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"{int(time.time() * 1000)}{suffix}"


def new_slot(students: Iterable[Student] = (), **fields: str) -> Slot:
    """Default slot offered by the editor's "Add Slot" action.

    ``fields`` override the defaults (start, end, subject, student). The
    first student, if any, is assigned unless ``student`` is given.

    Raises:
        ValidationError: If an override is not a valid slot value.
    """
    first = next(iter(students), None)
    values = {
        "start": "09:00",
        "end": "10:00",
        "subject": "New Subject",
        "student": first.name if first else "",
    }
    values.update(fields)
    try:
        return Slot(id=new_slot_id(), **values)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid slot: {_describe(e)}") from e


def _describe(error: pydantic.ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in error.errors()
    )


def _check_day(day: str) -> None:
    if day not in WEEKDAYS:
        raise ValidationError(f"Unknown weekday {day!r}. Valid: {list(WEEKDAYS)}")


class RoutineStore:
    """Immutable-by-convention wrapper around a Routine."""

    def __init__(self, routine: Routine | None = None) -> None:
        self._routine = routine if routine is not None else Routine()

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "RoutineStore":
        try:
            return cls(Routine.model_validate(data or {"days": {}}))
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid routine document: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        return self._routine.model_dump()

    @property
    def routine(self) -> Routine:
        """A deep copy of the underlying routine."""
        return self._routine.model_copy(deep=True)

    def slots_for(self, day: str) -> list[Slot]:
        """Slots scheduled on ``day``; an absent day is an empty list."""
        _check_day(day)
        return [s.model_copy() for s in self._routine.days.get(day, [])]

    def add_slot(self, day: str, slot: Slot) -> "RoutineStore":
        """Append ``slot`` to ``day``. Id uniqueness is the caller's job."""
        _check_day(day)
        routine = self.routine
        routine.days.setdefault(day, []).append(slot.model_copy())
        log.debug("slot_added", day=day, slot_id=slot.id)
        return RoutineStore(routine)

    def update_slot_field(
        self, day: str, slot_id: str, field: str, value: str
    ) -> "RoutineStore":
        """Set one field on the slot with ``slot_id``.

        A missing id is a no-op: the returned store equals this one and a
        warning is logged. Times must be "HH:MM"; anything else raises
        ValidationError and leaves this store untouched.
        """
        _check_day(day)
        if field not in EDITABLE_FIELDS:
            raise ValidationError(
                f"Cannot edit slot field {field!r}. Editable: {sorted(EDITABLE_FIELDS)}"
            )
        routine = self.routine
        for slot in routine.days.get(day, []):
            if slot.id == slot_id:
                try:
                    setattr(slot, field, value)
                except pydantic.ValidationError as e:
                    raise ValidationError(
                        f"Invalid value for slot {field}: {value!r}"
                    ) from e
                return RoutineStore(routine)

        log.warning("slot_not_found", day=day, slot_id=slot_id, field=field)
        return RoutineStore(routine)

    def remove_slot(self, day: str, slot_id: str) -> "RoutineStore":
        """Drop every slot with ``slot_id`` from ``day``; absent ids are ignored."""
        _check_day(day)
        routine = self.routine
        if day in routine.days:
            routine.days[day] = [s for s in routine.days[day] if s.id != slot_id]
        return RoutineStore(routine)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RoutineStore):
            return NotImplemented
        return self._routine == other._routine

    def __repr__(self) -> str:
        counts = {day: len(slots) for day, slots in self._routine.days.items()}
        return f"RoutineStore({counts})"
