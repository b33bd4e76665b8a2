"""Per-date completion toggling.

The completion map is a sparse overlay: ``{"YYYY-MM-DD": {slot_id: bool}}``.
Flipping a slot also moves the assigned student's lifetime counter by one,
so the two documents have to change together.
"""

import copy
from dataclasses import dataclass
from typing import Any

from src.portal.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ToggleResult:
    completion: dict[str, dict[str, bool]]
    students: list[dict[str, Any]]
    completed: bool  # state after the toggle
    student_found: bool


def toggle_completion(
    completion: dict[str, dict[str, bool]],
    date_key: str,
    slot_id: str,
    student_name: str,
    students: list[dict[str, Any]],
) -> ToggleResult:
    """Flip one slot on one date and adjust the student's counter.

    Inputs are not modified; the result holds new copies. When no student
    record matches ``student_name`` the flip still applies and the counter
    change is skipped. The counter is floored at 0.
    """
    new_completion = copy.deepcopy(completion)
    new_students = copy.deepcopy(students)

    day = new_completion.setdefault(date_key, {})
    was_completed = bool(day.get(slot_id))
    day[slot_id] = not was_completed

    delta = -1 if was_completed else 1
    for student in new_students:
        if student.get("name") == student_name:
            # never below zero, even if the counter was edited out of step
            total = int(student.get("totalCompleted", 0))
            student["totalCompleted"] = max(0, total + delta)
            found = True
            break
    else:
        found = False
        log.warning(
            "toggle_student_not_found",
            date_key=date_key,
            slot_id=slot_id,
            student=student_name,
        )

    return ToggleResult(
        completion=new_completion,
        students=new_students,
        completed=not was_completed,
        student_found=found,
    )
