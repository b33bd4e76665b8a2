"""Cyclical student progress.

Works like an odometer: ``totalCompleted`` only ever moves by one per toggle,
``cycles`` counts full laps of ``daysToComplete`` and the percentage resets to
0 at each lap boundary.
"""

import math

from src.portal.errors import ValidationError
from src.portal.models import Progress, Student


def validate_days_to_complete(value) -> int:
    """Coerce a cycle length to int, rejecting anything below 1."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"Days to complete must be a whole number, got {value!r}")
    try:
        days = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"Days to complete must be a whole number, got {value!r}"
        ) from e
    if days <= 0:
        raise ValidationError(f"Days to complete must be positive, got {days}")
    return days


def compute_progress(student: Student) -> Progress:
    days = student.days_to_complete
    # stored counters can be hand-edited; a negative total reads as 0
    total = max(0, student.total_completed)

    if days <= 0:
        cycles = current = percentage = 0
    else:
        cycles, current = divmod(total, days)
        # half-up rounding, 2.5 -> 3
        percentage = min(100, max(0, math.floor(100 * current / days + 0.5)))

    return Progress(
        name=student.name,
        days_to_complete=days,
        total_completed=total,
        cycles=cycles,
        current_cycle_completed=current,
        percentage=percentage,
    )
