"""Teacher/student portal core.

Weekly routine editing, the month calendar derived from it, per-date
completion tracking and cyclical student progress, plus the account,
feedback and syllabus services around them. All state lives in one JSON
document behind a DocumentStore.
"""

from src.portal.completion import ToggleResult, toggle_completion
from src.portal.models import WEEKDAYS, CalendarCell, Slot, Student
from src.portal.progress import compute_progress, validate_days_to_complete
from src.portal.projector import CalendarProjector, date_key
from src.portal.routine import RoutineStore, new_slot_id
from src.portal.storage import DocumentStore, FileDocumentStore, HttpDocumentStore

__all__ = [
    "WEEKDAYS",
    "CalendarCell",
    "CalendarProjector",
    "DocumentStore",
    "FileDocumentStore",
    "HttpDocumentStore",
    "RoutineStore",
    "Slot",
    "Student",
    "ToggleResult",
    "compute_progress",
    "date_key",
    "new_slot_id",
    "toggle_completion",
    "validate_days_to_complete",
]
