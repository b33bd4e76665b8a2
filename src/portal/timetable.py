"""TimetableService - routine editing, month views and completion toggles.

Holds the last loaded routine and completion map as local state. Toggles are
applied to local state first, then written to the store (completion map, then
students). If either write fails, the previous completion map is written back
where possible and local state is reloaded from the store.
"""

from datetime import date

from src.portal.completion import toggle_completion
from src.portal.errors import PortalError, StorageError
from src.portal.logging import get_logger
from src.portal.models import CalendarCell
from src.portal.projector import CalendarProjector, date_key
from src.portal.routine import RoutineStore
from src.portal.session import SessionContext
from src.portal.storage import DocumentStore

log = get_logger(__name__)


class TimetableService:
    def __init__(
        self,
        store: DocumentStore,
        session: SessionContext,
        projector: CalendarProjector | None = None,
    ) -> None:
        self.store = store
        self.session = session
        self.projector = projector or CalendarProjector()
        self.routine = RoutineStore()
        self.completion: dict[str, dict[str, bool]] = {}
        self.load_error: str | None = None

    def load(self) -> bool:
        """Refresh routine and completion map from the store.

        A failed load (store unreachable or a malformed document) leaves the
        previous state in place, records ``load_error`` and posts an error
        notice instead of raising.
        """
        try:
            routine = RoutineStore.from_dict(self.store.get_routine())
            completion = self.store.get_completed_tasks()
        except PortalError as e:
            self.load_error = str(e)
            log.error("timetable_load_failed", error=str(e))
            self.session.notifier.error("Load Failed", "Could not load timetable data.")
            return False
        self.routine = routine
        self.completion = completion
        self.load_error = None
        return True

    def month_view(self, year: int, month: int) -> list[CalendarCell]:
        return self.projector.project(self.routine, self.completion, year, month)

    def month_weeks(self, year: int, month: int) -> list[list[CalendarCell]]:
        """Month view as Sunday-first rows of seven, for grid rendering."""
        return self.projector.weeks(self.routine, self.completion, year, month)

    def day_view(self, d: date) -> CalendarCell:
        return self.projector.day_view(self.routine, self.completion, d)

    def save_routine(self, routine: RoutineStore) -> None:
        """Persist an edited routine and reload."""
        self.session.require_role("admin", "teacher")
        try:
            self.store.save_routine(routine.to_dict())
        except StorageError:
            self.session.notifier.error("Save Failed", "Could not save the routine.")
            self.load()
            raise
        self.session.notifier.success("Routine Saved", "The timetable has been updated.")
        self.load()

    def toggle_task(self, d: date, slot_id: str, student_name: str) -> bool:
        """Flip completion of ``slot_id`` on ``d`` and move the student's counter.

        Returns the new completion state.

        Raises:
            StorageError: If either save fails. Local state is reloaded first.
        """
        key = date_key(d)
        previous = self.completion

        try:
            students = self.store.get_students()
            result = toggle_completion(previous, key, slot_id, student_name, students)

            # Optimistic local update
            self.completion = result.completion
            self.store.save_completed_tasks(result.completion)
            if result.student_found:
                try:
                    self.store.save_students(result.students)
                except StorageError:
                    self._restore_completion(previous)
                    raise
        except StorageError as e:
            log.error(
                "toggle_failed", date_key=key, slot_id=slot_id, error=str(e)
            )
            # last known-good snapshot, in case the reload fails too
            self.completion = previous
            self.session.notifier.error("Update Failed", "Could not save task update.")
            self.load()
            raise

        state = "complete" if result.completed else "incomplete"
        if result.student_found:
            self.session.notifier.success(
                "Task Updated", f"Task for {student_name} marked as {state}."
            )
        else:
            self.session.notifier.warning(
                "Student Not Found",
                f"Task marked as {state}, but no student named {student_name!r} was found.",
            )
        log.info(
            "task_toggled",
            date_key=key,
            slot_id=slot_id,
            student=student_name,
            completed=result.completed,
        )
        return result.completed

    def _restore_completion(self, previous: dict[str, dict[str, bool]]) -> None:
        try:
            self.store.save_completed_tasks(previous)
            log.info("completion_restored")
        except StorageError as e:
            log.error("completion_restore_failed", error=str(e))
