"""StudentRoster - the students collection and its progress view."""

from src.portal.errors import NotFoundError, ValidationError
from src.portal.logging import get_logger
from src.portal.models import Progress, Student
from src.portal.progress import compute_progress, validate_days_to_complete
from src.portal.session import SessionContext
from src.portal.storage import DocumentStore

log = get_logger(__name__)


class StudentRoster:
    def __init__(
        self,
        store: DocumentStore,
        session: SessionContext,
        default_days_to_complete: int = 30,
    ) -> None:
        self.store = store
        self.session = session
        self.default_days_to_complete = validate_days_to_complete(default_days_to_complete)

    def students(self) -> list[Student]:
        return [Student.model_validate(s) for s in self.store.get_students()]

    def progress(self) -> list[Progress]:
        return [compute_progress(s) for s in self.students()]

    def add(self, name: str) -> Student:
        """Add a student with the default cycle length.

        Raises:
            ValidationError: Empty name, or the name exists (case-insensitive).
        """
        name = name.strip()
        if not name:
            raise ValidationError("Student name is required")

        students = self.store.get_students()
        if any(s.get("name", "").lower() == name.lower() for s in students):
            self.session.notifier.error("Error", "A student with this name already exists.")
            raise ValidationError(f"Student {name!r} already exists")

        student = Student(name=name, days_to_complete=self.default_days_to_complete)
        students.append(student.model_dump(by_alias=True))
        self.store.save_students(students)
        self.session.notifier.success("Student Added", f"{name} has been added.")
        log.info("student_added", name=name)
        return student

    def remove(self, name: str) -> None:
        students = self.store.get_students()
        remaining = [s for s in students if s.get("name") != name]
        if len(remaining) == len(students):
            raise NotFoundError(f"No student named {name!r}")
        self.store.save_students(remaining)
        self.session.notifier.success("Removed", f"{name} has been removed.")
        log.info("student_removed", name=name)

    def set_days_to_complete(self, name: str, days) -> Student:
        """Change a student's cycle length; non-positive values are rejected."""
        days = validate_days_to_complete(days)
        students = self.store.get_students()
        for record in students:
            if record.get("name") == name:
                record["daysToComplete"] = days
                break
        else:
            raise NotFoundError(f"No student named {name!r}")

        self.store.save_students(students)
        self.session.notifier.success("Updated", f"Days to complete for {name} updated.")
        log.info("days_to_complete_updated", name=name, days=days)
        return Student.model_validate(record)
