"""SyllabusService - per-student subject checklists.

Stored under ``syllabusData[username][subject]["items"]``. Teachers can look
at a student's checklist but not change it.
"""

import time

from src.portal.errors import PermissionDeniedError, ValidationError
from src.portal.logging import get_logger
from src.portal.models import SyllabusItem
from src.portal.session import SessionContext
from src.portal.storage import DocumentStore

log = get_logger(__name__)


class SyllabusService:
    def __init__(
        self,
        store: DocumentStore,
        session: SessionContext,
        student_username: str | None = None,
    ) -> None:
        """
        Args:
            student_username: Whose syllabus to open. Defaults to the signed-in user.
        """
        self.store = store
        self.session = session
        user = session.require_user()
        self.student_username = student_username or user["username"]
        self.read_only = user.get("role") == "teacher"

    def _load(self) -> dict:
        return self.store.get_syllabus_data().get(self.student_username) or {}

    def _save(self, syllabus: dict) -> None:
        all_data = self.store.get_syllabus_data()
        all_data[self.student_username] = syllabus
        self.store.save_syllabus_data(all_data)

    def _check_writable(self) -> None:
        if self.read_only:
            raise PermissionDeniedError("Teachers have read-only access to syllabi")

    def subjects(self) -> list[str]:
        return list(self._load())

    def items(self, subject: str) -> list[SyllabusItem]:
        entry = self._load().get(subject) or {}
        return [SyllabusItem.model_validate(i) for i in entry.get("items", [])]

    def add_subject(self, subject: str) -> None:
        self._check_writable()
        subject = subject.strip()
        if not subject:
            raise ValidationError("Subject name is required")
        syllabus = self._load()
        if subject in syllabus:
            self.session.notifier.warning(
                "Subject Exists", "A syllabus for this subject already exists."
            )
            raise ValidationError(f"Subject {subject!r} already exists")
        syllabus[subject] = {"items": []}
        self._save(syllabus)
        self.session.notifier.success("Subject Added", f"Syllabus for {subject} created.")

    def add_chapter(self, subject: str, text: str) -> SyllabusItem:
        self._check_writable()
        text = text.strip()
        if not text:
            raise ValidationError("Chapter name is required")
        item = SyllabusItem(id=str(int(time.time() * 1000)), text=text)
        syllabus = self._load()
        entry = syllabus.setdefault(subject, {"items": []})
        entry.setdefault("items", []).append(item.model_dump())
        self._save(syllabus)
        log.info("chapter_added", student=self.student_username, subject=subject)
        return item

    def delete_chapter(self, subject: str, item_id: str) -> None:
        self._check_writable()
        syllabus = self._load()
        entry = syllabus.get(subject) or {"items": []}
        entry["items"] = [i for i in entry.get("items", []) if i.get("id") != item_id]
        syllabus[subject] = entry
        self._save(syllabus)
        self.session.notifier.success("Chapter Removed", "The chapter has been deleted.")

    def toggle_item(self, subject: str, item_id: str) -> bool | None:
        """Flip an item's completed flag; returns the new value, None if absent."""
        self._check_writable()
        syllabus = self._load()
        new_value = None
        for item in (syllabus.get(subject) or {}).get("items", []):
            if item.get("id") == item_id:
                item["completed"] = new_value = not item.get("completed", False)
        if new_value is None:
            log.warning("syllabus_item_not_found", subject=subject, item_id=item_id)
            return None
        self._save(syllabus)
        return new_value

    def summary(self, subject: str) -> tuple[int, int, int]:
        """(completed, total, percentage) for one subject."""
        items = self.items(subject)
        total = len(items)
        completed = sum(1 for i in items if i.completed)
        percentage = int(completed * 100 / total + 0.5) if total else 0
        return completed, total, percentage
