"""FeedbackService - students send feedback to teachers."""

import time
from datetime import datetime

from src.portal.errors import StorageError, ValidationError
from src.portal.logging import get_logger
from src.portal.models import Feedback, User
from src.portal.session import SessionContext
from src.portal.storage import DocumentStore

log = get_logger(__name__)


class FeedbackService:
    def __init__(self, store: DocumentStore, session: SessionContext) -> None:
        self.store = store
        self.session = session

    def teachers(self) -> list[User]:
        return [
            User.model_validate(u)
            for u in self.store.get_users()
            if u.get("role") == "teacher"
        ]

    def visible(self) -> list[Feedback]:
        """All feedback, except that teachers only see feedback addressed to them."""
        entries = [Feedback.model_validate(f) for f in self.store.get_feedback()]
        user = self.session.user
        if user and user.get("role") == "teacher":
            entries = [f for f in entries if f.teacher == user.get("name")]
        return entries

    def submit(self, teacher: str, subject: str, type: str, message: str) -> Feedback:
        """Prepend a new entry, newest first."""
        if not all(v and v.strip() for v in (teacher, subject, type, message)):
            self.session.notifier.warning("Incomplete Form", "Please fill out all fields.")
            raise ValidationError("Teacher, subject, type and message are required")

        now = datetime.now()
        user = self.session.user or {}
        entry = Feedback(
            id=int(time.time() * 1000),
            student=user.get("name") or "Anonymous",
            teacher=teacher,
            subject=subject,
            type=type,
            message=message,
            date=now.strftime("%Y-%m-%d"),
            time=now.strftime("%H:%M"),
        )

        try:
            feedback = self.store.get_feedback()
            feedback.insert(0, entry.model_dump())
            self.store.save_feedback(feedback)
        except StorageError:
            self.session.notifier.error("Submit Failed", "Could not submit feedback.")
            raise

        self.session.notifier.success("Feedback Submitted", "Thank you for your feedback!")
        log.info("feedback_submitted", teacher=teacher, subject=subject, type=type)
        return entry
