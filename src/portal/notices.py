"""User-facing notices and the shared notifications feed.

``Notifier`` collects the transient success/error banners that actions
produce. ``NotificationCenter`` manages the persisted ``notifications``
collection (the bell menu).
"""

from dataclasses import dataclass
from typing import Literal

from src.portal.logging import get_logger
from src.portal.models import Notification
from src.portal.storage import DocumentStore

log = get_logger(__name__)

NoticeType = Literal["success", "error", "warning", "info"]


@dataclass(frozen=True)
class Notice:
    type: NoticeType
    title: str
    message: str


class Notifier:
    """Ordered list of notices raised during a session."""

    def __init__(self) -> None:
        self._notices: list[Notice] = []

    def add(self, type: NoticeType, title: str, message: str) -> Notice:
        notice = Notice(type=type, title=title, message=message)
        self._notices.append(notice)
        level = "error" if type == "error" else "warning" if type == "warning" else "info"
        getattr(log, level)("notice", notice_type=type, title=title, message=message)
        return notice

    def success(self, title: str, message: str) -> Notice:
        return self.add("success", title, message)

    def error(self, title: str, message: str) -> Notice:
        return self.add("error", title, message)

    def warning(self, title: str, message: str) -> Notice:
        return self.add("warning", title, message)

    @property
    def notices(self) -> list[Notice]:
        return list(self._notices)

    def latest(self) -> Notice | None:
        return self._notices[-1] if self._notices else None

    def clear(self) -> None:
        self._notices.clear()


class NotificationCenter:
    """Read/unread state of the shared notifications feed."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def feed(self) -> list[Notification]:
        return [Notification.model_validate(n) for n in self.store.get_notifications()]

    def unread_count(self) -> int:
        return sum(1 for n in self.feed() if not n.read)

    def mark_all_read(self) -> list[Notification]:
        """Mark every notification read and save the feed."""
        notifications = self.feed()
        for n in notifications:
            n.read = True
        self.store.save_notifications([n.model_dump() for n in notifications])
        log.info("notifications_marked_read", count=len(notifications))
        return notifications
