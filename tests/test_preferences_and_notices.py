import pytest

from src.portal.errors import ValidationError
from src.portal.notices import NotificationCenter, Notifier
from src.portal.preferences import PreferencesService


def test_preferences_default_and_update(store, session):
    session.start({"username": "alice"})
    prefs = PreferencesService(store, session)

    assert prefs.get().email_notifications is True
    updated = prefs.set("emailNotifications", False)

    assert updated.email_notifications is False
    assert store.get_user_settings("alice") == {
        "emailNotifications": False,
        "pushNotifications": True,
    }
    assert session.notifier.latest().message == "Email notifications have been disabled."


def test_preferences_reject_unknown_key(store, session):
    session.start({"username": "alice"})
    with pytest.raises(ValidationError):
        PreferencesService(store, session).set("smsNotifications", True)


def test_notifier_keeps_order():
    notifier = Notifier()
    assert notifier.latest() is None
    notifier.success("A", "first")
    notifier.error("B", "second")

    assert [n.title for n in notifier.notices] == ["A", "B"]
    assert notifier.latest().type == "error"
    notifier.clear()
    assert notifier.notices == []


def test_notification_center(store):
    store.save_notifications(
        [
            {"id": 1, "title": "Exam", "message": "Friday", "read": False},
            {"id": 2, "title": "Holiday", "message": "Monday", "read": True},
            {"id": 3, "title": "Trip", "message": "Soon"},
        ]
    )
    center = NotificationCenter(store)

    assert center.unread_count() == 2
    center.mark_all_read()
    assert center.unread_count() == 0
    assert all(n["read"] for n in store.get_notifications())
