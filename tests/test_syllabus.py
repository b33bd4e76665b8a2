import pytest

from src.portal.errors import PermissionDeniedError, ValidationError
from src.portal.syllabus import SyllabusService


@pytest.fixture
def student_session(session):
    session.start({"username": "s1", "name": "Sam", "role": "student"})
    return session


def test_subjects_and_chapters(store, student_session):
    service = SyllabusService(store, student_session)
    service.add_subject("Math")
    first = service.add_chapter("Math", "Fractions")
    service.add_chapter("Math", "Decimals")

    assert service.subjects() == ["Math"]
    assert [i.text for i in service.items("Math")] == ["Fractions", "Decimals"]
    assert store.get_syllabus_data()["s1"]["Math"]["items"][0]["id"] == first.id


def test_duplicate_subject_rejected(store, student_session):
    service = SyllabusService(store, student_session)
    service.add_subject("Math")
    with pytest.raises(ValidationError):
        service.add_subject("Math")
    assert student_session.notifier.latest().title == "Subject Exists"


def test_toggle_and_summary(store, student_session):
    service = SyllabusService(store, student_session)
    service.add_subject("Math")
    store.save_syllabus_data(
        {
            "s1": {
                "Math": {
                    "items": [
                        {"id": "1", "text": "a", "completed": False},
                        {"id": "2", "text": "b", "completed": False},
                        {"id": "3", "text": "c", "completed": True},
                    ]
                }
            }
        }
    )

    assert service.toggle_item("Math", "1") is True
    assert service.summary("Math") == (2, 3, 67)
    assert service.toggle_item("Math", "missing") is None
    assert service.summary("Science") == (0, 0, 0)


def test_delete_chapter(store, student_session):
    service = SyllabusService(store, student_session)
    service.add_subject("Math")
    item = service.add_chapter("Math", "Fractions")
    service.delete_chapter("Math", item.id)
    assert service.items("Math") == []


def test_syllabi_are_per_student(store, session):
    session.start({"username": "admin", "role": "admin"})
    SyllabusService(store, session, student_username="s1").add_subject("Math")
    SyllabusService(store, session, student_username="s2").add_subject("Art")

    assert set(store.get_syllabus_data()) == {"s1", "s2"}
    assert SyllabusService(store, session, student_username="s2").subjects() == ["Art"]


def test_teacher_is_read_only(store, session):
    store.save_syllabus_data({"s1": {"Math": {"items": [{"id": "1", "text": "a"}]}}})
    session.start({"username": "t1", "role": "teacher"})
    service = SyllabusService(store, session, student_username="s1")

    assert [i.text for i in service.items("Math")] == ["a"]
    with pytest.raises(PermissionDeniedError):
        service.add_chapter("Math", "b")
    with pytest.raises(PermissionDeniedError):
        service.toggle_item("Math", "1")
