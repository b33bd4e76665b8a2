import pytest
from structlog.testing import capture_logs

from src.portal.errors import ValidationError
from src.portal.models import Slot, Student
from src.portal.routine import RoutineStore, new_slot, new_slot_id


def _slot(slot_id="s1", student="Alice"):
    return Slot(id=slot_id, start="09:00", end="10:00", subject="Math", student=student)


def test_add_slot_creates_day_list_and_returns_new_store():
    empty = RoutineStore()
    store = empty.add_slot("Monday", _slot())

    assert [s.id for s in store.slots_for("Monday")] == ["s1"]
    # original snapshot untouched
    assert empty.slots_for("Monday") == []


def test_add_slot_appends_in_order():
    store = RoutineStore().add_slot("Monday", _slot("a")).add_slot("Monday", _slot("b"))
    assert [s.id for s in store.slots_for("Monday")] == ["a", "b"]


def test_absent_day_is_empty_list():
    assert RoutineStore().slots_for("Saturday") == []


def test_unknown_day_rejected():
    with pytest.raises(ValidationError):
        RoutineStore().add_slot("Funday", _slot())


def test_update_slot_field():
    store = RoutineStore().add_slot("Monday", _slot())
    updated = store.update_slot_field("Monday", "s1", "subject", "Physics")

    assert updated.slots_for("Monday")[0].subject == "Physics"
    assert store.slots_for("Monday")[0].subject == "Math"


def test_update_missing_slot_is_noop_and_warns():
    store = RoutineStore().add_slot("Monday", _slot())
    with capture_logs() as logs:
        updated = store.update_slot_field("Monday", "missing", "subject", "Physics")

    assert updated == store
    assert any(e["event"] == "slot_not_found" for e in logs)


def test_update_rejects_id_and_unknown_fields():
    store = RoutineStore().add_slot("Monday", _slot())
    with pytest.raises(ValidationError):
        store.update_slot_field("Monday", "s1", "id", "other")
    with pytest.raises(ValidationError):
        store.update_slot_field("Monday", "s1", "room", "B12")


def test_remove_slot_then_remove_again_is_noop():
    store = RoutineStore().add_slot("Monday", _slot())
    removed = store.remove_slot("Monday", "s1")
    assert removed.to_dict()["days"]["Monday"] == []

    again = removed.remove_slot("Monday", "s1")
    assert again == removed


def test_remove_from_absent_day_is_noop():
    assert RoutineStore().remove_slot("Friday", "x") == RoutineStore()


def test_returned_slots_are_copies():
    store = RoutineStore().add_slot("Monday", _slot())
    store.slots_for("Monday")[0].subject = "Changed"
    assert store.slots_for("Monday")[0].subject == "Math"


def test_from_dict_round_trip_keeps_document_shape():
    data = {"days": {"Tuesday": [_slot().model_dump()], "Monday": None}}
    store = RoutineStore.from_dict(data)
    assert store.slots_for("Monday") == []
    assert store.to_dict()["days"]["Tuesday"][0]["id"] == "s1"


def test_from_dict_rejects_unknown_weekday():
    with pytest.raises(ValidationError):
        RoutineStore.from_dict({"days": {"Mon": []}})


def test_new_slot_ids_differ():
    assert new_slot_id() != new_slot_id()


def test_new_slot_defaults_to_first_student():
    slot = new_slot([Student(name="Bob"), Student(name="Cara")])
    assert (slot.start, slot.end, slot.subject, slot.student) == (
        "09:00",
        "10:00",
        "New Subject",
        "Bob",
    )
    assert new_slot().student == ""


def test_new_slot_applies_overrides():
    slot = new_slot([Student(name="Bob")], start="14:30", end="15:15", student="")
    assert (slot.start, slot.end, slot.student) == ("14:30", "15:15", "")


def test_new_slot_rejects_malformed_time():
    with pytest.raises(ValidationError, match="start"):
        new_slot(start="banana")
    with pytest.raises(ValidationError):
        new_slot(end="24:00")


def test_update_rejects_malformed_time_and_keeps_store():
    store = RoutineStore().add_slot("Monday", _slot())
    for bad in ("banana", "9:00", "25:00", "09:60", ""):
        with pytest.raises(ValidationError):
            store.update_slot_field("Monday", "s1", "start", bad)
    assert store.slots_for("Monday")[0].start == "09:00"

    updated = store.update_slot_field("Monday", "s1", "end", "23:59")
    assert updated.slots_for("Monday")[0].end == "23:59"


def test_stored_routine_with_bad_time_is_rejected():
    data = {"days": {"Monday": [{"id": "s1", "start": "banana", "end": "10:00"}]}}
    with pytest.raises(ValidationError):
        RoutineStore.from_dict(data)
