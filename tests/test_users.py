import pytest

from src.portal.auth import verify_password
from src.portal.errors import NotFoundError, PermissionDeniedError, ValidationError
from src.portal.users import UserAdmin


@pytest.fixture
def admin(store, admin_session):
    store.save_users(
        [
            {"username": "admin", "name": "Admin", "password": "x", "role": "admin"},
            {"username": "t1", "name": "Ms T", "password": "x", "role": "teacher"},
            {"username": "s1", "name": "Sam", "password": "x", "role": "student"},
        ]
    )
    return UserAdmin(store, admin_session)


def test_lists(admin):
    assert [u.username for u in admin.users()] == ["admin", "t1", "s1"]
    assert [u.username for u in admin.students()] == ["s1"]


def test_add_teacher_hashes_password(admin, store):
    user = admin.add({"username": "t2", "name": "Mr T", "password": "pw"}, role="teacher")

    assert user.role == "teacher"
    stored = store.get_users()[-1]
    assert stored["username"] == "t2"
    assert verify_password("pw", stored["password"])[0]


def test_add_rejects_duplicates_and_missing_password(admin):
    with pytest.raises(ValidationError):
        admin.add({"username": "s1", "password": "pw"})
    with pytest.raises(ValidationError):
        admin.add({"username": "new"})


def test_edit_keeps_password_when_blank(admin, store):
    admin.edit("s1", {"name": "Samuel", "password": ""})
    stored = {u["username"]: u for u in store.get_users()}["s1"]
    assert stored["name"] == "Samuel"
    assert stored["password"] == "x"


def test_edit_missing_user(admin):
    with pytest.raises(NotFoundError):
        admin.edit("ghost", {"name": "Boo"})


def test_admin_cannot_demote_self(admin):
    with pytest.raises(PermissionDeniedError):
        admin.edit("admin", {"role": "teacher"})


def test_delete(admin, store):
    admin.delete("s1")
    assert [u["username"] for u in store.get_users()] == ["admin", "t1"]
    with pytest.raises(NotFoundError):
        admin.delete("s1")


def test_admin_cannot_delete_self(admin, admin_session):
    with pytest.raises(PermissionDeniedError):
        admin.delete("admin")
    assert admin_session.notifier.latest().title == "Action Forbidden"


def test_non_admin_denied(store, session):
    session.start({"username": "t1", "role": "teacher"})
    admin = UserAdmin(store, session)
    assert admin.students() == []
    with pytest.raises(PermissionDeniedError):
        admin.users()
    with pytest.raises(PermissionDeniedError):
        admin.delete("s1")
