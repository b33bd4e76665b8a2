"""UserAdmin - account management for admins."""

from src.portal.auth import hash_password
from src.portal.errors import NotFoundError, PermissionDeniedError, ValidationError
from src.portal.logging import get_logger
from src.portal.models import User
from src.portal.session import SessionContext
from src.portal.storage import DocumentStore

log = get_logger(__name__)


class UserAdmin:
    def __init__(self, store: DocumentStore, session: SessionContext) -> None:
        self.store = store
        self.session = session

    def users(self) -> list[User]:
        self.session.require_role("admin")
        return [User.model_validate(u) for u in self.store.get_users()]

    def students(self) -> list[User]:
        """Student accounts; visible to admins and teachers."""
        self.session.require_role("admin", "teacher")
        return [
            User.model_validate(u)
            for u in self.store.get_users()
            if u.get("role") == "student"
        ]

    def add(self, user: dict, role: str | None = None) -> User:
        """Create an account. ``role`` overrides the one in ``user``.

        Raises:
            ValidationError: Duplicate username or missing password.
        """
        self.session.require_role("admin")
        record = dict(user)
        if role is not None:
            record["role"] = role
        if not record.get("username"):
            raise ValidationError("Username is required")
        if not record.get("password"):
            self.session.notifier.error("Error", "Password is required for new users.")
            raise ValidationError("Password is required for new users")

        users = self.store.get_users()
        if any(u.get("username") == record["username"] for u in users):
            self.session.notifier.error("Error", "Username already exists.")
            raise ValidationError(f"Username {record['username']!r} already exists")

        record["password"] = hash_password(record["password"])
        new_user = User.model_validate(record)
        users.append(new_user.model_dump(by_alias=True))
        self.store.save_users(users)
        self.session.notifier.success("User Created", f"User {new_user.username} has been created.")
        log.info("user_created", username=new_user.username, role=new_user.role)
        return new_user

    def edit(self, username: str, changes: dict) -> User:
        """Update an account; a blank password keeps the current one."""
        admin = self.session.require_role("admin")
        changes = dict(changes)
        if username == admin["username"] and changes.get("role", "admin") != "admin":
            self.session.notifier.error(
                "Action Forbidden", "You cannot change your own role from admin."
            )
            raise PermissionDeniedError("Admins cannot change their own role")

        password = changes.pop("password", None)
        users = self.store.get_users()
        for i, record in enumerate(users):
            if record.get("username") == username:
                updated = {**record, **changes}
                if password:
                    updated["password"] = hash_password(password)
                users[i] = User.model_validate(updated).model_dump(by_alias=True)
                break
        else:
            raise NotFoundError(f"No user named {username!r}")

        self.store.save_users(users)
        self.session.notifier.success("User Updated", f"User {username} has been updated.")
        log.info("user_updated", username=username, fields=sorted(changes))
        return User.model_validate(users[i])

    def delete(self, username: str) -> None:
        admin = self.session.require_role("admin")
        if username == admin["username"]:
            self.session.notifier.error("Action Forbidden", "You cannot delete your own account.")
            raise PermissionDeniedError("Admins cannot delete their own account")

        users = self.store.get_users()
        remaining = [u for u in users if u.get("username") != username]
        if len(remaining) == len(users):
            raise NotFoundError(f"No user named {username!r}")
        self.store.save_users(remaining)
        self.session.notifier.success("User Deleted", f"User {username} has been deleted.")
        log.info("user_deleted", username=username)
