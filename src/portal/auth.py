"""AuthService - login, registration and profile updates.

Passwords are stored as passlib pbkdf2_sha256 hashes. Accounts created before
hashing keep a plaintext password until their next successful login, when it
is replaced with a hash.
"""

import hmac

from passlib.context import CryptContext

from src.portal.errors import AuthenticationError, StorageError, ValidationError
from src.portal.logging import get_logger
from src.portal.session import SessionContext
from src.portal.storage import DocumentStore

log = get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, stored: str | None) -> tuple[bool, str | None]:
    """Check a password against a stored value.

    Returns (matches, replacement hash or None).
    """
    if not stored:
        return False, None
    if pwd_context.identify(stored) is None:
        # Legacy plaintext entry
        if hmac.compare_digest(plain_password.encode(), stored.encode()):
            return True, hash_password(plain_password)
        return False, None
    return pwd_context.verify_and_update(plain_password, stored)


class AuthService:
    def __init__(self, store: DocumentStore, session: SessionContext) -> None:
        self.store = store
        self.session = session

    def login(self, username: str, password: str) -> dict | None:
        """Sign in; returns the user without password, or None on bad credentials."""
        try:
            users = self.store.get_users()
        except StorageError:
            self.session.notifier.error("Login Error", "Could not connect to the server.")
            raise

        for user in users:
            if user.get("username") != username:
                continue
            ok, new_hash = verify_password(password, user.get("password"))
            if not ok:
                break
            if new_hash:
                user["password"] = new_hash
                self.store.save_users(users)
                log.info("password_rehashed", username=username)
            self.session.start(user)
            self.session.notifier.success(
                "Login Successful", f"Welcome back, {user.get('name') or username}!"
            )
            return self.session.user

        log.info("login_failed", username=username)
        self.session.notifier.error("Login Failed", "Invalid username or password.")
        return None

    def register(self, name: str, username: str, password: str) -> dict | None:
        """Create a student account and sign it in; None if the username is taken."""
        if not (name.strip() and username.strip() and password):
            raise ValidationError("Name, username and password are required")

        users = self.store.get_users()
        if any(u.get("username") == username for u in users):
            self.session.notifier.error(
                "Registration Failed", "Username may already be taken."
            )
            return None

        new_user = {
            "name": name.strip(),
            "username": username,
            "password": hash_password(password),
            "role": "student",
            "profileImage": None,
        }
        users.append(new_user)
        self.store.save_users(users)
        self.session.start(new_user)
        self.session.notifier.success("Registration Successful", f"Welcome, {new_user['name']}!")
        log.info("user_registered", username=username)
        return self.session.user

    def update_profile(self, **changes) -> dict:
        """Merge ``changes`` into the signed-in user's stored record.

        A blank or missing password keeps the stored one.
        """
        current = self.session.require_user()
        changes = {k: v for k, v in changes.items() if k != "username"}
        password = changes.pop("password", None)

        users = self.store.get_users()
        for user in users:
            if user.get("username") == current["username"]:
                user.update(changes)
                if password:
                    user["password"] = hash_password(password)
                break
        else:
            raise AuthenticationError(f"Account {current['username']!r} no longer exists")

        try:
            self.store.save_users(users)
        except StorageError:
            self.session.notifier.error("Update Failed", "Could not save profile to the server.")
            raise
        self.session.update(**changes)
        self.session.notifier.success(
            "Profile Updated", "Your profile has been saved successfully."
        )
        return self.session.user

    def logout(self) -> None:
        self.session.end()
