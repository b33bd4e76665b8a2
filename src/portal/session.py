"""Explicit session context for the signed-in user.

SessionContext replaces ambient "current user" state. It is created once per
client, resumed from disk on start-up, and torn down on logout. The signed-in
user (without password) is written to a state file so a restart within
max_session_age_hours does not require a new login.
"""

import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from src.portal.errors import AuthenticationError, PermissionDeniedError
from src.portal.logging import bind_user, clear_user, get_logger
from src.portal.notices import Notifier

logger = get_logger(__name__)


class SessionContext:
    """Current user plus the notices raised while they work."""

    def __init__(
        self, state_dir: str = "data/state", max_session_age_hours: int = 24
    ) -> None:
        """Initialize SessionContext.

        Args:
            state_dir: Directory to store the session state file.
            max_session_age_hours: Maximum age of a saved session before it expires.
        """
        self.state_dir = Path(state_dir)
        self.state_file = self.state_dir / "portal_session.json"
        self.max_session_age_hours = max_session_age_hours
        self.notifier = Notifier()
        self._user: dict[str, Any] | None = None

    @property
    def user(self) -> dict[str, Any] | None:
        return dict(self._user) if self._user else None

    @property
    def is_logged_in(self) -> bool:
        return self._user is not None

    @property
    def username(self) -> str | None:
        return self._user["username"] if self._user else None

    @property
    def role(self) -> str | None:
        return self._user.get("role") if self._user else None

    def require_user(self) -> dict[str, Any]:
        """Return the signed-in user or raise AuthenticationError."""
        if self._user is None:
            raise AuthenticationError("No user is signed in")
        return dict(self._user)

    def require_role(self, *roles: str) -> dict[str, Any]:
        user = self.require_user()
        if user.get("role") not in roles:
            raise PermissionDeniedError(
                f"Role {user.get('role')!r} cannot do this (needs {', '.join(roles)})"
            )
        return user

    def is_session_valid(self) -> bool:
        """Check if a saved session exists and is still fresh."""
        if not self.state_file.exists():
            logger.debug("session_check", result="missing", reason="file_not_found")
            return False

        file_mtime = datetime.fromtimestamp(self.state_file.stat().st_mtime)
        age = datetime.now() - file_mtime
        max_age = timedelta(hours=self.max_session_age_hours)

        if age > max_age:
            logger.info(
                "session_check",
                result="expired",
                age_hours=age.total_seconds() / 3600,
                max_hours=self.max_session_age_hours,
            )
            return False

        logger.debug("session_check", result="valid", age_hours=age.total_seconds() / 3600)
        return True

    def resume(self) -> bool:
        """Restore the user from the state file if one is saved and fresh.

        A file that cannot be parsed is removed.
        """
        if not self.is_session_valid():
            return False
        try:
            with open(self.state_file, encoding="utf-8") as f:
                user = json.load(f)
            if not isinstance(user, dict) or "username" not in user:
                raise ValueError("session file has no username")
        except (OSError, ValueError) as e:
            logger.warning("session_resume_failed", error=str(e))
            self.clear_saved_session()
            return False

        user.pop("password", None)
        self._user = user
        bind_user(user["username"], user.get("role"))
        logger.info("session_resumed", username=user["username"])
        return True

    def start(self, user: dict[str, Any]) -> None:
        """Sign ``user`` in and persist the session."""
        user = {k: v for k, v in user.items() if k != "password"}
        self._user = user
        self.state_dir.mkdir(parents=True, exist_ok=True)
        with open(self.state_file, "w", encoding="utf-8") as f:
            json.dump(user, f, ensure_ascii=False)
        bind_user(user.get("username"), user.get("role"))
        logger.info("session_started", username=user.get("username"))

    def update(self, **fields: Any) -> None:
        """Merge profile changes into the signed-in user and re-save."""
        user = self.require_user()
        user.update(fields)
        self.start(user)

    def end(self) -> None:
        """Sign out: drop the user, the saved session and pending notices."""
        username = self.username
        self._user = None
        self.notifier.clear()
        self.clear_saved_session()
        logger.info("session_ended", username=username)
        clear_user()

    def clear_saved_session(self) -> None:
        if self.state_file.exists():
            self.state_file.unlink()
            logger.info("session_cleared", path=str(self.state_file))
        else:
            logger.debug("session_clear_skipped", reason="file_not_found")
