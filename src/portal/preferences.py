"""Per-user notification preferences."""

from src.portal.errors import StorageError, ValidationError
from src.portal.models import UserSettings
from src.portal.session import SessionContext
from src.portal.storage import DocumentStore

_LABELS = {
    "emailNotifications": "Email notifications",
    "pushNotifications": "Push notifications",
}


class PreferencesService:
    def __init__(self, store: DocumentStore, session: SessionContext) -> None:
        self.store = store
        self.session = session

    def get(self) -> UserSettings:
        user = self.session.require_user()
        return UserSettings.model_validate(self.store.get_user_settings(user["username"]))

    def set(self, key: str, value: bool) -> UserSettings:
        if key not in _LABELS:
            raise ValidationError(f"Unknown setting {key!r}. Valid: {sorted(_LABELS)}")
        user = self.session.require_user()
        settings = self.get().model_dump(by_alias=True)
        settings[key] = bool(value)
        try:
            self.store.save_user_settings(user["username"], settings)
        except StorageError:
            self.session.notifier.error("Save Failed", "Could not save settings.")
            raise
        state = "enabled" if value else "disabled"
        self.session.notifier.success("Settings Updated", f"{_LABELS[key]} have been {state}.")
        return UserSettings.model_validate(settings)
