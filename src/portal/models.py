"""Pydantic models for portal documents and derived views.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Stored documents keep their camelCase keys; dump with ``by_alias=True``.
"""

import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Sunday first, so the index matches a Sunday-based week column
WEEKDAYS: tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

Role = Literal["admin", "teacher", "student"]


# 24-hour "HH:MM", zero padded
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class Slot(BaseModel):
    """One recurring time block on a weekday."""

    model_config = ConfigDict(validate_assignment=True)

    id: str  # caller-generated, see routine.new_slot_id()
    start: str = Field(default="09:00", pattern=TIME_PATTERN)
    end: str = Field(default="10:00", pattern=TIME_PATTERN)
    subject: str = ""
    student: str = ""  # Student.name, not enforced


class Routine(BaseModel):
    """Weekly recurring schedule: weekday name -> ordered slots."""

    days: dict[str, list[Slot]] = Field(default_factory=dict)

    @field_validator("days", mode="before")
    @classmethod
    def _check_days(cls, value):
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("routine days must be a mapping of weekday to slots")
        unknown = set(value) - set(WEEKDAYS)
        if unknown:
            raise ValueError(f"unknown weekday keys: {', '.join(sorted(unknown))}")
        return {day: (slots or []) for day, slots in value.items()}


class Student(BaseModel):
    """Progress record for one student, keyed by name."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    days_to_complete: int = Field(default=30, alias="daysToComplete")
    total_completed: int = Field(default=0, alias="totalCompleted")


class User(BaseModel):
    """Portal account. Unknown keys are kept so saves never drop data."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    username: str
    name: str = ""
    password: str | None = None
    role: Role = "student"
    profile_image: str | None = Field(default=None, alias="profileImage")

    def public(self) -> dict:
        """Dump without the password field."""
        return self.model_dump(by_alias=True, exclude={"password"})


class Feedback(BaseModel):
    id: int  # epoch milliseconds
    student: str
    teacher: str
    subject: str
    type: str
    message: str
    date: str
    time: str


class Notification(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int | str
    title: str = ""
    message: str = ""
    read: bool = False


class SyllabusItem(BaseModel):
    id: str
    text: str
    completed: bool = False


class UserSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email_notifications: bool = Field(default=True, alias="emailNotifications")
    push_notifications: bool = Field(default=True, alias="pushNotifications")


class CalendarSlot(Slot):
    """A recurring slot as it appears on one specific date."""

    completed: bool = False


class CalendarCell(BaseModel):
    """One cell of a Sunday-first month grid.

    Leading placeholder cells have ``empty=True`` and no date.
    """

    empty: bool = False
    day: int | None = None
    date: datetime.date | None = None
    date_key: str | None = None  # "YYYY-MM-DD"
    weekday: str | None = None
    slots: list[CalendarSlot] = Field(default_factory=list)


class Progress(BaseModel):
    """Cyclical progress for one student."""

    name: str
    days_to_complete: int
    total_completed: int
    cycles: int
    current_cycle_completed: int
    percentage: int
