"""Domain models for the church community store.

Defines the User, Event and Sector dataclasses plus the enumerations they
use. Includes JSON serialisation helpers for API responses and for seeding
a store from plain dictionaries.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from typing import Any

# Sentinel sector id for church-wide events.
GLOBAL_SECTOR = "global"


class Role(enum.StrEnum):
    """Roles a user can hold in the community."""

    LEADER = "LEADER"
    MEMBER = "MEMBER"


class RecurrenceType(enum.StrEnum):
    """Recurrence tag stored on an event. Metadata only; never expanded."""

    NONE = "NONE"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"


class Gender(enum.StrEnum):
    MALE = "M"
    FEMALE = "F"


class ViewState(enum.StrEnum):
    """Navigation targets of a session."""

    LOGIN = "LOGIN"
    REGISTER = "REGISTER"
    DASHBOARD = "DASHBOARD"
    CALENDAR = "CALENDAR"
    MEMBERS = "MEMBERS"
    BIRTHDAYS = "BIRTHDAYS"
    CREATE_EVENT = "CREATE_EVENT"
    EDIT_EVENT = "EDIT_EVENT"


RECURRENCE_LABELS: dict[RecurrenceType, str | None] = {
    RecurrenceType.NONE: None,
    RecurrenceType.WEEKLY: "Semanal",
    RecurrenceType.BIWEEKLY: "Quinzenal",
    RecurrenceType.MONTHLY: "Mensal",
}


def _parse_date(value: Any) -> date:
    """Parse a calendar date from a ``YYYY-MM-DD`` string or date object."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def parse_timestamp(value: Any) -> datetime:
    """Parse an event timestamp; naive values are taken as UTC.

    Accepts datetime objects and ISO 8601 strings, including the ``Z``
    suffix emitted by JavaScript's ``toISOString()``.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True)
class Sector:
    """A ministry group. The catalogue is fixed at startup."""

    id: str
    name: str
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}


@dataclass
class User:
    """A community member.

    ``email`` is the case-insensitive login key. A user with no sectors is
    pending approval, whatever their role.
    """

    id: str
    name: str
    email: str
    birth_date: date
    phone: str = ""
    gender: Gender = Gender.MALE
    role: Role = Role.MEMBER
    sector_ids: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_pending(self) -> bool:
        return not self.sector_ids

    @property
    def is_leader(self) -> bool:
        return self.role == Role.LEADER

    def with_changes(self, **changes: Any) -> User:
        """Return a copy with *changes* applied; sector ids are normalised."""
        if "sector_ids" in changes:
            changes["sector_ids"] = frozenset(changes["sector_ids"])
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-safe dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "gender": self.gender.value,
            "role": self.role.value,
            "sector_ids": sorted(self.sector_ids),
            "birth_date": self.birth_date.isoformat(),
            "pending": self.is_pending,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        """Reconstruct a User from a dictionary (e.g. from to_dict())."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            email=data["email"],
            birth_date=_parse_date(data["birth_date"]),
            phone=data.get("phone", ""),
            gender=Gender(data.get("gender", Gender.MALE.value)),
            role=Role(data.get("role", Role.MEMBER.value)),
            sector_ids=frozenset(str(s) for s in data.get("sector_ids", ())),
        )


@dataclass
class Event:
    """A single point-in-time community event.

    ``sector_id`` is either a sector id or :data:`GLOBAL_SECTOR`.
    """

    id: str
    title: str
    date: datetime
    sector_id: str
    created_by: str
    description: str = ""
    location: str = ""
    recurrence: RecurrenceType = RecurrenceType.NONE

    def __post_init__(self) -> None:
        self.date = parse_timestamp(self.date)

    @property
    def is_global(self) -> bool:
        return self.sector_id == GLOBAL_SECTOR

    def with_changes(self, **changes: Any) -> Event:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-safe dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "date": self.date.isoformat(),
            "location": self.location,
            "sector_id": self.sector_id,
            "created_by": self.created_by,
            "recurrence": self.recurrence.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        """Reconstruct an Event from a dictionary (e.g. from to_dict())."""
        return cls(
            id=str(data["id"]),
            title=data["title"],
            description=data.get("description", ""),
            date=parse_timestamp(data["date"]),
            location=data.get("location", ""),
            sector_id=str(data["sector_id"]),
            created_by=str(data["created_by"]),
            recurrence=RecurrenceType(data.get("recurrence", RecurrenceType.NONE.value)),
        )
