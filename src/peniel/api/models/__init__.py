"""Shared Pydantic response/request models for the Peniel API.

Provides the generic response wrapper, the error format, and the request
bodies accepted by the routers. Request bodies convert themselves into
domain dataclasses; responses carry the domain ``to_dict()`` output.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from peniel.core.models import Event, Gender, RecurrenceType, Role, User, ViewState

# ---------------------------------------------------------------------------
# Base response wrappers
# ---------------------------------------------------------------------------


class ApiMeta(BaseModel):
    """Extensible metadata bag attached to every API response."""

    model_config = {"extra": "allow"}


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Generic API response wrapper.

    All successful responses follow ``{"data": T, "meta": {...}}``.
    """

    data: T
    meta: ApiMeta = Field(default_factory=ApiMeta)


class ErrorDetail(BaseModel):
    """Structured error payload."""

    code: str
    message: str
    details: dict | None = None


class ErrorResponse(BaseModel):
    """Standard error response envelope."""

    error: ErrorDetail


# ---------------------------------------------------------------------------
# Session & auth
# ---------------------------------------------------------------------------


class ViewRequest(BaseModel):
    view: ViewState


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    """Self-service sign-up. Sectors are never accepted here."""

    name: str
    email: str
    birth_date: date
    phone: str = ""
    gender: Gender = Gender.MALE
    role: Role = Role.MEMBER

    def to_user(self) -> User:
        return User(
            id="",
            name=self.name,
            email=self.email,
            birth_date=self.birth_date,
            phone=self.phone,
            gender=self.gender,
            role=self.role,
        )


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


class MemberPayload(BaseModel):
    """A member record as edited by a leader."""

    name: str
    email: str
    birth_date: date
    phone: str = ""
    gender: Gender = Gender.MALE
    role: Role = Role.MEMBER
    sector_ids: list[str] = Field(default_factory=list)

    def to_user(self, user_id: str = "") -> User:
        return User(
            id=user_id,
            name=self.name,
            email=self.email,
            birth_date=self.birth_date,
            phone=self.phone,
            gender=self.gender,
            role=self.role,
            sector_ids=frozenset(self.sector_ids),
        )


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class EventPayload(BaseModel):
    """Create/update body. ``notify`` asks for a simulated e-mail blast."""

    title: str
    date: datetime
    sector_id: str
    description: str = ""
    location: str = ""
    recurrence: RecurrenceType = RecurrenceType.NONE
    notify: bool = False

    def to_event(self, event_id: str = "") -> Event:
        return Event(
            id=event_id,
            title=self.title,
            date=self.date,
            sector_id=self.sector_id,
            created_by="",
            description=self.description,
            location=self.location,
            recurrence=self.recurrence,
        )


class DescriptionRequest(BaseModel):
    title: str = Field(min_length=1)
    sector_id: str


class GeneratedText(BaseModel):
    text: str


def envelope(data: Any, **meta: Any) -> ApiResponse[Any]:
    """Wrap *data* in the standard response envelope."""
    return ApiResponse[Any](data=data, meta=ApiMeta(**meta))
