"""Birthday occurrence calculation.

A birthday recurs every year on the same month and day. The next occurrence
is this year's date unless that is already behind us, in which case it is
next year's. Today counts as upcoming.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time

from peniel.core.models import User


def _project(birth_date: date, year: int) -> date:
    """Move *birth_date* onto *year*; 29 February falls on 1 March off leap years."""
    try:
        return birth_date.replace(year=year)
    except ValueError:
        return date(year, 3, 1)


def next_occurrence(birth_date: date, today: date) -> date:
    """Return the next date, on or after *today*, that *birth_date* recurs."""
    candidate = _project(birth_date, today.year)
    if candidate < today:
        candidate = _project(birth_date, today.year + 1)
    return candidate


def next_occurrence_at(birth_date: date, today: date, tzinfo=None) -> datetime:
    """Midnight of the next occurrence, used as a timeline sort key."""
    return datetime.combine(next_occurrence(birth_date, today), time.min, tzinfo=tzinfo)


def days_until(birth_date: date, today: date) -> int:
    return (next_occurrence(birth_date, today) - today).days


def is_birthday_today(user: User, today: date) -> bool:
    return next_occurrence(user.birth_date, today) == today


@dataclass(frozen=True)
class UpcomingBirthday:
    """A user paired with their next birthday."""

    user: User
    occurs_on: date
    days_until: int

    @property
    def is_today(self) -> bool:
        return self.days_until == 0

    def to_dict(self) -> dict:
        return {
            "user": self.user.to_dict(),
            "occurs_on": self.occurs_on.isoformat(),
            "days_until": self.days_until,
            "is_today": self.is_today,
        }


def upcoming_birthdays(users: Iterable[User], today: date) -> list[UpcomingBirthday]:
    """Order *users* by next birthday.

    Users sharing a month and day keep their collection order.
    """
    entries = [
        UpcomingBirthday(
            user=u,
            occurs_on=next_occurrence(u.birth_date, today),
            days_until=days_until(u.birth_date, today),
        )
        for u in users
    ]
    entries.sort(key=lambda entry: entry.occurs_on)
    return entries
