"""Month grid for the calendar screen.

Weeks start on Sunday. The grid is the list of leading blank slots followed
by the days of the month; each day carries its events in time order.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import MAXYEAR, MINYEAR, date, tzinfo
from typing import Any

from peniel.core.models import Event

WEEKDAY_NAMES = ("Domingo", "Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado")
MONTH_NAMES = (
    "janeiro",
    "fevereiro",
    "março",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
)


def leading_blanks(year: int, month: int) -> int:
    """Number of empty slots before day 1 in a Sunday-first week."""
    # calendar.weekday: Monday == 0 ... Sunday == 6
    return (calendar.weekday(year, month, 1) + 1) % 7


def month_grid(year: int, month: int) -> list[int | None]:
    """Slots of the month view: ``None`` for blanks, then 1..N."""
    days_in_month = calendar.monthrange(year, month)[1]
    return [None] * leading_blanks(year, month) + list(range(1, days_in_month + 1))


def events_for_day(events: Iterable[Event], day: date, tz: tzinfo) -> list[Event]:
    """Events starting on *day* in the display timezone, earliest first."""
    matching = [e for e in events if e.date.astimezone(tz).date() == day]
    return sorted(matching, key=lambda e: e.date)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Return the (year, month) *delta* months away."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


@dataclass
class CalendarDay:
    day: date
    is_today: bool
    events: list[Event] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.day.isoformat(),
            "is_today": self.is_today,
            "events": [e.to_dict() for e in self.events],
        }


@dataclass
class CalendarMonth:
    year: int
    month: int
    leading_blanks: int
    days: list[CalendarDay]

    @property
    def title(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} de {self.year}"

    def to_dict(self) -> dict[str, Any]:
        prev_year, prev_month = shift_month(self.year, self.month, -1)
        next_year, next_month = shift_month(self.year, self.month, 1)
        return {
            "year": self.year,
            "month": self.month,
            "title": self.title,
            "weekdays": list(WEEKDAY_NAMES),
            "leading_blanks": self.leading_blanks,
            "days": [d.to_dict() for d in self.days],
            "previous": {"year": prev_year, "month": prev_month},
            "next": {"year": next_year, "month": next_month},
        }


def build_month(
    events: Iterable[Event], year: int, month: int, *, today: date, tz: tzinfo
) -> CalendarMonth:
    """Lay out *events* on the grid of *year*/*month*."""
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month!r}")
    if not MINYEAR <= year <= MAXYEAR:
        raise ValueError(f"Invalid year: {year!r}")
    events = list(events)
    days = [
        CalendarDay(
            day=date(year, month, n),
            is_today=date(year, month, n) == today,
            events=events_for_day(events, date(year, month, n), tz),
        )
        for n in month_grid(year, month)
        if n is not None
    ]
    return CalendarMonth(
        year=year,
        month=month,
        leading_blanks=leading_blanks(year, month),
        days=days,
    )
