"""Dashboard timeline and summary counters.

The timeline merges the actor's visible events with every member's next
birthday into one chronological feed. Birthdays sort at local midnight of
the day they fall on.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import Any

from peniel.core.birthdays import is_birthday_today, next_occurrence_at
from peniel.core.models import Event, User


class FeedKind(enum.StrEnum):
    EVENT = "EVENT"
    BIRTHDAY = "BIRTHDAY"


@dataclass(frozen=True)
class FeedItem:
    kind: FeedKind
    sort_at: datetime
    event: Event | None = None
    user: User | None = None
    is_today: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = self.event.to_dict() if self.event is not None else self.user.to_dict()
        return {
            "kind": self.kind.value,
            "sort_at": self.sort_at.isoformat(),
            "is_today": self.is_today,
            "data": data,
        }


def build_timeline(
    events: Sequence[Event],
    users: Sequence[User],
    *,
    today: date,
    tz: tzinfo,
    show_events: bool = True,
    show_birthdays: bool = True,
) -> list[FeedItem]:
    """Merge *events* and the next birthday of each of *users*.

    *events* should already be filtered for the actor. Ties keep events
    ahead of birthdays and each group in its input order.
    """
    items: list[FeedItem] = []
    if show_events:
        for event in events:
            items.append(
                FeedItem(
                    kind=FeedKind.EVENT,
                    sort_at=event.date,
                    event=event,
                    is_today=event.date.astimezone(tz).date() == today,
                )
            )
    if show_birthdays:
        for user in users:
            items.append(
                FeedItem(
                    kind=FeedKind.BIRTHDAY,
                    sort_at=next_occurrence_at(user.birth_date, today, tzinfo=tz),
                    user=user,
                    is_today=is_birthday_today(user, today),
                )
            )
    items.sort(key=lambda item: item.sort_at)
    return items


@dataclass
class DashboardStats:
    total_members: int
    pending_members: int
    active_events: int
    next_event: Event | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_members": self.total_members,
            "pending_members": self.pending_members,
            "active_events": self.active_events,
            "next_event": self.next_event.to_dict() if self.next_event else None,
        }


@dataclass
class Dashboard:
    """Everything the dashboard screen shows for one actor."""

    actor: User
    stats: DashboardStats
    timeline: list[FeedItem] = field(default_factory=list)
    pending_approvals: list[User] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "actor": self.actor.to_dict(),
            "stats": self.stats.to_dict(),
            "timeline": [item.to_dict() for item in self.timeline],
            "pending_approvals": (
                [u.to_dict() for u in self.pending_approvals]
                if self.pending_approvals is not None
                else None
            ),
        }


def compute_stats(
    visible: Sequence[Event], users: Sequence[User], *, now: datetime
) -> DashboardStats:
    """Counters for the KPI row. *visible* must be in date order."""
    next_event = next((e for e in visible if e.date > now), None)
    return DashboardStats(
        total_members=len(users),
        pending_members=sum(1 for u in users if u.is_pending),
        active_events=len(visible),
        next_event=next_event,
    )
