"""Application state store: one per session.

Holds the acting user, the user and event collections, the navigation
target and the event under edit. Every mutation goes through a method here,
and every method consults :mod:`peniel.core.rules` before touching state.

Operations are synchronous. Each one validates fully before it mutates, so
a rejected call leaves the store exactly as it was.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo
from typing import Any

from peniel.core import rules
from peniel.core.birthdays import UpcomingBirthday, upcoming_birthdays
from peniel.core.calendar import CalendarMonth, build_month
from peniel.core.conflicts import find_conflict
from peniel.core.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    SchedulingConflictError,
    ValidationError,
)
from peniel.core.models import GLOBAL_SECTOR, Event, Role, User, ViewState
from peniel.core.seed import sector_name, seed_events, seed_users
from peniel.core.timeline import Dashboard, build_timeline, compute_stats
from peniel.notifications import NotificationReceipt, Notifier

logger = logging.getLogger(__name__)

# Views only leaders may navigate to.
LEADER_VIEWS = frozenset({ViewState.MEMBERS, ViewState.CREATE_EVENT, ViewState.EDIT_EVENT})


def _new_id() -> str:
    return str(uuid.uuid4())


def _require_user_fields(user: User) -> None:
    missing = [
        name
        for name, value in (("name", user.name), ("email", user.email))
        if not value or not str(value).strip()
    ]
    if user.birth_date is None:
        missing.append("birth_date")
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


def _require_event_fields(event: Event) -> None:
    if not event.title or not event.title.strip():
        raise ValidationError("Missing required field(s): title")
    if not event.sector_id:
        raise ValidationError("Missing required field(s): sector_id")


def _conflict_error(leader: User, conflict: Event) -> SchedulingConflictError:
    """Build the clash error, naming the occupant only if *leader* may see it."""
    if rules.can_see_sector(leader, conflict.sector_id):
        return SchedulingConflictError(conflict)
    return SchedulingConflictError()


@dataclass(frozen=True)
class EventSaveResult:
    """Outcome of a successful create or update."""

    event: Event
    notification: NotificationReceipt | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event.to_dict(),
            "notification": self.notification.to_dict() if self.notification else None,
        }


class AppStore:
    """In-memory state of one session.

    Parameters
    ----------
    users, events:
        Initial collections. Copied, so callers keep their own lists.
    notifier:
        Collaborator that "sends" event notices.
    tz:
        Display timezone used for "today", calendar placement and birthdays.
    clock:
        Returns the current aware datetime; overridable in tests.
    """

    def __init__(
        self,
        users: Iterable[User] = (),
        events: Iterable[Event] = (),
        *,
        notifier: Notifier | None = None,
        tz: tzinfo = UTC,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._users: list[User] = list(users)
        self._events: list[Event] = list(events)
        self._actor: User | None = None
        self._view = ViewState.LOGIN
        self._editing_event_id: str | None = None
        self.notifier = notifier or Notifier()
        self.tz = tz
        self._clock = clock or (lambda: datetime.now(UTC))

    @classmethod
    def seeded(
        cls,
        *,
        notifier: Notifier | None = None,
        tz: tzinfo = UTC,
        clock: Callable[[], datetime] | None = None,
    ) -> AppStore:
        """Build a store holding a fresh copy of the mock community."""
        now = clock() if clock is not None else datetime.now(UTC)
        return cls(seed_users(), seed_events(now), notifier=notifier, tz=tz, clock=clock)

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def actor(self) -> User | None:
        return self._actor

    @property
    def users(self) -> tuple[User, ...]:
        return tuple(self._users)

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(self._events)

    @property
    def view(self) -> ViewState:
        return self._view

    @property
    def editing_event_id(self) -> str | None:
        return self._editing_event_id

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self.now().astimezone(self.tz).date()

    def get_user(self, user_id: str) -> User:
        for user in self._users:
            if user.id == user_id:
                return user
        raise NotFoundError("User", user_id)

    def get_event(self, event_id: str) -> Event:
        for event in self._events:
            if event.id == event_id:
                return event
        raise NotFoundError("Event", event_id)

    def find_user_by_email(self, email: str) -> User | None:
        needle = email.strip().lower()
        return next((u for u in self._users if u.email.lower() == needle), None)

    def _require_unique_email(self, email: str, *, ignore_id: str | None = None) -> None:
        existing = self.find_user_by_email(email)
        if existing is not None and existing.id != ignore_id:
            raise ValidationError("E-mail já cadastrado.")

    def snapshot(self) -> dict[str, Any]:
        """Session summary: actor, view and edit target."""
        return {
            "actor": self._actor.to_dict() if self._actor else None,
            "view": self._view.value,
            "editing_event_id": self._editing_event_id,
        }

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def _authenticate(self, email: str) -> User | None:
        user = self.find_user_by_email(email)
        if user is None:
            logger.info("Login failed")
            return None
        self._actor = user
        self._view = ViewState.DASHBOARD
        logger.info("User %s logged in", user.id)
        return user

    def login(self, email: str) -> bool:
        """Log in by case-insensitive e-mail match over all users."""
        return self._authenticate(email) is not None

    def require_login(self, email: str) -> User:
        """Like :meth:`login` but raises :class:`AuthenticationError` on failure."""
        user = self._authenticate(email)
        if user is None:
            raise AuthenticationError()
        return user


    def logout(self) -> None:
        if self._actor is not None:
            logger.info("User %s logged out", self._actor.id)
        self._actor = None
        self._editing_event_id = None
        self._view = ViewState.LOGIN

    def register(self, new_user: User) -> User:
        """Create an account and log it in.

        The requested role is kept, but the account always starts without
        sectors: placement waits for a leader's approval.
        """
        _require_user_fields(new_user)
        self._require_unique_email(new_user.email)
        user = new_user.with_changes(id=new_user.id or _new_id(), sector_ids=())
        self._users.append(user)
        self._actor = user
        self._view = ViewState.DASHBOARD
        logger.info("Registered user %s as %s (pending approval)", user.id, user.role.value)
        return user

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def set_view(self, view: ViewState | str) -> ViewState:
        view = ViewState(view)
        if view in LEADER_VIEWS:
            rules.require_leader(self._actor, f"open {view.value}")
        elif view not in (ViewState.LOGIN, ViewState.REGISTER):
            rules.require_actor(self._actor, f"open {view.value}")
        if view != ViewState.EDIT_EVENT:
            self._editing_event_id = None
        self._view = view
        return view

    def start_editing_event(self, event_id: str) -> Event:
        leader = rules.require_leader(self._actor, "edit event")
        event = self.get_event(event_id)
        rules.require_event_visible(leader, event)
        self._editing_event_id = event.id
        self._view = ViewState.EDIT_EVENT
        return event

    def cancel_editing(self) -> None:
        self._editing_event_id = None
        self._view = ViewState.DASHBOARD

    # ------------------------------------------------------------------
    # Member management
    # ------------------------------------------------------------------

    def add_user(self, new_user: User) -> User:
        """Add a member directly, with whatever sectors the leader grants."""
        leader = rules.require_leader(self._actor, "add member")
        _require_user_fields(new_user)
        self._require_unique_email(new_user.email)
        user = new_user.with_changes(id=new_user.id or _new_id())
        self._users.append(user)
        logger.info("Leader %s added user %s", leader.id, user.id)
        return user

    def update_user(self, updated: User) -> User:
        """Replace a member's record, including role and sector grants.

        The last remaining leader cannot be demoted.
        """
        leader = rules.require_leader(self._actor, "update member")
        existing = self.get_user(updated.id)
        rules.require_manageable(leader, existing, self._users)
        _require_user_fields(updated)
        self._require_unique_email(updated.email, ignore_id=updated.id)
        if (
            existing.role == Role.LEADER
            and updated.role != Role.LEADER
            and rules.count_leaders(self._users) <= 1
        ):
            raise ValidationError("A igreja precisa de pelo menos um líder.")

        self._users = [updated if u.id == updated.id else u for u in self._users]
        if self._actor is not None and self._actor.id == updated.id:
            self._actor = updated
        logger.info("Leader %s updated user %s", leader.id, updated.id)
        return updated

    def delete_user(self, user_id: str) -> None:
        """Remove a member. Events they created are left in place."""
        leader = rules.require_leader(self._actor, "delete member")
        target = self.get_user(user_id)
        rules.require_manageable(leader, target, self._users)
        if target.id == leader.id:
            raise AuthorizationError("delete member", "Você não pode excluir a própria conta.")
        if target.role == Role.LEADER and rules.count_leaders(self._users) <= 1:
            raise ValidationError("A igreja precisa de pelo menos um líder.")
        self._users = [u for u in self._users if u.id != user_id]
        logger.info("Leader %s deleted user %s", leader.id, user_id)

    # ------------------------------------------------------------------
    # Event management
    # ------------------------------------------------------------------

    def add_event(self, event: Event, *, notify: bool = False) -> EventSaveResult:
        """Schedule a new event, refusing a start minute that is taken."""
        leader = rules.require_leader(self._actor, "create event")
        _require_event_fields(event)
        conflict = find_conflict(self._events, event.date)
        if conflict is not None:
            logger.info("Rejected event %r: slot taken by %s", event.title, conflict.id)
            raise _conflict_error(leader, conflict)
        rules.require_event_sector(leader, event.sector_id)

        saved = event.with_changes(id=event.id or _new_id(), created_by=leader.id)
        self._events.append(saved)
        self._view = ViewState.DASHBOARD
        logger.info("Leader %s created event %s in sector %s", leader.id, saved.id, saved.sector_id)
        receipt = self.notify(saved.sector_id, saved.title) if notify else None
        return EventSaveResult(event=saved, notification=receipt)

    def update_event(self, event: Event, *, notify: bool = False) -> EventSaveResult:
        """Replace an event, keeping its creator; the event never clashes with itself."""
        leader = rules.require_leader(self._actor, "update event")
        existing = self.get_event(event.id)
        rules.require_event_visible(leader, existing)
        _require_event_fields(event)
        conflict = find_conflict(self._events, event.date, excluding_event_id=existing.id)
        if conflict is not None:
            logger.info("Rejected update of %s: slot taken by %s", existing.id, conflict.id)
            raise _conflict_error(leader, conflict)
        rules.require_event_sector(leader, event.sector_id)

        saved = event.with_changes(created_by=existing.created_by)
        self._events = [saved if e.id == saved.id else e for e in self._events]
        self._editing_event_id = None
        self._view = ViewState.DASHBOARD
        logger.info("Leader %s updated event %s", leader.id, saved.id)
        receipt = self.notify(saved.sector_id, saved.title) if notify else None
        return EventSaveResult(event=saved, notification=receipt)

    def delete_event(self, event_id: str) -> None:
        leader = rules.require_leader(self._actor, "delete event")
        rules.require_event_visible(leader, self.get_event(event_id))
        self._events = [e for e in self._events if e.id != event_id]
        if self._editing_event_id == event_id:
            self._editing_event_id = None
        logger.info("Leader %s deleted event %s", leader.id, event_id)

    def notify(self, sector_id: str, event_title: str) -> NotificationReceipt:
        """Hand the recipients of *sector_id* to the notifier."""
        recipients = rules.notification_recipients(self._users, sector_id)
        church_wide = sector_id == GLOBAL_SECTOR
        return self.notifier.send(
            recipient_count=len(recipients),
            label=sector_name(sector_id),
            event_title=event_title,
            church_wide=church_wide,
        )

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def sector_name(self, sector_id: str) -> str:
        return sector_name(sector_id)

    def visible_events(self) -> list[Event]:
        return rules.visible_events(self._events, self._actor)

    def visible_members(self, search: str | None = None) -> list[User]:
        leader = rules.require_leader(self._actor, "view members")
        return rules.search_members(rules.visible_members(self._users, leader), search)

    def upcoming_birthdays(self) -> list[UpcomingBirthday]:
        rules.require_actor(self._actor, "view birthdays")
        return upcoming_birthdays(self._users, self.today())

    def dashboard(self, *, show_events: bool = True, show_birthdays: bool = True) -> Dashboard:
        actor = rules.require_actor(self._actor, "view dashboard")
        visible = self.visible_events()
        timeline = build_timeline(
            visible,
            self._users,
            today=self.today(),
            tz=self.tz,
            show_events=show_events,
            show_birthdays=show_birthdays,
        )
        pending = [u for u in self._users if u.is_pending] if actor.is_leader else None
        return Dashboard(
            actor=actor,
            stats=compute_stats(visible, self._users, now=self.now()),
            timeline=timeline,
            pending_approvals=pending,
        )

    def calendar_month(self, year: int | None = None, month: int | None = None) -> CalendarMonth:
        rules.require_actor(self._actor, "view calendar")
        today = self.today()
        return build_month(
            self.visible_events(),
            year if year is not None else today.year,
            month if month is not None else today.month,
            today=today,
            tz=self.tz,
        )
