"""Visibility and authorization rules: who may see and change what.

All functions here are pure: they take the collections and the acting user
and return a filtered view or raise. The store calls them at every entry
point so the rules live in one place.

Event visibility:
    An actor sees global events plus events of the sectors they belong to,
    ordered by start time. Nobody sees anything without logging in.

Member visibility (a leader's roster):
    The leader, every pending user (no sectors yet) and every user sharing
    at least one sector with the leader.

Authorization:
    Creating, editing and deleting events or users requires the LEADER role.
    A leader may only edit users in their own roster.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from peniel.core.errors import AuthorizationError, NotAuthenticatedError, ValidationError
from peniel.core.models import GLOBAL_SECTOR, Event, Role, User
from peniel.core.seed import is_known_sector

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Sector membership
# ---------------------------------------------------------------------------


def shares_sector(a: User, b: User) -> bool:
    """Return whether *a* and *b* have at least one sector in common."""
    return not a.sector_ids.isdisjoint(b.sector_ids)


def can_see_sector(actor: User, sector_id: str) -> bool:
    return sector_id == GLOBAL_SECTOR or sector_id in actor.sector_ids


def notification_recipients(users: Iterable[User], sector_id: str) -> list[User]:
    """Users who receive a notice about an event in *sector_id*.

    Everyone for a global event, otherwise the members of that sector.
    """
    if sector_id == GLOBAL_SECTOR:
        return list(users)
    return [u for u in users if sector_id in u.sector_ids]


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------


def visible_events(events: Iterable[Event], actor: User | None) -> list[Event]:
    """Return the events *actor* may see, in ascending date order.

    ``sorted`` is stable, so events at the same instant keep their
    collection order.
    """
    if actor is None:
        return []
    ordered = sorted(events, key=lambda e: e.date)
    return [e for e in ordered if can_see_sector(actor, e.sector_id)]


def visible_members(users: Iterable[User], leader: User) -> list[User]:
    """Return the roster *leader* manages, in collection order."""
    return [
        u
        for u in users
        if u.id == leader.id or u.is_pending or shares_sector(u, leader)
    ]


def search_members(users: Iterable[User], term: str | None) -> list[User]:
    """Filter *users* by a case-insensitive substring of name or e-mail."""
    if not term:
        return list(users)
    needle = term.strip().lower()
    return [u for u in users if needle in u.name.lower() or needle in u.email.lower()]


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


def require_actor(actor: User | None, action: str) -> User:
    """Return *actor*, or raise when the session is not logged in."""
    if actor is None:
        raise NotAuthenticatedError(action)
    return actor


def require_leader(actor: User | None, action: str) -> User:
    """Single authorization check for every leader-only operation.

    Raises
    ------
    NotAuthenticatedError
        If there is no actor.
    AuthorizationError
        If the actor is not a leader.
    """
    actor = require_actor(actor, action)
    if actor.role != Role.LEADER:
        logger.info("Denied %s for non-leader %s", action, actor.id)
        raise AuthorizationError(action)
    return actor


def require_manageable(leader: User, target: User, users: Sequence[User]) -> None:
    """Raise unless *target* is in *leader*'s roster."""
    roster_ids = {u.id for u in visible_members(users, leader)}
    if target.id not in roster_ids:
        logger.info("Denied management of %s by %s: outside roster", target.id, leader.id)
        raise AuthorizationError(
            "manage member",
            "Este membro pertence a setores que você não lidera.",
        )


def require_event_sector(leader: User, sector_id: str) -> None:
    """Raise unless *leader* may schedule into *sector_id*.

    Leaders schedule church-wide events or events of their own sectors.
    """
    if sector_id == GLOBAL_SECTOR:
        return
    if not is_known_sector(sector_id):
        raise ValidationError(f"Unknown sector: {sector_id}")
    if sector_id not in leader.sector_ids:
        raise AuthorizationError(
            "schedule event",
            "Você só pode agendar eventos gerais ou dos seus setores.",
        )


def require_event_visible(leader: User, event: Event) -> None:
    """Raise unless *event* is in *leader*'s view; hidden events are not theirs to touch."""
    if not can_see_sector(leader, event.sector_id):
        raise AuthorizationError(
            "manage event",
            "Este evento pertence a um setor que você não lidera.",
        )


def count_leaders(users: Iterable[User]) -> int:
    return sum(1 for u in users if u.role == Role.LEADER)
