"""Double-booking detection for event scheduling.

Two events conflict when they start in the same UTC minute. There is no
notion of duration, so events one minute apart never conflict. The check
spans every sector: one slot holds one event for the whole church.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from peniel.core.models import Event, parse_timestamp


def minute_key(value: datetime | str) -> str:
    """Return *value* in UTC truncated to ``YYYY-MM-DDTHH:MM``."""
    return parse_timestamp(value).astimezone(UTC).strftime("%Y-%m-%dT%H:%M")


def find_conflict(
    events: Iterable[Event],
    candidate: datetime | str,
    excluding_event_id: str | None = None,
) -> Event | None:
    """Return the first event starting in the same minute as *candidate*.

    Parameters
    ----------
    events:
        Every scheduled event, across all sectors.
    candidate:
        Proposed start time.
    excluding_event_id:
        Id of the event being edited, so re-saving it never clashes with
        itself.
    """
    wanted = minute_key(candidate)
    for event in events:
        if excluding_event_id is not None and event.id == excluding_event_id:
            continue
        if minute_key(event.date) == wanted:
            return event
    return None


def has_conflict(
    events: Iterable[Event],
    candidate: datetime | str,
    excluding_event_id: str | None = None,
) -> bool:
    """Return whether *candidate* collides with a scheduled event."""
    return find_conflict(events, candidate, excluding_event_id) is not None
