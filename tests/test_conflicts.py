"""Tests for same-minute conflict detection."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from peniel.core.conflicts import find_conflict, has_conflict, minute_key
from tests.conftest import make_event

pytestmark = pytest.mark.unit

SLOT = datetime(2026, 3, 12, 19, 30, 0, tzinfo=UTC)


class TestMinuteKey:
    def test_truncates_to_minute(self):
        assert minute_key(SLOT + timedelta(seconds=59)) == "2026-03-12T19:30"

    def test_normalises_to_utc(self):
        local = datetime(2026, 3, 12, 16, 30, tzinfo=timezone(timedelta(hours=-3)))
        assert minute_key(local) == "2026-03-12T19:30"


class TestFindConflict:
    def test_seconds_within_same_minute_conflict(self):
        existing = make_event("a", SLOT)
        assert find_conflict([existing], SLOT + timedelta(seconds=30)) is existing

    def test_next_minute_is_free(self):
        existing = make_event("a", SLOT + timedelta(seconds=30))
        assert find_conflict([existing], SLOT + timedelta(seconds=61)) is None

    def test_different_offsets_same_instant_conflict(self):
        existing = make_event("a", SLOT)
        candidate = SLOT.astimezone(timezone(timedelta(hours=-3)))
        assert has_conflict([existing], candidate)

    def test_conflict_spans_sectors(self):
        existing = make_event("a", SLOT, sector_id="3")
        assert has_conflict([existing], SLOT)

    def test_excluded_event_never_conflicts_with_itself(self):
        existing = make_event("a", SLOT)
        assert find_conflict([existing], SLOT, excluding_event_id="a") is None

    def test_exclusion_does_not_hide_other_events(self):
        events = [make_event("a", SLOT), make_event("b", SLOT)]
        assert find_conflict(events, SLOT, excluding_event_id="a").id == "b"

    def test_accepts_iso_string_candidate(self):
        existing = make_event("a", SLOT)
        assert has_conflict([existing], "2026-03-12T19:30:45.000Z")

    def test_empty_collection(self):
        assert not has_conflict([], SLOT)
