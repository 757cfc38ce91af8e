"""Tests for peniel.core.models."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from peniel.core.models import (
    GLOBAL_SECTOR,
    Event,
    Gender,
    RecurrenceType,
    Role,
    User,
    ViewState,
    parse_timestamp,
)

pytestmark = pytest.mark.unit


class TestParseTimestamp:
    def test_z_suffix_is_utc(self):
        parsed = parse_timestamp("2026-03-12T19:30:00.000Z")
        assert parsed == datetime(2026, 3, 12, 19, 30, tzinfo=UTC)

    def test_naive_string_is_taken_as_utc(self):
        parsed = parse_timestamp("2026-03-12T19:30:00")
        assert parsed.tzinfo is not None
        assert parsed.utcoffset() == timedelta(0)

    def test_offset_is_preserved(self):
        parsed = parse_timestamp("2026-03-12T16:30:00-03:00")
        assert parsed.utcoffset() == timedelta(hours=-3)
        assert parsed.astimezone(UTC).hour == 19

    def test_aware_datetime_passes_through(self):
        value = datetime(2026, 1, 1, 8, 0, tzinfo=timezone(timedelta(hours=2)))
        assert parse_timestamp(value) is value


class TestUser:
    def test_no_sectors_means_pending(self):
        user = User(id="x", name="X", email="x@a.com", birth_date=date(2000, 1, 1))
        assert user.is_pending
        assert not user.is_leader

    def test_with_changes_normalises_sector_ids(self):
        user = User(id="x", name="X", email="x@a.com", birth_date=date(2000, 1, 1))
        changed = user.with_changes(sector_ids=["1", "2", "1"])
        assert changed.sector_ids == frozenset({"1", "2"})
        assert user.sector_ids == frozenset()

    def test_to_dict_sorts_sectors_and_flags_pending(self):
        user = User(
            id="x",
            name="X",
            email="x@a.com",
            birth_date=date(2000, 1, 1),
            role=Role.LEADER,
            gender=Gender.FEMALE,
            sector_ids=frozenset({"3", "1"}),
        )
        data = user.to_dict()
        assert data["sector_ids"] == ["1", "3"]
        assert data["pending"] is False
        assert data["role"] == "LEADER"
        assert data["gender"] == "F"
        assert data["birth_date"] == "2000-01-01"

    def test_from_dict_accepts_to_dict_output(self):
        user = User(
            id="x",
            name="X",
            email="x@a.com",
            birth_date=date(2000, 2, 29),
            sector_ids=frozenset({"2"}),
        )
        assert User.from_dict(user.to_dict()) == user

    def test_from_dict_defaults(self):
        user = User.from_dict(
            {"id": 7, "name": "N", "email": "n@a.com", "birth_date": "1999-12-31"}
        )
        assert user.id == "7"
        assert user.role == Role.MEMBER
        assert user.gender == Gender.MALE
        assert user.is_pending


class TestEvent:
    def test_string_date_is_parsed_on_construction(self):
        event = Event(
            id="e", title="T", date="2026-03-12T19:30:00Z", sector_id="1", created_by="u1"
        )
        assert event.date == datetime(2026, 3, 12, 19, 30, tzinfo=UTC)

    def test_is_global(self):
        event = Event(
            id="e",
            title="T",
            date=datetime(2026, 1, 1, tzinfo=UTC),
            sector_id=GLOBAL_SECTOR,
            created_by="u1",
        )
        assert event.is_global

    def test_from_dict_defaults_recurrence(self):
        event = Event.from_dict(
            {
                "id": "e",
                "title": "T",
                "date": "2026-01-01T10:00:00Z",
                "sector_id": 1,
                "created_by": "u1",
            }
        )
        assert event.recurrence == RecurrenceType.NONE
        assert event.sector_id == "1"
        assert event.description == ""

    def test_to_dict_uses_iso_date(self):
        event = Event(
            id="e",
            title="T",
            date=datetime(2026, 1, 1, 10, 0, tzinfo=UTC),
            sector_id="1",
            created_by="u1",
            recurrence=RecurrenceType.BIWEEKLY,
        )
        data = event.to_dict()
        assert data["date"] == "2026-01-01T10:00:00+00:00"
        assert data["recurrence"] == "BIWEEKLY"


class TestViewState:
    def test_values_are_their_names(self):
        assert ViewState("EDIT_EVENT") is ViewState.EDIT_EVENT
        assert len(list(ViewState)) == 8
