"""Sector catalogue and mock community data.

Every new session starts from a fresh copy of this data. Event dates are
relative to the moment the session is seeded.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

from peniel.core.models import (
    GLOBAL_SECTOR,
    Event,
    Gender,
    RecurrenceType,
    Role,
    Sector,
    User,
)

GLOBAL_SECTOR_NAME = "Geral / Toda Igreja"
UNKNOWN_SECTOR_NAME = "Desconhecido"

SECTORS: tuple[Sector, ...] = (
    Sector(id="1", name="Louvor & Adoração", color="purple"),
    Sector(id="2", name="Jovens", color="blue"),
    Sector(id="3", name="Infantil", color="yellow"),
    Sector(id="4", name="Diaconia", color="emerald"),
    Sector(id="5", name="Missões", color="orange"),
)

_SECTORS_BY_ID: dict[str, Sector] = {sector.id: sector for sector in SECTORS}


def get_sector(sector_id: str) -> Sector | None:
    """Return the sector with *sector_id*, or ``None`` when unknown."""
    return _SECTORS_BY_ID.get(sector_id)


def is_known_sector(sector_id: str) -> bool:
    return sector_id in _SECTORS_BY_ID


def sector_name(sector_id: str) -> str:
    """Display name for a sector id, including the global sentinel."""
    if sector_id == GLOBAL_SECTOR:
        return GLOBAL_SECTOR_NAME
    sector = _SECTORS_BY_ID.get(sector_id)
    return sector.name if sector else UNKNOWN_SECTOR_NAME


def seed_users() -> list[User]:
    """Return the mock users. Carlos leads every sector, João only sector 2."""
    return [
        User(
            id="u1",
            name="Pr. Carlos",
            email="carlos@igreja.com",
            phone="11999999999",
            gender=Gender.MALE,
            role=Role.LEADER,
            sector_ids=frozenset({"1", "2", "3", "4", "5"}),
            birth_date=date(1980, 5, 15),
        ),
        User(
            id="u2",
            name="Ana Silva",
            email="ana@igreja.com",
            phone="11988888888",
            gender=Gender.FEMALE,
            role=Role.MEMBER,
            sector_ids=frozenset({"1"}),
            birth_date=date(1995, 10, 20),
        ),
        User(
            id="u3",
            name="João Souza",
            email="joao@igreja.com",
            phone="11977777777",
            gender=Gender.MALE,
            role=Role.LEADER,
            sector_ids=frozenset({"2"}),
            birth_date=date(2000, 1, 10),
        ),
    ]


def seed_events(now: datetime | None = None) -> list[Event]:
    """Return the mock events, dated one, two and five days after *now*."""
    now = now or datetime.now(UTC)
    return [
        Event(
            id="e1",
            title="Culto de Celebração",
            description="Nosso culto principal de domingo com toda a família.",
            date=now + timedelta(days=2),
            location="Santuário Principal",
            sector_id=GLOBAL_SECTOR,
            created_by="u1",
            recurrence=RecurrenceType.WEEKLY,
        ),
        Event(
            id="e2",
            title="Ensaio Geral",
            description="Preparação para o domingo.",
            date=now + timedelta(days=1),
            location="Sala de Música",
            sector_id="1",
            created_by="u2",
            recurrence=RecurrenceType.WEEKLY,
        ),
        Event(
            id="e3",
            title="Noite de Jogos",
            description="Momentos de comunhão e diversão.",
            date=now + timedelta(days=5),
            location="Salão Social",
            sector_id="2",
            created_by="u3",
            recurrence=RecurrenceType.MONTHLY,
        ),
    ]
