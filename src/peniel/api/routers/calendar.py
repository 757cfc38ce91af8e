"""Calendar month grid endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from peniel.api.deps import StoreDep
from peniel.api.models import ApiResponse, envelope

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


@router.get("")
async def get_current_month(store: StoreDep) -> ApiResponse[Any]:
    return envelope(store.calendar_month().to_dict())


@router.get("/{year}/{month}")
async def get_month(year: int, month: int, store: StoreDep) -> ApiResponse[Any]:
    """Month grid for *year*/*month*; an out-of-range month is a 400."""
    return envelope(store.calendar_month(year, month).to_dict())
