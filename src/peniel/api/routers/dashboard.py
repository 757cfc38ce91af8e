"""Dashboard feed endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from peniel.api.deps import StoreDep
from peniel.api.models import ApiResponse, envelope

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("")
async def get_dashboard(
    store: StoreDep,
    events: bool = Query(True, description="Include events in the timeline"),
    birthdays: bool = Query(True, description="Include birthdays in the timeline"),
) -> ApiResponse[Any]:
    dashboard = store.dashboard(show_events=events, show_birthdays=birthdays)
    return envelope(dashboard.to_dict())
