"""Sector catalogue endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from peniel.api.models import ApiResponse, envelope
from peniel.core.models import GLOBAL_SECTOR
from peniel.core.seed import GLOBAL_SECTOR_NAME, SECTORS

router = APIRouter(prefix="/api/sectors", tags=["sectors"])


@router.get("")
async def list_sectors() -> ApiResponse[Any]:
    return envelope(
        [sector.to_dict() for sector in SECTORS],
        global_sector={"id": GLOBAL_SECTOR, "name": GLOBAL_SECTOR_NAME},
    )
