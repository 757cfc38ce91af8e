"""Session lifecycle and navigation endpoints.

A client opens a session, then sends its id in the ``X-Session-Id`` header
on every other call. Each session owns a private, freshly seeded store.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from peniel.api.deps import RegistryDep, StoreDep, get_session_id
from peniel.api.models import ApiResponse, ViewRequest, envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["sessions"])


@router.post("/sessions", status_code=201)
async def open_session(registry: RegistryDep) -> ApiResponse[Any]:
    session_id = registry.create()
    return envelope({"session_id": session_id})


@router.delete("/sessions")
async def close_session(
    registry: RegistryDep,
    session_id: Annotated[str, Depends(get_session_id)],
) -> ApiResponse[Any]:
    registry.close(session_id)
    return envelope({"session_id": session_id, "closed": True})


@router.get("/session")
async def get_session(store: StoreDep) -> ApiResponse[Any]:
    """Current actor, navigation target and event under edit."""
    return envelope(store.snapshot())


@router.put("/session/view")
async def set_view(body: ViewRequest, store: StoreDep) -> ApiResponse[Any]:
    store.set_view(body.view)
    return envelope(store.snapshot())
