"""Member roster endpoints (leaders only)."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Query

from peniel.api.deps import StoreDep
from peniel.api.models import ApiResponse, MemberPayload, envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/members", tags=["members"])


@router.get("")
async def list_members(
    store: StoreDep,
    search: str | None = Query(None, description="Substring of name or e-mail"),
) -> ApiResponse[Any]:
    members = store.visible_members(search)
    return envelope([u.to_dict() for u in members], total=len(members))


@router.post("", status_code=201)
async def add_member(body: MemberPayload, store: StoreDep) -> ApiResponse[Any]:
    user = store.add_user(body.to_user())
    return envelope(user.to_dict())


@router.put("/{user_id}")
async def update_member(user_id: str, body: MemberPayload, store: StoreDep) -> ApiResponse[Any]:
    user = store.update_user(body.to_user(user_id))
    return envelope(user.to_dict())


@router.delete("/{user_id}")
async def delete_member(user_id: str, store: StoreDep) -> ApiResponse[Any]:
    store.delete_user(user_id)
    return envelope({"id": user_id, "deleted": True})
