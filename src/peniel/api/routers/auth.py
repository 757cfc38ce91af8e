"""Login, logout and self-registration within a session."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from peniel.api.deps import StoreDep
from peniel.api.models import ApiResponse, LoginRequest, RegisterRequest, envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(body: LoginRequest, store: StoreDep) -> ApiResponse[Any]:
    store.require_login(body.email)
    return envelope(store.snapshot())


@router.post("/logout")
async def logout(store: StoreDep) -> ApiResponse[Any]:
    store.logout()
    return envelope(store.snapshot())


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, store: StoreDep) -> ApiResponse[Any]:
    """Create a pending account and log it in."""
    store.register(body.to_user())
    return envelope(store.snapshot())
