"""Birthday list and AI greeting endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from peniel.api.deps import GeneratorDep, StoreDep
from peniel.api.models import ApiResponse, GeneratedText, envelope
from peniel.core import rules

router = APIRouter(prefix="/api/birthdays", tags=["birthdays"])


@router.get("")
async def list_birthdays(store: StoreDep) -> ApiResponse[Any]:
    upcoming = store.upcoming_birthdays()
    return envelope(
        [b.to_dict() for b in upcoming],
        today=store.today().isoformat(),
        celebrating_today=sum(1 for b in upcoming if b.is_today),
    )


@router.post("/{user_id}/message")
async def birthday_message(
    user_id: str,
    store: StoreDep,
    generator: GeneratorDep,
) -> ApiResponse[GeneratedText]:
    rules.require_actor(store.actor, "generate birthday message")
    user = store.get_user(user_id)
    text = await generator.generate_birthday_message(user.name)
    return ApiResponse[GeneratedText](data=GeneratedText(text=text))
