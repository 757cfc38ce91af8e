"""Event scheduling endpoints.

Listing returns only what the session's actor may see. Mutations are
leader-only and reject a start minute another event already holds.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from peniel.api.deps import GeneratorDep, StoreDep
from peniel.api.models import (
    ApiResponse,
    DescriptionRequest,
    EventPayload,
    GeneratedText,
    envelope,
)
from peniel.core import rules
from peniel.core.seed import sector_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("")
async def list_events(store: StoreDep) -> ApiResponse[Any]:
    rules.require_actor(store.actor, "view events")
    events = store.visible_events()
    return envelope([e.to_dict() for e in events], total=len(events))


@router.post("", status_code=201)
async def create_event(body: EventPayload, store: StoreDep) -> ApiResponse[Any]:
    result = store.add_event(body.to_event(), notify=body.notify)
    return envelope(result.to_dict())


@router.post("/description")
async def generate_description(
    body: DescriptionRequest,
    store: StoreDep,
    generator: GeneratorDep,
) -> ApiResponse[GeneratedText]:
    """Ask the AI collaborator for a short event blurb."""
    rules.require_leader(store.actor, "generate event description")
    text = await generator.generate_event_description(body.title, sector_name(body.sector_id))
    return ApiResponse[GeneratedText](data=GeneratedText(text=text))


@router.put("/{event_id}")
async def update_event(event_id: str, body: EventPayload, store: StoreDep) -> ApiResponse[Any]:
    result = store.update_event(body.to_event(event_id), notify=body.notify)
    return envelope(result.to_dict())


@router.delete("/{event_id}")
async def delete_event(event_id: str, store: StoreDep) -> ApiResponse[Any]:
    store.delete_event(event_id)
    return envelope({"id": event_id, "deleted": True})


@router.post("/{event_id}/edit")
async def start_editing(event_id: str, store: StoreDep) -> ApiResponse[Any]:
    """Mark *event_id* as the session's edit target."""
    event = store.start_editing_event(event_id)
    return envelope({"event": event.to_dict(), "session": store.snapshot()})
