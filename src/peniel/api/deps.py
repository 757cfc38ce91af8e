"""FastAPI dependencies shared by the routers.

``get_registry`` and ``get_text_generator`` are stubs: ``create_app()``
replaces them through ``app.dependency_overrides``, and tests do the same.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header

from peniel.core.sessions import SessionRegistry, set_session_context
from peniel.core.store import AppStore
from peniel.genai import TextGenerator

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Id"


def get_registry() -> SessionRegistry:
    """Dependency stub, overridden at app creation or in tests."""
    raise RuntimeError("SessionRegistry not initialized")


def get_text_generator() -> TextGenerator:
    """Dependency stub, overridden at app creation or in tests."""
    raise RuntimeError("TextGenerator not initialized")


async def get_session_id(
    session_id: Annotated[str, Header(alias=SESSION_HEADER)],
) -> str:
    set_session_context(session_id)
    return session_id


async def get_store(
    session_id: Annotated[str, Depends(get_session_id)],
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> AppStore:
    """Resolve the caller's store from the session header."""
    return registry.get(session_id)


RegistryDep = Annotated[SessionRegistry, Depends(get_registry)]
StoreDep = Annotated[AppStore, Depends(get_store)]
GeneratorDep = Annotated[TextGenerator, Depends(get_text_generator)]
