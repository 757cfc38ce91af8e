"""Session registry: one private store per client session.

Each session is seeded from the same mock data and never sees another
session's changes.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict
from collections.abc import Callable
from contextvars import ContextVar

from peniel.core.errors import PenielError
from peniel.core.store import AppStore

logger = logging.getLogger(__name__)

_session_context: ContextVar[str | None] = ContextVar("session_id", default=None)


def set_session_context(session_id: str | None) -> None:
    """Set the session id for the current async context (used by logging)."""
    _session_context.set(session_id)


def get_session_context() -> str | None:
    return _session_context.get()


class SessionNotFoundError(PenielError, KeyError):
    """Raised when a session id is unknown or already closed."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")

    def __str__(self) -> str:
        return self.args[0]


class SessionRegistry:
    """Creates, looks up and discards per-session stores.

    Sessions untouched for ``idle_timeout_s`` seconds expire, and opening a
    session beyond ``max_sessions`` evicts the least recently used one.

    Usage::

        registry = SessionRegistry(AppStore.seeded)
        session_id = registry.create()
        store = registry.get(session_id)
        registry.close(session_id)
    """

    def __init__(
        self,
        store_factory: Callable[[], AppStore] = AppStore.seeded,
        *,
        max_sessions: int = 500,
        idle_timeout_s: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_sessions < 1:
            raise ValueError(f"max_sessions must be >= 1, got {max_sessions!r}")
        self._factory = store_factory
        self._max_sessions = max_sessions
        self._idle_timeout_s = idle_timeout_s
        self._clock = clock
        # session id -> (store, last access); oldest access first.
        self._stores: OrderedDict[str, tuple[AppStore, float]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._stores)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._stores

    def _expire_idle(self, now: float) -> None:
        cutoff = now - self._idle_timeout_s
        while self._stores:
            session_id, (_, last_seen) = next(iter(self._stores.items()))
            if last_seen > cutoff:
                break
            del self._stores[session_id]
            logger.info("Expired idle session %s", session_id)

    def create(self) -> str:
        now = self._clock()
        self._expire_idle(now)
        while len(self._stores) >= self._max_sessions:
            evicted, _ = self._stores.popitem(last=False)
            logger.info("Evicted session %s (limit %d)", evicted, self._max_sessions)
        session_id = uuid.uuid4().hex
        self._stores[session_id] = (self._factory(), now)
        logger.info("Opened session %s (%d active)", session_id, len(self._stores))
        return session_id

    def get(self, session_id: str) -> AppStore:
        now = self._clock()
        self._expire_idle(now)
        try:
            store, _ = self._stores[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None
        self._stores[session_id] = (store, now)
        self._stores.move_to_end(session_id)
        return store

    def close(self, session_id: str) -> None:
        if self._stores.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)
        logger.info("Closed session %s", session_id)
