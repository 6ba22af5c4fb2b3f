"""In-memory registry of server-held listing and form sessions."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Generic, TypeVar

from app.controllers.form import FormController
from app.controllers.listing import ListingController
from app.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionNotFoundError(KeyError):
    pass


class SessionRegistry(Generic[T]):
    """Sessions expire ``ttl_seconds`` after their last access."""

    def __init__(self, kind: str, ttl_seconds: float) -> None:
        self.kind = kind
        self.ttl_seconds = ttl_seconds
        self._sessions: dict[str, T] = {}
        self._last_access: dict[str, float] = {}

    def _evict_expired(self, now: float) -> None:
        expired = [sid for sid, seen in self._last_access.items() if now - seen >= self.ttl_seconds]
        for session_id in expired:
            self._sessions.pop(session_id, None)
            self._last_access.pop(session_id, None)
        if expired:
            logger.info("Expired %d %s session(s)", len(expired), self.kind)

    def add(self, controller: T) -> str:
        now = time.time()
        self._evict_expired(now)
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = controller
        self._last_access[session_id] = now
        logger.debug("Opened %s session %s", self.kind, session_id)
        return session_id

    def get(self, session_id: str) -> T:
        now = time.time()
        self._evict_expired(now)
        try:
            controller = self._sessions[session_id]
        except KeyError as e:
            raise SessionNotFoundError(session_id) from e
        self._last_access[session_id] = now
        return controller

    def discard(self, session_id: str) -> None:
        self._last_access.pop(session_id, None)
        if self._sessions.pop(session_id, None) is not None:
            logger.debug("Closed %s session %s", self.kind, session_id)

    def clear(self) -> None:
        self._sessions.clear()
        self._last_access.clear()

    def __len__(self) -> int:
        return len(self._sessions)


listing_sessions: SessionRegistry[ListingController] = SessionRegistry("listing", settings.SESSION_TTL_SECONDS)
form_sessions: SessionRegistry[FormController] = SessionRegistry("form", settings.SESSION_TTL_SECONDS)
