"""In-process registry of open client editor sessions."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from app.application.services.client_dialog import ClientDialog
from app.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EditorSession:
    id: str
    dialog: ClientDialog
    opened_at: datetime = field(default_factory=_utcnow)
    last_used_at: datetime = field(default_factory=_utcnow)


class EditorSessionRegistry:
    """Keeps each open dialog addressable by a session id.

    ``dialog_factory`` builds a fresh dialog (with its own notifier and
    preview registry) for the session id it is given.

    Sessions unused for ``idle_timeout`` are evicted, and opening a session
    beyond ``max_sessions`` evicts the least recently used one. A session
    with a save in flight is never evicted.
    """

    def __init__(
        self,
        dialog_factory: Callable[[str], ClientDialog],
        *,
        idle_timeout: timedelta | None = None,
        max_sessions: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._dialog_factory = dialog_factory
        self._idle_timeout = idle_timeout
        self._max_sessions = max_sessions
        self._clock = clock
        self._sessions: dict[str, EditorSession] = {}

    def open(self) -> EditorSession:
        self.evict_idle()
        if self._max_sessions is not None:
            while len(self._sessions) >= self._max_sessions and self._evict_least_recent():
                pass

        session_id = uuid4().hex
        now = self._clock()
        session = EditorSession(
            id=session_id,
            dialog=self._dialog_factory(session_id),
            opened_at=now,
            last_used_at=now,
        )
        self._sessions[session.id] = session
        logger.info("Editor session %s opened (%d open)", session.id, len(self._sessions))
        return session

    def get(self, session_id: str) -> EditorSession:
        self.evict_idle()
        session = self._sessions.get(session_id)
        if session is None:
            raise EntityNotFoundError("EditorSession", session_id)
        session.last_used_at = self._clock()
        return session

    def close(self, session_id: str) -> None:
        """Drop a session whose dialog has closed, releasing its previews."""
        if not self.discard(session_id):
            raise EntityNotFoundError("EditorSession", session_id)

    def discard(self, session_id: str) -> bool:
        """Like ``close``, but a session that is already gone is not an error."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.dialog.close()
        logger.info("Editor session %s closed", session_id)
        return True

    def close_all(self) -> int:
        count = len(self._sessions)
        for session in self._sessions.values():
            session.dialog.close()
        self._sessions.clear()
        return count

    # ── Eviction ─────────────────────────────────────────────────────

    def evict_idle(self) -> int:
        """Close every session unused for longer than the idle timeout."""
        if self._idle_timeout is None:
            return 0
        cutoff = self._clock() - self._idle_timeout
        expired = [
            s.id
            for s in self._sessions.values()
            if s.last_used_at < cutoff and not s.dialog.is_submitting
        ]
        for session_id in expired:
            self._evict(session_id, "idle")
        return len(expired)

    def _evict_least_recent(self) -> bool:
        candidates = [s for s in self._sessions.values() if not s.dialog.is_submitting]
        if not candidates:
            return False
        oldest = min(candidates, key=lambda s: s.last_used_at)
        self._evict(oldest.id, "capacity")
        return True

    def _evict(self, session_id: str, reason: str) -> None:
        session = self._sessions.pop(session_id)
        session.dialog.close()
        logger.info("Editor session %s evicted (%s)", session_id, reason)

    def __len__(self) -> int:
        return len(self._sessions)
