import logging
import threading
import time
from typing import Callable, Dict, Optional

from verifyai.config import MAX_SESSIONS, SESSION_TTL_SECONDS
from verifyai.exceptions import SessionNotFoundError
from verifyai.services.analysis_session import AnalysisService, AnalysisSession

logger = logging.getLogger("session_store")


class SessionStore:
    """In-memory registry of live sessions. Nothing survives a restart.

    Sessions untouched for ``ttl_seconds`` are dropped, and once ``max_sessions``
    are live the least recently used one makes room for a new one.
    """

    def __init__(self, ttl_seconds: int = SESSION_TTL_SECONDS, max_sessions: int = MAX_SESSIONS,
                 clock: Callable[[], float] = time.monotonic):
        self._sessions: Dict[str, AnalysisSession] = {}
        self._last_seen: Dict[str, float] = {}
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self.clock = clock
        self.lock = threading.Lock()

    def _drop(self, session_id: str) -> Optional[AnalysisSession]:
        self._last_seen.pop(session_id, None)
        return self._sessions.pop(session_id, None)

    def _evict_expired(self, now: float) -> None:
        expired = [sid for sid, seen in self._last_seen.items() if now - seen > self.ttl_seconds]
        for sid in expired:
            self._drop(sid)
        if expired:
            logger.info(f"🧹 Expired {len(expired)} idle session(s)")

    def create(self, service: Optional[AnalysisService] = None) -> AnalysisSession:
        session = AnalysisSession(service=service)
        with self.lock:
            now = self.clock()
            self._evict_expired(now)
            while self._sessions and len(self._sessions) >= self.max_sessions:
                oldest = min(self._last_seen, key=self._last_seen.get)
                self._drop(oldest)
                logger.warning(f"⚠️ Session limit {self.max_sessions} reached, evicted {oldest}")
            self._sessions[session.id] = session
            self._last_seen[session.id] = now
            live = len(self._sessions)
        logger.info(f"Created session {session.id} ({live} live)")
        return session

    def get(self, session_id: str) -> AnalysisSession:
        with self.lock:
            now = self.clock()
            self._evict_expired(now)
            session = self._sessions.get(session_id)
            if session is not None:
                self._last_seen[session_id] = now
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def delete(self, session_id: str) -> None:
        with self.lock:
            if self._drop(session_id) is None:
                raise SessionNotFoundError(session_id)
        logger.info(f"Deleted session {session_id}")

    def __len__(self) -> int:
        return len(self._sessions)


_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    global _store
    if _store is None:
        _store = SessionStore()
    return _store
