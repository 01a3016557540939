# fcf_chatbot/session_registry.py
"""
In-memory conversation sessions, keyed by session id.

Nothing survives a process restart; a page reload simply starts a new
session. Idle sessions are evicted after ``ttl_seconds`` and the registry
never holds more than ``max_sessions`` (oldest activity evicted first).
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Optional, Tuple

from .conversation import ConversationSession
from .utils.smart_logger import get_smart_logger

smart_log = get_smart_logger("sessions")


class SessionRegistry:
    def __init__(self, ttl_seconds: int = 3600, max_sessions: int = 1000,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max(1, max_sessions)
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: Dict[str, Tuple[ConversationSession, float]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return self.get(session_id) is not None

    def _purge_expired(self, now: float) -> None:
        if self.ttl_seconds <= 0:
            return
        expired = [sid for sid, (_, seen) in self._sessions.items() if now - seen > self.ttl_seconds]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            smart_log.session_expired(len(expired), len(self._sessions))

    def add(self, session: ConversationSession) -> ConversationSession:
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            while len(self._sessions) >= self.max_sessions:
                oldest = min(self._sessions, key=lambda sid: self._sessions[sid][1])
                del self._sessions[oldest]
                smart_log.session_expired(1, len(self._sessions))
            self._sessions[session.session_id] = (session, now)
        return session

    def get(self, session_id: str) -> Optional[ConversationSession]:
        """Return the session and mark it as active, or None if unknown/expired."""
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            item = self._sessions.get(session_id)
            if item is None:
                return None
            session = item[0]
            self._sessions[session_id] = (session, now)
            return session

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None
