"""Per-browser conversation sessions with history trimming and idle eviction."""

import logging
import threading
import time
import uuid
from typing import Callable

log = logging.getLogger(__name__)


class Session:
    """Conversation history for one browser session."""

    def __init__(self, session_id: str, conversation_config: dict, now: float | None = None):
        self.id = session_id
        try:
            self._max_turns = max(1, int(conversation_config.get("max_turns", 20)))
        except (TypeError, ValueError):
            self._max_turns = 20
        try:
            self._max_tokens_budget = float(conversation_config.get("max_tokens_budget", 8000))
        except (TypeError, ValueError):
            self._max_tokens_budget = 8000.0
        self._history: list[dict] = []
        self.created_at = time.monotonic() if now is None else now
        self.last_active = self.created_at

    @property
    def history(self) -> list[dict]:
        return list(self._history)

    def touch(self, now: float) -> None:
        self.last_active = now

    def add_user_message(self, text: str) -> None:
        self._history.append({"role": "user", "content": text})
        self._trim()

    def add_assistant_message(self, text: str) -> None:
        self._history.append({"role": "assistant", "content": text})
        self._trim()

    def get_messages(self) -> list[dict]:
        return list(self._history)

    def clear(self) -> None:
        self._history.clear()

    def _trim(self) -> None:
        """Drop the oldest turns beyond the turn limit or token budget."""
        max_messages = self._max_turns * 2
        if len(self._history) > max_messages:
            self._history = self._history[-max_messages:]

        while len(self._history) > 2:
            estimated_tokens = sum(len(m["content"]) for m in self._history) / 4
            if estimated_tokens <= self._max_tokens_budget:
                break
            self._history = self._history[2:]


class SessionStore:
    """Thread-safe registry of live sessions keyed by session id.

    Sessions idle for longer than ``idle_timeout_s`` are evicted on every
    access. When ``max_sessions`` is reached the least recently active
    session makes room for the new one.
    """

    def __init__(self, conversation_config: dict, clock: Callable[[], float] = time.monotonic):
        self._config = conversation_config
        self._clock = clock
        try:
            self._idle_timeout_s = float(conversation_config.get("idle_timeout_s", 1800))
        except (TypeError, ValueError):
            self._idle_timeout_s = 1800.0
        try:
            self._max_sessions = max(1, int(conversation_config.get("max_sessions", 1000)))
        except (TypeError, ValueError):
            self._max_sessions = 1000
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get_or_create(self, session_id: str | None = None) -> Session:
        """Return the live session for *session_id* or start a new one."""
        with self._lock:
            now = self._clock()
            self._evict_idle_locked(now)

            session = self._sessions.get(session_id) if session_id else None
            if session is None:
                if len(self._sessions) >= self._max_sessions:
                    oldest = min(self._sessions.values(), key=lambda s: s.last_active)
                    del self._sessions[oldest.id]
                    log.info("Session limit reached, evicted %s", oldest.id)
                session = Session(uuid.uuid4().hex, self._config, now=now)
                self._sessions[session.id] = session
                log.info("Session started: %s", session.id)

            session.touch(now)
            return session

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            self._evict_idle_locked(self._clock())
            return self._sessions.get(session_id)

    def drop(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.clear()
        log.info("Session dropped: %s", session_id)
        return True

    def evict_idle(self) -> int:
        with self._lock:
            return self._evict_idle_locked(self._clock())

    def _evict_idle_locked(self, now: float) -> int:
        expired = [
            sid for sid, s in self._sessions.items()
            if now - s.last_active > self._idle_timeout_s
        ]
        for sid in expired:
            self._sessions.pop(sid).clear()
        if expired:
            log.info("Evicted %d idle session(s)", len(expired))
        return len(expired)
