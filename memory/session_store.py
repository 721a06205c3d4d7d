"""Session store abstractions for conversation contexts."""
from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Dict, Optional

from memory.session_context import SessionContext
from stylist_app.errors import SessionNotFoundError


class SessionStore:
    """Interface for session context persistence.

    Stores also hand out one lock per conversation so a turn can check its
    sequence number and commit its changes atomically.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def lock_for(self, conversation_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(conversation_id, threading.Lock())

    def get(self, conversation_id: str) -> Optional[SessionContext]:
        raise NotImplementedError

    def save(self, session: SessionContext) -> None:
        raise NotImplementedError

    def delete(self, conversation_id: str) -> None:
        raise NotImplementedError

    def session_exists(self, conversation_id: str) -> bool:
        return self.get(conversation_id) is not None

    def require(self, conversation_id: str) -> SessionContext:
        session = self.get(conversation_id)
        if session is None:
            raise SessionNotFoundError(conversation_id)
        return session

    def get_or_create(self, conversation_id: str, user_id: str | None = None) -> SessionContext:
        session = self.get(conversation_id)
        if session is None:
            session = SessionContext(conversation_id=conversation_id, user_id=user_id)
            self.save(session)
        elif user_id and not session.user_id:
            session.user_id = user_id
        return session


class InMemorySessionStore(SessionStore):
    """Process-local store; sessions live as long as the process."""

    def __init__(self) -> None:
        super().__init__()
        self._sessions: Dict[str, SessionContext] = {}

    def get(self, conversation_id: str) -> Optional[SessionContext]:
        return self._sessions.get(conversation_id)

    def save(self, session: SessionContext) -> None:
        self._sessions[session.conversation_id] = session

    def delete(self, conversation_id: str) -> None:
        self._sessions.pop(conversation_id, None)


class JSONSessionStore(SessionStore):
    """JSON-file-backed SessionStore suitable for local runs."""

    def __init__(self, base_dir: str | Path = "data/sessions") -> None:
        super().__init__()
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, conversation_id: str) -> Path:
        safe_id = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in conversation_id)
        return self.base_dir / f"{safe_id}.json"

    def get(self, conversation_id: str) -> Optional[SessionContext]:
        path = self._path(conversation_id)
        if not path.exists():
            return None
        return SessionContext.from_export(json.loads(path.read_text()))

    def save(self, session: SessionContext) -> None:
        self._path(session.conversation_id).write_text(json.dumps(session.export(), indent=2))

    def delete(self, conversation_id: str) -> None:
        path = self._path(conversation_id)
        if path.exists():
            path.unlink()


__all__ = ["SessionStore", "InMemorySessionStore", "JSONSessionStore"]
