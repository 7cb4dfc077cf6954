from __future__ import annotations

import logging
import threading
import uuid
from typing import Dict, List, Optional

from .turns import TranscriptSession


class SessionStore:
    """Registry of live sessions, one per client connection.

    The lock only guards the registry itself; each session carries its own
    lock for its transcript state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: Dict[str, TranscriptSession] = {}

    def create(self, session_id: Optional[str] = None) -> TranscriptSession:
        with self._lock:
            sid = session_id or uuid.uuid4().hex[:12]
            while sid in self._sessions:
                sid = uuid.uuid4().hex[:12]
            session = TranscriptSession(sid)
            self._sessions[sid] = session
            return session

    def get(self, session_id: str) -> Optional[TranscriptSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def rekey(self, session: TranscriptSession) -> None:
        """Re-register ``session`` under its current id (e.g. the provider's Begin id)."""
        with self._lock:
            old = next((k for k, v in self._sessions.items() if v is session), None)
            if old is None or old == session.session_id:
                return
            if session.session_id in self._sessions:
                logging.getLogger("app.session").warning(
                    f"session id {session.session_id} already registered; keeping {old}"
                )
                return
            del self._sessions[old]
            self._sessions[session.session_id] = session

    def remove(self, session: TranscriptSession) -> None:
        with self._lock:
            for key in [k for k, v in self._sessions.items() if v is session]:
                del self._sessions[key]

    def list(self) -> List[TranscriptSession]:
        with self._lock:
            return list(self._sessions.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
