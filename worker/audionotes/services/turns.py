"""Turn reassembly for one live transcription session.

The recognition provider reports turns that can arrive late, out of order or
more than once. Completed turns are kept in a mapping keyed by their
``turn_order`` and the full transcript is always rebuilt by sorting those keys,
so arrival order never matters. A turn key, once committed, is never
overwritten.

Phases: ``idle`` (connected, no Begin yet) -> ``active`` -> ``closed``.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from ..models.live import (
    BeginEvent,
    ErrorNotice,
    FinalTranscript,
    Notification,
    PartialTranscript,
    SessionEnd,
    SessionStart,
    TerminationEvent,
    TurnEvent,
    upstream_event_adapter,
)

_log = logging.getLogger("app.session")

UpstreamEvent = Union[BeginEvent, TurnEvent, TerminationEvent]


class SessionPhase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    CLOSED = "closed"


def parse_event(raw: Union[str, bytes, Dict[str, Any]]) -> Optional[UpstreamEvent]:
    """Validate a raw provider message; malformed or unknown ones yield None."""
    try:
        if isinstance(raw, (str, bytes)):
            return upstream_event_adapter.validate_json(raw)
        return upstream_event_adapter.validate_python(raw)
    except ValidationError as e:
        _log.warning(f"dropping malformed upstream event: {e.errors(include_url=False)[:1]}")
        return None


def _turn_text(event: TurnEvent) -> str:
    return (event.utterance or event.transcript or "").strip()


class TranscriptSession:
    """Per-connection transcript state.

    All state is guarded by one lock so a reader never sees a half-applied
    commit. Methods return the notifications to deliver to the client.
    """

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self._lock = threading.Lock()
        self._turns: Dict[int, str] = {}
        self._partial = ""
        self._phase = SessionPhase.IDLE
        self._ended = False

    @property
    def phase(self) -> SessionPhase:
        with self._lock:
            return self._phase

    @property
    def partial(self) -> str:
        with self._lock:
            return self._partial

    @property
    def turn_count(self) -> int:
        with self._lock:
            return len(self._turns)

    def _build_transcript(self) -> str:
        return " ".join(self._turns[k] for k in sorted(self._turns)).strip()

    def full_transcript(self) -> str:
        with self._lock:
            return self._build_transcript()

    def turns(self) -> List[Tuple[int, str]]:
        with self._lock:
            return [(k, self._turns[k]) for k in sorted(self._turns)]

    def snapshot(self) -> Dict[str, Any]:
        """Consistent copy of the session state for readers."""
        with self._lock:
            return {
                "session_id": self.session_id,
                "phase": self._phase.value,
                "turns": [{"turn_order": k, "text": self._turns[k]} for k in sorted(self._turns)],
                "full_transcript": self._build_transcript(),
                "partial": self._partial,
            }

    def handle_message(self, raw: Union[str, bytes, Dict[str, Any]]) -> List[Notification]:
        event = parse_event(raw)
        if event is None:
            return []
        return self.apply(event)

    def apply(self, event: UpstreamEvent) -> List[Notification]:
        with self._lock:
            if self._phase is SessionPhase.CLOSED:
                _log.warning(f"session {self.session_id}: {event.type} after close ignored")
                return []
            if isinstance(event, BeginEvent):
                return self._on_begin(event)
            if isinstance(event, TurnEvent):
                return self._on_turn(event)
            return self._on_termination()

    def _on_begin(self, event: BeginEvent) -> List[Notification]:
        if event.id:
            self.session_id = event.id
        self._phase = SessionPhase.ACTIVE
        _log.info(f"session {self.session_id} started")
        return [SessionStart(session_id=self.session_id)]

    def _on_turn(self, event: TurnEvent) -> List[Notification]:
        if self._phase is SessionPhase.IDLE:
            _log.warning(f"session {self.session_id}: turn before Begin, activating")
            self._phase = SessionPhase.ACTIVE
        if not event.end_of_turn:
            text = event.transcript or ""
            if not text:
                return []
            self._partial = text
            return [PartialTranscript(text=text)]

        order = event.turn_order if event.turn_order is not None else 0
        text = _turn_text(event)
        if not text:
            return []
        if order in self._turns:
            _log.debug(f"session {self.session_id}: duplicate turn {order} ignored")
            return []
        self._turns[order] = text
        self._partial = ""
        full = self._build_transcript()
        _log.info(f"session {self.session_id}: completed turn {order}, transcript {len(full)} chars")
        return [FinalTranscript(text=text, full_transcript=full)]

    def _on_termination(self) -> List[Notification]:
        self._phase = SessionPhase.CLOSED
        if self._ended:
            return []
        self._ended = True
        full = self._build_transcript()
        _log.info(f"session {self.session_id} terminated: {len(full)} chars, {len(self._turns)} turns")
        return [SessionEnd(full_transcript=full)]

    def close(self) -> Optional[SessionEnd]:
        """Close the session; the session end is returned only if not yet sent."""
        with self._lock:
            self._phase = SessionPhase.CLOSED
            self._partial = ""
            if self._ended:
                return None
            self._ended = True
            return SessionEnd(full_transcript=self._build_transcript())

    def fail(self, message: str) -> ErrorNotice:
        """Report an upstream failure. Committed turns are left untouched."""
        _log.warning(f"session {self.session_id}: upstream error: {message}")
        return ErrorNotice(message=f"Transcription service error: {message}")
