from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, WebSocket

from ..models.live import SessionInfo, SessionListResponse, TranscriptResponse
from ..models.summary import SummarizeResponse
from ..services.relay import relay_session
from ..services.summarizer import summarize
from ..services.turns import TranscriptSession
from ..state import State, get_state, get_ws_state

router = APIRouter(tags=["live"])
ws_router = APIRouter(tags=["live"])


def _get_session(state: State, session_id: str) -> TranscriptSession:
    session = state.sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return session


@ws_router.websocket("/ws")
async def live_transcription(websocket: WebSocket) -> None:
    state = get_ws_state(websocket)
    await relay_session(
        websocket,
        state.sessions,
        state.stream_factory,
        websocket.app.state.settings,
        state.summary_options,
    )


@router.get("/sessions", response_model=SessionListResponse)
def v1_list_sessions(state: State = Depends(get_state)) -> SessionListResponse:
    items = [
        SessionInfo(session_id=s.session_id, phase=s.phase.value, turn_count=s.turn_count)
        for s in state.sessions.list()
    ]
    return SessionListResponse(sessions=items)


@router.get("/sessions/{session_id}/transcript", response_model=TranscriptResponse)
def v1_session_transcript(session_id: str, state: State = Depends(get_state)) -> TranscriptResponse:
    session = _get_session(state, session_id)
    return TranscriptResponse(**session.snapshot())


@router.post("/sessions/{session_id}/summary", response_model=SummarizeResponse)
def v1_session_summary(session_id: str, state: State = Depends(get_state)) -> SummarizeResponse:
    # works on a snapshot, so a session closing meanwhile does not affect the result
    text = _get_session(state, session_id).full_transcript()
    result = summarize(text, state.summary_options)
    return SummarizeResponse(**result.to_dict())
