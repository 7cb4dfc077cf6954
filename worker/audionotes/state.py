from __future__ import annotations

from dataclasses import dataclass, field

from fastapi import Request, WebSocket

from .services.notes import EnhanceOptions
from .services.sessions import SessionStore
from .services.streaming import StreamFactory, open_assemblyai_stream
from .services.summarizer import SummaryOptions


@dataclass
class State:
    """Mutable application state shared across routers.

    Attached to FastAPI's app.state; live sessions are owned by the store and
    never shared between connections.
    """

    sessions: SessionStore = field(default_factory=SessionStore)
    stream_factory: StreamFactory = open_assemblyai_stream
    summary_options: SummaryOptions = field(default_factory=SummaryOptions)
    enhance_options: EnhanceOptions = field(default_factory=EnhanceOptions)


def get_state(request: Request) -> State:  # FastAPI dependency helper
    return request.app.state.state


def get_ws_state(websocket: WebSocket) -> State:
    return websocket.app.state.state
