from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from .summary import SummaryResponse


# Upstream (recognition provider) events

class BeginEvent(BaseModel):
    type: Literal["Begin"]
    id: Optional[str] = None


class TurnEvent(BaseModel):
    type: Literal["Turn"]
    turn_order: Optional[int] = 0
    end_of_turn: bool = False
    transcript: Optional[str] = None
    utterance: Optional[str] = None


class TerminationEvent(BaseModel):
    type: Literal["Termination"]


UpstreamEvent = Annotated[Union[BeginEvent, TurnEvent, TerminationEvent], Field(discriminator="type")]
upstream_event_adapter: TypeAdapter = TypeAdapter(UpstreamEvent)


# Notifications sent to the client; dump with by_alias=True for the wire shape

class SessionStart(BaseModel):
    type: Literal["session_start"] = "session_start"
    session_id: str = Field(serialization_alias="sessionId")


class PartialTranscript(BaseModel):
    type: Literal["partial_transcript"] = "partial_transcript"
    text: str


class FinalTranscript(BaseModel):
    type: Literal["final_transcript"] = "final_transcript"
    text: str
    full_transcript: str = Field(serialization_alias="fullTranscript")


class SessionEnd(BaseModel):
    type: Literal["session_end"] = "session_end"
    full_transcript: str = Field(serialization_alias="fullTranscript")
    summary: Optional[SummaryResponse] = None


class ErrorNotice(BaseModel):
    type: Literal["error"] = "error"
    message: str


Notification = Union[SessionStart, PartialTranscript, FinalTranscript, SessionEnd, ErrorNotice]


# HTTP views of live sessions

class TurnView(BaseModel):
    turn_order: int
    text: str


class SessionInfo(BaseModel):
    session_id: str
    phase: str
    turn_count: int


class SessionListResponse(BaseModel):
    ok: bool = True
    sessions: List[SessionInfo] = []


class TranscriptResponse(BaseModel):
    ok: bool = True
    session_id: str
    phase: str
    turns: List[TurnView] = []
    full_transcript: str = ""
    partial: str = ""
