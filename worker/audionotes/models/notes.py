from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class EnhanceNotesRequest(BaseModel):
    existing_notes: str = Field(default="", description="Notes, one item per line")
    transcription: str = Field(default="", description="Transcript text to merge in")


class EnhanceNotesResponse(BaseModel):
    ok: bool
    enhanced_notes: str
    sections: List[str] = []
