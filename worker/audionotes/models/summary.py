from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class SummarizeRequest(BaseModel):
    text: str = Field(default="", description="Transcript or any plain text")
    format: Optional[str] = Field(default=None, description="'markdown' adds rendered notes")


class SummaryResponse(BaseModel):
    key_points: List[str] = []
    action_items: List[str] = []
    summary: str = ""
    word_count: int = 0
    sentence_count: int = 0
    compression_ratio: float = 0.0


class SummarizeResponse(SummaryResponse):
    ok: bool = True
    markdown: Optional[str] = None
