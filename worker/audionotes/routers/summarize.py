from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..models.summary import SummarizeRequest, SummarizeResponse
from ..services.summarizer import render_summary_markdown, summarize
from ..state import State, get_state

router = APIRouter(tags=["summarize"])


@router.post("/summarize", response_model=SummarizeResponse)
def v1_summarize(payload: SummarizeRequest, state: State = Depends(get_state)) -> SummarizeResponse:
    if not payload.text.strip():
        raise HTTPException(status_code=400, detail="No text provided for summarization")
    result = summarize(payload.text, state.summary_options)
    markdown = None
    if (payload.format or "").lower() in {"markdown", "md"}:
        markdown = render_summary_markdown(result)
    return SummarizeResponse(**result.to_dict(), markdown=markdown)
