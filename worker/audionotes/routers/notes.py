from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..models.notes import EnhanceNotesRequest, EnhanceNotesResponse
from ..services.notes import enhance_to_dict
from ..state import State, get_state

router = APIRouter(tags=["notes"])


@router.post("/enhance_notes", response_model=EnhanceNotesResponse)
def v1_enhance_notes(payload: EnhanceNotesRequest, state: State = Depends(get_state)) -> EnhanceNotesResponse:
    if not payload.existing_notes.strip() or not payload.transcription.strip():
        raise HTTPException(status_code=400, detail="Both existing notes and transcription are required")
    return EnhanceNotesResponse(
        **enhance_to_dict(payload.existing_notes, payload.transcription, state.enhance_options)
    )
