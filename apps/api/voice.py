"""``POST /api/voice``: narrate poem text as MP3."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel

from services.poet import tts

router = APIRouter(prefix="/api", tags=["voice"])


class SpeechRequest(BaseModel):
    text: str = ""


@router.post("/voice")
def voice(body: SpeechRequest) -> Response:
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Poem text is required.")
    try:
        audio = tts.synthesize(body.text)
    except tts.SpeechError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to generate speech: {exc}") from exc
    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={"Content-Disposition": 'inline; filename="voice.mp3"'},
    )


__all__ = ["router"]
