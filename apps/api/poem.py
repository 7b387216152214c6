"""Poem writing and line-timing endpoints."""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel, Field

from services.poet import poem as poem_service
from services.poet.timing import line_cues, poem_lines, render_srt, render_vtt

router = APIRouter(prefix="/api", tags=["poem"])


class PoemRequest(BaseModel):
    text: str = ""


class CuesRequest(BaseModel):
    poem: str
    duration: float = Field(ge=0)
    format: Literal["json", "srt", "vtt"] = "json"


@router.post("/poem")
def write_poem(body: PoemRequest) -> dict[str, Any]:
    """Write a poem inspired by ``text`` and return it with its lines."""
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Please provide some text to inspire the poem.")
    try:
        poem = poem_service.generate_poem(body.text)
    except poem_service.PoemError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to write the poem: {exc}") from exc
    return {"poem": poem, "lines": poem_lines(poem)}


@router.post("/cues", response_model=None)
def cues(body: CuesRequest) -> dict[str, Any] | Response:
    """Spread ``duration`` seconds over the poem's lines by character count."""
    timed = line_cues(poem_lines(body.poem), body.duration)
    if body.format == "srt":
        return Response(content=render_srt(timed), media_type="application/x-subrip")
    if body.format == "vtt":
        return Response(content=render_vtt(timed), media_type="text/vtt")
    return {
        "cues": [
            {"index": c.index, "text": c.text, "start": c.start, "end": c.end}
            for c in timed
        ]
    }


__all__ = ["router"]
