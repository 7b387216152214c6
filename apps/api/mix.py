"""``POST /api/mix``: blend uploaded narration with a background track."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import partial

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from starlette.datastructures import UploadFile
from starlette.types import Receive, Scope, Send

from services.mixer.ffmpeg import MixError
from services.mixer.pipeline import MixPipeline
from services.mixer.scratch import ScratchSet, ScratchSpace
from services.mixer.tracks import TrackMissing, TrackRegistry, UnknownTrack
from shared.config import Settings, settings
from shared.logging import log_error, log_info
from shared.types import MixRequest

VOICE_REQUIRED = "Voice audio file is required for mixing."
MUSIC_REQUIRED = "Please choose a known background melody to accompany your verse."
MUSIC_MISSING = "Background music file not found on the server."
UNEXPECTED = "An unexpected error occurred while mixing. Please try again."

router = APIRouter(prefix="/api", tags=["mix"])


class MixStreamingResponse(StreamingResponse):
    """Streams the mix and always runs ``cleanup`` once sending ends.

    Runs even when the first ``send`` fails and the body iterator never
    starts.
    """

    def __init__(self, content, *, cleanup: Callable[[], Awaitable[None]], **kwargs) -> None:
        super().__init__(content, **kwargs)
        self._cleanup = cleanup

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self._cleanup()


class MixHandler:
    """Owns one mixing request from form parsing to the streamed reply."""

    def __init__(self, tracks: TrackRegistry, scratch: ScratchSpace, pipeline: MixPipeline) -> None:
        self.tracks = tracks
        self.scratch = scratch
        self.pipeline = pipeline

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> "MixHandler":
        cfg = cfg or settings
        return cls(
            tracks=TrackRegistry.from_settings(cfg),
            scratch=ScratchSpace(cfg.TMP_DIR),
            pipeline=MixPipeline(),
        )

    async def parse(self, request: Request) -> MixRequest:
        """Validate the multipart form before any scratch file exists."""
        try:
            async with request.form() as form:
                upload = form.get("voice_audio")
                choice = form.get("musicChoice")
                narration = await upload.read() if isinstance(upload, UploadFile) else b""
        except Exception as exc:
            log_error("mix_form_error", error=str(exc))
            raise HTTPException(status_code=400, detail="Could not read the uploaded form.") from exc

        if not narration:
            raise HTTPException(status_code=400, detail=VOICE_REQUIRED)
        music_choice = choice if isinstance(choice, str) else None
        try:
            background = self.tracks.resolve(music_choice)
        except UnknownTrack:
            raise HTTPException(status_code=400, detail=MUSIC_REQUIRED)
        except TrackMissing:
            raise HTTPException(status_code=500, detail=MUSIC_MISSING)
        return MixRequest(narration=narration, music_choice=music_choice, background=background)

    async def handle(self, request: Request) -> StreamingResponse:
        mix_request = await self.parse(request)
        scratch: ScratchSet | None = None
        streaming = False
        try:
            scratch = self.scratch.session()
            result = await self.pipeline.run(mix_request.narration, mix_request.background, scratch)
            response = MixStreamingResponse(
                self.pipeline.stream(result),
                cleanup=partial(self.pipeline.release, scratch),
                media_type="audio/mpeg",
                headers={
                    "Content-Length": str(result.size),
                    "Content-Disposition": 'inline; filename="final_mix.mp3"',
                },
            )
            streaming = True
            log_info("mix_stream", choice=mix_request.music_choice, bytes=result.size)
            return response
        except MixError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        except Exception as exc:
            log_error("mix_unexpected", error_class=exc.__class__.__name__, error=str(exc))
            raise HTTPException(status_code=500, detail=UNEXPECTED) from exc
        finally:
            # The response releases scratch once it has been handed off.
            if scratch is not None and not streaming:
                scratch.release()


def get_mix_handler() -> MixHandler:
    return MixHandler.from_settings()


@router.post("/mix")
async def mix(request: Request, handler: MixHandler = Depends(get_mix_handler)) -> StreamingResponse:
    """Return the narration mixed with the chosen background track."""
    return await handler.handle(request)


__all__ = ["router", "MixHandler", "MixStreamingResponse", "get_mix_handler"]
