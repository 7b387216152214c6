"""FastAPI application setup with request logging and health checks."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from time import monotonic

from services.mixer.scratch import ScratchSpace
from services.mixer.tracks import TrackRegistry
from shared.config import settings
from shared.logging import log_error

from .mix import router as mix_router
from .poem import router as poem_router
from .voice import router as voice_router


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("api")
ready = False

app = FastAPI(title="Recitation API")


class LogRequestsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = monotonic()
        response = await call_next(request)
        duration_ms = int((monotonic() - start) * 1000)
        logger.info(
            "request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response


app.add_middleware(LogRequestsMiddleware)
app.include_router(mix_router)
app.include_router(voice_router)
app.include_router(poem_router)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render every HTTP error as ``{"error": message}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    return JSONResponse(status_code=400, content={"error": first.get("msg", "Invalid request.")})


@app.on_event("startup")
def on_startup() -> None:
    """Prepare scratch space and optionally check background tracks."""
    global ready
    ScratchSpace(settings.TMP_DIR).ensure()
    if settings.VALIDATE_TRACKS_ON_STARTUP:
        missing = TrackRegistry.from_settings(settings).validate()
        if missing:
            log_error("music_tracks_missing", choices=missing)
    ready = True


@app.get("/healthz")
async def health() -> dict[str, str]:
    """Liveness check."""
    return {"status": "ok"}


@app.get("/readyz")
async def readyz() -> dict[str, str]:
    """Readiness check that flips true after startup checks."""
    if not ready:
        raise HTTPException(status_code=503, detail="not ready")
    return {"status": "ok"}
