"""OpenAI text-to-speech client returning MP3 bytes."""

from __future__ import annotations

import requests

from shared.config import settings
from shared.logging import log_error, log_info


class SpeechError(RuntimeError):
    """Speech synthesis produced no audio."""


def synthesize(
    text: str,
    *,
    voice: str | None = None,
    model: str | None = None,
    session: requests.sessions.Session | None = None,
) -> bytes:
    """Return MP3 narration for ``text``."""

    if not settings.OPENAI_API_KEY:
        raise SpeechError("OPENAI_API_KEY is required")

    url = f"{settings.OPENAI_BASE_URL.rstrip('/')}/audio/speech"
    headers = {
        "Authorization": f"Bearer {settings.OPENAI_API_KEY}",
        "Accept": "audio/mpeg",
    }
    payload = {
        "model": model or settings.OPENAI_TTS_MODEL,
        "voice": voice or settings.OPENAI_TTS_VOICE,
        "input": text,
        "response_format": "mp3",
    }
    sess = session or requests
    try:
        resp = sess.post(url, json=payload, headers=headers, timeout=settings.HTTP_TIMEOUT_SEC)
        resp.raise_for_status()
    except requests.RequestException as exc:
        log_error("tts_error", error=str(exc), api_key="REDACTED")
        raise SpeechError(str(exc)) from exc

    audio = resp.content
    if not audio:
        log_error("tts_empty", chars=len(text))
        raise SpeechError("no audio returned")

    log_info("tts", chars=len(text), bytes=len(audio), voice=payload["voice"])
    return audio


__all__ = ["synthesize", "SpeechError"]
