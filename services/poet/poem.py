"""Poem generation through the Gemini ``generateContent`` REST endpoint."""

from __future__ import annotations

import requests

from shared.config import settings
from shared.logging import log_error, log_info

PROMPT_TEMPLATE = (
    "Write a beautiful and inspiring poem based on the following text, focusing on "
    "evocative imagery and emotional depth. Ensure the poem is at least 8 lines long. "
    'Text: "{text}"'
)


class PoemError(RuntimeError):
    """The text model returned no poem."""


def build_prompt(text: str) -> str:
    return PROMPT_TEMPLATE.format(text=text)


def _extract_text(data: dict) -> str:
    parts = []
    for candidate in data.get("candidates") or []:
        content = candidate.get("content") or {}
        for part in content.get("parts") or []:
            if part.get("text"):
                parts.append(part["text"])
        if parts:
            break
    return "".join(parts)


def generate_poem(
    text: str,
    *,
    model: str | None = None,
    session: requests.sessions.Session | None = None,
) -> str:
    """Ask the text model for a poem inspired by ``text``."""

    if not settings.GEMINI_API_KEY:
        raise PoemError("GEMINI_API_KEY is required")

    model_id = model or settings.GEMINI_MODEL
    url = f"{settings.GEMINI_BASE_URL.rstrip('/')}/models/{model_id}:generateContent"
    payload = {"contents": [{"role": "user", "parts": [{"text": build_prompt(text)}]}]}
    sess = session or requests
    try:
        resp = sess.post(
            url,
            json=payload,
            headers={"x-goog-api-key": settings.GEMINI_API_KEY},
            timeout=settings.HTTP_TIMEOUT_SEC,
        )
        resp.raise_for_status()
        poem = _extract_text(resp.json()).strip()
    except (requests.RequestException, ValueError) as exc:
        log_error("poem_error", model=model_id, error=str(exc))
        raise PoemError(str(exc)) from exc

    if not poem:
        log_error("poem_empty", model=model_id)
        raise PoemError("No poem text received from the model.")

    log_info("poem", model=model_id, chars=len(poem), lines=poem.count("\n") + 1)
    return poem


__all__ = ["generate_poem", "build_prompt", "PoemError", "PROMPT_TEMPLATE"]
