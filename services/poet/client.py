"""HTTP client for the recitation API."""

from __future__ import annotations

from typing import Any

import httpx

from shared.config import settings
from shared.logging import log_error


class ClientError(RuntimeError):
    """The API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


def _raise_for_error(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    try:
        message = resp.json().get("error") or ""
    except ValueError:
        message = ""
    message = message or f"HTTP error! status: {resp.status_code}"
    log_error("api_error", path=resp.request.url.path, status=resp.status_code, error=message)
    raise ClientError(message, resp.status_code)


class RecitationClient:
    """Thin wrapper over ``/api/poem``, ``/api/voice`` and ``/api/mix``."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=(base_url or settings.API_BASE_URL).rstrip("/"),
            timeout=timeout or settings.HTTP_TIMEOUT_SEC,
            transport=transport,
        )

    def __enter__(self) -> "RecitationClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def poem(self, text: str) -> str:
        resp = self._client.post("/api/poem", json={"text": text})
        _raise_for_error(resp)
        return resp.json()["poem"]

    def voice(self, text: str) -> bytes:
        resp = self._client.post("/api/voice", json={"text": text})
        _raise_for_error(resp)
        return resp.content

    def mix(self, voice_mp3: bytes, music_choice: str) -> bytes:
        resp = self._client.post(
            "/api/mix",
            files={"voice_audio": ("voice.mp3", voice_mp3, "audio/mpeg")},
            data={"musicChoice": music_choice},
        )
        _raise_for_error(resp)
        return resp.content


__all__ = ["RecitationClient", "ClientError"]
