"""Upload -> scratch file -> ffmpeg -> stream -> cleanup."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from pathlib import Path

import anyio

from shared.config import settings
from shared.logging import log_error, log_info
from shared.types import MixResult

from .ffmpeg import FfmpegMixer, MediaMixer
from .scratch import ScratchSet

CHUNK_SIZE = 64 * 1024


class MixPipeline:
    """Produce one mix per call, stream it, and release its scratch files.

    The pipeline never retries and never falls back to narration alone; a
    mixer failure propagates as :class:`~services.mixer.ffmpeg.MixError`.
    """

    def __init__(self, mixer: MediaMixer | None = None, cleanup_delay: float | None = None) -> None:
        self.mixer = mixer or FfmpegMixer()
        self._cleanup_delay = cleanup_delay

    @property
    def cleanup_delay(self) -> float:
        if self._cleanup_delay is not None:
            return self._cleanup_delay
        return settings.CLEANUP_DELAY_MS / 1000.0

    async def run(self, narration: bytes, background: Path, scratch: ScratchSet) -> MixResult:
        """Copy ``narration`` into scratch space and mix it with ``background``."""
        voice_path = scratch.allocate("voice")
        voice_path.write_bytes(narration)
        mix_path = scratch.allocate("final_mix")

        await self.mixer.mix(voice_path, background, mix_path)

        size = mix_path.stat().st_size
        log_info("mix_ready", path=str(mix_path), bytes=size)
        return MixResult(path=mix_path, size=size)

    def stream(self, result: MixResult) -> Iterator[bytes]:
        """Yield the mix in chunks; a short or failed read is logged, not raised."""
        sent = 0
        try:
            with open(result.path, "rb") as fh:
                while chunk := fh.read(CHUNK_SIZE):
                    sent += len(chunk)
                    yield chunk
        except OSError as exc:
            log_error("mix_stream_error", path=str(result.path), sent=sent, error=str(exc))
        finally:
            if sent < result.size:
                log_error("mix_stream_incomplete", path=str(result.path), sent=sent, size=result.size)

    async def release(self, scratch: ScratchSet) -> None:
        """Wait ``cleanup_delay`` seconds, then delete every file in ``scratch``.

        Shielded so a cancelled response task still gets its files removed.
        """
        with anyio.CancelScope(shield=True):
            await asyncio.sleep(self.cleanup_delay)
            scratch.release()


__all__ = ["MixPipeline", "CHUNK_SIZE"]
