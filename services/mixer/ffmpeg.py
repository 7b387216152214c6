"""FFmpeg binding that blends narration with a background track."""

from __future__ import annotations

import asyncio
import os
import subprocess
from pathlib import Path
from typing import Protocol

from shared.config import settings
from shared.logging import log_debug, log_error, log_info

MIX_FAILED = "Failed to weave voice and music into one track"


class MixError(RuntimeError):
    """The external media processor could not produce a mix."""


class MediaMixer(Protocol):
    async def mix(self, narration: Path, background: Path, output: Path) -> None:
        """Write ``narration`` blended with ``background`` to ``output``."""


def build_filter_graph(music_volume: float) -> list[str]:
    """Return the filter chains: attenuate the music, pin length to the voice."""
    return [
        f"[1:a]volume={music_volume}[music_vol]",
        "[0:a][music_vol]amix=inputs=2:duration=first:dropout_transition=2[aout]",
    ]


def build_command(narration: Path, background: Path, output: Path) -> list[str]:
    return [
        settings.FFMPEG_BIN,
        "-y",
        "-i",
        str(narration),
        "-i",
        str(background),
        "-filter_complex",
        ";".join(build_filter_graph(settings.MUSIC_VOLUME)),
        "-map",
        "[aout]",
        "-c:a",
        "libmp3lame",
        "-q:a",
        str(settings.MP3_QUALITY),
        str(output),
    ]


def _env(name: str) -> dict[str, str]:
    env = os.environ.copy()
    if os.getenv("DEBUG", "false").lower() == "true":
        ffreport = Path(settings.TMP_DIR) / f"ffreport-{name}.log"
        ffreport.parent.mkdir(parents=True, exist_ok=True)
        env["FFREPORT"] = f"file={ffreport}:level=32"
        log_info("ffreport", path=str(ffreport))
    return env


class FfmpegMixer:
    """Runs one ffmpeg process per mix and waits for it to exit."""

    async def mix(self, narration: Path, background: Path, output: Path) -> None:
        cmd = build_command(narration, background, output)
        log_debug("ffmpeg_cmd", argv=cmd)

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
                env=_env(output.stem),
            )
        except OSError as exc:
            log_error("ffmpeg_fail", error=str(exc))
            raise MixError(f"{MIX_FAILED}: {exc}") from exc

        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            snippet = stderr.decode("utf-8", "replace").strip()[-200:]
            log_error("ffmpeg_fail", exit_code=proc.returncode, stderr=snippet)
            output.unlink(missing_ok=True)
            raise MixError(f"{MIX_FAILED}: {snippet or f'exit code {proc.returncode}'}")

        log_info("music_mix", voice=str(narration), music=str(background), out=str(output))


def media_duration_ms(path: Path) -> int:
    """Return media duration in milliseconds using ffprobe."""
    try:
        result = subprocess.run(
            [
                settings.FFPROBE_BIN,
                "-v",
                "error",
                "-show_entries",
                "format=duration",
                "-of",
                "default=noprint_wrappers=1:nokey=1",
                str(path),
            ],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=True,
        )
        return int(float(result.stdout.strip()) * 1000)
    except (OSError, ValueError, subprocess.CalledProcessError) as exc:
        log_error("ffprobe", path=str(path), error=str(exc))
        return 0


__all__ = [
    "MediaMixer",
    "FfmpegMixer",
    "MixError",
    "build_filter_graph",
    "build_command",
    "media_duration_ms",
]
