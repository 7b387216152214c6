import asyncio
import shutil
import subprocess
from pathlib import Path

import pytest

from services.mixer import ffmpeg
from services.mixer.ffmpeg import FfmpegMixer, MixError
from shared.config import settings


def test_filter_graph_attenuates_music_and_follows_voice():
    graph = ffmpeg.build_filter_graph(0.25)
    assert graph[0] == "[1:a]volume=0.25[music_vol]"
    assert "duration=first" in graph[1]
    assert graph[1].endswith("[aout]")


def test_command_encodes_mp3(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "MP3_QUALITY", 2)
    cmd = ffmpeg.build_command(tmp_path / "v.mp3", tmp_path / "m.mp3", tmp_path / "o.mp3")
    assert cmd[cmd.index("-c:a") + 1] == "libmp3lame"
    assert cmd[cmd.index("-q:a") + 1] == "2"
    assert cmd[cmd.index("-map") + 1] == "[aout]"
    assert cmd[-1] == str(tmp_path / "o.mp3")


class FakeProc:
    def __init__(self, returncode, stderr=b""):
        self.returncode = returncode
        self._stderr = stderr

    async def communicate(self):
        return b"", self._stderr


def test_failure_logs_and_removes_output(tmp_path, monkeypatch):
    out = tmp_path / "o.mp3"
    out.write_bytes(b"partial")
    logs = {}

    def fake_log_error(event, **fields):
        logs.update({"event": event, **fields})

    async def fake_exec(*args, **kwargs):
        return FakeProc(1, b"Invalid data found when processing input: boom")

    monkeypatch.setattr(ffmpeg, "log_error", fake_log_error)
    monkeypatch.setattr(ffmpeg.asyncio, "create_subprocess_exec", fake_exec)

    with pytest.raises(MixError) as info:
        asyncio.run(FfmpegMixer().mix(tmp_path / "v.mp3", tmp_path / "m.mp3", out))

    assert "boom" in str(info.value)
    assert logs["event"] == "ffmpeg_fail"
    assert logs["exit_code"] == 1
    assert not out.exists()


def test_missing_binary_is_a_mix_error(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "FFMPEG_BIN", str(tmp_path / "no-such-ffmpeg"))
    with pytest.raises(MixError):
        asyncio.run(FfmpegMixer().mix(tmp_path / "v.mp3", tmp_path / "m.mp3", tmp_path / "o.mp3"))


def test_duration_lookup_failure_returns_zero(tmp_path, monkeypatch):
    def fake_run(*args, **kwargs):
        raise subprocess.CalledProcessError(1, args[0], stderr="nope")

    monkeypatch.setattr(ffmpeg.subprocess, "run", fake_run)
    assert ffmpeg.media_duration_ms(tmp_path / "x.mp3") == 0


def _tone(path: Path, freq: int, seconds: float) -> None:
    subprocess.run(
        [
            "ffmpeg",
            "-y",
            "-f",
            "lavfi",
            "-i",
            f"sine=frequency={freq}:duration={seconds}",
            "-acodec",
            "libmp3lame",
            str(path),
        ],
        check=True,
        capture_output=True,
    )


@pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg required")
def test_mix_length_follows_narration(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "FFMPEG_BIN", "ffmpeg")
    monkeypatch.setattr(settings, "FFPROBE_BIN", "ffprobe")
    voice = tmp_path / "voice.mp3"
    music = tmp_path / "music.mp3"
    out = tmp_path / "mix.mp3"
    _tone(voice, 440, 1)
    _tone(music, 880, 3)

    asyncio.run(FfmpegMixer().mix(voice, music, out))

    assert out.stat().st_size > 0
    if shutil.which("ffprobe"):
        assert abs(ffmpeg.media_duration_ms(out) - 1000) < 250
