from pathlib import Path

import pytest

from services.mixer.ffmpeg import MixError


class FakeMixer:
    """Stand-in for ffmpeg: concatenates both inputs into the output."""

    def __init__(self):
        self.calls = []
        self.error = None

    async def mix(self, narration: Path, background: Path, output: Path) -> None:
        self.calls.append((narration, background, output))
        if self.error is not None:
            raise self.error
        output.write_bytes(narration.read_bytes() + background.read_bytes())


@pytest.fixture
def fake_mixer():
    return FakeMixer()


@pytest.fixture
def failing_mixer():
    mixer = FakeMixer()
    mixer.error = MixError("Failed to weave voice and music into one track: boom")
    return mixer


@pytest.fixture
def music_dir(tmp_path: Path) -> Path:
    """Music directory holding only the ambient track."""
    path = tmp_path / "music"
    path.mkdir()
    (path / "ambient_background.mp3").write_bytes(b"ambient")
    return path
