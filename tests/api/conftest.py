import pytest
from fastapi.testclient import TestClient

from apps.api.main import app
from apps.api.mix import MixHandler, get_mix_handler
from services.mixer.pipeline import MixPipeline
from services.mixer.scratch import ScratchSpace
from services.mixer.tracks import TrackRegistry
from shared.config import settings


@pytest.fixture
def scratch_dir(tmp_path, monkeypatch):
    path = tmp_path / "scratch"
    monkeypatch.setattr(settings, "TMP_DIR", path)
    return path


@pytest.fixture
def make_client(music_dir, scratch_dir):
    """Build a TestClient whose mix handler uses ``mixer``."""

    clients = []

    def _make(mixer=None, scratch_root=None):
        handler = MixHandler(
            tracks=TrackRegistry(
                {
                    "ambient": music_dir / "ambient_background.mp3",
                    "orchestral": music_dir / "orchestral_background.mp3",
                }
            ),
            scratch=ScratchSpace(scratch_root or scratch_dir),
            pipeline=MixPipeline(mixer, cleanup_delay=0),
        )
        app.dependency_overrides[get_mix_handler] = lambda: handler
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)
    app.dependency_overrides.clear()


@pytest.fixture(name="client")
def client_fixture(make_client, fake_mixer):
    return make_client(fake_mixer)
