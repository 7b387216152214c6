from typer.testing import CliRunner

from apps.cli import main as cli_main
from services.poet.client import ClientError
from services.poet.recitation import DOWNLOAD_NAME

runner = CliRunner()


class FakeClient:
    instances = []

    def __init__(self, base_url=None, **kwargs):
        self.base_url = base_url
        self.mixed = []
        FakeClient.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None

    def poem(self, text):
        return "Quiet rain\n\non the window"

    def voice(self, text):
        return b"ID3speech"

    def mix(self, voice, choice):
        if choice == "jazz":
            raise ClientError("Please choose a known background melody.", 400)
        self.mixed.append(choice)
        return voice + b"+" + choice.encode()


def test_help_lists_commands():
    result = runner.invoke(cli_main.app, ["--help"])
    assert result.exit_code == 0
    for name in ("serve", "recite", "mix", "follow"):
        assert name in result.stdout


def test_recite_saves_speech_only(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_main, "RecitationClient", FakeClient)

    result = runner.invoke(cli_main.app, ["recite", "rain", "--output-dir", str(tmp_path)])

    assert result.exit_code == 0, result.stdout
    assert (tmp_path / DOWNLOAD_NAME).read_bytes() == b"ID3speech"
    assert "Quiet rain" in result.stdout


def test_recite_with_music_and_cues(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_main, "RecitationClient", FakeClient)
    monkeypatch.setattr(cli_main, "media_duration_ms", lambda path: 4000)
    cues = tmp_path / "poem.srt"

    result = runner.invoke(
        cli_main.app,
        ["recite", "rain", "--music", "ambient", "--output-dir", str(tmp_path), "--cues", str(cues)],
    )

    assert result.exit_code == 0, result.stdout
    assert (tmp_path / DOWNLOAD_NAME).read_bytes() == b"ID3speech+ambient"
    text = cues.read_text(encoding="utf-8")
    assert "Quiet rain" in text
    assert "00:00:04,000" in text


def test_recite_reports_api_errors(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_main, "RecitationClient", FakeClient)

    result = runner.invoke(
        cli_main.app, ["recite", "rain", "--music", "jazz", "--output-dir", str(tmp_path)]
    )

    assert result.exit_code == 1
    assert not (tmp_path / DOWNLOAD_NAME).exists()


def test_mix_command(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_main, "RecitationClient", FakeClient)
    voice = tmp_path / "voice.mp3"
    voice.write_bytes(b"ID3v")
    out = tmp_path / "out.mp3"

    result = runner.invoke(cli_main.app, ["mix", str(voice), "--music", "orchestral", "--output", str(out)])

    assert result.exit_code == 0, result.stdout
    assert out.read_bytes() == b"ID3v+orchestral"


def test_follow_prints_lines(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_main, "media_duration_ms", lambda path: 50)
    audio = tmp_path / "a.mp3"
    audio.write_bytes(b"x")
    poem = tmp_path / "poem.txt"
    poem.write_text("first line\n\nsecond line\n", encoding="utf-8")

    result = runner.invoke(cli_main.app, ["follow", str(audio), str(poem)])

    assert result.exit_code == 0, result.stdout
    assert result.stdout.index("first line") < result.stdout.index("second line")


def test_follow_without_duration(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_main, "media_duration_ms", lambda path: 0)
    audio = tmp_path / "a.mp3"
    audio.write_bytes(b"x")
    poem = tmp_path / "poem.txt"
    poem.write_text("line", encoding="utf-8")

    result = runner.invoke(cli_main.app, ["follow", str(audio), str(poem)])

    assert result.exit_code == 1
