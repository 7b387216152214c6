"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

load_dotenv()


# Absolute path constants used across mixer components
# Environment variables can override these defaults.
BASE_DIR = Path(__file__).resolve().parent.parent
MUSIC_DIR = Path(os.getenv("MUSIC_DIR", str(BASE_DIR / "public" / "audio")))
TMP_DIR = Path(os.getenv("TMP_DIR", str(BASE_DIR / "tmp")))

DEFAULT_TRACKS = {
    "ambient": "ambient_background.mp3",
    "orchestral": "orchestral_background.mp3",
}


class Settings(BaseSettings):
    """Application settings read from environment variables."""

    BASE_DIR: Path = BASE_DIR
    MUSIC_DIR: Path = Field(default=MUSIC_DIR)
    TMP_DIR: Path = Field(default=TMP_DIR)
    MUSIC_TRACKS: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_TRACKS),
        description="Music selection key to file name under MUSIC_DIR (JSON)",
    )
    VALIDATE_TRACKS_ON_STARTUP: bool = Field(
        default=False,
        description="Check every background track exists when the API starts",
    )
    LOG_LEVEL: str = Field(
        default="INFO", description="Logging level"
        )

    # Mix policy
    MUSIC_VOLUME: float = Field(
        default=0.25,
        description="Amplitude multiplier applied to the background track",
    )
    MP3_QUALITY: int = Field(
        default=2,
        description="libmp3lame VBR quality for the mix output",
    )
    CLEANUP_DELAY_MS: int = Field(
        default=100,
        description="Pause between end of streaming and scratch file removal",
    )
    FFMPEG_BIN: str = Field(default="ffmpeg", description="ffmpeg executable")
    FFPROBE_BIN: str = Field(default="ffprobe", description="ffprobe executable")

    # OpenAI speech configuration
    OPENAI_API_KEY: str = Field(
        default="",
        description="OpenAI API key for speech synthesis",
    )
    OPENAI_BASE_URL: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI REST base URL",
    )
    OPENAI_TTS_MODEL: str = Field(
        default="gpt-4o-mini-tts",
        description="Model identifier for synthesis",
    )
    OPENAI_TTS_VOICE: str = Field(
        default="alloy",
        description="Voice identifier for synthesis",
    )

    # Gemini poem configuration
    GEMINI_API_KEY: str = Field(
        default="",
        description="Google Generative Language API key",
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
    )
    GEMINI_MODEL: str = Field(
        default="gemini-2.5-flash",
        description="Model used to write poems",
    )
    GEMINI_BASE_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Generative Language REST base URL",
    )

    API_BASE_URL: str = Field(
        default="http://localhost:8000",
        description="Base URL of the recitation API (used by the CLI)",
    )
    HTTP_TIMEOUT_SEC: float = Field(
        default=120.0,
        description="Timeout for outbound HTTP calls",
    )


settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "BASE_DIR",
    "MUSIC_DIR",
    "TMP_DIR",
    "DEFAULT_TRACKS",
]
