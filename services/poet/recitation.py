"""Which narration is current: speech only or mixed with music."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import List, Optional

from shared.logging import log_error, log_info

from .timing import poem_lines

NO_MUSIC = "none"
DOWNLOAD_NAME = "soulful_recitation.mp3"

Mixer = Callable[[bytes, str], bytes]
Speaker = Callable[[str], bytes]


class NoPoemYet(RuntimeError):
    """Music was chosen before any narration exists."""


class NothingToDownload(RuntimeError):
    """There is no current audio to save."""


@dataclass
class Recitation:
    poem: str = ""
    speech: Optional[bytes] = None
    mixed: Optional[bytes] = None
    music_choice: str = NO_MUSIC

    @property
    def lines(self) -> List[str]:
        return poem_lines(self.poem)

    @property
    def current(self) -> Optional[bytes]:
        if self.music_choice != NO_MUSIC and self.mixed is not None:
            return self.mixed
        return self.speech

    def reset(self, poem: str, speech: bytes) -> None:
        """Start over with a freshly written poem and its narration."""
        self.poem = poem
        self.speech = speech
        self.mixed = None
        self.music_choice = NO_MUSIC

    def select_music(self, choice: str, mix: Mixer, speak: Speaker | None = None) -> bytes:
        """Switch the current track to ``choice`` and return its MP3 bytes.

        ``mix(voice_mp3, choice)`` produces the blended track. If it fails the
        selection falls back to ``none`` and the error is re-raised.
        ``speak`` regenerates narration when none is held.
        """

        if not self.poem:
            raise NoPoemYet("Generate the poem's narration before choosing music.")
        if choice == self.music_choice and self.current is not None:
            return self.current

        if self.speech is None:
            if speak is None:
                raise NoPoemYet("No narration is available to mix.")
            self.speech = speak(self.poem)

        if choice == NO_MUSIC:
            self.mixed = None
            self.music_choice = NO_MUSIC
            return self.speech

        try:
            self.mixed = mix(self.speech, choice)
        except Exception as exc:
            log_error("recitation_mix_failed", choice=choice, error=str(exc))
            self.mixed = None
            self.music_choice = NO_MUSIC
            raise
        self.music_choice = choice
        log_info("recitation_mix", choice=choice, bytes=len(self.mixed))
        return self.mixed

    def download(self) -> tuple[str, bytes]:
        audio = self.current
        if not audio:
            raise NothingToDownload("There's no audio to download yet.")
        return DOWNLOAD_NAME, audio


__all__ = ["Recitation", "NoPoemYet", "NothingToDownload", "NO_MUSIC", "DOWNLOAD_NAME"]
