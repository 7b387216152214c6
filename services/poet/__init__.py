"""Poem writing, narration and playback timing."""

from . import client, poem, recitation, timing, tts

__all__ = ["client", "poem", "recitation", "timing", "tts"]
