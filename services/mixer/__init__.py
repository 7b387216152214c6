"""Narration mixing components."""

from . import ffmpeg, pipeline, scratch, tracks

__all__ = ["ffmpeg", "pipeline", "scratch", "tracks"]
