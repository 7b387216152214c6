"""Shared data types for the recitation services."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal


ScratchPurpose = Literal["voice", "final_mix"]


@dataclass
class MixRequest:
    """A validated mixing request: uploaded narration plus a known track."""

    narration: bytes
    music_choice: str
    background: Path


@dataclass(frozen=True)
class ScratchFile:
    """A short-lived file owned by a single request."""

    path: Path
    purpose: ScratchPurpose


@dataclass
class MixResult:
    """The encoded mix produced for one request."""

    path: Path
    size: int


@dataclass
class LineCue:
    """Approximate playback window for one poem line, in seconds."""

    index: int
    text: str
    start: float
    end: float
