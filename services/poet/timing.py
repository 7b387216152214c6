"""Approximate line timing for highlighting a poem during playback.

Each line gets a share of the total audio duration proportional to its
character count. This is not forced alignment; long words and pauses are
ignored.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import List

from shared.logging import log_debug
from shared.types import LineCue

CLEAR = -1


def poem_lines(poem: str) -> List[str]:
    """Split ``poem`` into lines, dropping blank ones."""
    return [line for line in poem.split("\n") if line.strip()]


def line_cues(lines: List[str], duration: float) -> List[LineCue]:
    """Allocate ``duration`` seconds across ``lines`` by character count."""
    total_chars = sum(len(line) for line in lines)
    if not lines or total_chars == 0:
        return []
    cues: List[LineCue] = []
    start = 0.0
    for idx, line in enumerate(lines):
        span = duration * (len(line) / total_chars)
        cues.append(LineCue(index=idx, text=line, start=start, end=start + span))
        start += span
    return cues


class HighlightScheduler:
    """Fire ``on_line(index)`` as each cue starts and ``on_line(-1)`` at the end.

    Pending callbacks are dropped by :meth:`cancel`, which is what stopping or
    switching tracks must call.
    """

    def __init__(self, on_line: Callable[[int], None], loop: asyncio.AbstractEventLoop | None = None) -> None:
        self.on_line = on_line
        self._loop = loop
        self._handles: list[asyncio.TimerHandle] = []

    @property
    def pending(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled())

    def start(self, cues: List[LineCue], duration: float) -> None:
        self.cancel()
        if not cues:
            self.on_line(CLEAR)
            return
        loop = self._loop or asyncio.get_running_loop()
        for cue in cues:
            self._handles.append(loop.call_later(cue.start, self._fire, cue.index))
        self._handles.append(loop.call_later(duration, self._fire, CLEAR))
        log_debug("highlight_scheduled", cues=len(cues), duration=duration)

    def _fire(self, index: int) -> None:
        self.on_line(index)

    def cancel(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()


def _format_ts(seconds: float, kind: str) -> str:
    ms = int(round(seconds * 1000))
    h = ms // 3_600_000
    m = (ms % 3_600_000) // 60_000
    s = (ms % 60_000) // 1000
    millis = ms % 1000
    if kind == "srt":
        return f"{h:02}:{m:02}:{s:02},{millis:03}"
    return f"{h:02}:{m:02}:{s:02}.{millis:03}"


def render_srt(cues: Iterable[LineCue]) -> str:
    blocks = [
        f"{cue.index + 1}\n{_format_ts(cue.start, 'srt')} --> {_format_ts(cue.end, 'srt')}\n{cue.text.strip()}"
        for cue in cues
    ]
    return "\n\n".join(blocks) + "\n"


def render_vtt(cues: Iterable[LineCue]) -> str:
    lines = ["WEBVTT\n"]
    for cue in cues:
        lines.append(f"{_format_ts(cue.start, 'vtt')} --> {_format_ts(cue.end, 'vtt')}\n{cue.text.strip()}\n")
    return "\n".join(lines)


def write_cues(cues: Iterable[LineCue], dest: Path) -> Path:
    """Write ``cues`` as SRT or WebVTT depending on the suffix of ``dest``."""
    text = render_vtt(cues) if dest.suffix.lower() == ".vtt" else render_srt(cues)
    dest.write_text(text, encoding="utf-8")
    return dest


__all__ = [
    "CLEAR",
    "poem_lines",
    "line_cues",
    "HighlightScheduler",
    "render_srt",
    "render_vtt",
    "write_cues",
]
