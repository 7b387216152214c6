"""Scratch file allocation and best-effort cleanup."""

from __future__ import annotations

import secrets
import time
from pathlib import Path

from shared.logging import log_debug, log_warn
from shared.types import ScratchFile, ScratchPurpose


def _token() -> str:
    return secrets.token_hex(4)


def discard(path: Path) -> None:
    """Delete ``path``; an absent file is fine and other errors only log."""
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        log_warn("scratch_cleanup_failed", path=str(path), error=str(exc))


class ScratchSpace:
    """A directory of uniquely named, request-owned scratch files."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def ensure(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def allocate(self, purpose: ScratchPurpose) -> ScratchFile:
        """Return a new scratch path named ``<purpose>-<ms>-<token>.mp3``."""
        stamp = int(time.time() * 1000)
        path = self.root / f"{purpose}-{stamp}-{_token()}.mp3"
        return ScratchFile(path=path, purpose=purpose)

    def session(self) -> "ScratchSet":
        self.ensure()
        return ScratchSet(self)


class ScratchSet:
    """Every scratch file allocated for one request.

    :meth:`release` may be called from several exit paths; each call tries to
    delete every file that was handed out.
    """

    def __init__(self, space: ScratchSpace) -> None:
        self._space = space
        self.files: list[ScratchFile] = []

    def allocate(self, purpose: ScratchPurpose) -> Path:
        scratch = self._space.allocate(purpose)
        self.files.append(scratch)
        return scratch.path

    def release(self) -> None:
        for scratch in self.files:
            discard(scratch.path)
        log_debug("scratch_release", paths=[str(s.path) for s in self.files])


__all__ = ["ScratchSpace", "ScratchSet", "discard"]
