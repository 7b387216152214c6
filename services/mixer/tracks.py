"""Background track registry mapping music selections to files."""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from shared.config import Settings, settings as default_settings
from shared.logging import log_error, log_info


class UnknownTrack(KeyError):
    """The music selection is missing or not one of the known keys."""


class TrackMissing(FileNotFoundError):
    """The selection is known but its file is absent from the server."""


class TrackRegistry(Mapping[str, Path]):
    """Immutable ``music choice -> file`` table.

    Existence is checked when a track is resolved, not when the registry is
    built. :meth:`validate` offers the eager check for startup.
    """

    def __init__(self, tracks: Mapping[str, Path]) -> None:
        self._tracks = MappingProxyType(dict(tracks))

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TrackRegistry":
        cfg = settings or default_settings
        music_dir = Path(cfg.MUSIC_DIR)
        return cls({key: music_dir / name for key, name in cfg.MUSIC_TRACKS.items()})

    def __getitem__(self, key: str) -> Path:
        return self._tracks[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tracks)

    def __len__(self) -> int:
        return len(self._tracks)

    def resolve(self, choice: str | None) -> Path:
        """Return the readable file for ``choice``.

        Raises :class:`UnknownTrack` for a missing or unknown key and
        :class:`TrackMissing` when the file is not on disk.
        """

        if not choice or choice not in self._tracks:
            raise UnknownTrack(choice)
        path = self._tracks[choice]
        if not path.is_file() or not os.access(path, os.R_OK):
            log_error("music_missing", choice=choice, path=str(path))
            raise TrackMissing(f"background track not found: {path}")
        log_info("music_select", choice=choice, path=str(path))
        return path

    def validate(self) -> list[str]:
        """Return the keys whose files are missing, logging each one."""
        missing: list[str] = []
        for key, path in self._tracks.items():
            if not path.is_file():
                log_error("music_missing", choice=key, path=str(path))
                missing.append(key)
        return missing


__all__ = ["TrackRegistry", "UnknownTrack", "TrackMissing"]
