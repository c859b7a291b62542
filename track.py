#!/usr/bin/env python3
# track.py – rev-t3  (2026-10-12)
"""
Single audio-file reference.

Two tracks are the *same song* when their base filename and duration match,
wherever the files live.  Playability is sticky: a track built from a missing
(or unreadable) file stays unplayable forever, a track that started out fine
is re-checked against the filesystem on every query.
"""

from __future__ import annotations
from pathlib import Path
from typing  import Callable

from loguru import logger
from mutagen import File as MFile, MutagenError


def read_duration(path: Path) -> float | None:
    """Return total length in seconds, or None if mutagen can't read *path*."""
    try:
        audio = MFile(path)
    except (MutagenError, OSError) as e:
        logger.warning(f"metadata read failed for {path}: {e}")
        return None
    if audio is None or getattr(audio, "info", None) is None:
        return None
    return float(audio.info.length or 0.0)


def fmt_mmss(seconds: float) -> str:
    secs = int(seconds)
    return f"{secs // 60:02}:{secs % 60:02}"


class Track:
    __slots__ = ("location", "duration", "_playable")

    def __init__(self, location: Path | str, duration: float = 0.0):
        self.location  = Path(location)
        self.duration  = float(duration)
        self._playable = self.location.exists()

    @classmethod
    def from_location(cls, location: Path | str,
                      read: Callable[[Path], float | None] = read_duration) -> "Track":
        path = Path(location)
        if not path.exists():
            logger.debug(f"missing file, flagged unplayable: {path}")
            return cls(path, 0.0)
        duration = read(path)
        track = cls(path, duration or 0.0)
        if duration is None:
            track._playable = False
        return track

    # ─────────────────────────────── queries
    @property
    def name(self) -> str:
        return self.location.name

    def is_playable(self) -> bool:
        if not self._playable:
            return False
        return self.location.exists()

    def formatted_duration(self) -> str:
        return fmt_mmss(self.duration)

    # ─────────────────────────────── (de)serialisation
    def to_json(self) -> str:
        return str(self.location)

    @classmethod
    def from_json(cls, value: str) -> "Track":
        return cls.from_location(value)

    # ─────────────────────────────── identity
    def __eq__(self, other):
        if not isinstance(other, Track):
            return NotImplemented
        return self.name == other.name and self.duration == other.duration

    def __hash__(self):
        return hash((self.name, self.duration))

    def __repr__(self):
        return f"<Track {self.name!r} {self.formatted_duration()}>"
