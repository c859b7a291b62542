#!/usr/bin/env python3
# playlist.py – rev-p6  (2026-10-14)
"""
Ordered, de-duplicated list of tracks with one optional *selected* track.

Every lookup goes by Track equality (filename + duration), never by a cached
index: shuffling and moving rows would invalidate stored positions.

NB: remove() / clear() also delete the matching file from the downloads
folder. That cannot be undone.
"""

from __future__ import annotations
import random
from pathlib import Path
from typing  import Iterator, List, Optional

from loguru import logger

import scanner
from track import Track


class NotInPlaylist(LookupError):
    """Track lookup by equality found nothing."""


class NoSelection(LookupError):
    """An operation needed a selected track and there is none."""


class Playlist:
    def __init__(self, tracks: Optional[List[Track]] = None, *,
                 downloads_dir: Path | str = "downloads"):
        self.tracks: List[Track]      = []
        self.selected: Optional[Track] = None
        self.downloads_dir = Path(downloads_dir)
        for t in tracks or []:
            self.add_track(t)

    # ─────────────────────────────── container protocol
    def __len__(self) -> int:                 return len(self.tracks)
    def __iter__(self) -> Iterator[Track]:    return iter(self.tracks)
    def __getitem__(self, i: int) -> Track:   return self.tracks[i]
    def __contains__(self, track) -> bool:    return track in self.tracks

    def __repr__(self):
        return f"<Playlist ({len(self.tracks)} tracks, selected={self.selected!r})>"

    # ─────────────────────────────── lookup
    def index_of(self, track: Track) -> int:
        try:
            return self.tracks.index(track)
        except ValueError:
            raise NotInPlaylist(f"{track!r} is not in the playlist") from None

    def selected_index(self) -> Optional[int]:
        if self.selected is None or self.selected not in self.tracks:
            return None
        return self.tracks.index(self.selected)

    def next_after(self, track: Track) -> Track:
        i = self.index_of(track)
        return self.tracks[(i + 1) % len(self.tracks)]

    def select(self, track: Optional[Track]) -> None:
        if track is not None and track not in self.tracks:
            raise NotInPlaylist(f"cannot select {track!r}: not in the playlist")
        self.selected = track

    def require_selected(self) -> Track:
        if self.selected is None:
            raise NoSelection("no track is selected")
        return self.selected

    # ─────────────────────────────── adding
    def add(self, location: Path | str) -> Optional[Track]:
        """Append the audio file at *location*; None if rejected or a duplicate."""
        path = Path(location)
        if not scanner.is_audio(path):
            logger.debug(f"rejected non-audio file: {path}")
            return None
        return self.add_track(Track.from_location(path))

    def add_track(self, track: Track) -> Optional[Track]:
        if track in self.tracks:
            return None
        self.tracks.append(track)
        logger.debug(f"added {track!r}")
        return track

    def add_downloads(self) -> List[Track]:
        added = [t for t in map(self.add, scanner.scan_audio_files(self.downloads_dir)) if t]
        if added:
            logger.info(f"{len(added)} downloaded track(s) added")
        return added

    # ─────────────────────────────── removing
    def _delete_download(self, track: Track) -> None:
        if not self.downloads_dir.is_dir():
            return
        target = track.location.resolve()
        for entry in self.downloads_dir.iterdir():
            if entry.is_file() and entry.resolve() == target:
                entry.unlink()
                logger.info(f"deleted downloaded file {entry}")

    def remove(self, track: Track) -> None:
        self._delete_download(track)
        self.tracks = [t for t in self.tracks if t != track]
        if self.selected == track:
            self.selected = None

    def clear(self) -> None:
        for t in list(self.tracks):
            self.remove(t)

    # ─────────────────────────────── ordering
    def _swap(self, track: Track, step: int) -> None:
        i = self.index_of(track)
        j = (i + step) % len(self.tracks)
        self.tracks[i], self.tracks[j] = self.tracks[j], self.tracks[i]

    def move_up(self, track: Track) -> None:
        """Swap with the previous row; the first row swaps with the last."""
        self._swap(track, -1)

    def move_down(self, track: Track) -> None:
        """Swap with the next row; the last row swaps with the first."""
        self._swap(track, 1)

    def shuffle(self, rng: Optional[random.Random] = None) -> None:
        (rng or random).shuffle(self.tracks)
