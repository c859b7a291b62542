#!/usr/bin/env python3
# autoplay.py – rev-a3  (2026-10-19)
"""Advance to the next playlist row when the current track ends by itself."""

from __future__ import annotations
from typing import Optional

from loguru import logger

from player   import PlaybackSession
from playlist import Playlist
from track    import Track


class AutoplayController:
    def __init__(self, playlist: Playlist, session: PlaybackSession, *,
                 enabled: bool = False):
        self.playlist = playlist
        self.session  = session
        self.enabled  = enabled

    def tick(self) -> Optional[Track]:
        """Call once per host tick; returns the track it started, if any."""
        if self.enabled and self.session.just_finished():
            return self.advance()
        return None

    def advance(self) -> Optional[Track]:
        """
        Select and play the row after the selected one (wrapping to the top).

        Unplayable rows are skipped; if a whole lap finds nothing playable the
        session is stopped.  Raises NoSelection / NotInPlaylist when the
        selection is missing or no longer in the playlist.
        """
        cur = self.playlist.require_selected()
        start = self.playlist.index_of(cur)
        n = len(self.playlist)
        for step in range(1, n + 1):
            nxt = self.playlist[(start + step) % n]
            if nxt.is_playable():
                break
            logger.warning(f"autoplay skipped unplayable {nxt.name}")
        else:
            logger.warning("autoplay: nothing playable left, stopping")
            self.session.stop()
            return None

        self.playlist.selected = nxt
        if nxt == self.session.current:
            self.session.stop()            # same track again: reload, not resume
        self.session.play(nxt)
        logger.info(f"autoplay → {nxt.name}")
        return nxt
