#!/usr/bin/env python3
# output.py – rev-o5  (2026-10-19)
"""
libVLC output queue.

A thin queue over one VLC media-list player: append / play / pause / clear,
plus emptiness + pause introspection and a 0‥1 volume scalar.  One instance is
created per process and lives until release().
"""

from __future__ import annotations
import sys
from pathlib import Path

from loguru import logger

try:
    import vlc as _vlc
except (ImportError, OSError, NotImplementedError):  # no libVLC → OutputUnavailable later
    _vlc = None


class OutputUnavailable(RuntimeError):
    """No audio output could be acquired."""


VLC_OPTS = ["--no-video", "--quiet"]


class VLCOutputQueue:
    def __init__(self, *, vlc_module=None, platform_name: str | None = None):
        self._vlc = vlc_module if vlc_module is not None else _vlc
        if self._vlc is None:
            raise OutputUnavailable("python-vlc / libVLC is not available")
        opts = list(VLC_OPTS)
        if (platform_name or sys.platform).startswith("linux"):
            opts.append("--no-xlib")
        self._instance = self._vlc.Instance(opts)
        if self._instance is None:
            raise OutputUnavailable("libVLC could not be initialised")
        self._player = self._instance.media_list_player_new()
        self._media_list = self._instance.media_list_new()
        self._player.set_media_list(self._media_list)
        self._paused = False
        self._volume = 1.0
        self._ended  = 0            # MediaPlayerEndReached count since last clear()
        self._attach_end_event()
        logger.debug(f"VLC output ready ({' '.join(opts)})")

    def _attach_end_event(self):
        # runs on a libVLC thread
        self._player.get_media_player().event_manager().event_attach(
            self._vlc.EventType.MediaPlayerEndReached,
            lambda *_: setattr(self, "_ended", self._ended + 1)
        )

    # ─────────────────────────────── queue
    def append(self, path: Path | str) -> None:
        media = self._instance.media_new(str(path))
        self._media_list.lock()
        try:
            self._media_list.add_media(media)
        finally:
            self._media_list.unlock()

    def play(self) -> None:
        self._paused = False
        self._player.play()
        self._apply_volume()

    def pause(self) -> None:
        self._paused = True
        self._player.set_pause(1)

    def clear(self) -> None:
        self._player.stop()
        self._media_list.release()
        self._media_list = self._instance.media_list_new()
        self._player.set_media_list(self._media_list)
        self._ended = 0

    # ─────────────────────────────── introspection
    def is_empty(self) -> bool:
        """True once every queued item has played out (Stopped alone is not enough)."""
        count = self._media_list.count()
        if count == 0 or self._ended >= count:
            return True
        return self._player.get_state() == self._vlc.State.Error

    def is_paused(self) -> bool:
        return self._paused

    # ─────────────────────────────── volume
    def set_volume(self, volume: float) -> None:
        self._volume = max(0.0, min(float(volume), 1.0))
        self._apply_volume()

    def get_volume(self) -> float:
        return self._volume

    def _apply_volume(self) -> None:
        # libVLC ignores volume until an audio output exists; re-sent on play()
        mp = self._player.get_media_player()
        if mp is not None:
            mp.audio_set_volume(int(round(self._volume * 100)))

    def release(self) -> None:
        self._player.stop()
        self._media_list.release()
        self._player.release()
        self._instance.release()
