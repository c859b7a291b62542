#!/usr/bin/env python3
# player.py – rev-f3  (2026-10-19)
"""
Playback session: transport state machine + wall-clock timing.

• Elapsed time is always recomputed from timestamps, never ticked
• Paused spans are folded into an accumulator on resume, so elapsed time
  survives any number of pause/resume cycles
• Transport state is *derived* from the output queue + current/pause fields
• `just_finished()` is a level, not an event: it stays true until the next
  play / pause / stop
"""

from __future__ import annotations
import enum, time
from typing import Callable, Optional

from loguru import logger

from track import Track, fmt_mmss


class NoActiveSession(RuntimeError):
    """elapsed() was asked for while nothing is loaded."""


class TrackUnavailable(FileNotFoundError):
    """The track's file is gone (or was never readable)."""


class PlayerAction(enum.Enum):
    NONE  = "none"
    PLAY  = "play"
    PAUSE = "pause"
    STOP  = "stop"


class TransportState(enum.Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED  = "paused"


class PlaybackSession:
    def __init__(self, output=None, *, clock: Callable[[], float] = time.monotonic):
        if output is None:
            from output import VLCOutputQueue
            output = VLCOutputQueue()
        self._out   = output
        self._clock = clock

        self.current: Optional[Track]   = None
        self.last_action                = PlayerAction.NONE
        self.start_instant: Optional[float] = None
        self.pause_instant: Optional[float] = None
        self.accumulated_pause          = 0.0

    def __repr__(self):
        return (f"<PlaybackSession {self.state.value} current={self.current!r} "
                f"last_action={self.last_action.value}>")

    # ─────────────────────────────── derived state
    @property
    def state(self) -> TransportState:
        if self.current is None:
            return TransportState.STOPPED
        if self.pause_instant is not None:
            return TransportState.PAUSED
        if self.is_playing():
            return TransportState.PLAYING
        return TransportState.STOPPED           # queue drained on its own

    def is_playing(self) -> bool:
        return (not self._out.is_empty() and not self._out.is_paused()
                and self.current is not None)

    def is_paused(self) -> bool:
        return self.current is not None and self.pause_instant is not None

    def just_finished(self) -> bool:
        return self.last_action is PlayerAction.PLAY and not self.is_playing()

    # ─────────────────────────────── transport
    def play(self, track: Track) -> None:
        if self.current == track:
            # resume: last_action stays whatever it was
            if self.pause_instant is not None:
                self.accumulated_pause += self._clock() - self.pause_instant
            self.pause_instant = None
            self._out.play()
            logger.debug(f"resume {track!r}")
            return

        if not track.is_playable():
            raise TrackUnavailable(str(track.location))
        self.stop()
        self._restart()
        self.current = track
        self._out.append(track.location)
        self._out.play()
        self.last_action = PlayerAction.PLAY
        logger.info(f"playing {track.name}")

    def _restart(self) -> None:
        self.start_instant     = self._clock()
        self.pause_instant     = None
        self.accumulated_pause = 0.0

    def pause(self) -> None:
        if self.current is None or self.pause_instant is not None:
            logger.debug(f"pause ignored while {self.state.value}")
            return
        self._out.pause()
        self.last_action   = PlayerAction.PAUSE
        self.pause_instant = self._clock()

    def stop(self) -> None:
        self.pause_instant = None
        self.start_instant = None
        self.last_action   = PlayerAction.STOP
        self.current       = None
        self._out.pause()
        self._out.clear()

    def toggle(self, track: Track) -> None:
        """Space-bar behaviour: pause if playing, else play/resume *track*."""
        if self.is_playing(): self.pause()
        else:                 self.play(track)

    # ─────────────────────────────── timing
    def elapsed(self) -> float:
        if self.start_instant is None:
            raise NoActiveSession("timer not started")
        now = self._clock()
        elapsed = now - self.start_instant - self.accumulated_pause
        if self.pause_instant is not None:
            elapsed -= now - self.pause_instant
        return elapsed

    def formatted_elapsed(self) -> str:
        return fmt_mmss(self.elapsed())

    # ─────────────────────────────── volume
    def set_volume(self, volume: float) -> None:
        self._out.set_volume(max(0.0, min(float(volume), 1.0)))

    def set_volume_percent(self, volume: int) -> None:
        self._out.set_volume(max(0, min(int(volume), 100)) / 100.0)

    def volume(self) -> float:
        return self._out.get_volume()

    def volume_percent(self) -> int:
        return int(round(self.volume() * 100))

    def close(self) -> None:
        self.stop()
        release = getattr(self._out, "release", None)
        if release: release()
