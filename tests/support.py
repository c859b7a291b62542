"""Shared test doubles: WAV fixtures, a hand-cranked clock, an in-memory output queue."""

import wave
from pathlib import Path


def write_wav(path: Path, seconds: float = 1.0, rate: int = 8000) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as w:
        w.setnchannels(1); w.setsampwidth(2); w.setframerate(rate)
        w.writeframes(b"\x00\x00" * int(rate * seconds))
    return path


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start
    def __call__(self) -> float:
        return self.now
    def advance(self, dt: float) -> None:
        self.now += dt


class FakeOutput:
    """Sink-like queue: emptiness and pause flag are independent, like the real one."""
    def __init__(self):
        self.queue    = []
        self.paused   = False
        self.volume   = 1.0
        self.released = False
    def append(self, path):   self.queue.append(path)
    def play(self):           self.paused = False
    def pause(self):          self.paused = True
    def clear(self):          self.queue.clear()
    def is_empty(self):       return not self.queue
    def is_paused(self):      return self.paused
    def set_volume(self, v):  self.volume = v
    def get_volume(self):     return self.volume
    def release(self):        self.released = True
    def finish(self):
        """Track reached its end on its own."""
        self.queue.clear()
