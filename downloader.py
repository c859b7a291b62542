#!/usr/bin/env python3
# downloader.py – rev-d3  (2026-10-15)
"""
Fire-and-forget yt-dlp runner.

The download runs as a subprocess on a daemon thread; the GUI polls
is_finished() once per tick and never blocks on it.
"""

from __future__ import annotations
import os, shutil, subprocess, sys, threading
from pathlib import Path
from typing  import List, Optional

from loguru import logger

CREATE_NO_WINDOW = 0x08000000      # Windows: don't flash a console


def ytdlp_command() -> List[str]:
    exe = shutil.which("yt-dlp")
    return [exe] if exe else [sys.executable, "-m", "yt_dlp"]


class Downloader:
    def __init__(self, downloads_dir: Path | str):
        self.downloads_dir = Path(downloads_dir)
        self.returncode: Optional[int] = None
        self._thread: Optional[threading.Thread] = None

    def command(self, url: str, max_items: int) -> List[str]:
        return [
            *ytdlp_command(),
            "--extract-audio", "--audio-format", "mp3",
            "--playlist-end", str(max_items),
            "-o", str(self.downloads_dir / "%(title)s.%(ext)s"),
            url,
        ]

    def download(self, url: str, max_items: int = 10) -> None:
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("a download is already running")
        self.downloads_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.command(url, max_items)
        logger.info(f"download started: {url} (≤{max_items} items)")
        self._thread = threading.Thread(target=self._run, args=(cmd,), daemon=True)
        self._thread.start()

    def _run(self, cmd: List[str]) -> None:
        flags = CREATE_NO_WINDOW if os.name == "nt" else 0
        try:
            rc = subprocess.run(cmd, stdout=subprocess.DEVNULL,
                                stderr=subprocess.DEVNULL,
                                creationflags=flags).returncode
        except OSError as e:
            logger.error(f"yt-dlp could not be started: {e}")
            rc = -1
        self.returncode = rc
        if rc:
            logger.warning(f"yt-dlp exited with code {rc}")
        else:
            logger.info("download finished")

    def is_finished(self) -> bool:
        """True once a running download has completed, and whenever idle."""
        if self._thread is None:
            return True
        if self._thread.is_alive():
            return False
        self._thread = None
        return True

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
