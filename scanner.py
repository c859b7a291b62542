#!/usr/bin/env python3
# scanner.py – rev-s9  (2026-10-12)
"""
Audio-file discovery for the playlist.

• Folder scan (downloads folder, dropped folders)
• Dropped paths / file:// URIs → Path, same rules as the old .m3u reader:
  percent-decoding and a lone leading “/” before a Windows drive letter
  (`/s:/Music/…` → `S:\\Music\\…`) are both handled.
"""

from __future__ import annotations
import re, urllib.parse
from pathlib import Path
from typing  import Iterable, List

AUDIO_EXTS = {".mp3", ".wav", ".flac", ".ogg"}

def is_audio(path: Path) -> bool:
    return path.suffix.lower() in AUDIO_EXTS

# ───────────────────────── parsing helpers ─────────────────────────
URI_PREFIXES = ("file:///", "file://", "file:\\\\", "file:\\")  # longest first
WIN_DRIVE_RE = re.compile(r"^[A-Za-z]:[/\\]")

def _strip_uri_prefix(line: str) -> str:
    lower = line.lower()
    for pre in URI_PREFIXES:
        if lower.startswith(pre):
            return line[len(pre):]
    return line

def normalise(line: str) -> Path | None:
    line = line.strip().lstrip("\ufeff")          # strip BOM / spaces
    if not line or line.startswith("#"):
        return None

    had_uri = line.lower().startswith("file:")
    line = _strip_uri_prefix(line)
    line = urllib.parse.unquote(line)
    if had_uri and not WIN_DRIVE_RE.match(line) and not line.startswith("/"):
        line = "/" + line                         # file:///home/… lost its root

    # drop a single leading "/" when what follows is drive:\
    if WIN_DRIVE_RE.match(line.lstrip("/")):
        line = line.lstrip("/")

    if WIN_DRIVE_RE.match(line):
        line = line.replace("/", "\\")

    return Path(line)

# ───────────────────────── public API ─────────────────────────────
def scan_audio_files(folder: Path) -> List[Path]:
    """Audio files directly inside *folder*, sorted case-insensitively."""
    folder = Path(folder)
    if not folder.is_dir():
        return []
    return sorted((p for p in folder.iterdir() if p.is_file() and is_audio(p)),
                  key=lambda p: p.name.lower())

def expand_drop(paths: Iterable[Path]) -> List[Path]:
    """Folders expand to their audio files; files pass through untouched."""
    out: List[Path] = []
    for p in paths:
        p = Path(p)
        if p.is_dir():
            out.extend(scan_audio_files(p))
        else:
            out.append(p)
    return out
