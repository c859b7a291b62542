#!/usr/bin/env python3
# storage.py – rev-s9 (2026-10-19)

r"""
Resilient preferences store
═══════════════════════════
* Same config folder for script **and** PyInstaller binary
  – Windows  : %APPDATA%\Tapedeck\prefs.json
  – macOS/*nix: ~/.config/tapedeck/prefs.json
* Atomic writes, previous file kept as prefs.bak
* Tracks are stored as bare location strings; duration and playability are
  recomputed on load.
"""

from __future__ import annotations
import json, os, shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing  import Any, Dict, List, Optional

from loguru import logger

from playlist import Playlist
from track    import Track

# ────────────────────────────────────────────────────────────
# 1. resolve canonical config path
# ────────────────────────────────────────────────────────────
if os.name == "nt":
    # %APPDATA% should exist for *all* normal accounts.  If it doesn't,
    # fall back to <User>\AppData\Roaming.
    _appdata = Path(os.getenv("APPDATA") or Path.home() / "AppData" / "Roaming")
    CFG_DIR  = _appdata / "Tapedeck"
else:
    # Follow XDG spec; ~/.config if XDG_CONFIG_HOME not set.
    CFG_DIR  = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config")) / "tapedeck"

STATE_FILE    = CFG_DIR / "prefs.json"
DOWNLOADS_DIR = CFG_DIR / "downloads"
VERSION       = 1
DEFAULT_UI_SIZE = (360.0, 300.0)

# ────────────────────────────────────────────────────────────
# 2. atomic writer (+ backup)
# ────────────────────────────────────────────────────────────
def _bak(path: Path) -> Path:
    return path.with_suffix(".bak")

def _atomic_write(path: Path, data: Any) -> None:
    """Write *data* as UTF-8 JSON atomically and keep a .bak copy."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    # create/refresh backup *before* replacement
    if path.exists():
        shutil.copy2(path, _bak(path))
    tmp.replace(path)

# ────────────────────────────────────────────────────────────
# 3. helpers
# ────────────────────────────────────────────────────────────
def _empty_state() -> Dict:
    return {
        "version":       VERSION,
        "playlist":      [],
        "autoplay":      False,
        "selected":      None,
        "volume":        50,
        "ui_size":       list(DEFAULT_UI_SIZE),
        "show_debug":    False,
        "always_on_top": False,
    }

def _load_json(path: Path) -> Dict | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        logger.warning(f"unreadable preferences {path}: {e}")
        return None
    return data if isinstance(data, dict) else None

def _volume(value: Any) -> int:
    try:
        return max(0, min(int(value), 100))
    except (TypeError, ValueError):
        return 50

def _ui_size(value: Any) -> List[float]:
    if (isinstance(value, (list, tuple)) and len(value) == 2
            and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value)):
        return [float(v) for v in value]
    return list(DEFAULT_UI_SIZE)

# ────────────────────────────────────────────────────────────
# 4. public API
# ────────────────────────────────────────────────────────────
def load(path: Path = STATE_FILE) -> Dict:
    """Return persisted state.  Rolls back to .bak on corruption."""
    if not path.exists() and not _bak(path).exists():
        state = _empty_state()
        save(state, path)              # first run: write the defaults out
        return state

    data = _load_json(path)
    if data is None:
        data = _load_json(_bak(path))
        if data is not None:
            logger.warning(f"restoring preferences from {_bak(path)}")
            shutil.copy2(_bak(path), path)
        else:
            return _empty_state()

    # merge with defaults to ensure all keys exist
    base = _empty_state()
    base.update(data)
    base["volume"] = _volume(base["volume"])
    return base


def save(state: Dict, path: Path = STATE_FILE) -> None:
    """Write *state* to disk, safely."""
    state["version"] = VERSION
    _atomic_write(path, state)

# ────────────────────────────────────────────────────────────
# 5. typed view
# ────────────────────────────────────────────────────────────
@dataclass
class Preferences:
    playlist:      Playlist
    autoplay:      bool = False
    volume:        int = 50
    ui_size:       List[float] = field(default_factory=lambda: list(DEFAULT_UI_SIZE))
    show_debug:    bool = False
    always_on_top: bool = False

    @classmethod
    def from_state(cls, state: Dict, *, downloads_dir: Path = DOWNLOADS_DIR) -> "Preferences":
        # valid JSON can still hold the wrong types (hand-edited file)
        entries = state.get("playlist")
        if not isinstance(entries, list):
            entries = []
        locations = [s for s in entries if isinstance(s, str) and s]
        if len(locations) != len(entries):
            logger.warning(f"skipped {len(entries) - len(locations)} malformed playlist entries")
        pl = Playlist([Track.from_json(s) for s in locations], downloads_dir=downloads_dir)
        sel = state.get("selected")
        if isinstance(sel, str) and sel:
            track = Track.from_json(sel)
            if track in pl:
                pl.selected = track
        return cls(
            playlist      = pl,
            autoplay      = bool(state.get("autoplay", False)),
            volume        = _volume(state.get("volume", 50)),
            ui_size       = _ui_size(state.get("ui_size")),
            show_debug    = bool(state.get("show_debug", False)),
            always_on_top = bool(state.get("always_on_top", False)),
        )

    def to_state(self) -> Dict:
        sel: Optional[Track] = self.playlist.selected
        return {
            "version":       VERSION,
            "playlist":      [t.to_json() for t in self.playlist],
            "autoplay":      self.autoplay,
            "selected":      sel.to_json() if sel else None,
            "volume":        self.volume,
            "ui_size":       list(self.ui_size),
            "show_debug":    self.show_debug,
            "always_on_top": self.always_on_top,
        }

def load_preferences(path: Path = STATE_FILE, *,
                     downloads_dir: Path = DOWNLOADS_DIR) -> Preferences:
    return Preferences.from_state(load(path), downloads_dir=downloads_dir)

def save_preferences(prefs: Preferences, path: Path = STATE_FILE) -> None:
    save(prefs.to_state(), path)
