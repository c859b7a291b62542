#!/usr/bin/env python3
# main.py – rev-m8  (2026-10-19)
"""
Tapedeck
────────
Small always-at-hand playlist player (PySide6 + libVLC).

Key features
• Add files (Ctrl+O / drag & drop / YouTube download via yt-dlp)
• Play / pause / stop, elapsed / total time, autoplay to the next row
• Shuffle, move up / down (wrapping), remove, clear
• Preferences + playlist persisted to prefs.json on exit
"""

from __future__ import annotations
import os, sys, time
from pathlib import Path
from typing import Optional

from PySide6.QtWidgets import (
    QApplication, QWidget, QListWidget, QListWidgetItem, QVBoxLayout,
    QHBoxLayout, QPushButton, QFileDialog, QInputDialog, QLabel, QMessageBox,
    QMenuBar, QMenu, QSlider, QFrame
)
from PySide6.QtGui  import (
    QAction, QColor, QDesktopServices, QDragEnterEvent, QDropEvent,
    QKeySequence, QShortcut
)
from PySide6.QtCore import Qt, QTimer, QUrl
from loguru import logger
if os.name == 'nt':
    # The keyboard module is mandatory on Windows for global media hotkeys
    import keyboard
else:
    try:
        import keyboard
    except Exception:
        keyboard = None

import scanner, storage
from autoplay   import AutoplayController
from downloader import Downloader
from logs       import setup_logging
from output     import OutputUnavailable
from player     import PlaybackSession, TrackUnavailable, TransportState
from playlist   import NoSelection, NotInPlaylist, Playlist
from track      import Track

# ═════════════════ 1. constants ═════════════════
APP_NAME   = "Tapedeck"
TICK_MS    = 250
MAX_YT_ITEMS = 10
MIN_SIZE, MAX_SIZE = (260, 200), (800, 550)

# Play/Pause key can appear under several names or as raw scancode
MEDIA_KEY_ALIASES = (
    "play/pause media",
    "media play pause",
    -179,                 # raw scan-code with extended flag
    179,                  # raw scan-code without flag
)

ROW_EVEN    = QColor(42, 42, 45)
ROW_ODD     = QColor(35, 35, 35)
ROW_CURRENT = QColor(50, 55, 77)
TEXT_MISSING = QColor("red")


# ═════════════════ 2. debug window ═════════════════
class DebugWindow(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent, Qt.Tool)
        self.setWindowTitle("Debug Menu")
        self.lbl = QLabel(); self.lbl.setTextInteractionFlags(Qt.TextSelectableByMouse)
        QVBoxLayout(self).addWidget(self.lbl)

    def update_from(self, win: "MainWindow"):
        sel = win.playlist.selected_index()
        cur = win.session.current
        self.lbl.setText(
            f"Selected:  {sel if sel is not None else 0}\n"
            f"Playing:   {cur.name if cur else 'None'!r}\n"
            f"State:     {win.session.state.value}\n"
            f"Volume:    {win.prefs.volume}\n"
            f"UI Size:   [{win.width()}, {win.height()}]"
        )


# ═════════════════ 3. MainWindow ═════════════════
class MainWindow(QWidget):
    def __init__(self, prefs: storage.Preferences, session: PlaybackSession):
        super().__init__()
        self.prefs    = prefs
        self.playlist: Playlist = prefs.playlist
        self.session  = session
        self.session.set_volume_percent(prefs.volume)
        self.autoplay   = AutoplayController(self.playlist, session, enabled=prefs.autoplay)
        self.downloader = Downloader(self.playlist.downloads_dir)
        self._downloading = False
        self._shown_current: Optional[Track] = None

        self.setWindowTitle(APP_NAME)
        self.setMinimumSize(*MIN_SIZE); self.setMaximumSize(*MAX_SIZE)
        self.resize(int(prefs.ui_size[0]), int(prefs.ui_size[1]))
        self.setAcceptDrops(True)
        self._build_widgets(); self._build_menu(); self._wire_signals()
        self.debug_win = DebugWindow(self)
        if prefs.always_on_top: self._set_on_top(True)
        if prefs.show_debug:    self.debug_win.show()
        self._refresh_list()
        QTimer(self, interval=TICK_MS, timeout=self._tick).start()

        # ── Global Play/Pause hot-keys: register *every* alias ──────────────
        self._hotkey_ids: list = []
        if keyboard:
            for alias in MEDIA_KEY_ALIASES:
                try:
                    hid = keyboard.add_hotkey(
                        alias,
                        lambda a=alias: self._on_media_key(a),
                        suppress=False,                         # don’t swallow
                    )
                    self._hotkey_ids.append(hid)
                    logger.debug(f"▶/⏸ bound on {alias!r}")
                except (ValueError, RuntimeError, ImportError, OSError):
                    pass

    # ---------- UI
    def _build_widgets(self):
        self.btn_play = QPushButton("▶"); self.btn_stop = QPushButton("⏹")
        for b in (self.btn_play, self.btn_stop): b.setFixedWidth(32)
        self.lbl_time = QLabel(); self.lbl_time.hide()
        self.lbl_download = QLabel("Downloading…"); self.lbl_download.hide()
        self.lbl_volume = QLabel()
        self.sld_volume = QSlider(Qt.Horizontal); self.sld_volume.setRange(0, 100)
        self.sld_volume.setFixedWidth(90); self.sld_volume.setValue(self.prefs.volume)
        self._show_volume(self.prefs.volume)

        ctl = QHBoxLayout()
        for w in (self.btn_play, self.btn_stop, self.lbl_time): ctl.addWidget(w)
        ctl.addStretch(); ctl.addWidget(self.lbl_download)
        ctl.addWidget(self.lbl_volume); ctl.addWidget(self.sld_volume)

        self.list = QListWidget(frameShape=QFrame.NoFrame)
        self.list.setContextMenuPolicy(Qt.CustomContextMenu)
        self.list.setStyleSheet("QListWidget {background:#232323; color:#e6e6e6;}"
                                "QListWidget::item {padding:2px 4px;}")

        root = QVBoxLayout(self); root.setContentsMargins(6, 0, 6, 6)
        self.menubar = QMenuBar(self); root.setMenuBar(self.menubar)
        root.addLayout(ctl); root.addWidget(self.list, 1)

    def _build_menu(self):
        def act(menu: QMenu, text: str, slot, *, checkable=False, checked=False) -> QAction:
            a = menu.addAction(text); a.setCheckable(checkable)
            if checkable: a.setChecked(checked); a.toggled.connect(slot)
            else:         a.triggered.connect(slot)
            return a

        m = self.menubar.addMenu("Media")
        self.act_open = act(m, "Open…", self._ask_open_file); self.act_open.setShortcut(QKeySequence("Ctrl+O"))
        self.act_yt   = act(m, "From YouTube…", self._ask_download)
        m.addSeparator()

        m = self.menubar.addMenu("Playback")
        self.act_play  = act(m, "Play",  self._play_selected)
        self.act_pause = act(m, "Pause", self.session.pause)
        act(m, "Stop", self._stop)
        m.addSeparator()
        self.act_autoplay = act(m, "Autoplay", self._set_autoplay, checkable=True, checked=self.autoplay.enabled)
        m.aboutToShow.connect(self._update_actions)

        m = self.menubar.addMenu("Playlist")
        self.act_shuffle = act(m, "🔀 Shuffle", self._shuffle)
        self.act_remove  = act(m, "Remove Selected", self._remove_selected)
        self.act_up      = act(m, "Move Up",   lambda: self._move(self.playlist.move_up))
        self.act_down    = act(m, "Move Down", lambda: self._move(self.playlist.move_down))
        act(m, "Clear", self._clear)
        m.aboutToShow.connect(self._update_actions)

        m = self.menubar.addMenu("Debug")
        act(m, "Always on Top", self._toggle_on_top, checkable=True, checked=self.prefs.always_on_top)
        act(m, "Debug Menu", self._toggle_debug, checkable=True, checked=self.prefs.show_debug)
        act(m, "Open prefs.json", lambda: QDesktopServices.openUrl(QUrl.fromLocalFile(str(storage.STATE_FILE))))
        act(m, "Select none", lambda: (self.playlist.select(None), self._refresh_list()))

    # ---------- signals
    def _wire_signals(self):
        self.btn_play.clicked.connect(self._play_pause_button)
        self.btn_stop.clicked.connect(self._stop)
        self.sld_volume.valueChanged.connect(self._set_volume)
        self.list.itemClicked.connect(self._on_click)
        self.list.itemDoubleClicked.connect(self._on_double_click)
        self.list.customContextMenuRequested.connect(self._context_menu)
        QShortcut(QKeySequence(Qt.Key_Space), self, self._play_pause)
        QShortcut(QKeySequence(Qt.Key_Delete), self, self._remove_selected)
        QShortcut(QKeySequence("Alt+="), self, lambda: self.sld_volume.setValue(self.sld_volume.value() + 1))
        QShortcut(QKeySequence("Alt+-"), self, lambda: self.sld_volume.setValue(self.sld_volume.value() - 1))

    def _update_actions(self):
        playing, has_sel = self.session.is_playing(), self.playlist.selected is not None
        self.act_play.setEnabled(not playing); self.act_pause.setEnabled(playing)
        self.act_shuffle.setEnabled(len(self.playlist) > 0)
        for a in (self.act_remove, self.act_up, self.act_down): a.setEnabled(has_sel)
        self.act_yt.setEnabled(not self.downloader.is_running())

    # ═════════════════ 4. list view ═════════════════
    def _refresh_list(self):
        self._shown_current = self.session.current
        self.list.blockSignals(True); self.list.clear()
        for i, t in enumerate(self.playlist):
            it = QListWidgetItem(t.name); it.setToolTip(f"{t.location}  [{t.formatted_duration()}]")
            it.setBackground(ROW_CURRENT if t == self.session.current else (ROW_EVEN if i % 2 == 0 else ROW_ODD))
            if not t.is_playable(): it.setForeground(TEXT_MISSING)
            self.list.addItem(it)
            if t == self.playlist.selected and t.is_playable(): it.setSelected(True)
        self.list.blockSignals(False)

    def _row_track(self, item: QListWidgetItem) -> Optional[Track]:
        row = self.list.row(item)
        return self.playlist[row] if 0 <= row < len(self.playlist) else None

    def _on_click(self, item: QListWidgetItem):
        t = self._row_track(item)
        if t and t.is_playable(): self.playlist.select(t)
        self._refresh_list()

    def _on_double_click(self, item: QListWidgetItem):
        t = self._row_track(item)
        if t and t.is_playable():
            self.playlist.select(t); self._play(t)

    def _context_menu(self, pos):
        item = self.list.itemAt(pos)
        t = self._row_track(item) if item else None
        if t is None: return
        menu = QMenu(self)
        a_play = menu.addAction("Play"); a_play.setEnabled(t.is_playable())
        a_open = menu.addAction("Open");  a_open.setEnabled(t.is_playable())
        a_rm   = menu.addAction("Remove")
        chosen = menu.exec(self.list.viewport().mapToGlobal(pos))
        if chosen is a_play:
            self.playlist.select(t); self._play(t)
        elif chosen is a_open:
            QDesktopServices.openUrl(QUrl.fromLocalFile(str(t.location.parent.resolve())))
        elif chosen is a_rm:
            self._remove(t)

    # ═════════════════ 5. transport ═════════════════
    def _play(self, t: Track):
        try:
            self.session.play(t)
        except TrackUnavailable:
            logger.warning(f"cannot play missing file {t.location}")
        self._refresh_list()

    def _stop_if_drained(self):
        """A track that ran out must be reloaded; play() on it would only resume."""
        if self.session.current is not None and (
                self.session.just_finished() or self.session.state is TransportState.STOPPED):
            self.session.stop()

    def _play_selected(self):
        if self.playlist.selected is None: return
        self._stop_if_drained()
        self._play(self.playlist.selected)

    def _play_pause_button(self):
        if self.session.is_playing(): self.session.pause()
        else:                         self._play_selected()

    def _play_pause(self):
        """Space / media key: current → selected → first row."""
        to_play = (self.session.current or self.playlist.selected
                   or (self.playlist[0] if len(self.playlist) else None))
        if to_play is None: return
        if self.session.is_playing(): self.session.pause(); return
        self._stop_if_drained()
        self._play(to_play)

    def _stop(self):
        self.session.stop(); self._refresh_list()

    def _on_media_key(self, alias) -> None:
        """Prevent double-toggles when two aliases fire for one key-press."""
        now = time.monotonic()
        if now - getattr(self, "_last_media_evt", 0) < 0.25:   # 250 ms guard
            return
        self._last_media_evt = now
        logger.debug(f"media key from {alias!r}")
        QTimer.singleShot(0, self._play_pause)

    def _set_autoplay(self, on: bool):
        self.autoplay.enabled = self.prefs.autoplay = bool(on)

    def _set_volume(self, v: int):
        self.prefs.volume = v; self.session.set_volume_percent(v); self._show_volume(v)

    def _show_volume(self, v: int):
        self.lbl_volume.setText(f"🔊 {v:>3}%")

    # ═════════════════ 6. playlist editing ═════════════════
    def _add_paths(self, paths):
        added = [t for t in map(self.playlist.add, scanner.expand_drop(paths)) if t]
        if added: self._refresh_list()

    def _ask_open_file(self):
        exts = " ".join(f"*{e}" for e in sorted(scanner.AUDIO_EXTS))
        files, _ = QFileDialog.getOpenFileNames(self, "Open audio files", "", f"audio ({exts})")
        self._add_paths(Path(f) for f in files)

    def _ask_download(self):
        url, ok = QInputDialog.getText(self, "From YouTube", "Enter Youtube URL:")
        if not (ok and url.strip()): return
        try:
            self.downloader.download(url.strip(), MAX_YT_ITEMS)
        except RuntimeError as e:
            QMessageBox.warning(self, APP_NAME, str(e)); return
        self._downloading = True; self.lbl_download.show()

    def _remove(self, t: Track):
        was_current = t == self.session.current
        self.playlist.remove(t)
        if was_current: self.session.stop()
        self._refresh_list()

    def _remove_selected(self):
        sel = self.playlist.selected
        if sel is None: return
        self._remove(sel)
        # keep the playing track highlighted, if anything is still playing
        cur = self.session.current
        self.playlist.selected = cur if cur in self.playlist else None
        self._refresh_list()

    def _move(self, op):
        try:
            op(self.playlist.require_selected())
        except (NoSelection, NotInPlaylist):
            logger.exception("move without a valid selection")
            return
        self._refresh_list()

    def _shuffle(self):
        self.playlist.shuffle(); self._refresh_list()

    def _clear(self):
        if QMessageBox.question(self, "Clear playlist",
                                "Remove every track?\n(Downloaded files are deleted from disk.)",
                                QMessageBox.Yes | QMessageBox.No) != QMessageBox.Yes:
            return
        self.playlist.clear(); self.session.stop(); self.playlist.selected = None
        self._refresh_list()

    # ═════════════════ 7. window options ═════════════════
    def _set_on_top(self, on: bool):
        visible = self.isVisible()
        self.setWindowFlag(Qt.WindowStaysOnTopHint, on)
        if visible: self.show()            # changing flags hides the window

    def _toggle_on_top(self, on: bool):
        self.prefs.always_on_top = bool(on); self._set_on_top(bool(on))

    def _toggle_debug(self, on: bool):
        self.prefs.show_debug = bool(on)
        self.debug_win.setVisible(bool(on))

    # ═════════════════ 8. drag & drop ═════════════════
    def dragEnterEvent(self, e: QDragEnterEvent):
        if e.mimeData().hasUrls() or e.mimeData().hasText(): e.acceptProposedAction()
        else:                                                 e.ignore()

    def dropEvent(self, e: QDropEvent):
        md = e.mimeData()
        if md.hasUrls():
            paths = [Path(u.toLocalFile()) for u in md.urls() if u.isLocalFile()]
        else:
            paths = [p for p in map(scanner.normalise, md.text().splitlines()) if p]
        self._add_paths(paths)

    # ═════════════════ 9. timer tick ═════════════════
    def _tick(self):
        try:
            if self.autoplay.tick(): self._refresh_list()
        except (NoSelection, NotInPlaylist, TrackUnavailable):
            logger.exception("autoplay failed, stopping playback")
            self.session.stop(); self._refresh_list()

        if self._downloading and self.downloader.is_finished():
            self._downloading = False; self.lbl_download.hide()
            if self.playlist.add_downloads(): self._refresh_list()

        if self.session.current != self._shown_current: self._refresh_list()
        self._update_time()
        self.btn_play.setText("⏸" if self.session.is_playing() else "▶")
        self.btn_play.setEnabled(self.playlist.selected is not None or self.session.is_playing())
        if self.debug_win.isVisible(): self.debug_win.update_from(self)

    def _update_time(self):
        cur = self.session.current
        if cur is None or self.session.just_finished():
            self.lbl_time.hide(); return
        self.lbl_time.setText(f"{self.session.formatted_elapsed()}/{cur.formatted_duration()}")
        self.lbl_time.show()

    # ═════════════════ 10. close ═════════════════
    def closeEvent(self, e):
        if keyboard:
            for hid in self._hotkey_ids:
                try:
                    keyboard.remove_hotkey(hid)
                except (KeyError, ValueError):
                    pass
        self.prefs.ui_size = [float(self.width()), float(self.height())]
        try:
            storage.save_preferences(self.prefs)
        except OSError:
            logger.exception("could not save preferences")
        self.session.close(); self.debug_win.close()
        super().closeEvent(e)


# ═════════════════ 11. entry-point ═════════════════
def main() -> int:
    setup_logging(storage.CFG_DIR / "tapedeck.log")
    prefs = storage.load_preferences()
    app = QApplication(sys.argv)
    try:
        session = PlaybackSession()
    except OutputUnavailable as e:
        logger.critical(f"no audio output: {e}")
        QMessageBox.critical(None, APP_NAME, f"No audio output available:\n{e}")
        return 1
    win = MainWindow(prefs, session); win.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
