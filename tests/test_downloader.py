import sys, tempfile, threading
from pathlib import Path
from unittest import TestCase
from unittest.mock import MagicMock, patch

import downloader


class DownloaderTests(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dl_dir = Path(self._tmp.name) / "downloads"
        self.d = downloader.Downloader(self.dl_dir)

    def tearDown(self):
        self._tmp.cleanup()

    def test_idle_counts_as_finished(self):
        self.assertTrue(self.d.is_finished())
        self.assertFalse(self.d.is_running())

    @patch("downloader.shutil.which", return_value="/usr/bin/yt-dlp")
    def test_command_line(self, _which):
        cmd = self.d.command("https://example.com/list", 7)
        self.assertEqual(cmd[0], "/usr/bin/yt-dlp")
        self.assertIn("--extract-audio", cmd)
        self.assertEqual(cmd[cmd.index("--audio-format") + 1], "mp3")
        self.assertEqual(cmd[cmd.index("--playlist-end") + 1], "7")
        self.assertEqual(cmd[cmd.index("-o") + 1], str(self.dl_dir / "%(title)s.%(ext)s"))
        self.assertEqual(cmd[-1], "https://example.com/list")

    @patch("downloader.shutil.which", return_value=None)
    def test_falls_back_to_module(self, _which):
        self.assertEqual(self.d.command("u", 1)[:3], [sys.executable, "-m", "yt_dlp"])

    def test_runs_in_background_and_reports_once(self):
        gate = threading.Event()
        def fake_run(cmd, **kw):
            gate.wait(5)
            return MagicMock(returncode=0)
        with patch("downloader.subprocess.run", side_effect=fake_run) as run:
            self.d.download("https://example.com/v", 3)
            self.assertTrue(self.dl_dir.is_dir())
            self.assertFalse(self.d.is_finished())
            with self.assertRaises(RuntimeError):
                self.d.download("https://example.com/other")
            gate.set()
            self.d._thread.join(5)
            self.assertTrue(self.d.is_finished())
            self.assertIsNone(self.d._thread)
            self.assertTrue(self.d.is_finished())
        self.assertEqual(self.d.returncode, 0)
        self.assertEqual(run.call_args[0][0][-1], "https://example.com/v")

    def test_missing_executable_is_logged_not_raised(self):
        with patch("downloader.subprocess.run", side_effect=FileNotFoundError("yt-dlp")):
            self.d.download("u")
            self.d._thread.join(5)
        self.assertTrue(self.d.is_finished())
        self.assertEqual(self.d.returncode, -1)
