import tempfile
from pathlib import Path
from unittest import TestCase

import scanner
from support import write_wav


class NormaliseTests(TestCase):
    def test_blank_and_comment_lines(self):
        self.assertIsNone(scanner.normalise("   "))
        self.assertIsNone(scanner.normalise("#EXTM3U"))

    def test_plain_path(self):
        self.assertEqual(scanner.normalise("  /music/a.mp3\n"), Path("/music/a.mp3"))

    def test_posix_file_uri_keeps_root(self):
        self.assertEqual(scanner.normalise("file:///home/me/My%20Song.mp3"),
                         Path("/home/me/My Song.mp3"))

    def test_windows_file_uri(self):
        self.assertEqual(str(scanner.normalise("file:///C:/Music/a%20b.mp3")),
                         "C:\\Music\\a b.mp3")

    def test_leading_slash_before_drive_dropped(self):
        self.assertEqual(str(scanner.normalise("/s:/Music/x.wav")), "s:\\Music\\x.wav")

    def test_bom_stripped(self):
        self.assertEqual(scanner.normalise("\ufeff/a.mp3"), Path("/a.mp3"))


class FolderScanTests(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_scan_filters_and_sorts(self):
        write_wav(self.root / "b.wav"); write_wav(self.root / "A.WAV")
        (self.root / "c.mp3").write_bytes(b"")
        (self.root / "cover.jpg").write_bytes(b"")
        (self.root / "sub.mp3").mkdir()
        names = [p.name for p in scanner.scan_audio_files(self.root)]
        self.assertEqual(names, ["A.WAV", "b.wav", "c.mp3"])

    def test_scan_missing_folder(self):
        self.assertEqual(scanner.scan_audio_files(self.root / "nope"), [])

    def test_expand_drop(self):
        folder = self.root / "album"
        write_wav(folder / "1.wav"); write_wav(folder / "2.wav")
        single = self.root / "single.mp3"
        out = scanner.expand_drop([folder, single])
        self.assertEqual([p.name for p in out], ["1.wav", "2.wav", "single.mp3"])
