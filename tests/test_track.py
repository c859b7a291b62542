import tempfile
from pathlib import Path
from unittest import TestCase
from unittest.mock import MagicMock

from track import Track, read_duration
from support import write_wav


class TrackIdentityTests(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_duration_read_from_file(self):
        t = Track.from_location(write_wav(self.root / "song.wav", seconds=2.0))
        self.assertAlmostEqual(t.duration, 2.0, places=2)
        self.assertTrue(t.is_playable())

    def test_equal_across_directories(self):
        a = Track.from_location(write_wav(self.root / "x" / "song.wav"))
        b = Track.from_location(write_wav(self.root / "y" / "song.wav"))
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))

    def test_same_name_different_duration_differs(self):
        a = Track.from_location(write_wav(self.root / "x" / "song.wav", seconds=1.0))
        b = Track.from_location(write_wav(self.root / "y" / "song.wav", seconds=2.0))
        self.assertNotEqual(a, b)

    def test_different_name_same_duration_differs(self):
        self.assertNotEqual(Track("a.mp3", 10), Track("b.mp3", 10))

    def test_not_equal_to_other_types(self):
        self.assertNotEqual(Track("a.mp3", 10), "a.mp3")


class TrackPlayabilityTests(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file_is_unplayable_with_zero_duration(self):
        t = Track.from_location(self.root / "gone.mp3")
        self.assertFalse(t.is_playable())
        self.assertEqual(t.duration, 0.0)

    def test_unplayable_flag_is_sticky(self):
        path = self.root / "late.wav"
        t = Track.from_location(path)
        write_wav(path)
        self.assertFalse(t.is_playable())

    def test_playable_track_rechecks_filesystem(self):
        path = write_wav(self.root / "here.wav")
        t = Track.from_location(path)
        self.assertTrue(t.is_playable())
        path.unlink()
        self.assertFalse(t.is_playable())

    def test_unreadable_metadata_degrades_to_unplayable(self):
        path = self.root / "junk.mp3"
        path.write_bytes(b"this is not audio at all")
        t = Track.from_location(path)
        self.assertFalse(t.is_playable())
        self.assertEqual(t.duration, 0.0)

    def test_duration_reader_is_injectable(self):
        path = self.root / "fake.mp3"; path.write_bytes(b"")
        reader = MagicMock(return_value=185.0)
        t = Track.from_location(path, read=reader)
        reader.assert_called_once_with(path)
        self.assertEqual(t.formatted_duration(), "03:05")

    def test_read_duration_none_for_unknown_format(self):
        path = self.root / "notes.txt"; path.write_text("hello")
        self.assertIsNone(read_duration(path))


class TrackFormattingTests(TestCase):
    def test_minutes_and_seconds(self):
        self.assertEqual(Track("a.mp3", 65).formatted_duration(), "01:05")

    def test_fraction_truncated(self):
        self.assertEqual(Track("a.mp3", 59.9).formatted_duration(), "00:59")

    def test_no_hour_field(self):
        self.assertEqual(Track("a.mp3", 3725).formatted_duration(), "62:05")

    def test_json_is_location_only(self):
        self.assertEqual(Track(Path("music") / "a.mp3", 12).to_json(), str(Path("music") / "a.mp3"))
