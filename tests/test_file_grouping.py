"""
Tests for audio file discovery, classification and grouping.
"""

import os
import shutil
import tempfile
import unittest

from py2fmod.core.errors import DataError, ErrorCodes
from py2fmod.models.file_group import InstrumentType, SuffixRules, make_group_key
from py2fmod.services.file_grouping_service import (
    classify_stem,
    group_files,
    is_supported_audio_file,
    relative_folder_path,
    scan_audio_files,
)


class TestClassifyStem(unittest.TestCase):
    """Test suffix-based classification."""

    def setUp(self):
        self.rules = SuffixRules()

    def test_multi_suffix(self):
        self.assertEqual(classify_stem("kick_m", self.rules), ("kick", InstrumentType.MULTI, False))

    def test_scatterer_suffix(self):
        self.assertEqual(classify_stem("rain_c", self.rules), ("rain", InstrumentType.SCATTERER, False))

    def test_no_suffix_is_single(self):
        self.assertEqual(classify_stem("door", self.rules), ("door", InstrumentType.SINGLE, False))

    def test_case_insensitive_match(self):
        self.assertEqual(classify_stem("Kick_M", self.rules), ("Kick", InstrumentType.MULTI, False))

    def test_spatializer_is_detected_only(self):
        """Test that the spatializer suffix flags the file but stays in the name."""
        self.assertEqual(classify_stem("wind_s", self.rules), ("wind_s", InstrumentType.SINGLE, True))

    def test_multi_checked_before_scatterer(self):
        rules = SuffixRules(multi="_x", scatterer="_x")
        self.assertEqual(classify_stem("a_x", rules)[1], InstrumentType.MULTI)

    def test_empty_suffix_never_matches(self):
        rules = SuffixRules(multi="", scatterer="_c", spatializer="")
        self.assertEqual(classify_stem("kick", rules), ("kick", InstrumentType.SINGLE, False))

    def test_stem_equal_to_suffix(self):
        self.assertEqual(classify_stem("_m", self.rules), ("", InstrumentType.MULTI, False))

    def test_custom_suffixes(self):
        rules = SuffixRules(multi="-multi", scatterer="-scat", spatializer="-3d")
        self.assertEqual(classify_stem("step-multi", rules), ("step", InstrumentType.MULTI, False))
        self.assertEqual(classify_stem("bird-scat", rules), ("bird", InstrumentType.SCATTERER, False))


class TestRelativeFolderPath(unittest.TestCase):
    """Test folder paths relative to the scan root."""

    def setUp(self):
        self.root = os.path.join(tempfile.gettempdir(), "audio_root")

    def test_file_in_root(self):
        self.assertEqual(relative_folder_path(os.path.join(self.root, "a.wav"), self.root), "")

    def test_nested_file_uses_forward_slashes(self):
        path = os.path.join(self.root, "Ambience", "Forest", "a.wav")
        self.assertEqual(relative_folder_path(path, self.root), "Ambience/Forest")

    def test_file_outside_root_is_root_level(self):
        """Test that a file outside the root is treated as root level with a warning."""
        outside = os.path.join(tempfile.gettempdir(), "elsewhere", "a.wav")
        with self.assertLogs('py2fmod.services.file_grouping_service', level='WARNING'):
            self.assertEqual(relative_folder_path(outside, self.root), "")

    def test_sibling_with_common_prefix_is_outside(self):
        sibling = os.path.join(tempfile.gettempdir(), "audio_root_other", "a.wav")
        with self.assertLogs('py2fmod.services.file_grouping_service', level='WARNING'):
            self.assertEqual(relative_folder_path(sibling, self.root), "")


class TestGroupFiles(unittest.TestCase):
    """Test grouping into future events."""

    def setUp(self):
        self.root = os.path.join(tempfile.gettempdir(), "sfx")
        self.rules = SuffixRules()

    def _path(self, *parts):
        return os.path.join(self.root, *parts)

    def test_groups_by_folder_base_and_type(self):
        files = [
            self._path("kick_m.wav"),
            self._path("Kick_m.wav"),
            self._path("kick.wav"),
            self._path("Drums", "kick_m.wav"),
        ]
        groups = group_files(files, self.root, self.rules)

        keys = [g.group_key for g in groups]
        self.assertEqual(keys, ["_kick_Multi", "_Kick_Multi", "_kick_Single", "Drums_kick_Multi"])

    def test_files_keep_input_order(self):
        files = [self._path("step_m.wav"), self._path("other.wav"), self._path("step_m.ogg")]
        groups = group_files(files, self.root, self.rules)

        self.assertEqual(len(groups), 2)
        self.assertEqual(groups[0].file_paths, [files[0], files[2]])
        self.assertEqual(groups[0].base_name, "step")
        self.assertEqual(groups[0].instrument_type, InstrumentType.MULTI)

    def test_spatializer_flag_is_carried_on_group(self):
        files = [self._path("wind_s.wav"), self._path("wind_s.ogg")]
        groups = group_files(files, self.root, self.rules)
        self.assertEqual(len(groups), 1)
        self.assertTrue(groups[0].has_spatializer)
        self.assertEqual(groups[0].base_name, "wind_s")

    def test_empty_input(self):
        self.assertEqual(group_files([], self.root, self.rules), [])

    def test_grouping_is_pure(self):
        """Test that the same input always yields the same groups."""
        files = [self._path("A", "x_c.wav"), self._path("y.wav"), self._path("A", "x_c.mp3")]
        first = group_files(list(files), self.root, self.rules)
        second = group_files(list(files), self.root, self.rules)
        self.assertEqual(first, second)
        self.assertEqual(first[0].relative_folder_path, "A")
        self.assertEqual(first[0].event_path, "A/x")

    def test_group_key_collision_is_preserved(self):
        """Test that '_'-joined keys can collide across folder/name splits."""
        self.assertEqual(
            make_group_key("a_b", "c", InstrumentType.SINGLE),
            make_group_key("a", "b_c", InstrumentType.SINGLE)
        )


class TestScanAudioFiles(unittest.TestCase):
    """Test recursive discovery."""

    def setUp(self):
        self.root = tempfile.mkdtemp()
        for relative in ["b.wav", "a.WAV", "notes.txt", "Sub/c.ogg", "Sub/Deeper/d.aif", "Sub/e.flac", "f.aiff", "g.mp3"]:
            path = os.path.join(self.root, *relative.split("/"))
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(b"")

    def tearDown(self):
        shutil.rmtree(self.root, ignore_errors=True)

    def test_finds_supported_files_only(self):
        found = [os.path.relpath(p, self.root).replace(os.sep, "/") for p in scan_audio_files(self.root)]
        self.assertEqual(found, ["a.WAV", "b.wav", "f.aiff", "g.mp3", "Sub/c.ogg", "Sub/Deeper/d.aif"])

    def test_empty_folder(self):
        empty = tempfile.mkdtemp()
        try:
            self.assertEqual(scan_audio_files(empty), [])
        finally:
            shutil.rmtree(empty, ignore_errors=True)

    def test_missing_root_raises_data_error(self):
        with self.assertRaises(DataError) as ctx:
            scan_audio_files(os.path.join(self.root, "does-not-exist"))
        self.assertEqual(ctx.exception.error_code, ErrorCodes.FOLDER_NOT_FOUND)

    def test_supported_extension_check(self):
        self.assertTrue(is_supported_audio_file("x.Mp3"))
        self.assertFalse(is_supported_audio_file("x.flac"))
        self.assertFalse(is_supported_audio_file("wav"))


if __name__ == '__main__':
    unittest.main()
