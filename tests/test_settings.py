"""Tests for gemini_chat/settings.py (temp files only)."""

import json
import os
import tempfile
import unittest

from gemini_chat.settings import DEFAULT_SETTINGS, Settings


class TestSettings(unittest.TestCase):

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.path = os.path.join(self._tmp.name, "settings.json")

    def _write(self, data) -> None:
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump(data, fh)

    def _read(self) -> dict:
        with open(self.path, "r", encoding="utf-8") as fh:
            return json.load(fh)

    def test_defaults_when_file_missing(self) -> None:
        s = Settings(self.path)
        self.assertEqual(s.get_api_key(), "")
        self.assertEqual(s.get_model(), "gemini-1.5-flash")
        self.assertEqual(s.get_personas(), [])

    def test_partial_file_merged_with_defaults(self) -> None:
        self._write({"gemini_api_key": "abc"})
        s = Settings(self.path)
        self.assertEqual(s.get_api_key(), "abc")
        self.assertEqual(s.get_model(), DEFAULT_SETTINGS["gemini_model"])
        self.assertEqual(s.get_personas(), [])

    def test_corrupt_file_uses_defaults(self) -> None:
        with open(self.path, "w", encoding="utf-8") as fh:
            fh.write("{not json")
        s = Settings(self.path)
        self.assertEqual(s.get_model(), "gemini-1.5-flash")

    def test_mutations_persist(self) -> None:
        s = Settings(self.path)
        s.set_api_key("  key123 ")
        s.set_model("gemini-2.0-flash")
        s.set_personas([{"name": "Poet", "instruction": "Rhyme."}])
        data = self._read()
        self.assertEqual(data["gemini_api_key"], "key123")
        self.assertEqual(data["gemini_model"], "gemini-2.0-flash")
        self.assertEqual(data["saved_gems"],
                         [{"name": "Poet", "instruction": "Rhyme."}])
        reloaded = Settings(self.path)
        self.assertEqual(reloaded.get_personas(), data["saved_gems"])

    def test_empty_model_falls_back_to_default(self) -> None:
        s = Settings(self.path)
        s.set_model("")
        self.assertEqual(s.get_model(), "gemini-1.5-flash")

    def test_personas_json_round_trip_via_editor(self) -> None:
        s = Settings(self.path)
        ok = s.set_personas_json('[{"name": "A", "instruction": "x"}]')
        self.assertTrue(ok)
        self.assertEqual(json.loads(s.personas_json()),
                         [{"name": "A", "instruction": "x"}])

    def test_invalid_gems_json_ignored(self) -> None:
        s = Settings(self.path)
        s.set_personas([{"name": "Keep", "instruction": ""}])
        self.assertFalse(s.set_personas_json("[{broken"))
        self.assertFalse(s.set_personas_json('{"name": "not a list"}'))
        self.assertEqual(s.get_personas(), [{"name": "Keep", "instruction": ""}])

    def test_get_personas_returns_copy(self) -> None:
        s = Settings(self.path)
        s.set_personas([{"name": "A", "instruction": ""}])
        s.get_personas().append({"name": "B"})
        self.assertEqual(len(s.get_personas()), 1)


if __name__ == "__main__":
    unittest.main()
