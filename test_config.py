from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from laudo.config import Settings, load_settings
from laudo.constants import DEFAULT_HOST, DEFAULT_PORT


class SettingsTests(unittest.TestCase):
    def test_env_file_values(self):
        with tempfile.TemporaryDirectory() as tmp:
            env_file = Path(tmp) / "laudo.env"
            env_file.write_text("ROOT_PATH=/data/casos\nTARGET_PATH=/data/laudos\nPORT=8081\n", encoding="utf-8")
            with patch.dict(os.environ, {}, clear=True):
                settings = load_settings(str(env_file))
        self.assertEqual(settings.source_root, Path("/data/casos"))
        self.assertEqual(settings.destination_base, Path("/data/laudos"))
        self.assertEqual(settings.port, 8081)
        self.assertEqual(settings.host, DEFAULT_HOST)

    def test_environment_wins_over_env_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            env_file = Path(tmp) / "laudo.env"
            env_file.write_text("ROOT_PATH=/from/file\n", encoding="utf-8")
            with patch.dict(os.environ, {"ROOT_PATH": "/from/env"}, clear=True):
                settings = load_settings(str(env_file))
        self.assertEqual(settings.source_root, Path("/from/env"))

    def test_defaults_and_bad_port(self):
        with tempfile.TemporaryDirectory() as tmp:
            cwd = os.getcwd()
            os.chdir(tmp)
            try:
                with patch.dict(os.environ, {"PORT": "not-a-number"}, clear=True):
                    settings = load_settings()
            finally:
                os.chdir(cwd)
        self.assertEqual(settings.port, DEFAULT_PORT)
        self.assertEqual(settings.source_root, Path("."))

    def test_missing_explicit_env_file(self):
        with self.assertRaises(FileNotFoundError):
            load_settings("/definitely/not/here.env")

    def test_overrides(self):
        base = Settings(source_root=Path("/a"), destination_base=Path("/b"))
        self.assertIs(base.with_overrides(), base)
        changed = base.with_overrides(destination_base="/c", port=9000)
        self.assertEqual(changed.source_root, Path("/a"))
        self.assertEqual(changed.destination_base, Path("/c"))
        self.assertEqual(changed.port, 9000)


if __name__ == "__main__":
    unittest.main()
