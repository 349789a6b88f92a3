import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "resolver"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from relpick_core.config import AppConfig, load_config, save_config
from relpick_resolver.models import ArchiveKind


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "missing.json"
            cfg = load_config(path)
            self.assertIsInstance(cfg, AppConfig)
            self.assertEqual(cfg.match.archive_preference, [])
            self.assertTrue(cfg.download.verify_checksums)
            self.assertEqual(cfg.network.api_base, "https://api.github.com")
            self.assertEqual(cfg.preference, ())

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "config.json"
            cfg = load_config(path)
            cfg.match.archive_preference = ["zip", "tar.gz"]
            cfg.download.chunk_size_kb = 128
            save_config(cfg, path)
            reloaded = load_config(path)
            self.assertEqual(reloaded.preference, (ArchiveKind.ZIP, ArchiveKind.TAR_GZ))
            self.assertEqual(reloaded.chunk_size, 128 * 1024)

    def test_invalid_values_are_normalized(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            raw = {
                "match": {"archive_preference": ["ZIP", "rar", "zip", "tar.xz"], "libc_override": "uclibc"},
                "download": {"chunk_size_kb": 1, "timeout_s": 99999},
                "logging": {"level": "chatty", "keep_log_files": 0},
                "unknown_section": {"x": 1},
            }
            path.write_text(json.dumps(raw), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.match.archive_preference, ["zip", "tar.xz"])
            self.assertIsNone(cfg.match.libc_override)
            self.assertEqual(cfg.download.chunk_size_kb, 4)
            self.assertEqual(cfg.download.timeout_s, 3600)
            self.assertEqual(cfg.logging.level, "INFO")
            self.assertEqual(cfg.logging.keep_log_files, 2)

    def test_non_numeric_and_null_values_fall_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            raw = {
                "config_version": "one",
                "download": {"chunk_size_kb": "big", "timeout_s": None},
                "logging": {"keep_log_files": None},
            }
            path.write_text(json.dumps(raw), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.config_version, 1)
            self.assertEqual(cfg.download.chunk_size_kb, 64)
            self.assertEqual(cfg.download.timeout_s, 180)
            self.assertEqual(cfg.logging.keep_log_files, 7)

    def test_libc_override_is_lowercased(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(json.dumps({"match": {"libc_override": "MUSL"}}), encoding="utf-8")
            self.assertEqual(load_config(path).match.libc_override, "musl")

    def test_unreadable_file_falls_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_config(path), AppConfig())
            path.write_text("[1, 2]", encoding="utf-8")
            self.assertEqual(load_config(path), AppConfig())


if __name__ == "__main__":
    unittest.main()
