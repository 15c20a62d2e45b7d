import json
import os
import tempfile
import unittest
from pathlib import Path

from sheet_merger.config import ConfigError, MergerSettings, load_settings, starter_config


class LoadSettingsTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.dir = Path(self.tmp.name)
        cwd = os.getcwd()
        os.chdir(self.dir)
        self.addCleanup(os.chdir, cwd)

    def write_config(self, payload, name="sheet-merger.json") -> Path:
        path = self.dir / name
        path.write_text(json.dumps(payload) if not isinstance(payload, str) else payload, encoding="utf-8")
        return path

    def test_defaults_without_config(self):
        settings = load_settings(environ={})
        self.assertEqual(settings.export_basename, "merged-data")
        self.assertEqual(settings.preview_limit, 100)
        self.assertEqual(settings.locale, "en")

    def test_file_values_override_defaults(self):
        path = self.write_config({"export_basename": "combined", "preview_limit": 25, "locale": "vi"})
        settings = load_settings(path, environ={})
        self.assertEqual(settings, MergerSettings(export_basename="combined", preview_limit=25, locale="vi"))

    def test_environment_overrides_file(self):
        path = self.write_config({"export_basename": "combined", "preview_limit": 25})
        settings = load_settings(
            path,
            environ={"SHEET_MERGER_EXPORT_NAME": "from-env", "SHEET_MERGER_PREVIEW_LIMIT": "7"},
        )
        self.assertEqual(settings.export_basename, "from-env")
        self.assertEqual(settings.preview_limit, 7)

    def test_config_path_from_environment(self):
        path = self.write_config({"locale": "vi"}, name="custom.json")
        settings = load_settings(environ={"SHEET_MERGER_CONFIG": str(path)})
        self.assertEqual(settings.locale, "vi")

    def test_missing_explicit_config_is_an_error(self):
        with self.assertRaises(ConfigError):
            load_settings(self.dir / "nope.json", environ={})

    def test_invalid_values_are_rejected(self):
        with self.assertRaises(ConfigError):
            load_settings(self.write_config({"locale": "fr"}), environ={})
        with self.assertRaises(ConfigError):
            load_settings(self.write_config({"preview_limit": 0}), environ={})
        with self.assertRaises(ConfigError):
            load_settings(self.write_config({"export_basename": "  "}), environ={})
        with self.assertRaises(ConfigError):
            load_settings(environ={"SHEET_MERGER_PREVIEW_LIMIT": "many"})

    def test_unknown_keys_and_formats_are_rejected(self):
        with self.assertRaises(ConfigError):
            load_settings(self.write_config({"theme": "dark"}), environ={})
        with self.assertRaises(ConfigError):
            load_settings(self.write_config("locale: vi\n", name="config.yaml"), environ={})
        with self.assertRaises(ConfigError):
            load_settings(self.write_config("[1, 2]"), environ={})
        with self.assertRaises(ConfigError):
            load_settings(self.write_config("{not json"), environ={})

    def test_starter_config_loads_back_to_defaults(self):
        path = self.write_config(starter_config())
        self.assertEqual(load_settings(path, environ={}), MergerSettings())


if __name__ == "__main__":
    unittest.main()
