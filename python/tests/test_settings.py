"""
Settings tests focusing on behavior, not implementation.
"""

import json
import os
import tempfile
import unittest
from unittest.mock import patch

import yaml

from settings import DEFAULT_SETTINGS, Settings, _convert_env_value, _deep_merge


class TestSettingsBehavior(unittest.TestCase):
    """Test settings behavior and configuration outcomes."""

    def _write_temp(self, suffix, content):
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=suffix, delete=False, encoding="utf-8"
        ) as f:
            f.write(content)
        self.addCleanup(os.unlink, f.name)
        return f.name

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults_without_file(self):
        """Settings should provide sensible defaults when no file is given."""
        settings = Settings()

        self.assertEqual(settings.articles_dir, "./articles")
        self.assertEqual(settings.output_dir, "./docs")
        self.assertEqual(settings.index_path, os.path.join("./docs", "search-index.json"))
        self.assertEqual(settings.excerpt_length, 150)
        self.assertEqual(settings.content_sample_length, 500)
        self.assertEqual(settings.default_limit, 10)
        self.assertEqual(settings.default_fields, ["title", "content", "tags"])
        self.assertEqual(settings.field_weights["title"], 10)
        self.assertEqual(settings.importance_multiplier, 2)
        self.assertEqual(settings.meta_defaults["author"], "佚名")
        self.assertEqual(len(settings.popular_searches), 10)

    @patch.dict(os.environ, {}, clear=True)
    def test_json_file_is_merged_over_defaults(self):
        """Values from a JSON file override only the keys they name."""
        path = self._write_temp(
            ".json",
            json.dumps({"paths": {"output_dir": "./site"}, "search": {"excerpt_length": 80}}),
        )
        settings = Settings(path)

        self.assertEqual(settings.output_dir, "./site")
        self.assertEqual(settings.articles_dir, "./articles")
        self.assertEqual(settings.excerpt_length, 80)
        self.assertEqual(settings.content_sample_length, 500)
        self.assertEqual(settings.stats_path, os.path.join("./site", "search-stats.json"))

    @patch.dict(os.environ, {}, clear=True)
    def test_yaml_file_is_loaded(self):
        path = self._write_temp(
            ".yaml",
            yaml.safe_dump(
                {"site": {"title": "中文科"}, "defaults": {"author": "無名氏"}},
                allow_unicode=True,
            ),
        )
        settings = Settings(path)

        self.assertEqual(settings.site_title, "中文科")
        self.assertEqual(settings.meta_defaults["author"], "無名氏")
        self.assertEqual(settings.meta_defaults["genre"], "未知體裁")

    def test_missing_file_exits(self):
        """An explicit settings file that does not exist is fatal."""
        with self.assertRaises(SystemExit) as ctx:
            Settings("/nonexistent/settings.json")
        self.assertEqual(ctx.exception.code, 1)

    @patch.dict(os.environ, {}, clear=True)
    def test_invalid_file_falls_back_to_defaults(self):
        path = self._write_temp(".json", "{ invalid json")
        settings = Settings(path)

        self.assertEqual(settings.excerpt_length, 150)

    @patch.dict(
        os.environ,
        {"DSE_SEARCH_EXCERPT_LENGTH": "120", "DSE_PATHS_OUTPUT_DIR": "/tmp/site"},
        clear=True,
    )
    def test_environment_overrides(self):
        settings = Settings()

        self.assertEqual(settings.excerpt_length, 120)
        self.assertEqual(settings.output_dir, "/tmp/site")

    def test_defaults_are_not_mutated(self):
        with patch.dict(os.environ, {"DSE_SEARCH_DEFAULT_LIMIT": "3"}, clear=True):
            Settings()
        self.assertEqual(DEFAULT_SETTINGS["search"]["default_limit"], 10)


class TestSettingsHelpers(unittest.TestCase):
    def test_deep_merge(self):
        merged = _deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
        self.assertEqual(merged, {"a": {"x": 1, "y": 3}, "b": 1, "c": 4})

    def test_convert_env_value(self):
        self.assertIs(_convert_env_value("true"), True)
        self.assertIs(_convert_env_value("off"), False)
        self.assertEqual(_convert_env_value("42"), 42)
        self.assertEqual(_convert_env_value("1.5"), 1.5)
        self.assertEqual(_convert_env_value("title, content"), ["title", "content"])
        self.assertEqual(_convert_env_value("docs"), "docs")


if __name__ == "__main__":
    unittest.main()
