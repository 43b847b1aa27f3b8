"""
Integration tests for the search CLI.
"""

import io
import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from cli_search import SearchCLI
from search import IndexRecord, IndexStore


class TestSearchCLIBehavior(unittest.TestCase):
    """Test search CLI commands against a published index."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.index_path = os.path.join(self.temp_dir, "search-index.json")
        self.stats_path = os.path.join(self.temp_dir, "search-stats.json")
        IndexStore(self.index_path).publish(
            [
                IndexRecord(
                    id="quanxue",
                    title="勸學",
                    author="荀子",
                    genre="議論文",
                    tags=("儒家", "學習"),
                    focus_topics=("比喻論證",),
                    content="君子曰：學不可以已。",
                    url="quanxue.html",
                    importance=5,
                ),
                IndexRecord(
                    id="shishuo",
                    title="師說",
                    author="韓愈",
                    genre="議論文",
                    tags=("學習",),
                    content="古之學者必有師。",
                    url="shishuo.html",
                    importance=4,
                ),
            ],
            created="2024-05-01T00:00:00",
        )
        self.cli = SearchCLI()
        self.env = patch.dict(os.environ, {}, clear=True)
        self.env.start()

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _run(self, *args):
        argv = ["--index", self.index_path, "--stats-file", self.stats_path, *args]
        with patch("sys.stdout", new_callable=io.StringIO) as stdout:
            code = self.cli.run(argv)
        return code, stdout.getvalue()

    def test_search_json_output(self):
        code, output = self._run("search", "學習", "--format", "json")

        self.assertEqual(code, 0)
        results = json.loads(output)
        self.assertEqual([r["id"] for r in results], ["quanxue", "shishuo"])
        self.assertEqual(results[0]["score"], 5 + 5 * 2)

    def test_search_table_output(self):
        code, output = self._run("search", "勸學")

        self.assertEqual(code, 0)
        self.assertIn("Found 1 results", output)
        self.assertIn("quanxue.html", output)

    def test_search_list_output(self):
        code, output = self._run("search", "師", "--format", "list")

        self.assertEqual(code, 0)
        self.assertIn("1. 師說", output)
        self.assertIn("Author: 韓愈", output)

    def test_search_field_and_pagination(self):
        code, output = self._run(
            "search", "學習", "--field", "tags", "--offset", "1", "--format", "json"
        )

        self.assertEqual(code, 0)
        self.assertEqual([r["id"] for r in json.loads(output)], ["shishuo"])

    def test_search_without_results(self):
        code, output = self._run("search", "岳陽樓")

        self.assertEqual(code, 0)
        self.assertIn("No results found.", output)

    def test_unknown_field_is_rejected(self):
        code, _ = self._run("search", "學習", "--field", "subreddit")
        self.assertEqual(code, 2)

    def test_searches_are_recorded(self):
        self._run("search", "學習")
        self._run("search", "學習")
        self._run("search", "荀子", "--no-record")

        code, output = self._run("popular")

        self.assertEqual(code, 0)
        self.assertIn("學習", output)
        self.assertNotIn("荀子", output)

    def test_popular_defaults(self):
        code, output = self._run("popular", "--limit", "3")

        self.assertEqual(code, 0)
        self.assertIn("荀子", output)
        self.assertEqual(len(output.strip().splitlines()), 3)

    def test_related(self):
        code, output = self._run("related", "quanxue", "--format", "json")

        self.assertEqual(code, 0)
        results = json.loads(output)
        self.assertEqual(results[0]["id"], "shishuo")
        self.assertEqual(results[0]["similarity"], 5 + 2)

    def test_related_unknown_article(self):
        code, output = self._run("related", "missing")

        self.assertEqual(code, 0)
        self.assertIn("No related articles", output)

    def test_suggest(self):
        code, output = self._run("suggest", "學")

        self.assertEqual(code, 0)
        self.assertIn("勸學", output.splitlines())
        self.assertIn("學習", output.splitlines())

    def test_stats(self):
        code, output = self._run("stats")

        self.assertEqual(code, 0)
        self.assertIn("Articles: 2", output)
        self.assertIn("Created: 2024-05-01T00:00:00", output)
        self.assertIn("學習: 2", output)

    def test_stats_without_index(self):
        os.unlink(self.index_path)
        code, output = self._run("stats")

        self.assertEqual(code, 1)
        self.assertIn("not available", output)

    def test_no_command_prints_help(self):
        with patch("sys.stdout", new_callable=io.StringIO):
            self.assertEqual(self.cli.run([]), 1)


if __name__ == "__main__":
    unittest.main()
