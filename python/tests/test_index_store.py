"""
Tests for index persistence and snapshot loading.
"""

import json
import os
import shutil
import tempfile
import unittest

from search import (
    IndexRecord,
    IndexStore,
    IndexUnavailableError,
    QueryEngine,
    SearchIndex,
    SimilarityEngine,
)
from search.index_store import INDEX_FORMAT_VERSION, check_format_version


class TestIndexRecordSerialization(unittest.TestCase):
    """Test the index file field names."""

    def test_to_dict_uses_index_field_names(self):
        record = IndexRecord(id="a", title="甲", focus_topics=("修辭",), word_count=12)
        data = record.to_dict()

        self.assertEqual(data["dse_focus"], ["修辭"])
        self.assertEqual(data["wordCount"], 12)
        self.assertNotIn("focus_topics", data)
        self.assertNotIn("word_count", data)

    def test_unknown_fields_are_preserved(self):
        record = IndexRecord.from_dict({"id": "a", "title": "甲", "audio": "a.mp3"})

        self.assertEqual(record.extra, {"audio": "a.mp3"})
        self.assertEqual(record.to_dict()["audio"], "a.mp3")

    def test_absent_lists_default_to_empty(self):
        record = IndexRecord.from_dict({"id": "a"})

        self.assertEqual(record.tags, ())
        self.assertEqual(record.focus_topics, ())
        self.assertEqual(record.importance, 0)

    def test_focus_topics_alias_is_read(self):
        record = IndexRecord.from_dict({"id": "a", "focusTopics": ["比喻"]})
        self.assertEqual(record.focus_topics, ("比喻",))

    def test_entry_without_id_is_rejected(self):
        with self.assertRaises(ValueError):
            IndexRecord.from_dict({"title": "no id"})
        with self.assertRaises(ValueError):
            IndexRecord.from_dict(["not", "an", "object"])


class TestSearchIndexParsing(unittest.TestCase):
    """Test parsing stored index payloads."""

    def test_bad_entries_are_skipped(self):
        index = SearchIndex.from_dict(
            {"version": "1.0", "created": "t", "data": [{"id": "a"}, {"title": "x"}, "junk"]}
        )

        self.assertEqual(index.count, 1)
        self.assertEqual(index.get("a").id, "a")
        self.assertIsNone(index.get("missing"))

    def test_payload_without_data_is_unavailable(self):
        with self.assertRaises(IndexUnavailableError):
            SearchIndex.from_dict({"version": "1.0"})
        with self.assertRaises(IndexUnavailableError):
            SearchIndex.from_dict([])

    def test_version_checks(self):
        check_format_version(INDEX_FORMAT_VERSION)
        check_format_version("1.3")
        with self.assertRaises(IndexUnavailableError):
            check_format_version("2.0")
        with self.assertRaises(IndexUnavailableError):
            check_format_version("not-a-version")

    def test_round_trip_dict(self):
        index = SearchIndex(records=(IndexRecord(id="a", title="甲"),), created="2024-01-01")
        data = index.to_dict()

        self.assertEqual(data["count"], 1)
        self.assertEqual(data["version"], INDEX_FORMAT_VERSION)
        self.assertEqual(SearchIndex.from_dict(data), index)


class TestIndexStoreBehavior(unittest.TestCase):
    """Test publishing and loading the index file."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.index_path = os.path.join(self.temp_dir, "out", "search-index.json")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_publish_writes_index_file(self):
        store = IndexStore(self.index_path)
        store.publish([IndexRecord(id="a", title="甲")], created="2024-01-01T00:00:00")

        with open(self.index_path, encoding="utf-8") as f:
            data = json.load(f)

        self.assertEqual(data["version"], INDEX_FORMAT_VERSION)
        self.assertEqual(data["created"], "2024-01-01T00:00:00")
        self.assertEqual(data["count"], 1)
        self.assertEqual(data["data"][0]["title"], "甲")

    def test_publish_leaves_no_temp_files(self):
        IndexStore(self.index_path).publish([IndexRecord(id="a", title="甲")])
        self.assertEqual(os.listdir(os.path.dirname(self.index_path)), ["search-index.json"])

    def test_load_sees_republished_index(self):
        reader = IndexStore(self.index_path)
        writer = IndexStore(self.index_path)

        writer.publish([IndexRecord(id="a", title="甲")])
        first = reader.load()
        writer.publish([IndexRecord(id="a", title="甲"), IndexRecord(id="b", title="乙")])
        second = reader.load()

        self.assertEqual(first.count, 1)
        self.assertEqual(second.count, 2)

    def test_publish_replaces_whole_index(self):
        store = IndexStore(self.index_path)
        store.publish([IndexRecord(id="a", title="甲"), IndexRecord(id="b", title="乙")])
        store.publish([IndexRecord(id="c", title="丙")])

        self.assertEqual([r.id for r in store.load().records], ["c"])

    def test_snapshot_is_reused_when_file_unchanged(self):
        store = IndexStore(self.index_path)
        store.publish([IndexRecord(id="a", title="甲")])

        self.assertIs(store.load(), store.load())

    def test_missing_file_is_unavailable(self):
        with self.assertRaises(IndexUnavailableError):
            IndexStore(self.index_path).load()

    def test_corrupt_file_is_unavailable(self):
        os.makedirs(os.path.dirname(self.index_path))
        with open(self.index_path, "w", encoding="utf-8") as f:
            f.write("{not json")

        with self.assertRaises(IndexUnavailableError):
            IndexStore(self.index_path).load()

    def test_deeply_nested_file_is_unavailable(self):
        os.makedirs(os.path.dirname(self.index_path))
        with open(self.index_path, "w", encoding="utf-8") as f:
            f.write('{"data": ' + "[" * 200000 + "]" * 200000 + "}")

        with self.assertRaises(IndexUnavailableError):
            IndexStore(self.index_path).load()
        self.assertEqual(QueryEngine(IndexStore(self.index_path)).search_simple("x"), [])
        self.assertEqual(SimilarityEngine(IndexStore(self.index_path)).related("a"), [])

    def test_in_memory_store(self):
        store = IndexStore.from_records([IndexRecord(id="a", title="甲")])
        self.assertEqual(store.load().count, 1)

        with self.assertRaises(IndexUnavailableError):
            IndexStore().load()


if __name__ == "__main__":
    unittest.main()
