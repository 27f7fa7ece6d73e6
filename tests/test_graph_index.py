import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from vocabgraph.graph import index as graph_index
from vocabgraph.graph import query
from vocabgraph.graph.index import CachedGraph, build_index, load
from vocabgraph.graph.models import GraphNode, SynsetNode, WordNode


def _word(lemma, **props):
    return {"id": f"word:{lemma}", "type": "Word", "properties": {"text": lemma, "display": lemma, **props}}


SNAPSHOT = {
    "nodes": [
        _word("apple"),
        {"id": "sense:s1", "type": "Synset", "properties": {"definition_en": "a round fruit"}},
        {"id": "odd:1", "type": "Mystery", "properties": {"x": 1}},
    ],
    "edges": [
        {"source": "word:apple", "target": "sense:s1", "type": "HAS_SENSE"},
        {"source": "word:apple", "target": "word:ghost", "type": "SYNONYM_OF"},
    ],
}


class TestGraphIndex(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "vocabulary_graph.json"

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, data):
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def test_build_index_variants_and_adjacency(self):
        idx = build_index(SNAPSHOT)
        self.assertIsInstance(idx.get("word:apple"), WordNode)
        self.assertIsInstance(idx.get("sense:s1"), SynsetNode)
        odd = idx.get("odd:1")
        self.assertIs(type(odd), GraphNode)
        self.assertEqual(odd.type, "Mystery")
        self.assertEqual([e.target for e in idx.outgoing("word:apple")], ["sense:s1", "word:ghost"])
        self.assertEqual([e.source for e in idx.incoming("sense:s1")], ["word:apple"])
        self.assertEqual(idx.outgoing("missing"), [])

    def test_absent_fields_default_to_none(self):
        idx = build_index({"nodes": [{"id": "word:x", "type": "Word", "properties": {}}], "edges": []})
        node = idx.get("word:x")
        self.assertIsNone(node.text)
        self.assertIsNone(node.display)

    def test_duplicate_ids_last_write_wins(self):
        data = {
            "nodes": [_word("x", display="first"), _word("x", display="second")],
            "edges": [],
        }
        idx = build_index(data)
        self.assertEqual(idx.get("word:x").display, "second")
        self.assertEqual(len(idx.nodes), 2)

    def test_stats_from_snapshot_or_metadata_or_computed(self):
        self.assertEqual(build_index({**SNAPSHOT, "stats": {"nodesCreated": 99}}).stats, {"nodesCreated": 99})
        nested = {**SNAPSHOT, "metadata": {"stats": {"edgesCreated": 7}}}
        self.assertEqual(build_index(nested).stats, {"edgesCreated": 7})

        computed = build_index(SNAPSHOT).stats
        self.assertEqual(computed["nodesCreated"], 3)
        self.assertEqual(computed["edgesCreated"], 2)
        self.assertEqual(computed["byNodeType"]["Word"], 1)
        self.assertEqual(computed["byEdgeType"]["HAS_SENSE"], 1)

    def test_load_missing_file_returns_none_and_logs(self):
        with self.assertLogs("vocabgraph.graph.index", level="ERROR"):
            self.assertIsNone(load(self.path))

    def test_load_malformed_file_returns_none(self):
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertLogs("vocabgraph.graph.index", level="ERROR"):
            self.assertIsNone(load(self.path))

        self._write({"nodes": "nope", "edges": []})
        with self.assertLogs("vocabgraph.graph.index", level="ERROR"):
            self.assertIsNone(load(self.path))

        # Nesting deep enough to exhaust the decoder's recursion limit.
        self.path.write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
        with self.assertLogs("vocabgraph.graph.index", level="ERROR"):
            self.assertIsNone(load(self.path))

        cache = CachedGraph(self.path)
        with self.assertLogs("vocabgraph.graph.index", level="ERROR"):
            self.assertIsNone(query.word_graph(cache.get(), "apple"))

    def test_non_object_metadata_falls_back_to_computed_stats(self):
        self._write({"nodes": [_word("apple")], "edges": [], "metadata": "v1"})
        idx = load(self.path)
        self.assertIsNotNone(idx)
        self.assertEqual(query.dataset_stats(idx)["nodesCreated"], 1)
        self.assertEqual(query.dataset_stats(idx)["byNodeType"], {"Word": 1})

    def test_unexpected_error_is_contained(self):
        self._write(SNAPSHOT)
        with mock.patch.object(graph_index, "build_index", side_effect=AttributeError("boom")):
            with self.assertLogs("vocabgraph.graph.index", level="ERROR") as logs:
                self.assertIsNone(load(self.path))
        self.assertIn("boom", logs.output[0])

    def test_cached_graph_loads_once_after_success(self):
        self._write(SNAPSHOT)
        cache = CachedGraph(self.path)
        with mock.patch.object(graph_index, "load", wraps=graph_index.load) as spy:
            first = cache.get()
            second = cache.get()
            self.path.unlink()
            third = cache.get()
        self.assertIsNotNone(first)
        self.assertIs(first, second)
        self.assertIs(first, third)
        self.assertEqual(spy.call_count, 1)
        self.assertEqual(query.word_graph(first, "apple"), query.word_graph(third, "apple"))

    def test_cached_graph_retries_after_failure(self):
        cache = CachedGraph(self.path)
        with self.assertLogs("vocabgraph.graph.index", level="ERROR"):
            self.assertIsNone(cache.get())
        self.assertFalse(cache.loaded)

        self._write(SNAPSHOT)
        self.assertIsNotNone(cache.get())
        self.assertTrue(cache.loaded)

    def test_missing_dataset_sentinels(self):
        cache = CachedGraph(self.path)
        with self.assertLogs("vocabgraph.graph.index", level="ERROR"):
            idx = cache.get()
        self.assertIsNone(query.word_graph(idx, "apple"))
        self.assertEqual(query.get_synonyms(idx, "apple"), [])
        self.assertEqual(query.get_antonyms(idx, "apple"), [])
        self.assertIsNone(query.word_properties(idx, "apple"))
        self.assertIsNone(query.dataset_stats(idx))


if __name__ == "__main__":
    unittest.main()
