import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from fastapi.testclient import TestClient

from vocabgraph.web.server import create_app


SNAPSHOT = {
    "nodes": [
        {"id": "word:apple", "type": "Word",
         "properties": {"text": "apple", "display": "apple", "definition_en": "a round fruit"}},
        {"id": "sense:s1", "type": "Synset", "properties": {"definition_en": "a round fruit"}},
        {"id": "word:fruit", "type": "Word",
         "properties": {"text": "fruit", "display": "fruit", "definition_en": "edible plant part"}},
        {"id": "word:run", "type": "Word", "properties": {"text": "run", "display": "run", "meaning_ko": "달리다"}},
        {"id": "word:blue", "type": "Word", "properties": {"text": "blue", "display": "blue", "definition_en": "a colour"}},
    ],
    "edges": [
        {"source": "word:apple", "target": "sense:s1", "type": "HAS_SENSE"},
        {"source": "word:fruit", "target": "word:apple", "type": "SYNONYM_OF"},
    ],
}


class FakeLLM:
    def chat_json(self, messages):
        return {"explanation": "x"}


class TestServer(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "vocabulary_graph.json"
        self.path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
        self.client = TestClient(create_app(graph_path=str(self.path), llm=FakeLLM()))

    def tearDown(self):
        self.tmp.cleanup()

    def test_home(self):
        r = self.client.get("/")
        self.assertEqual(r.status_code, 200)
        self.assertIn("running", r.text)

    def test_search_resolves_word(self):
        r = self.client.get("/api/search/Apple")
        self.assertEqual(r.status_code, 200)
        data = r.json()
        self.assertEqual([n["id"] for n in data["nodes"]], ["apple", "a round fruit", "fruit"])
        self.assertIn({"source": "fruit", "target": "apple", "type": "SYNONYM_OF"}, data["links"])

    def test_search_placeholder_when_not_found(self):
        r = self.client.get("/api/search/zebra")
        self.assertEqual(r.json(), {"nodes": [{"id": "zebra", "group": "Word", "val": 20}], "links": []})

    def test_search_falls_back_to_store(self):
        stored = {"nodes": [{"id": "zebra", "group": "Word", "val": 25}], "links": []}
        with mock.patch("vocabgraph.store.graph_db.word_graph", return_value=stored) as lookup:
            client = TestClient(create_app(graph_path=str(self.path), driver=mock.MagicMock(), llm=FakeLLM()))
            r = client.get("/api/search/zebra")
        self.assertEqual(r.json(), stored)
        lookup.assert_called_once()

    def test_word_details(self):
        r = self.client.get("/api/words/apple")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["synonyms"], ["fruit"])
        self.assertEqual(self.client.get("/api/words/zebra").status_code, 404)

    def test_stats(self):
        r = self.client.get("/api/graph/stats")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["nodesCreated"], 5)

    def test_missing_dataset(self):
        client = TestClient(create_app(graph_path=str(Path(self.tmp.name) / "nope.json"), llm=FakeLLM()))
        self.assertEqual(client.get("/api/graph/stats").status_code, 500)
        self.assertEqual(client.get("/api/quiz").status_code, 500)
        self.assertEqual(client.get("/api/words/apple").status_code, 404)
        self.assertEqual(client.get("/api/search/apple").json()["nodes"][0]["val"], 20)

    def test_quiz(self):
        r = self.client.get("/api/quiz", params={"word": "run"})
        self.assertEqual(r.status_code, 200)
        data = r.json()
        self.assertEqual(data["answer"], "달리다")
        self.assertEqual(len(data["options"]), 4)

    def test_quiz_submit(self):
        r = self.client.post("/api/quiz/submit", json={"wordId": "run", "isCorrect": True})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["stored"], False)
        self.assertEqual(self.client.post("/api/quiz/submit", json={}).status_code, 400)

    def test_store_routes_without_driver(self):
        self.assertEqual(self.client.get("/test-db").status_code, 500)
        self.assertEqual(self.client.post("/learners/init").status_code, 500)
        self.assertEqual(self.client.get("/quiz/learner_novice").status_code, 500)
        self.assertEqual(self.client.get("/agent/recommend/learner_novice").json()["ok"], False)

    def test_recommend_with_driver(self):
        session = mock.MagicMock()
        session.run.return_value.single.return_value = {"word": "eager", "def": "keen", "related_words": []}
        driver = mock.MagicMock()
        driver.session.return_value.__enter__.return_value = session

        client = TestClient(create_app(graph_path=str(self.path), driver=driver, llm=FakeLLM()))
        r = client.get("/agent/recommend/learner_inter")
        self.assertEqual(r.json(), {"word": "eager", "explanation": "x"})


if __name__ == "__main__":
    unittest.main()
