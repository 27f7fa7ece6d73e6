import random
import unittest
from unittest import mock

from vocabgraph.graph.index import build_index
from vocabgraph.quiz import QuizUnavailable, learner_quiz, snapshot_quiz
from vocabgraph.store.graph_db import StoreUnavailable


def _word(lemma, definition, key="definition_en"):
    return {"id": f"word:{lemma}", "type": "Word", "properties": {"text": lemma, "display": lemma, key: definition}}


class TestSnapshotQuiz(unittest.TestCase):
    def setUp(self):
        self.idx = build_index(
            {
                "nodes": [
                    _word("apple", "사과", key="meaning_ko"),
                    _word("run", "to move fast"),
                    _word("happy", "feeling good"),
                    _word("blue", "a colour"),
                    {"id": "word:bare", "type": "Word", "properties": {"text": "bare"}},
                ],
                "edges": [],
            }
        )

    def test_targeted_question(self):
        item = snapshot_quiz(self.idx, "APPLE", rng=random.Random(3))
        self.assertEqual(item.question, '"apple"의 뜻은?')
        self.assertEqual(item.answer, "사과")
        self.assertEqual(item.wordId, "apple")
        self.assertEqual(len(item.options), 4)
        self.assertEqual(sorted(item.options), sorted(["사과", "to move fast", "feeling good", "a colour"]))

    def test_random_target_has_definition(self):
        item = snapshot_quiz(self.idx, None, rng=random.Random(7))
        self.assertIn(item.answer, item.options)
        self.assertNotEqual(item.wordId, "bare")
        self.assertEqual(item.to_dict()["type"], "definition")

    def test_pads_duplicate_distractors(self):
        idx = build_index(
            {
                "nodes": [_word("a", "same"), _word("b", "same"), _word("c", "same"), _word("d", "other")],
                "edges": [],
            }
        )
        item = snapshot_quiz(idx, "a", rng=random.Random(1))
        self.assertEqual(
            sorted(item.options),
            sorted(["same", "other", "Alternative meaning 2", "Alternative meaning 3"]),
        )

    def test_unavailable(self):
        with self.assertRaises(QuizUnavailable):
            snapshot_quiz(None)
        small = build_index({"nodes": [_word("a", "x"), _word("b", "y")], "edges": []})
        with self.assertRaises(QuizUnavailable):
            snapshot_quiz(small)


def _result(single=None, rows=()):
    res = mock.MagicMock()
    res.single.return_value = single
    res.__iter__.return_value = iter(list(rows))
    return res


def _driver(session):
    driver = mock.MagicMock()
    driver.session.return_value.__enter__.return_value = session
    return driver


class TestLearnerQuiz(unittest.TestCase):
    def test_falls_back_to_any_word(self):
        session = mock.MagicMock()
        session.run.side_effect = [
            _result(single=None),
            _result(single={"word": "apple", "def": "a fruit"}),
            _result(rows=[{"def": "a colour"}, {"def": "to run"}, {"def": "a dog"}]),
        ]
        item = learner_quiz(_driver(session), "learner_novice", rng=random.Random(0))

        self.assertEqual(item.question, 'What is the definition of "apple"?')
        self.assertEqual(item.answer, "a fruit")
        self.assertEqual(sorted(item.options), sorted(["a fruit", "a colour", "to run", "a dog"]))
        self.assertEqual(session.run.call_count, 3)

    def test_empty_store(self):
        session = mock.MagicMock()
        session.run.side_effect = [_result(single=None), _result(single=None)]
        self.assertIsNone(learner_quiz(_driver(session), "learner_novice"))

    def test_requires_driver(self):
        with self.assertRaises(StoreUnavailable):
            learner_quiz(None, "learner_novice")


if __name__ == "__main__":
    unittest.main()
