from __future__ import annotations

import random
from dataclasses import asdict, dataclass
from typing import Any

from neo4j import Driver

from .graph.index import GraphIndex
from .graph.models import WordNode
from .store.graph_db import require


class QuizUnavailable(RuntimeError):
    pass


@dataclass(frozen=True)
class QuizItem:
    question: str
    options: list[str]
    answer: str
    wordId: str
    type: str = "definition"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _definition(node: WordNode) -> str:
    return node.meaning_ko or node.definition_en or ""


def snapshot_quiz(index: GraphIndex | None, word: str | None = None, *, rng: random.Random | None = None) -> QuizItem:
    """Multiple-choice meaning question built from the snapshot's word definitions."""
    rng = rng or random.Random()
    if index is None:
        raise QuizUnavailable("Graph data not available")

    candidates = [n for n in index.nodes if isinstance(n, WordNode) and (n.meaning_ko or n.definition_en)]
    if len(candidates) < 4:
        raise QuizUnavailable("Not enough vocabulary data")

    target: WordNode | None = None
    if word:
        search = word.lower()
        target = next(
            (
                n
                for n in candidates
                if (n.text is not None and n.text.lower() == search)
                or (n.display is not None and n.display.lower() == search)
            ),
            None,
        )
    if target is None:
        target = rng.choice(candidates)

    label = target.display or target.text or "unknown"
    answer = _definition(target)

    others = [n for n in candidates if n.id != target.id]
    picked = rng.sample(others, min(3, len(others)))
    distractors = [d for d in (_definition(n) for n in picked) if d and d != answer]
    while len(distractors) < 3:
        distractors.append(f"Alternative meaning {len(distractors) + 1}")

    options = [answer, *distractors[:3]]
    rng.shuffle(options)
    return QuizItem(question=f'"{label}"의 뜻은?', options=options, answer=answer, wordId=label)


_TARGET_FOR_LEARNER = """
MATCH (l:Learner {id: $learner_id})-[r:LEARNING|FORGOT]->(w:Word)-[:HAS_SENSE]->(s:Sense)
RETURN w.lemma AS word, s.definition_en AS def
ORDER BY r.last_seen ASC
LIMIT 1
"""

_ANY_TARGET = """
MATCH (w:Word)-[:HAS_SENSE]->(s:Sense)
RETURN w.lemma AS word, s.definition_en AS def
LIMIT 1
"""

_DISTRACTORS = """
MATCH (w:Word)-[:HAS_SENSE]->(s:Sense)
WHERE w.lemma <> $word
WITH s.definition_en AS def
ORDER BY rand()
LIMIT 3
RETURN def
"""


def learner_quiz(driver: Driver | None, learner_id: str, *, rng: random.Random | None = None) -> QuizItem | None:
    """Definition question for the learner's stalest LEARNING/FORGOT word, else any word."""
    rng = rng or random.Random()
    with require(driver).session() as session:
        record = session.run(_TARGET_FOR_LEARNER, learner_id=learner_id).single()
        if record is None:
            record = session.run(_ANY_TARGET).single()
        if record is None:
            return None

        word = str(record["word"])
        definition = str(record["def"] or "")
        distractors = [str(r["def"] or "") for r in session.run(_DISTRACTORS, word=word)]

    options = [definition, *distractors]
    rng.shuffle(options)
    return QuizItem(
        question=f'What is the definition of "{word}"?',
        options=options,
        answer=definition,
        wordId=word,
    )
