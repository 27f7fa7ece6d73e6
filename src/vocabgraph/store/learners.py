from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Any

from neo4j import Driver

from .graph_db import require


logger = logging.getLogger(__name__)

MASTERY_TYPES = ("KNOWS", "LEARNING", "FORGOT")

DEFAULT_LEARNERS = (
    {"id": "learner_novice", "name": "Novice Kim", "level": "A1"},
    {"id": "learner_inter", "name": "Intermediate Lee", "level": "B1"},
    {"id": "learner_advanced", "name": "Advanced Park", "level": "C1"},
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def init_learners(driver: Driver | None) -> dict[str, Any]:
    with require(driver).session() as session:
        session.run(
            """
            UNWIND $learners AS learner
            MERGE (l:Learner {id: learner.id})
            SET l.name = learner.name, l.level = learner.level
            """,
            learners=[dict(l) for l in DEFAULT_LEARNERS],
        )
    logger.info("Learners initialized")
    return {"message": "Initialized 3 learners: Novice, Intermediate, Advanced"}


def simulate_history(
    driver: Driver | None,
    learner_id: str,
    count: int = 20,
    *,
    rng: random.Random | None = None,
) -> dict[str, Any]:
    """Scatter random mastery relationships between a learner and existing words."""
    rng = rng or random.Random()
    with require(driver).session() as session:
        result = session.run("MATCH (w:Word) RETURN w.lemma AS lemma LIMIT $limit", limit=int(count) * 3)
        words = [r["lemma"] for r in result]
        if not words:
            return {"message": "No words found to learn"}

        created = 0
        for word in words:
            if rng.random() > 0.3:
                continue
            if created >= count:
                break

            # Relationship types cannot be parameterized; MASTERY_TYPES is a closed set.
            rel = rng.choice(MASTERY_TYPES)
            session.run(
                f"""
                MATCH (l:Learner {{id: $learner_id}})
                MATCH (w:Word {{lemma: $word}})
                MERGE (l)-[r:{rel}]->(w)
                SET r.strength = $strength, r.correct_rate = $correct_rate, r.last_seen = $last_seen
                """,
                learner_id=learner_id,
                word=word,
                strength=rng.random(),
                correct_rate=rng.random(),
                last_seen=_now(),
            )
            created += 1

    return {"message": f"Simulated history for {learner_id}: {created} words linked."}


def record_quiz_result(driver: Driver | None, learner_id: str, word: str, is_correct: bool) -> dict[str, Any]:
    with require(driver).session() as session:
        session.run(
            """
            MATCH (l:Learner {id: $learner_id})
            MATCH (w:Word {lemma: $word})
            MERGE (l)-[r:LEARNING]->(w)
            SET r.last_seen = $now,
                r.correct_count = coalesce(r.correct_count, 0) + $inc,
                r.total_count = coalesce(r.total_count, 0) + 1
            SET r.strength = toFloat(r.correct_count) / r.total_count
            """,
            learner_id=learner_id,
            word=word,
            now=_now(),
            inc=1 if is_correct else 0,
        )
    return {"message": "Updated"}
