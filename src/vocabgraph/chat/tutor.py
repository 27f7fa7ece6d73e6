from __future__ import annotations

import logging
from typing import Any, Protocol

from neo4j import Driver

from ..store.graph_db import require
from .llm import ChatMessage, LLMError


logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = "AI Agent is offline, but here is a word to study."


class JSONChatClient(Protocol):
    def chat_json(self, messages: list[ChatMessage]) -> dict[str, Any]: ...


_CANDIDATE = """
MATCH (l:Learner {id: $learner_id})-[r:LEARNING]->(w:Word)
WHERE r.strength < 0.5
WITH w, r
LIMIT 1
MATCH (w)-[:HAS_SENSE]->(s:Sense)
OPTIONAL MATCH (w)-[:RELATED_TO]->(related:Word)
RETURN w.lemma AS word, s.definition_en AS def, collect(related.lemma) AS related_words
"""


def build_prompt(word: str, definition: str, related: list[str]) -> str:
    return (
        "You are a Vocabulary Tutor Agent.\n"
        f'The user is struggling with the word "{word}".\n'
        f'Definition: "{definition}".\n'
        f"Related words they might know: {', '.join(related) if related else '(none)'}.\n"
        "\n"
        "Task:\n"
        "1. Explain the word simply.\n"
        "2. Give a mnemonic or connection using the related words if helpful.\n"
        "3. Create a short, fun sentence using the word.\n"
        "\n"
        'Output JSON: { "explanation": "...", "mnemonic": "...", "sentence": "..." }'
    )


def recommend_and_explain(driver: Driver | None, llm: JSONChatClient, learner_id: str) -> dict[str, Any]:
    """Pick a weak word for the learner and ask the LLM for a personalized explanation."""
    with require(driver).session() as session:
        record = session.run(_CANDIDATE, learner_id=learner_id).single()

    if record is None:
        return {"message": "No recommendations found"}

    word = str(record["word"])
    definition = str(record["def"] or "")
    related = [str(r) for r in (record["related_words"] or []) if r]

    try:
        explained = llm.chat_json([ChatMessage(role="user", content=build_prompt(word, definition, related))])
    except LLMError as e:
        logger.error("Tutor explanation failed for %s: %s", word, e)
        return {"message": OFFLINE_MESSAGE, "word": word, "error": str(e)}

    return {"word": word, **explained}
