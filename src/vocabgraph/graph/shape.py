from __future__ import annotations

from typing import Any

from .models import (
    CEFRLevelNode,
    CollocationNode,
    CurriculumNode,
    DomainNode,
    ExampleNode,
    GraphNode,
    SynsetNode,
    TopicNode,
    WordNode,
)


MAIN_WORD_VAL = 25

# Curriculum nodes come from the Korean national curriculum tables.
CURRICULUM_PREFIX = "교육과정"


def word_label(node: WordNode) -> str:
    return node.display or node.text or node.id


def main_word(node: GraphNode) -> dict[str, Any]:
    """Shape the resolved word itself (always the first visualization node)."""
    if isinstance(node, WordNode):
        label = word_label(node)
    else:
        label = str(node.properties.get("display") or node.properties.get("text") or node.id)
    return {
        "id": label,
        "group": "Word",
        "val": MAIN_WORD_VAL,
        "label": label,
        "properties": node.properties,
    }


def _shaped(node_id: str, group: str, val: int, label: str | None, node: GraphNode) -> dict[str, Any]:
    return {"id": node_id, "group": group, "val": val, "label": label, "properties": node.properties}


def shape_node(node: GraphNode) -> dict[str, Any] | None:
    """Project a graph node into a visualization record, or None for unknown types.

    The shaped id doubles as the merge key in the force graph, so long
    definitions and sentences are truncated and may collide.
    """
    if isinstance(node, WordNode):
        return _shaped(word_label(node), "Word", 18, node.display or node.text, node)

    if isinstance(node, SynsetNode):
        definition = (node.meaning_ko or node.definition_en or "")[:50]
        return _shaped(definition or "Definition", "Sense", 14, definition, node)

    if isinstance(node, ExampleNode):
        sentence = (node.sentence or "")[:60]
        return _shaped(sentence or "Example", "Example", 10, sentence, node)

    if isinstance(node, CEFRLevelNode):
        return _shaped(f"Level: {node.code or ''}", "Topic", 12, f"CEFR {node.code or ''}", node)

    if isinstance(node, CurriculumNode):
        return _shaped(f"{CURRICULUM_PREFIX}: {node.code or ''}", "Topic", 12, node.code, node)

    if isinstance(node, TopicNode):
        return _shaped(f"Topic: {node.name or ''}", "Topic", 10, node.name, node)

    if isinstance(node, DomainNode):
        return _shaped(f"Domain: {node.name or ''}", "Topic", 10, node.name, node)

    if isinstance(node, CollocationNode):
        return _shaped(node.pattern or "Collocation", "Example", 8, node.pattern, node)

    return None
