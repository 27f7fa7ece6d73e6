from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NodeType(str, Enum):
    WORD = "Word"
    SYNSET = "Synset"
    EXAMPLE = "Example"
    CEFR_LEVEL = "CEFRLevel"
    CURRICULUM = "Curriculum"
    TOPIC = "Topic"
    DOMAIN = "Domain"
    COLLOCATION = "Collocation"


SYNONYM_OF = "SYNONYM_OF"
ANTONYM_OF = "ANTONYM_OF"


@dataclass(frozen=True)
class GraphNode:
    """A snapshot node. Unknown node types load as this base class."""

    id: str
    type: str
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WordNode(GraphNode):
    text: str | None = None
    display: str | None = None
    meaning_ko: str | None = None
    definition_en: str | None = None


@dataclass(frozen=True)
class SynsetNode(GraphNode):
    meaning_ko: str | None = None
    definition_en: str | None = None


@dataclass(frozen=True)
class ExampleNode(GraphNode):
    sentence: str | None = None


@dataclass(frozen=True)
class CEFRLevelNode(GraphNode):
    code: str | None = None


@dataclass(frozen=True)
class CurriculumNode(GraphNode):
    code: str | None = None


@dataclass(frozen=True)
class TopicNode(GraphNode):
    name: str | None = None


@dataclass(frozen=True)
class DomainNode(GraphNode):
    name: str | None = None


@dataclass(frozen=True)
class CollocationNode(GraphNode):
    pattern: str | None = None


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str
    type: str
    properties: dict[str, Any] = field(default_factory=dict)


_VARIANTS: dict[str, tuple[type[GraphNode], tuple[str, ...]]] = {
    NodeType.WORD.value: (WordNode, ("text", "display", "meaning_ko", "definition_en")),
    NodeType.SYNSET.value: (SynsetNode, ("meaning_ko", "definition_en")),
    NodeType.EXAMPLE.value: (ExampleNode, ("sentence",)),
    NodeType.CEFR_LEVEL.value: (CEFRLevelNode, ("code",)),
    NodeType.CURRICULUM.value: (CurriculumNode, ("code",)),
    NodeType.TOPIC.value: (TopicNode, ("name",)),
    NodeType.DOMAIN.value: (DomainNode, ("name",)),
    NodeType.COLLOCATION.value: (CollocationNode, ("pattern",)),
}


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def node_from_dict(raw: dict[str, Any]) -> GraphNode:
    node_id = raw["id"]
    if not isinstance(node_id, str):
        raise ValueError(f"Node id must be a string, got {node_id!r}")
    node_type = str(raw.get("type") or "")
    props = dict(raw.get("properties") or {})

    variant = _VARIANTS.get(node_type)
    if variant is None:
        return GraphNode(id=node_id, type=node_type, properties=props)

    cls, keys = variant
    fields = {k: _opt_str(props.get(k)) for k in keys}
    return cls(id=node_id, type=node_type, properties=props, **fields)


def edge_from_dict(raw: dict[str, Any]) -> GraphEdge:
    return GraphEdge(
        source=str(raw["source"]),
        target=str(raw["target"]),
        type=str(raw.get("type") or ""),
        properties=dict(raw.get("properties") or {}),
    )
