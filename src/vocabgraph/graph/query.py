from __future__ import annotations

from typing import Any

from .index import GraphIndex
from .models import ANTONYM_OF, SYNONYM_OF, NodeType, WordNode
from .shape import main_word, shape_node


MAX_NODES = 30


def word_id_for(word: str) -> str:
    return f"word:{word.lower()}"


def _word_nodes(index: GraphIndex) -> list[WordNode]:
    return [n for n in index.nodes if isinstance(n, WordNode)]


def resolve_word(index: GraphIndex, word: str) -> str | None:
    """Map a user-supplied word to a node id: exact id, exact text/display, then prefix."""
    search = word.lower()
    candidate = word_id_for(word)
    if candidate in index.node_index:
        return candidate

    words = _word_nodes(index)
    for n in words:
        if (n.text is not None and n.text.lower() == search) or (
            n.display is not None and n.display.lower() == search
        ):
            return n.id

    prefix = [
        n
        for n in words
        if (n.text is not None and n.text.lower().startswith(search))
        or (n.display is not None and n.display.lower().startswith(search))
    ]
    if not prefix:
        return None

    # Shortest text wins; min() keeps the first of equal lengths.
    best = min(prefix, key=lambda n: len(n.text) if n.text else 0)
    return best.id


def build_visualization(index: GraphIndex, word_id: str, *, max_nodes: int = MAX_NODES) -> dict[str, Any]:
    """Depth-1 neighborhood of a word node, shaped for the force graph."""
    nodes: list[dict[str, Any]] = []
    links: list[dict[str, Any]] = []
    added: set[str] = set()

    root = index.get(word_id)
    if root is None:
        return {"nodes": nodes, "links": links}

    main = main_word(root)
    label = main["id"]
    nodes.append(main)
    added.add(word_id)

    for edge in index.outgoing(word_id):
        target = index.get(edge.target)
        if target is None or edge.target in added:
            continue
        info = shape_node(target)
        if info is not None and len(nodes) < max_nodes:
            nodes.append(info)
            added.add(edge.target)
            links.append({"source": label, "target": info["id"], "type": edge.type})

    # Incoming edges only matter for symmetric word-to-word relations.
    for edge in index.incoming(word_id):
        if edge.source in added:
            continue
        source = index.get(edge.source)
        if source is None:
            continue
        if source.type == NodeType.WORD.value and len(nodes) < max_nodes:
            info = shape_node(source)
            if info is not None:
                nodes.append(info)
                added.add(edge.source)
                links.append({"source": info["id"], "target": label, "type": edge.type})

    return {"nodes": nodes, "links": links}


def word_graph(index: GraphIndex | None, word: str) -> dict[str, Any] | None:
    if index is None:
        return None
    word_id = resolve_word(index, word)
    if word_id is None:
        return None
    return build_visualization(index, word_id)


def related_words(index: GraphIndex | None, word: str, relation: str, *, limit: int = 5) -> list[str]:
    """Display names linked to `word:<word>` by `relation`, in either direction."""
    if index is None:
        return []

    word_id = word_id_for(word)
    found: list[str] = []

    for edge in index.outgoing(word_id):
        if edge.type != relation:
            continue
        target = index.get(edge.target)
        display = target.properties.get("display") if target is not None else None
        if display:
            found.append(str(display))

    for edge in index.incoming(word_id):
        if edge.type != relation:
            continue
        source = index.get(edge.source)
        display = source.properties.get("display") if source is not None else None
        if display:
            found.append(str(display))

    # Slice semantics: a negative limit drops that many entries from the end.
    return list(dict.fromkeys(found))[: int(limit)]


def get_synonyms(index: GraphIndex | None, word: str, limit: int = 5) -> list[str]:
    return related_words(index, word, SYNONYM_OF, limit=limit)


def get_antonyms(index: GraphIndex | None, word: str, limit: int = 5) -> list[str]:
    return related_words(index, word, ANTONYM_OF, limit=limit)


def word_properties(index: GraphIndex | None, word: str) -> dict[str, Any] | None:
    if index is None:
        return None
    node = index.get(word_id_for(word))
    return dict(node.properties) if node is not None else None


def dataset_stats(index: GraphIndex | None) -> dict[str, Any] | None:
    if index is None:
        return None
    return index.stats
