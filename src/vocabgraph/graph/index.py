from __future__ import annotations

import json
import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .models import GraphEdge, GraphNode, edge_from_dict, node_from_dict


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphIndex:
    """Read-only view of one loaded snapshot plus its adjacency indices.

    `nodes` keeps dataset order; resolution tie-breaks depend on it.
    Edges whose endpoints are missing from `node_index` stay in the edge
    maps and are skipped by the traversal code.
    """

    nodes: tuple[GraphNode, ...]
    edges: tuple[GraphEdge, ...]
    node_index: dict[str, GraphNode]
    edges_by_source: dict[str, list[GraphEdge]]
    edges_by_target: dict[str, list[GraphEdge]]
    stats: dict[str, Any] = field(default_factory=dict)

    def get(self, node_id: str) -> GraphNode | None:
        return self.node_index.get(node_id)

    def outgoing(self, node_id: str) -> list[GraphEdge]:
        return self.edges_by_source.get(node_id, [])

    def incoming(self, node_id: str) -> list[GraphEdge]:
        return self.edges_by_target.get(node_id, [])


def build_index(data: dict[str, Any]) -> GraphIndex:
    """Build a GraphIndex from a parsed snapshot document."""
    raw_nodes = data.get("nodes")
    raw_edges = data.get("edges")
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        raise ValueError("Snapshot must contain 'nodes' and 'edges' lists")

    nodes = tuple(node_from_dict(n) for n in raw_nodes)
    edges = tuple(edge_from_dict(e) for e in raw_edges)

    # Duplicate ids: the later node wins.
    node_index: dict[str, GraphNode] = {}
    for n in nodes:
        node_index[n.id] = n

    by_source: dict[str, list[GraphEdge]] = {}
    by_target: dict[str, list[GraphEdge]] = {}
    for e in edges:
        by_source.setdefault(e.source, []).append(e)
        by_target.setdefault(e.target, []).append(e)

    return GraphIndex(
        nodes=nodes,
        edges=edges,
        node_index=node_index,
        edges_by_source=by_source,
        edges_by_target=by_target,
        stats=_snapshot_stats(data, nodes, edges),
    )


def _snapshot_stats(data: dict[str, Any], nodes: tuple[GraphNode, ...], edges: tuple[GraphEdge, ...]) -> dict[str, Any]:
    stats = data.get("stats")
    if not isinstance(stats, dict):
        metadata = data.get("metadata")
        stats = metadata.get("stats") if isinstance(metadata, dict) else None
    if isinstance(stats, dict):
        return dict(stats)

    return {
        "nodesCreated": len(nodes),
        "edgesCreated": len(edges),
        "byNodeType": dict(Counter(n.type for n in nodes)),
        "byEdgeType": dict(Counter(e.type for e in edges)),
    }


def load(path: str | os.PathLike[str]) -> GraphIndex | None:
    """Read and index a snapshot file. Returns None if it is missing or malformed."""
    p = Path(path)
    if not p.exists():
        logger.error("Vocabulary graph not found at: %s", p)
        return None

    try:
        logger.info("Loading vocabulary graph from: %s", p)
        data = json.loads(p.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Snapshot root must be a JSON object")
        index = build_index(data)
    except Exception as e:  # load boundary: any failure means the dataset is unavailable
        logger.error("Error loading vocabulary graph from %s: %r", p, e)
        return None

    logger.info("Loaded %d nodes and %d edges", len(index.nodes), len(index.edges))
    return index


class CachedGraph:
    """Load-once holder for a snapshot path.

    The first successful load is kept for the lifetime of the holder; a
    failed load is retried on the next call.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)
        self._index: GraphIndex | None = None

    @property
    def loaded(self) -> bool:
        return self._index is not None

    def get(self) -> GraphIndex | None:
        if self._index is None:
            self._index = load(self.path)
        return self._index
