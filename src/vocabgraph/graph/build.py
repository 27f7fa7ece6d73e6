from __future__ import annotations

import json
import os
from collections import Counter
from pathlib import Path
from typing import Any, Iterable

from ..ingest.csv_rows import VocabRow
from .models import SYNONYM_OF, NodeType


def build_snapshot(rows: Iterable[VocabRow]) -> dict[str, Any]:
    """Build a graph snapshot document from vocabulary rows.

    Each row becomes one sense of its word. Words named only in a
    synonyms cell are created with just text/display so the edge resolves.
    """
    word_props: dict[str, dict[str, Any]] = {}
    other_nodes: dict[str, dict[str, Any]] = {}
    edges: list[dict[str, Any]] = []
    seen_edges: set[tuple[str, str, str]] = set()
    sense_counts: Counter[str] = Counter()

    def ensure_word(display: str) -> str:
        wid = f"word:{display.lower()}"
        if wid not in word_props:
            word_props[wid] = {"text": display.lower(), "display": display}
        return wid

    def add_edge(source: str, target: str, etype: str) -> None:
        key = (source, target, etype)
        if key in seen_edges:
            return
        seen_edges.add(key)
        edges.append({"source": source, "target": target, "type": etype})

    for row in rows:
        wid = ensure_word(row.word)
        props = word_props[wid]
        for key, value in (
            ("pos", row.pos),
            ("cefr", row.cefr),
            ("meaning_ko", row.ko_def),
            ("definition_en", row.en_def),
        ):
            if value and not props.get(key):
                props[key] = value

        sense_counts[wid] += 1
        sid = f"sense:{row.word.lower()}:{sense_counts[wid]}"
        sense: dict[str, Any] = {"pos": row.pos}
        if row.ko_def:
            sense["meaning_ko"] = row.ko_def
        if row.en_def:
            sense["definition_en"] = row.en_def
        other_nodes[sid] = {"id": sid, "type": NodeType.SYNSET.value, "properties": sense}
        add_edge(wid, sid, "HAS_SENSE")

        if row.example:
            eid = f"example:{sid.split(':', 1)[1]}"
            other_nodes[eid] = {
                "id": eid,
                "type": NodeType.EXAMPLE.value,
                "properties": {"sentence": row.example},
            }
            add_edge(sid, eid, "HAS_EXAMPLE")
            add_edge(wid, eid, "HAS_EXAMPLE")

        if row.cefr:
            cid = f"cefr:{row.cefr.upper()}"
            other_nodes.setdefault(
                cid,
                {"id": cid, "type": NodeType.CEFR_LEVEL.value, "properties": {"code": row.cefr.upper()}},
            )
            add_edge(wid, cid, "AT_LEVEL")

        for syn in row.synonyms:
            tid = ensure_word(syn)
            if tid != wid:
                add_edge(wid, tid, SYNONYM_OF)

    nodes = [{"id": wid, "type": NodeType.WORD.value, "properties": p} for wid, p in word_props.items()]
    nodes.extend(other_nodes.values())

    return {
        "nodes": nodes,
        "edges": edges,
        "stats": {
            "nodesCreated": len(nodes),
            "edgesCreated": len(edges),
            "byNodeType": dict(Counter(n["type"] for n in nodes)),
            "byEdgeType": dict(Counter(e["type"] for e in edges)),
        },
    }


def write_snapshot(snapshot: dict[str, Any], out_path: str | os.PathLike[str]) -> Path:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(snapshot, ensure_ascii=False, indent=2), encoding="utf-8")
    return out
