from __future__ import annotations

import logging
from typing import Any, Iterable

from neo4j import Driver, GraphDatabase

from ..config import Settings
from ..ingest.csv_rows import VocabRow


logger = logging.getLogger(__name__)


class StoreUnavailable(RuntimeError):
    pass


def connect(settings: Settings) -> Driver | None:
    """Open a Neo4j driver, or None when the server cannot be reached."""
    try:
        driver = GraphDatabase.driver(settings.neo4j_uri, auth=(settings.neo4j_user, settings.neo4j_password))
        driver.verify_connectivity()
    except Exception as e:
        logger.warning("Neo4j connection error at %s: %s", settings.neo4j_uri, e)
        logger.info("Running without Neo4j; snapshot-based search and quiz are still available")
        return None
    logger.info("Neo4j connection established at %s", settings.neo4j_uri)
    return driver


def require(driver: Driver | None) -> Driver:
    if driver is None:
        raise StoreUnavailable("Neo4j driver not initialized")
    return driver


def count_nodes(driver: Driver | None) -> int:
    with require(driver).session() as session:
        record = session.run("MATCH (n) RETURN count(n) AS count").single()
    return int(record["count"]) if record is not None else 0


def init_sample(driver: Driver | None) -> dict[str, Any]:
    with require(driver).session() as session:
        session.run(
            """
            MERGE (w1:Word {lemma: 'apple'})
            MERGE (w2:Word {lemma: 'fruit'})
            MERGE (w1)-[:RELATED_TO]->(w2)
            """
        )
    return {"message": "Sample data created: apple -> fruit"}


_IMPORT_ROW = """
MERGE (w:Word {lemma: $word})
SET w.pos = $pos, w.cefr = $cefr
MERGE (s:Sense {id: $word + '_sense_' + $ko_def})
SET s.definition_ko = $ko_def, s.definition_en = $en_def
MERGE (w)-[:HAS_SENSE]->(s)
WITH w, s
WHERE $example <> ''
MERGE (e:Example {text: $example})
MERGE (s)-[:HAS_EXAMPLE]->(e)
"""

_IMPORT_SYNONYM = """
MATCH (w:Word {lemma: $word})
MERGE (t:Word {lemma: $syn})
MERGE (w)-[:RELATED_TO {type: 'synonym'}]->(t)
"""


def import_rows(driver: Driver | None, rows: Iterable[VocabRow], *, skipped: int = 0) -> dict[str, int]:
    """MERGE vocabulary rows into Neo4j. Per-row failures are counted, not raised."""
    stats = {"created": 0, "errors": 0, "skipped": int(skipped)}
    with require(driver).session() as session:
        for row in rows:
            try:
                session.run(
                    _IMPORT_ROW,
                    word=row.word,
                    pos=row.pos,
                    cefr=row.cefr,
                    ko_def=row.ko_def,
                    en_def=row.en_def,
                    example=row.example,
                )
                for syn in row.synonyms:
                    session.run(_IMPORT_SYNONYM, word=row.word, syn=syn)
                stats["created"] += 1
            except Exception as e:
                logger.error("Error processing row for word %s: %s", row.word, e)
                stats["errors"] += 1
    return stats


_NEIGHBORS = """
MATCH (w:Word)
WHERE toLower(w.lemma) = $word
OPTIONAL MATCH (w)-[r]-(n)
RETURN w.lemma AS lemma, type(r) AS rel, labels(n) AS labels, properties(n) AS props,
       startNode(r) = w AS outgoing
LIMIT $limit
"""


def _neighbor_label(labels: list[str], props: dict[str, Any]) -> tuple[str, str] | None:
    if "Word" in labels and props.get("lemma"):
        return str(props["lemma"]), "Word"
    if "Sense" in labels:
        text = str(props.get("definition_ko") or props.get("definition_en") or "")[:50]
        return text or "Definition", "Sense"
    if "Example" in labels:
        return str(props.get("text") or "")[:60] or "Example", "Example"
    return None


def word_graph(driver: Driver | None, word: str, *, limit: int = 29) -> dict[str, Any] | None:
    """Neighborhood of a word as stored in Neo4j, shaped like the snapshot result."""
    with require(driver).session() as session:
        records = list(session.run(_NEIGHBORS, word=word.lower(), limit=int(limit)))
    if not records:
        return None

    main = str(records[0]["lemma"])
    nodes: list[dict[str, Any]] = [{"id": main, "group": "Word", "val": 25, "label": main}]
    links: list[dict[str, Any]] = []
    seen = {main}
    for rec in records:
        if rec["rel"] is None:
            continue
        shaped = _neighbor_label(list(rec["labels"] or []), dict(rec["props"] or {}))
        if shaped is None:
            continue
        node_id, group = shaped
        if node_id not in seen:
            seen.add(node_id)
            nodes.append({"id": node_id, "group": group, "val": 18 if group == "Word" else 14, "label": node_id})
        if rec["outgoing"]:
            links.append({"source": main, "target": node_id, "type": rec["rel"]})
        else:
            links.append({"source": node_id, "target": main, "type": rec["rel"]})
    return {"nodes": nodes, "links": links}
