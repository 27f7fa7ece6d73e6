import logging
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


def create_app(*, graph_path: str | None = None, driver=None, llm=None):
    # Lazy import so core CLI works without web deps.
    from fastapi import FastAPI
    from fastapi.responses import JSONResponse, PlainTextResponse
    from neo4j.exceptions import DriverError, Neo4jError

    from ..chat.llm import OllamaChatClient
    from ..chat.tutor import recommend_and_explain
    from ..config import Settings
    from ..graph import query
    from ..graph.index import CachedGraph
    from ..ingest.csv_rows import read_rows
    from ..quiz import QuizUnavailable, learner_quiz, snapshot_quiz
    from ..store import graph_db, learners
    from ..store.graph_db import StoreUnavailable

    settings = Settings()
    graph = CachedGraph(graph_path or settings.graph_path)
    tutor_llm = llm or OllamaChatClient(
        base_url=settings.ollama_base_url,
        model=settings.ollama_model,
        options={"temperature": settings.ollama_temperature},
    )

    app = FastAPI(title="Vocabulary Graph", version="0.1.0")
    app.state.graph = graph
    app.state.driver = driver

    def _no_store(e: Exception) -> JSONResponse:
        return JSONResponse({"ok": False, "error": str(e)}, status_code=500)

    @app.get("/", response_class=PlainTextResponse)
    def home():
        return "Vocabulary Graph API is running"

    @app.get("/api/health")
    def health(base_url: str | None = None):
        import httpx

        url = (base_url or settings.ollama_base_url).rstrip("/")
        out: dict[str, Any] = {
            "graph_path": str(graph.path),
            "graph_loaded": graph.get() is not None,
            "neo4j_ok": driver is not None,
            "ollama_base_url": url,
            "ollama_ok": False,
        }
        try:
            r = httpx.get(f"{url}/api/tags", timeout=3.0)
            r.raise_for_status()
            out["ollama_ok"] = True
        except httpx.HTTPError as e:
            out["error"] = str(e)
        return out

    @app.get("/api/search/{word}")
    def search(word: str):
        word = word.strip()
        if not word:
            return JSONResponse({"error": "Word parameter is required"}, status_code=400)

        data = query.word_graph(graph.get(), word.lower())
        if data and data["nodes"]:
            return data

        if driver is not None:
            try:
                stored = graph_db.word_graph(driver, word)
            except (DriverError, Neo4jError) as e:
                logger.warning("Neo4j lookup failed for %s: %s", word, e)
                stored = None
            if stored and stored["nodes"]:
                return stored

        return {"nodes": [{"id": word, "group": "Word", "val": 20}], "links": []}

    @app.get("/api/words/{word}")
    def word_details(word: str, limit: int = 5):
        index = graph.get()
        props = query.word_properties(index, word)
        if props is None:
            return JSONResponse({"ok": False, "error": "Not found"}, status_code=404)
        return {
            "ok": True,
            "word": word,
            "properties": props,
            "synonyms": query.get_synonyms(index, word, limit=limit),
            "antonyms": query.get_antonyms(index, word, limit=limit),
        }

    @app.get("/api/graph/stats")
    def graph_stats():
        stats = query.dataset_stats(graph.get())
        if stats is None:
            return JSONResponse({"error": "Graph data not available"}, status_code=500)
        return stats

    @app.get("/api/quiz")
    def quiz(word: str | None = None):
        try:
            item = snapshot_quiz(graph.get(), word)
        except QuizUnavailable as e:
            return JSONResponse({"error": str(e)}, status_code=500)
        return item.to_dict()

    @app.post("/api/quiz/submit")
    def quiz_submit(payload: dict[str, Any]):
        word_id = payload.get("wordId")
        is_correct = bool(payload.get("isCorrect"))
        learner_id = payload.get("learnerId")
        if not word_id:
            return JSONResponse({"error": "wordId is required"}, status_code=400)

        logger.info("Quiz result: %s - %s", word_id, "correct" if is_correct else "incorrect")
        recorded = False
        if learner_id and driver is not None:
            learners.record_quiz_result(driver, str(learner_id), str(word_id), is_correct)
            recorded = True
        return {"message": "Result recorded", "wordId": word_id, "isCorrect": is_correct, "stored": recorded}

    @app.get("/test-db")
    def test_db():
        try:
            return {"count": graph_db.count_nodes(driver)}
        except StoreUnavailable as e:
            return _no_store(e)

    @app.post("/init-sample")
    def init_sample():
        try:
            return graph_db.init_sample(driver)
        except StoreUnavailable as e:
            return _no_store(e)

    @app.post("/import-csv")
    def import_csv(payload: dict[str, Any] | None = None):
        csv_path = Path(str((payload or {}).get("csv_path") or settings.csv_path))
        if not csv_path.exists():
            return JSONResponse({"ok": False, "error": f"CSV not found: {csv_path}"}, status_code=400)
        try:
            rows, skipped = read_rows(csv_path)
            stats = graph_db.import_rows(driver, rows, skipped=skipped)
        except StoreUnavailable as e:
            return _no_store(e)
        return {"message": "Import completed", "stats": stats}

    @app.post("/learners/init")
    def learners_init():
        try:
            return learners.init_learners(driver)
        except StoreUnavailable as e:
            return _no_store(e)

    @app.post("/learners/{learner_id}/simulate")
    def learners_simulate(learner_id: str, count: int = 20):
        try:
            return learners.simulate_history(driver, learner_id, count)
        except StoreUnavailable as e:
            return _no_store(e)

    @app.get("/quiz/{learner_id}")
    def quiz_for_learner(learner_id: str):
        try:
            item = learner_quiz(driver, learner_id)
        except StoreUnavailable as e:
            return _no_store(e)
        if item is None:
            return JSONResponse({"message": "No quiz items available"}, status_code=404)
        return item.to_dict()

    @app.post("/quiz/{learner_id}/submit")
    def quiz_submit_for_learner(learner_id: str, payload: dict[str, Any]):
        word_id = payload.get("wordId")
        if not word_id:
            return JSONResponse({"error": "wordId is required"}, status_code=400)
        try:
            learners.record_quiz_result(driver, learner_id, str(word_id), bool(payload.get("isCorrect")))
        except StoreUnavailable as e:
            return _no_store(e)
        return {"success": True}

    @app.get("/agent/recommend/{learner_id}")
    def recommend(learner_id: str):
        try:
            return recommend_and_explain(driver, tutor_llm, learner_id)
        except StoreUnavailable as e:
            return _no_store(e)

    return app
