from __future__ import annotations

import logging
from pathlib import Path

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from .chat.llm import OllamaChatClient
from .chat.tutor import recommend_and_explain
from .config import Settings
from .graph import query
from .graph.build import build_snapshot, write_snapshot
from .graph.index import load
from .ingest.csv_rows import read_rows
from .quiz import QuizUnavailable, snapshot_quiz
from .store import graph_db, learners


app = typer.Typer(add_completion=False, help="Vocabulary graph: word relationships, quizzes and an AI tutor.")
console = Console()

graph_app = typer.Typer(add_completion=False, help="Snapshot utilities.")
app.add_typer(graph_app, name="graph")

db_app = typer.Typer(add_completion=False, help="Neo4j store utilities.")
app.add_typer(db_app, name="db")

learners_app = typer.Typer(add_completion=False, help="Learner bootstrap and simulation.")
app.add_typer(learners_app, name="learners")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _graph_path(graph: Path | None) -> Path:
    return graph or Settings().graph_path


def _load_or_exit(graph: Path | None):
    path = _graph_path(graph)
    index = load(path)
    if index is None:
        console.print(f"Graph data not available at {path}", style="red")
        console.print("Fix: run `vocabgraph graph build --csv ... --out ...`", style="yellow")
        raise typer.Exit(code=2)
    return index


def _driver_or_exit(settings: Settings):
    driver = graph_db.connect(settings)
    if driver is None:
        console.print(f"Neo4j not reachable at {settings.neo4j_uri}", style="red")
        raise typer.Exit(code=2)
    return driver


@app.command()
def search(
    word: str = typer.Argument(...),
    graph: Path | None = typer.Option(None, "--graph", help="Snapshot JSON path"),
):
    """Show the neighborhood a word resolves to."""
    index = _load_or_exit(graph)
    data = query.word_graph(index, word)
    if data is None:
        console.print(f"No match for '{word}'.", style="yellow")
        raise typer.Exit(code=1)

    table = Table(title=f"Neighborhood of {data['nodes'][0]['id']}")
    table.add_column("node")
    table.add_column("group")
    table.add_column("val", justify="right")
    for n in data["nodes"]:
        table.add_row(Text(str(n["id"])), Text(n["group"]), Text(str(n["val"])))
    console.print(table)

    for link in data["links"]:
        console.print(f"{link['source']} -[{link['type']}]-> {link['target']}", markup=False)


@app.command()
def synonyms(
    word: str = typer.Argument(...),
    limit: int = typer.Option(5, help="Max words per relation"),
    graph: Path | None = typer.Option(None, "--graph", help="Snapshot JSON path"),
):
    """List synonyms and antonyms of a word."""
    index = _load_or_exit(graph)
    syn = query.get_synonyms(index, word, limit=limit)
    ant = query.get_antonyms(index, word, limit=limit)
    console.print(f"synonyms: {', '.join(syn) if syn else '-'}", markup=False)
    console.print(f"antonyms: {', '.join(ant) if ant else '-'}", markup=False)


@app.command()
def stats(graph: Path | None = typer.Option(None, "--graph", help="Snapshot JSON path")):
    """Show snapshot stats."""
    index = _load_or_exit(graph)
    data = query.dataset_stats(index) or {}

    table = Table(title="Vocabulary Graph Stats")
    table.add_column("Metric")
    table.add_column("Value")
    table.add_row("Nodes", str(data.get("nodesCreated", len(index.nodes))))
    table.add_row("Edges", str(data.get("edgesCreated", len(index.edges))))
    console.print(table)

    for title, key in (("Nodes by Type", "byNodeType"), ("Edges by Type", "byEdgeType")):
        counts = data.get(key) or {}
        if not counts:
            continue
        t2 = Table(title=title)
        t2.add_column("type")
        t2.add_column("count")
        for k, v in counts.items():
            t2.add_row(str(k), str(v))
        console.print(t2)


@app.command()
def quiz(
    word: str | None = typer.Option(None, "--word", help="Ask about this word instead of a random one"),
    graph: Path | None = typer.Option(None, "--graph", help="Snapshot JSON path"),
):
    """Ask one multiple-choice meaning question from the snapshot."""
    index = _load_or_exit(graph)
    try:
        item = snapshot_quiz(index, word)
    except QuizUnavailable as e:
        console.print(str(e), style="red")
        raise typer.Exit(code=2)

    console.print(item.question, markup=False, style="bold")
    for i, opt in enumerate(item.options, start=1):
        console.print(f"{i}. {opt}", markup=False)

    choice = typer.prompt("Answer", type=int)
    if 1 <= choice <= len(item.options) and item.options[choice - 1] == item.answer:
        console.print("Correct!", style="green")
    else:
        console.print(f"Wrong. Answer: {item.answer}", style="red", markup=False)


@app.command()
def recommend(
    learner_id: str = typer.Argument(...),
    model: str | None = typer.Option(None, "--model", help="Ollama model name"),
    base_url: str | None = typer.Option(None, "--base-url", help="Ollama base URL"),
):
    """Recommend a weak word to a learner with an AI explanation."""
    settings = Settings()
    driver = _driver_or_exit(settings)
    llm = OllamaChatClient(
        base_url=base_url or settings.ollama_base_url,
        model=model or settings.ollama_model,
        options={"temperature": settings.ollama_temperature},
    )
    try:
        res = recommend_and_explain(driver, llm, learner_id)
    finally:
        driver.close()

    for k, v in res.items():
        console.print(f"{k}: {v}", markup=False)


@app.command()
def doctor(
    graph: Path | None = typer.Option(None, "--graph", help="Snapshot JSON path"),
    base_url: str | None = typer.Option(None, "--base-url", help="Ollama base URL"),
):
    """Check the snapshot, Neo4j and Ollama, and print actionable fixes."""
    settings = Settings()
    ok = True

    console.print("Snapshot:")
    path = _graph_path(graph)
    index = load(path)
    if index is None:
        console.print(f"- Missing or unreadable: {path}", style="red")
        console.print("  Fix: run `vocabgraph graph build --csv ... --out ...`", style="yellow")
        ok = False
    else:
        console.print(f"- {len(index.nodes)} nodes, {len(index.edges)} edges", style="green")

    console.print("\nNeo4j:")
    driver = graph_db.connect(settings)
    if driver is None:
        console.print(f"- Not reachable at {settings.neo4j_uri} (search falls back to the snapshot only)", style="yellow")
        ok = False
    else:
        try:
            console.print(f"- Reachable, {graph_db.count_nodes(driver)} nodes", style="green")
        finally:
            driver.close()

    console.print("\nOllama:")
    url = (base_url or settings.ollama_base_url).rstrip("/")
    try:
        r = httpx.get(f"{url}/api/tags", timeout=5.0)
        r.raise_for_status()
        models = [m.get("name") for m in (r.json().get("models") or []) if isinstance(m, dict)]
        if settings.ollama_model in models:
            console.print(f"- Model OK: {settings.ollama_model}", style="green")
        else:
            console.print(f"- Missing model: {settings.ollama_model}", style="yellow")
            console.print(f"  Fix: `ollama pull {settings.ollama_model}`", style="yellow")
            ok = False
    except httpx.HTTPError as e:
        console.print(f"- Not reachable at {url}: {e}", style="red")
        console.print("  Fix: start Ollama (`ollama serve`) then retry.", style="yellow")
        ok = False

    if not ok:
        raise typer.Exit(code=1)


@app.command()
def serve(
    graph: Path | None = typer.Option(None, "--graph", help="Snapshot JSON path"),
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(3001, "--port"),
    no_db: bool = typer.Option(False, "--no-db", help="Do not try to connect to Neo4j"),
):
    """Run the HTTP API (FastAPI)."""
    try:
        import uvicorn
    except ImportError:
        console.print("Missing web dependencies. Install: `pip install -e '.[web]'`", style="red")
        raise typer.Exit(code=2)

    from .web.server import create_app

    settings = Settings()
    driver = None if no_db else graph_db.connect(settings)
    app_ = create_app(graph_path=str(_graph_path(graph)), driver=driver)
    try:
        uvicorn.run(app_, host=host, port=int(port))
    finally:
        if driver is not None:
            driver.close()


@graph_app.command("build")
def graph_build(
    csv: Path = typer.Option(..., "--csv", exists=True, file_okay=True, dir_okay=False),
    out: Path | None = typer.Option(None, "--out", help="Snapshot JSON path to write"),
):
    """Build the snapshot JSON from the vocabulary CSV."""
    rows, skipped = read_rows(csv)
    snapshot = build_snapshot(rows)
    path = write_snapshot(snapshot, out or Settings().graph_path)

    console.print(f"Rows: {len(rows)} (skipped {skipped})")
    for k, v in snapshot["stats"].items():
        console.print(f"{k}: {v}", markup=False)
    console.print(f"Wrote {path}")


@db_app.command("import")
def db_import(csv: Path = typer.Option(..., "--csv", exists=True, file_okay=True, dir_okay=False)):
    """Import the vocabulary CSV into Neo4j."""
    settings = Settings()
    rows, skipped = read_rows(csv)
    driver = _driver_or_exit(settings)
    try:
        res = graph_db.import_rows(driver, rows, skipped=skipped)
    finally:
        driver.close()

    for k, v in res.items():
        console.print(f"{k}: {v}", markup=False)


@learners_app.command("init")
def learners_init():
    """Create the three demo learners."""
    settings = Settings()
    driver = _driver_or_exit(settings)
    try:
        res = learners.init_learners(driver)
    finally:
        driver.close()
    console.print(res["message"])


@learners_app.command("simulate")
def learners_simulate(
    learner_id: str = typer.Argument(...),
    count: int = typer.Option(20, help="Max words to link"),
):
    """Give a learner a random mastery history."""
    settings = Settings()
    driver = _driver_or_exit(settings)
    try:
        res = learners.simulate_history(driver, learner_id, count)
    finally:
        driver.close()
    console.print(res["message"], markup=False)


if __name__ == "__main__":
    app()
