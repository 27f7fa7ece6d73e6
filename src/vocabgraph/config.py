from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class Settings:
    # Snapshot location; the file name is resolved under data_dir.
    data_dir: str = os.getenv("VOCABGRAPH_DATA_DIR", "./data")
    graph_file: str = os.getenv("VOCABGRAPH_GRAPH_FILE", "vocabulary_graph.json")

    # Master vocabulary table used by `graph build` and `/import-csv`.
    csv_path: str = os.getenv("VOCABGRAPH_CSV_PATH", "./data/master_vocabulary_table9000.csv")

    # Neo4j
    neo4j_uri: str = os.getenv("VOCABGRAPH_NEO4J_URI", "bolt://localhost:7687")
    neo4j_user: str = os.getenv("VOCABGRAPH_NEO4J_USER", "neo4j")
    neo4j_password: str = os.getenv("VOCABGRAPH_NEO4J_PASSWORD", "password")

    # Ollama
    ollama_base_url: str = os.getenv("VOCABGRAPH_OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("VOCABGRAPH_OLLAMA_MODEL", "llama3.2:1b")
    ollama_temperature: float = float(os.getenv("VOCABGRAPH_OLLAMA_TEMPERATURE", "0.7"))

    @property
    def graph_path(self) -> Path:
        return Path(self.data_dir) / self.graph_file
