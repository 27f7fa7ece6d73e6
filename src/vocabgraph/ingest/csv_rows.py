from __future__ import annotations

import csv
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator


COL_WORD = "Word"
COL_POS = "Parts of Speech"
COL_KO_DEF = "Korean Definition"
COL_EN_DEF = "English Definition"
COL_EXAMPLE = "Example Sentence (Simple Complete Sentence)"
COL_SYNONYMS = "Synonyms/Antonyms"
COL_CEFR = "CEFR/Grade"


@dataclass(frozen=True)
class VocabRow:
    word: str
    pos: str = "Unknown"
    ko_def: str = ""
    en_def: str = ""
    example: str = ""
    synonyms: list[str] = field(default_factory=list)
    cefr: str = ""


def normalize_key(key: str) -> str:
    # Spreadsheet exports wrap long headers onto a second line.
    return key.replace("\r", "").replace("\n", " ").strip()


def split_synonyms(cell: str) -> list[str]:
    return [s.strip() for s in cell.split(",") if s.strip()]


def parse_row(raw: dict[str, str | None]) -> VocabRow | None:
    """Map one normalized CSV record to a VocabRow; None when the word cell is blank."""
    row = {normalize_key(k): (v or "").strip() for k, v in raw.items() if k is not None}
    word = row.get(COL_WORD, "")
    if not word:
        return None
    return VocabRow(
        word=word,
        pos=row.get(COL_POS) or "Unknown",
        ko_def=row.get(COL_KO_DEF, ""),
        en_def=row.get(COL_EN_DEF, ""),
        example=row.get(COL_EXAMPLE, ""),
        synonyms=split_synonyms(row.get(COL_SYNONYMS, "")),
        cefr=row.get(COL_CEFR, ""),
    )


def iter_records(lines: Iterable[str]) -> Iterator[dict[str, str | None]]:
    yield from csv.DictReader(lines)


def read_rows(path: str | os.PathLike[str]) -> tuple[list[VocabRow], int]:
    """Return (rows, skipped) for a vocabulary CSV file."""
    rows: list[VocabRow] = []
    skipped = 0
    with Path(path).open("r", encoding="utf-8-sig", newline="") as f:
        for raw in iter_records(f):
            parsed = parse_row(raw)
            if parsed is None:
                skipped += 1
                continue
            rows.append(parsed)
    return rows, skipped
