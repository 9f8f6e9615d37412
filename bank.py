from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from errors import ConfigurationError, EmptyCatalogError

logger = logging.getLogger("daily-trivia.bank")

_BASE = Path(__file__).resolve().parent
_DATA_DIR = _BASE / "data" / "questions"  # bundled catalog, shipped as package data

QUESTIONS_PATH = os.getenv("QUESTIONS_PATH", "")


class Question(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    text: str = Field(alias="question", min_length=1)
    options: Tuple[str, str, str, str]
    correct_index: int = Field(alias="correct")
    category: str
    fun_fact: str = Field(alias="funFact")

    @model_validator(mode="after")
    def _correct_in_range(self) -> "Question":
        if not 0 <= self.correct_index < len(self.options):
            raise ValueError(f"correct index {self.correct_index} outside options")
        return self


def _iter_jsonl(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        for idx, line in enumerate(f, 1):
            s = line.strip()
            if not s or s.startswith("#") or s.startswith("//"):
                continue
            try:
                yield json.loads(s)
            except json.JSONDecodeError:
                logger.warning("%s:%d: malformed JSON line skipped", p.name, idx)


def _iter_json(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Question file {p} is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise ConfigurationError(f"Question file {p} must contain a JSON list")
    yield from data


def _sources(path: Optional[Path]) -> List[Path]:
    if path is not None:
        if path.is_dir():
            return [p for p in sorted(path.rglob("*")) if p.suffix.lower() in (".json", ".jsonl")]
        return [path]
    return [p for p in sorted(_DATA_DIR.rglob("*")) if p.suffix.lower() in (".json", ".jsonl")]


class QuestionCatalog:
    """
    Ordered, immutable set of questions. Order is the index domain the
    daily selector works over, so it must be stable between processes:
    files are read in sorted order and rows in file order.
    """

    def __init__(self, questions: Iterable[Question]):
        self._questions: Tuple[Question, ...] = tuple(questions)
        seen: Dict[int, int] = {}
        for pos, q in enumerate(self._questions):
            if q.id in seen:
                raise ConfigurationError(f"Duplicate question id {q.id} at positions {seen[q.id]} and {pos}")
            seen[q.id] = pos

    def __len__(self) -> int:
        return len(self._questions)

    def __getitem__(self, index: int) -> Question:
        return self._questions[index]

    def __iter__(self):
        return iter(self._questions)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "QuestionCatalog":
        questions: List[Question] = []
        files = _sources(path)

        for p in files:
            try:
                source = _iter_jsonl(p) if p.suffix.lower() == ".jsonl" else _iter_json(p)
                for raw in source:
                    try:
                        questions.append(Question.model_validate(raw))
                    except ValidationError as e:
                        logger.warning(
                            "%s: invalid question %r skipped (%d errors)",
                            p.name,
                            raw.get("id") if isinstance(raw, dict) else raw,
                            e.error_count(),
                        )
            except OSError as e:
                raise ConfigurationError(f"Cannot read question file {p}: {e}") from e

        if not questions:
            raise EmptyCatalogError(", ".join(str(p) for p in files) or str(path or _DATA_DIR))

        logger.info("Loaded %d questions from %d file(s)", len(questions), len(files))
        return cls(questions)


# Public API
@lru_cache(maxsize=1)
def get_catalog() -> QuestionCatalog:
    return QuestionCatalog.load(Path(QUESTIONS_PATH) if QUESTIONS_PATH else None)
