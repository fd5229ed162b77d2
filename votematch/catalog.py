from __future__ import annotations

"""
Loading of question and candidate-position snapshots.

The offline pipeline exports questions and extracted candidate positions
(with their embeddings) as JSON, JSON-lines, CSV or Parquet files.  This
module reads those snapshots with pandas and hands the records to
:mod:`votematch.mapping`, which turns them into validated objects.
"""

import math
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
from loguru import logger

from .config import POSITIONS_PATH, QUESTIONS_PATH, CandidatePosition, Question, UserAnswer
from .errors import SnapshotError
from .mapping import map_answers, map_positions, map_questions


# ---------------------------
# IO helpers
# ---------------------------

def _read_frame(path: Path) -> pd.DataFrame:
    ext = path.suffix.lower()
    if ext == ".parquet":
        return pd.read_parquet(path)
    if ext == ".csv":
        return pd.read_csv(path)
    if ext in {".jsonl", ".ndjson"}:
        return pd.read_json(path, lines=True, dtype=False, convert_dates=False)
    return pd.read_json(path, dtype=False, convert_dates=False)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def load_records(path: Path) -> List[Dict[str, Any]]:
    """Load a snapshot file into a list of plain dict records.

    Missing cells (NaN/None) are dropped from each record so that model
    defaults apply instead of failing validation.
    """
    path = Path(path)
    if not path.exists():
        raise SnapshotError(f"Snapshot not found: {path}")
    logger.info("Loading snapshot from {}", path)
    try:
        df = _read_frame(path)
    except (ValueError, OSError) as e:
        raise SnapshotError(f"Failed to read snapshot {path}: {e}") from e
    records = [
        {k: v for k, v in row.items() if not _is_missing(v)}
        for row in df.to_dict(orient="records")
    ]
    logger.info("Loaded {} rows from {}", len(records), path.name)
    return records


def load_questions(path: Path = QUESTIONS_PATH) -> List[Question]:
    questions = map_questions(load_records(path))
    logger.info("Loaded {} valid questions", len(questions))
    return questions


def load_positions(path: Path = POSITIONS_PATH) -> List[CandidatePosition]:
    positions = map_positions(load_records(path))
    n_candidates = len({p.candidate_id for p in positions})
    logger.info("Loaded {} positions for {} candidates", len(positions), n_candidates)
    return positions


def load_answers(path: Path) -> List[UserAnswer]:
    answers, _ = map_answers(load_records(path))
    return answers
