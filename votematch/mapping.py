from __future__ import annotations

"""
Mapping utilities at the votematch boundary.

Questions, candidate positions and user answers arrive as loosely typed
JSON-like records (camelCase keys from the persistence layer or an HTTP
body, numpy arrays from Parquet snapshots).  This module converts them
into the strict pydantic objects defined in :mod:`votematch.config` and
applies the required-field checks once, so the scoring hot path never
has to re-validate.  Invalid records are dropped with a warning rather
than failing the whole batch.
"""

import json
import math
from typing import Any, Iterable, List, Mapping, Tuple

import numpy as np
from loguru import logger
from pydantic import ValidationError

from .config import (
    SPECIFIC_CHOICE,
    QUESTION_TYPES,
    CandidatePosition,
    Question,
    UserAnswer,
)


def _coerce_list(raw: Any) -> Any:
    """Convert array-like values (ndarray, tuple, JSON string) into lists.

    Anything else is passed through untouched so that pydantic reports
    the real type error.
    """
    if isinstance(raw, np.ndarray):
        return raw.tolist()
    if isinstance(raw, tuple):
        return list(raw)
    if isinstance(raw, str):
        s = raw.strip()
        if s.startswith("["):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return raw
    return raw


_ID_FIELDS = ("questionId", "question_id", "candidateId", "candidate_id")


def _prepare(raw: Mapping[str, Any], *list_fields: str) -> dict:
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected a mapping, got {type(raw).__name__}")
    data = dict(raw)
    for key in _ID_FIELDS:
        # numeric ids come back from Parquet/CSV as ints
        if isinstance(data.get(key), (int, np.integer)) and not isinstance(data.get(key), bool):
            data[key] = str(data[key])
    if isinstance(data.get("answer"), np.generic):
        data["answer"] = data["answer"].item()
    for key in list_fields:
        if key in data:
            data[key] = _coerce_list(data[key])
    return data


def _check_embedding(embedding: List[float]) -> None:
    if not all(math.isfinite(v) for v in embedding):
        raise ValueError("Embedding must contain only valid numbers")


# ---------------------------
# Single-record converters
# ---------------------------

def to_question(raw: Mapping[str, Any]) -> Question:
    """Convert one raw question record into a :class:`Question`.

    Raises ``ValueError`` (or pydantic's ``ValidationError``, a subclass)
    when a required field is missing or malformed.
    """
    question = Question.model_validate(_prepare(raw, "embedding", "options"))
    if question.type not in QUESTION_TYPES:
        raise ValueError(f"Invalid question type: {question.type}")
    if question.type == SPECIFIC_CHOICE and not question.options:
        raise ValueError("Specific-choice questions must have at least 1 option")
    _check_embedding(question.embedding)
    return question


def to_position(raw: Mapping[str, Any]) -> CandidatePosition:
    """Convert one raw position record into a :class:`CandidatePosition`."""
    position = CandidatePosition.model_validate(_prepare(raw, "embedding"))
    if not position.position.strip():
        raise ValueError("Position text cannot be empty")
    _check_embedding(position.embedding)
    return position


def to_answer(raw: Mapping[str, Any]) -> UserAnswer:
    """Convert one raw answer record into a :class:`UserAnswer`."""
    data = _prepare(raw, "questionEmbedding", "embedding")
    if data.get("answer") is None:
        raise ValueError("Answer value is required")
    answer = UserAnswer.model_validate(data)
    _check_embedding(answer.embedding)
    return answer


# ---------------------------
# Batch converters
# ---------------------------

def _map_all(rows: Iterable[Mapping[str, Any]], convert, kind: str) -> Tuple[list, int]:
    valid = []
    invalid = 0
    for i, row in enumerate(rows):
        try:
            valid.append(convert(row))
        except (ValidationError, ValueError, TypeError) as e:
            invalid += 1
            logger.warning("Dropping invalid {} record #{}: {}", kind, i, str(e).splitlines()[0])
    if invalid:
        logger.warning(
            "Some {} records were invalid: total={}, valid={}, invalid={}",
            kind,
            len(valid) + invalid,
            len(valid),
            invalid,
        )
    return valid, invalid


def map_questions(rows: Iterable[Mapping[str, Any]]) -> List[Question]:
    questions, _ = _map_all(rows, to_question, "question")
    return questions


def map_positions(rows: Iterable[Mapping[str, Any]]) -> List[CandidatePosition]:
    positions, _ = _map_all(rows, to_position, "position")
    return positions


def map_answers(rows: Iterable[Mapping[str, Any]]) -> Tuple[List[UserAnswer], int]:
    """Return the valid answers and the number of rejected ones."""
    return _map_all(rows, to_answer, "answer")
