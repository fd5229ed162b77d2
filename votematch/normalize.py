from __future__ import annotations

"""
Answer normalization utilities used across the scoring engine.

Every raw quiz answer is mapped onto ``[0, 1]`` before it takes part in
scoring: agreement-scale answers linearly, specific-choice answers by
their position in the question's ordered option list.  Normalization is
total: anything that cannot be interpreted becomes the neutral 0.5 and
a warning is logged, so one malformed answer never denies a result to
the whole session.
"""

import math
from numbers import Real
from typing import Union

from loguru import logger

from .config import (
    AGREEMENT_MAX,
    AGREEMENT_MIN,
    AGREEMENT_SCALE,
    NEUTRAL_ANSWER,
    NEUTRAL_TOLERANCE,
    SPECIFIC_CHOICE,
    Question,
)

RawAnswer = Union[bool, int, float, str]


# ---------------------------
# Basic helpers
# ---------------------------

def _as_ordinal(answer: RawAnswer) -> int | None:
    """Parse an agreement-scale answer into an integer, or None."""
    if isinstance(answer, bool):
        return None
    if isinstance(answer, str):
        try:
            value = float(answer.strip())
        except ValueError:
            return None
    elif isinstance(answer, Real):
        value = float(answer)
    else:
        return None
    if not math.isfinite(value) or not value.is_integer():
        return None
    return int(value)


def _normalize_agreement(answer: RawAnswer, question: Question) -> float:
    value = _as_ordinal(answer)
    if value is None or value < AGREEMENT_MIN or value > AGREEMENT_MAX:
        logger.warning(
            "Invalid agreement-scale answer {!r} for question {}. Using neutral {}",
            answer,
            question.question_id,
            NEUTRAL_ANSWER,
        )
        return NEUTRAL_ANSWER
    return (value - AGREEMENT_MIN) / (AGREEMENT_MAX - AGREEMENT_MIN)


def _normalize_choice(answer: RawAnswer, question: Question) -> float:
    options = question.options
    if not options:
        logger.warning("Missing options for specific-choice question {}", question.question_id)
        return NEUTRAL_ANSWER
    try:
        index = options.index(str(answer))
    except ValueError:
        logger.warning(
            "Answer {!r} not found in options for question {}. Using neutral {}",
            answer,
            question.question_id,
            NEUTRAL_ANSWER,
        )
        return NEUTRAL_ANSWER
    if len(options) == 1:
        return 1.0
    return index / (len(options) - 1)


# ---------------------------
# Public API
# ---------------------------

def normalize_answer(answer: RawAnswer, question: Question) -> float:
    """Map a raw answer for ``question`` onto ``[0, 1]``.

    Agreement scale: 1 -> 0.0, 3 -> 0.5, 5 -> 1.0.  Specific choice:
    ``index / (len(options) - 1)``, or 1.0 when there is a single option.
    Never raises.
    """
    if question.type == AGREEMENT_SCALE:
        return _normalize_agreement(answer, question)
    if question.type == SPECIFIC_CHOICE:
        return _normalize_choice(answer, question)
    logger.warning("Unknown question type: {}. Using neutral {}", question.type, NEUTRAL_ANSWER)
    return NEUTRAL_ANSWER


def user_stance(normalized: float) -> float:
    """Signed stance in ``[-1, 1]``: -1 fully against, +1 fully for."""
    return (normalized - NEUTRAL_ANSWER) * 2.0


def is_neutral(normalized: float) -> bool:
    return abs(normalized - NEUTRAL_ANSWER) < NEUTRAL_TOLERANCE
