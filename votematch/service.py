from __future__ import annotations

"""
Request-level match flow shared by the HTTP app and the CLI.

Validates the raw answers of one completed quiz, runs the scoring
engine against the loaded snapshots and trims the result to the top
matches.  Request problems are raised as typed errors; the HTTP layer
maps them to status codes.
"""

from typing import Any, Sequence

import numpy as np
from loguru import logger

from .config import (
    DEFAULT_RETURN,
    JITTER_ENABLED,
    JITTER_SEED,
    MAX_ANSWERS,
    CandidatePosition,
    MatchResponse,
    Question,
)
from .errors import MatchRequestError, NoCandidateDataError
from .mapping import map_answers
from .matching import calculate_matches


def make_rng(enabled: bool = JITTER_ENABLED, seed: int | None = JITTER_SEED) -> np.random.Generator | None:
    """Return the jitter generator configured for production, or None."""
    if not enabled:
        return None
    return np.random.default_rng(seed)


def run_match(
    raw_answers: Any,
    positions: Sequence[CandidatePosition],
    questions: Sequence[Question],
    *,
    limit: int = DEFAULT_RETURN,
    max_answers: int = MAX_ANSWERS,
    rng: np.random.Generator | None = None,
) -> MatchResponse:
    """Validate ``raw_answers`` and return the top ``limit`` matches."""
    if not isinstance(raw_answers, Sequence) or isinstance(raw_answers, (str, bytes)) or not raw_answers:
        logger.warning("Invalid request body: answers must be a non-empty list")
        raise MatchRequestError("Invalid request body. Expected { answers: UserAnswer[] }")
    if len(raw_answers) > max_answers:
        logger.warning("Too many answers: count={}, max={}", len(raw_answers), max_answers)
        raise MatchRequestError(f"Too many answers. Maximum is {max_answers}.")

    answers, _ = map_answers(raw_answers)
    if not answers:
        logger.warning("No valid answers provided")
        raise MatchRequestError("No valid answers provided")

    if not positions:
        logger.error("No candidate positions available")
        raise NoCandidateDataError("No candidate data found. Please run the training pipeline first.")

    logger.info("Calculating matches for {} answers", len(answers))
    matches = calculate_matches(answers, positions, questions, rng=rng)
    total_candidates = len({p.candidate_id for p in positions})
    if matches:
        logger.info(
            "Match calculation complete: top={} score={:.1f} total={}",
            matches[0].name,
            matches[0].score,
            len(matches),
        )
    return MatchResponse(
        matches=matches[: max(0, limit)],
        total_candidates=total_candidates,
        questions_answered=len(answers),
    )
