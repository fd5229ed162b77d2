from __future__ import annotations

"""
Three independent scoring pathways combined by taking the maximum.

Each pathway structurally favours a different kind of candidate:

* ``rank`` (pathway A) rewards specialists who win individual questions,
  plus a bonus when the candidate's similarity spread mirrors the
  spread of the user's own answers;
* ``consistency`` (pathway B) rewards generalists who are good enough
  everywhere, mixing the worst question with the average;
* ``correlation`` (pathway C) reads raw similarity directly and favours
  candidates with richer, better-matched position text.

A weighted blend could permanently cap a fairly positioned candidate,
so the final score is the best of the three.  Every pathway is a pure
function of one candidate's tally and the user's profile, which keeps
each of them testable on its own.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Tuple

from .baseline import CandidateBaseline, NEUTRAL_BASELINE
from .config import (
    COMPREHENSIVE_BONUS_MAX,
    CONSISTENCY_MEAN_WEIGHT,
    CONSISTENCY_MIN_WEIGHT,
    RANK_WEIGHT,
    SCORE_MAX,
    SCORE_MIN,
    TOTAL_POLICY_AREAS,
    VARIANCE_BONUS_DECAY,
    VARIANCE_BONUS_MAX,
)


@dataclass
class CandidateTally:
    """Running totals for one candidate across the processed questions."""

    candidate_id: str
    topics_covered: int = 0
    baseline: CandidateBaseline = NEUTRAL_BASELINE
    points: List[float] = field(default_factory=list)
    weighted_total: float = 0.0
    weight_total: float = 0.0
    strengths: List[float] = field(default_factory=list)

    @property
    def average_points(self) -> float:
        if self.weight_total <= 0:
            return 0.0
        return self.weighted_total / self.weight_total


@dataclass(frozen=True)
class UserProfile:
    answer_spread: float = 0.0
    question_count: int = 0


# ---------------------------
# Bonuses
# ---------------------------

def variance_bonus(tally: CandidateTally, profile: UserProfile) -> float:
    """Up to 30 points when the candidate's spread matches the user's.

    Candidates with no similarity samples have no spread to compare and
    get no bonus.
    """
    if tally.baseline.samples == 0:
        return 0.0
    delta = abs(tally.baseline.spread - profile.answer_spread)
    return math.exp(-VARIANCE_BONUS_DECAY * delta) * VARIANCE_BONUS_MAX


def comprehensiveness_bonus(tally: CandidateTally) -> float:
    """Up to 35 points for documenting a position on every topic."""
    covered = min(tally.topics_covered, TOTAL_POLICY_AREAS)
    return covered / TOTAL_POLICY_AREAS * COMPREHENSIVE_BONUS_MAX


# ---------------------------
# Pathways
# ---------------------------

def rank_pathway(tally: CandidateTally, profile: UserProfile) -> float:
    return (
        RANK_WEIGHT * tally.average_points
        + variance_bonus(tally, profile)
        + comprehensiveness_bonus(tally)
    )


def consistency_pathway(tally: CandidateTally, profile: UserProfile) -> float:
    worst = min(tally.points) if tally.points else 0.0
    return (
        CONSISTENCY_MIN_WEIGHT * worst
        + CONSISTENCY_MEAN_WEIGHT * tally.average_points
        + comprehensiveness_bonus(tally)
    )


def correlation_pathway(tally: CandidateTally, profile: UserProfile) -> float:
    # questions without a position contribute 0 but still count
    count = max(profile.question_count, len(tally.strengths))
    if count == 0:
        return 0.0
    return sum(tally.strengths) / count * 100.0


Pathway = Callable[[CandidateTally, UserProfile], float]

PATHWAYS: Dict[str, Pathway] = {
    "rank": rank_pathway,
    "consistency": consistency_pathway,
    "correlation": correlation_pathway,
}


def clamp_score(value: float) -> float:
    if not math.isfinite(value):
        return SCORE_MIN
    return max(SCORE_MIN, min(SCORE_MAX, value))


def combine_pathways(tally: CandidateTally, profile: UserProfile) -> Tuple[float, str]:
    """Return the clamped best pathway score and the pathway that produced it."""
    best_name = ""
    best = -math.inf
    for name, pathway in PATHWAYS.items():
        score = pathway(tally, profile)
        if not math.isfinite(score):
            continue
        if score > best:
            best, best_name = score, name
    return clamp_score(best), best_name
