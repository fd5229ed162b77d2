from __future__ import annotations

"""
Directional stance alignment and per-question relative ranking.

Raw similarity only says that a position *talks about* the same thing as
a question.  The stance aligner turns a (user, candidate) pair into a
directional score: the user's signed stance times the candidate's
z-scored similarity, mapped back onto ``[0, 1]`` around 0.5.  Same-sign
stances land above 0.5, opposite signs below.

Each question then ranks every candidate against its peers and converts
the rank into linear points.  Ranking is recomputed per question so the
scheme stays relative: a candidate is only penalized for ranking behind
the others on that question, never for conservative wording as such.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .baseline import CandidateBaseline
from .config import JITTER_AMPLITUDE, RANK_POINTS_MAX


@dataclass
class RankedCandidate:
    candidate_id: str
    alignment: float
    points: float
    weighted_points: float


def stance_alignment(
    user_stance: float,
    similarity: Optional[float],
    baseline: CandidateBaseline,
) -> float:
    """Alignment of one candidate with one answer.

    ``similarity`` is None when the candidate has no position on the
    question's topic; the candidate stance is then 0, which yields the
    neutral alignment of 0.5.
    """
    if similarity is None:
        candidate_stance = 0.0
    else:
        candidate_stance = baseline.z_score(similarity)
    return (candidate_stance * user_stance + 1.0) / 2.0


def rank_points(rank_index: int, n: int) -> float:
    """Linear points for a 0-based rank among ``n`` candidates.

    First place scores 100, last place 0.  A lone candidate scores 100.
    """
    if n <= 1:
        return RANK_POINTS_MAX
    return RANK_POINTS_MAX * (n - 1 - rank_index) / (n - 1)


def rank_question(
    candidate_ids: Sequence[str],
    alignments: Sequence[float],
    weight: float = 1.0,
    rng: np.random.Generator | None = None,
) -> List[RankedCandidate]:
    """Rank candidates on one question by alignment, best first.

    Ties keep the input order.  When ``rng`` is given each alignment is
    perturbed by up to ``JITTER_AMPLITUDE`` before sorting so that small
    stable embedding biases cannot lock in the same winner forever.
    """
    n = len(candidate_ids)
    if n == 0:
        return []
    scores = [float(a) for a in alignments]
    if rng is not None:
        noise = rng.uniform(-JITTER_AMPLITUDE, JITTER_AMPLITUDE, size=n)
        scores = [s + float(d) for s, d in zip(scores, noise)]
    order = sorted(range(n), key=lambda i: -scores[i])
    ranked: List[RankedCandidate] = []
    for rank_index, i in enumerate(order):
        points = rank_points(rank_index, n)
        ranked.append(
            RankedCandidate(
                candidate_id=candidate_ids[i],
                alignment=scores[i],
                points=points,
                weighted_points=points * weight,
            )
        )
    return ranked
