from __future__ import annotations

"""
Topic-balanced random selection of quiz questions.

A quiz should touch every policy area, otherwise candidates who only
documented the skipped areas are structurally disadvantaged.  The
selection takes one random question per area first, fills the rest of
the quiz from the remaining pool, and shuffles the result so areas are
not grouped together.
"""

from typing import Dict, List, Sequence

import numpy as np

from .config import POLICY_AREAS, Question


def _shuffled(items: List[Question], rng: np.random.Generator) -> List[Question]:
    order = rng.permutation(len(items))
    return [items[int(i)] for i in order]


def select_random_questions(
    questions: Sequence[Question],
    count: int,
    rng: np.random.Generator | None = None,
) -> List[Question]:
    """Pick ``count`` questions with at least one per available topic.

    The result never exceeds ``count``; when ``count`` is smaller than
    the number of topics present, the shuffled per-topic picks are
    truncated.  Pass a seeded ``rng`` for reproducible quizzes.
    """
    if count <= 0 or not questions:
        return []
    if rng is None:
        rng = np.random.default_rng()

    by_area: Dict[str, List[Question]] = {area: [] for area in POLICY_AREAS}
    for q in questions:
        if q.topic in by_area:
            by_area[q.topic].append(q)

    selected: List[Question] = []
    remaining: List[Question] = []
    for area in POLICY_AREAS:
        pool = by_area[area]
        if not pool:
            continue
        pick = int(rng.integers(len(pool)))
        selected.append(pool[pick])
        remaining.extend(q for i, q in enumerate(pool) if i != pick)

    selected = _shuffled(selected, rng)[:count]
    missing = count - len(selected)
    if missing > 0:
        selected.extend(_shuffled(remaining, rng)[:missing])
    return _shuffled(selected, rng)
