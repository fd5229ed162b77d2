from __future__ import annotations

"""
Fairness and coverage audits for the matching engine.

Both audits sweep many synthetic answer profiles through
:func:`votematch.matching.calculate_matches`:

* the **fairness** audit runs random profiles and measures how evenly
  first place (and top/bottom-5 placement) is distributed across
  candidates, reported as a coefficient of variation;
* the **coverage** audit runs the systematic patterns and then random
  profiles until every candidate has ranked first at least once (or the
  test budget runs out).  Every legitimately positioned candidate must
  be reachable as a first place for some profile.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set

import numpy as np
import pandas as pd
from loguru import logger

from .config import (
    AGREEMENT_MAX,
    AGREEMENT_MIN,
    AGREEMENT_SCALE,
    AUDIT_CV_TARGET,
    AUDIT_PATTERNS,
    AUDIT_STUCK_HIGH,
    AUDIT_STUCK_LOW,
    AUDIT_TOP_K,
    CandidatePosition,
    Question,
    UserAnswer,
)
from .matching import calculate_matches


# ---------------------------
# Answer profile generators
# ---------------------------

def _answer(question: Question, value) -> UserAnswer:
    return UserAnswer(
        question_id=question.question_id,
        topic=question.topic,
        answer=value,
        embedding=question.embedding,
    )


def _require_options(question: Question) -> List[str]:
    if not question.options:
        raise ValueError(f"Question {question.question_id} has no options")
    return question.options


def generate_random_answers(questions: Sequence[Question], rng: np.random.Generator) -> List[UserAnswer]:
    """One uniformly random answer per question."""
    answers: List[UserAnswer] = []
    for q in questions:
        if q.type == AGREEMENT_SCALE:
            value = int(rng.integers(AGREEMENT_MIN, AGREEMENT_MAX + 1))
        else:
            options = _require_options(q)
            value = options[int(rng.integers(len(options)))]
        answers.append(_answer(q, value))
    return answers


def generate_systematic_answers(
    questions: Sequence[Question],
    pattern: str,
    rng: np.random.Generator,
) -> List[UserAnswer]:
    """Answers following one of ``AUDIT_PATTERNS``.

    ``progressive`` answers 4-5, ``conservative`` 1-2 and ``moderate``
    3-4 on agreement questions; choice questions take the last, first or
    middle option respectively.
    """
    if pattern not in AUDIT_PATTERNS:
        raise ValueError(f"Unknown answer pattern: {pattern}")
    answers: List[UserAnswer] = []
    for q in questions:
        if q.type == AGREEMENT_SCALE:
            if pattern == "strongly-agree":
                value = 5
            elif pattern == "strongly-disagree":
                value = 1
            elif pattern == "neutral":
                value = 3
            elif pattern == "progressive":
                value = int(rng.integers(4, 6))
            elif pattern == "conservative":
                value = int(rng.integers(1, 3))
            else:
                value = int(rng.integers(3, 5))
        else:
            options = _require_options(q)
            if pattern in {"strongly-agree", "progressive"}:
                value = options[-1]
            elif pattern in {"strongly-disagree", "conservative"}:
                value = options[0]
            else:
                value = options[len(options) // 2]
        answers.append(_answer(q, value))
    return answers


# ---------------------------
# Reports
# ---------------------------

def _cv(values: Sequence[float]) -> float:
    arr = np.asarray(values, dtype="float64")
    if arr.size == 0:
        return 0.0
    mean = float(arr.mean())
    return float(arr.std()) / mean * 100.0 if mean > 0 else 0.0


@dataclass
class FairnessReport:
    tests: int
    table: pd.DataFrame
    cv: float
    top_k_cv: float
    stuck_at_top: int
    stuck_at_bottom: int

    @property
    def passed(self) -> bool:
        return self.cv < AUDIT_CV_TARGET and self.stuck_at_top == 0 and self.stuck_at_bottom == 0


@dataclass
class CoverageReport:
    total_candidates: int
    tests_run: int
    ranked_first: Set[str] = field(default_factory=set)
    pattern_winners: Dict[str, str] = field(default_factory=dict)

    @property
    def coverage(self) -> float:
        if self.total_candidates == 0:
            return 0.0
        return len(self.ranked_first) / self.total_candidates * 100.0

    @property
    def passed(self) -> bool:
        return self.total_candidates > 0 and len(self.ranked_first) == self.total_candidates


# ---------------------------
# Audits
# ---------------------------

def audit_fairness(
    questions: Sequence[Question],
    positions: Sequence[CandidatePosition],
    tests: int,
    rng: np.random.Generator,
    jitter_rng: np.random.Generator | None = None,
) -> FairnessReport:
    """Run ``tests`` random profiles and measure placement distribution."""
    candidate_ids = list(dict.fromkeys(p.candidate_id for p in positions))
    wins = {cid: 0 for cid in candidate_ids}
    top3 = {cid: 0 for cid in candidate_ids}
    top_k = {cid: 0 for cid in candidate_ids}
    bottom_k = {cid: 0 for cid in candidate_ids}

    for i in range(tests):
        answers = generate_random_answers(questions, rng)
        results = calculate_matches(answers, positions, questions, rng=jitter_rng)
        if not results:
            continue
        wins[results[0].candidate_id] += 1
        for m in results[:3]:
            top3[m.candidate_id] += 1
        for m in results[:AUDIT_TOP_K]:
            top_k[m.candidate_id] += 1
        # bottom slice never overlaps the top slice
        for m in results[max(AUDIT_TOP_K, len(results) - AUDIT_TOP_K):]:
            bottom_k[m.candidate_id] += 1
        if (i + 1) % 100 == 0:
            logger.info("Fairness audit progress: {}/{}", i + 1, tests)

    denom = max(tests, 1)
    table = pd.DataFrame(
        {
            "candidate_id": candidate_ids,
            "wins": [wins[c] for c in candidate_ids],
            "win_pct": [wins[c] / denom * 100 for c in candidate_ids],
            "top3_pct": [top3[c] / denom * 100 for c in candidate_ids],
            "top5_pct": [top_k[c] / denom * 100 for c in candidate_ids],
            "bottom5_pct": [bottom_k[c] / denom * 100 for c in candidate_ids],
        }
    )
    table = table.sort_values("wins", ascending=False, kind="stable").reset_index(drop=True)

    stuck_at_top = stuck_at_bottom = 0
    # smaller fields put most candidates in the top slice on every run
    if len(candidate_ids) > 2 * AUDIT_TOP_K:
        top_share = table["top5_pct"] / 100
        bottom_share = table["bottom5_pct"] / 100
        stuck_at_top = int(((top_share > AUDIT_STUCK_HIGH) & (bottom_share < AUDIT_STUCK_LOW)).sum())
        stuck_at_bottom = int(((bottom_share > AUDIT_STUCK_HIGH) & (top_share < AUDIT_STUCK_LOW)).sum())

    report = FairnessReport(
        tests=tests,
        table=table,
        cv=_cv(table["wins"].tolist()),
        top_k_cv=_cv(table["top5_pct"].tolist()),
        stuck_at_top=stuck_at_top,
        stuck_at_bottom=stuck_at_bottom,
    )
    logger.info(
        "Fairness audit: CV={:.1f}% top-5 CV={:.1f}% stuck top={} bottom={}",
        report.cv,
        report.top_k_cv,
        report.stuck_at_top,
        report.stuck_at_bottom,
    )
    return report


def audit_coverage(
    questions: Sequence[Question],
    positions: Sequence[CandidatePosition],
    max_tests: int,
    rng: np.random.Generator,
    jitter_rng: np.random.Generator | None = None,
) -> CoverageReport:
    """Check that every candidate can rank first for some profile."""
    total = len({p.candidate_id for p in positions})
    report = CoverageReport(total_candidates=total, tests_run=0)

    for pattern in AUDIT_PATTERNS:
        answers = generate_systematic_answers(questions, pattern, rng)
        results = calculate_matches(answers, positions, questions, rng=jitter_rng)
        report.tests_run += 1
        if results:
            winner = results[0].candidate_id
            report.pattern_winners[pattern] = winner
            report.ranked_first.add(winner)

    logger.info("Coverage after patterns: {}/{}", len(report.ranked_first), total)

    for _ in range(max_tests):
        if len(report.ranked_first) >= total:
            break
        answers = generate_random_answers(questions, rng)
        results = calculate_matches(answers, positions, questions, rng=jitter_rng)
        report.tests_run += 1
        if results and results[0].candidate_id not in report.ranked_first:
            report.ranked_first.add(results[0].candidate_id)
            logger.info("Random test {} found new #1: {}", report.tests_run, results[0].candidate_id)

    logger.info("Coverage: {:.1f}% after {} tests", report.coverage, report.tests_run)
    return report
