from __future__ import annotations

"""
Candidate matching: from quiz answers to a ranked list of candidates.

This module wires the scoring components together.  For one completed
quiz it

1. resolves each answer against its question (unknown questions are
   skipped),
2. computes the raw similarity between the question embedding and each
   candidate's position on the question's topic,
3. builds a per-candidate z-score baseline from those similarities,
4. ranks all candidates on every question by directional stance
   alignment and converts ranks into weighted points, and
5. scores each candidate with the three pathways and keeps the best.

The computation is a pure function of its inputs (plus the optional
injected ``rng`` used for jitter).  All lookup tables are rebuilt per
call, so it is safe to call concurrently for many users.

Example::

    from votematch.matching import calculate_matches
    matches = calculate_matches(answers, positions, questions)
    for m in matches[:3]:
        print(m.name, m.score)

"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np
from loguru import logger

from .baseline import compute_baseline
from .config import CandidateMatch, CandidatePosition, Question, UserAnswer
from .normalize import is_neutral, normalize_answer, user_stance
from .pathways import CandidateTally, UserProfile, combine_pathways
from .ranking import rank_question, stance_alignment
from .similarity import cosine_similarity


@dataclass(frozen=True)
class _Candidate:
    candidate_id: str
    name: str
    party: str
    order: int
    positions: Mapping[str, CandidatePosition]


@dataclass(frozen=True)
class _ScoredAnswer:
    question: Question
    normalized: float
    stance: float
    similarities: Mapping[str, Optional[float]]


def _index_candidates(positions: Sequence[CandidatePosition]) -> Dict[str, _Candidate]:
    """Group positions by candidate, keeping first-appearance order."""
    grouped: Dict[str, Dict[str, CandidatePosition]] = {}
    meta: Dict[str, CandidatePosition] = {}
    for pos in positions:
        by_topic = grouped.setdefault(pos.candidate_id, {})
        meta.setdefault(pos.candidate_id, pos)
        if pos.topic in by_topic:
            logger.warning(
                "Duplicate position for candidate {} on {}; keeping the first",
                pos.candidate_id,
                pos.topic,
            )
            continue
        by_topic[pos.topic] = pos
    return {
        cid: _Candidate(
            candidate_id=cid,
            name=meta[cid].name,
            party=meta[cid].party,
            order=i,
            positions=MappingProxyType(by_topic),
        )
        for i, (cid, by_topic) in enumerate(grouped.items())
    }


def _score_answers(
    answers: Sequence[UserAnswer],
    questions_by_id: Mapping[str, Question],
    candidates: Mapping[str, _Candidate],
) -> List[_ScoredAnswer]:
    scored: List[_ScoredAnswer] = []
    for answer in answers:
        question = questions_by_id.get(answer.question_id)
        if question is None:
            logger.warning("Question not found for answer: {}", answer.question_id)
            continue
        if answer.topic != question.topic:
            logger.warning(
                "Answer topic {} does not match question {} topic {}; skipping",
                answer.topic,
                question.question_id,
                question.topic,
            )
            continue
        sims: Dict[str, Optional[float]] = {}
        for cid, cand in candidates.items():
            pos = cand.positions.get(question.topic)
            sims[cid] = None if pos is None else cosine_similarity(answer.embedding, pos.embedding)
        if all(s is None for s in sims.values()):
            logger.warning("No candidate positions found for policy area: {}", question.topic)
        normalized = normalize_answer(answer.answer, question)
        scored.append(
            _ScoredAnswer(
                question=question,
                normalized=normalized,
                stance=user_stance(normalized),
                similarities=MappingProxyType(sims),
            )
        )
    return scored


def _correlation_strength(item: _ScoredAnswer, similarity: Optional[float]) -> float:
    if similarity is None:
        return 0.0
    if is_neutral(item.normalized):
        return similarity
    return item.stance * (similarity - 0.5) + 0.5


def calculate_matches(
    answers: Sequence[UserAnswer],
    positions: Sequence[CandidatePosition],
    questions: Sequence[Question],
    rng: np.random.Generator | None = None,
) -> List[CandidateMatch]:
    """Score every candidate in ``positions`` against the user's answers.

    Returns one :class:`CandidateMatch` per distinct candidate id, best
    first.  Empty answers, positions or questions give an empty list.
    ``rng`` enables the per-question jitter; leave it None for
    reproducible output.
    """
    if not answers:
        logger.warning("No user answers provided for matching")
        return []
    if not positions:
        logger.warning("No candidate positions provided for matching")
        return []
    if not questions:
        logger.warning("No questions provided for matching")
        return []

    questions_by_id = MappingProxyType({q.question_id: q for q in questions})
    candidates = _index_candidates(positions)
    candidate_ids = list(candidates)

    scored = _score_answers(answers, questions_by_id, candidates)

    tallies: Dict[str, CandidateTally] = {}
    for cid, cand in candidates.items():
        sims = [item.similarities[cid] for item in scored if item.similarities[cid] is not None]
        tallies[cid] = CandidateTally(
            candidate_id=cid,
            topics_covered=len(cand.positions),
            baseline=compute_baseline(sims),
        )

    matched: Dict[str, int] = {cid: 0 for cid in candidate_ids}
    topic_totals: Dict[str, Dict[str, float]] = {cid: {} for cid in candidate_ids}
    topic_counts: Dict[str, Dict[str, int]] = {cid: {} for cid in candidate_ids}

    for item in scored:
        question = item.question
        alignments = [
            stance_alignment(item.stance, item.similarities[cid], tallies[cid].baseline)
            for cid in candidate_ids
        ]
        ranked = rank_question(candidate_ids, alignments, weight=question.weight, rng=rng)
        for entry in ranked:
            cid = entry.candidate_id
            tally = tallies[cid]
            tally.points.append(entry.points)
            tally.weighted_total += entry.weighted_points
            tally.weight_total += question.weight
            sim = item.similarities[cid]
            tally.strengths.append(_correlation_strength(item, sim))
            if sim is not None:
                matched[cid] += 1
            totals = topic_totals[cid]
            counts = topic_counts[cid]
            totals[question.topic] = totals.get(question.topic, 0.0) + entry.weighted_points
            counts[question.topic] = counts.get(question.topic, 0) + 1

    answer_values = np.asarray([item.normalized for item in scored], dtype="float64")
    profile = UserProfile(
        answer_spread=float(answer_values.std()) if answer_values.size else 0.0,
        question_count=len(scored),
    )

    matches: List[CandidateMatch] = []
    sort_keys: Dict[str, tuple] = {}
    for cid, cand in candidates.items():
        tally = tallies[cid]
        score, pathway = combine_pathways(tally, profile)
        logger.debug("Candidate {} scored {:.2f} via {} pathway", cid, score, pathway)
        alignment_by_area = {
            topic: total / topic_counts[cid][topic]
            for topic, total in topic_totals[cid].items()
        }
        matches.append(
            CandidateMatch(
                candidate_id=cid,
                name=cand.name,
                party=cand.party,
                score=score,
                matched_positions=matched[cid],
                alignment_by_area=alignment_by_area,
            )
        )
        sort_keys[cid] = (-score, -tally.weighted_total, cand.order)

    matches.sort(key=lambda m: sort_keys[m.candidate_id])
    logger.info(
        "Scored {} candidates over {} questions ({} answers skipped)",
        len(matches),
        len(scored),
        len(answers) - len(scored),
    )
    return matches
