from __future__ import annotations

"""
Per-candidate baseline statistics for z-score normalization.

Raw cosine similarity against externally generated embeddings carries a
systematic, candidate-specific offset that has nothing to do with what
the candidate actually proposes: verbose or "average" position texts
sit closer to every question.  Each candidate is therefore normalized
against its own similarity distribution over the answered questions
before any cross-candidate comparison happens.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Sequence

import numpy as np

from .config import BASELINE_MIN_SAMPLES, BASELINE_STD_FLOOR


@dataclass(frozen=True)
class CandidateBaseline:
    mean: float = 0.0
    std_dev: float = 1.0
    spread: float = 0.0
    samples: int = 0

    def z_score(self, similarity: float) -> float:
        return (similarity - self.mean) / self.std_dev


NEUTRAL_BASELINE = CandidateBaseline()


def compute_baseline(similarities: Sequence[float]) -> CandidateBaseline:
    """Build a baseline from one candidate's raw similarities.

    Fewer than ``BASELINE_MIN_SAMPLES`` samples give the neutral
    baseline (mean 0, std 1); a single sample has no spread to normalize
    against.  The sample standard deviation is floored at
    ``BASELINE_STD_FLOOR``.  ``spread`` is the population standard
    deviation, used by the variance bonus.
    """
    arr = np.asarray(similarities, dtype="float64")
    n = int(arr.size)
    if n < BASELINE_MIN_SAMPLES:
        return CandidateBaseline(samples=n)
    std = float(arr.std(ddof=1))
    if not np.isfinite(std) or std < BASELINE_STD_FLOOR:
        std = BASELINE_STD_FLOOR
    return CandidateBaseline(
        mean=float(arr.mean()),
        std_dev=std,
        spread=float(arr.std()),
        samples=n,
    )


def compute_baselines(
    similarities: Mapping[str, Sequence[float]],
) -> Dict[str, CandidateBaseline]:
    """Compute a baseline for every candidate id in ``similarities``."""
    return {cid: compute_baseline(sims) for cid, sims in similarities.items()}
