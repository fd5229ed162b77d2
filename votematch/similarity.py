from __future__ import annotations

"""
Cosine similarity between embeddings.

Embeddings are produced by an external model and consumed here as
opaque fixed-length vectors.  A ranking pass over tens of candidates
must never be aborted by one dirty vector, so zero-norm vectors and
vectors with non-finite or non-numeric components score a neutral 0.
Only a length mismatch is treated as a hard error: it means the caller
mixed embeddings from different models.
"""

from typing import Sequence

import numpy as np
from loguru import logger

from .errors import ShapeMismatchError


def _as_vector(values: Sequence[float]) -> np.ndarray | None:
    """Coerce a sequence into a float64 array, or None if it cannot be."""
    try:
        return np.asarray(values, dtype="float64")
    except (TypeError, ValueError) as e:
        logger.warning("Embedding has non-numeric components ({}); similarity set to 0", e)
        return None


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the cosine similarity of ``a`` and ``b`` in ``[-1, 1]``.

    Raises :class:`ShapeMismatchError` when the vectors differ in length.
    Returns 0.0 for zero-norm vectors or any NaN/inf component.
    """
    if len(a) != len(b):
        raise ShapeMismatchError(len(a), len(b))
    va = _as_vector(a)
    vb = _as_vector(b)
    if va is None or vb is None:
        return 0.0
    if not (np.all(np.isfinite(va)) and np.all(np.isfinite(vb))):
        logger.warning("Embedding has non-finite components; similarity set to 0")
        return 0.0
    norm = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if norm == 0.0 or not np.isfinite(norm):
        return 0.0
    sim = float(np.dot(va, vb)) / norm
    if not np.isfinite(sim):
        return 0.0
    # rounding can push |sim| a hair past 1
    return max(-1.0, min(1.0, sim))
