"""Tests for cosine similarity."""

import math

import numpy as np
import pytest

from votematch.errors import ShapeMismatchError
from votematch.similarity import cosine_similarity


class TestCosineSimilarity:
    """Cosine similarity over plain and degenerate vectors."""

    def test_identical_vectors(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)

    def test_scale_invariant(self):
        assert cosine_similarity([1.0, 2.0], [10.0, 20.0]) == pytest.approx(1.0)

    def test_known_value(self):
        assert cosine_similarity([1.0, 0.0], [0.6, 0.8]) == pytest.approx(0.6)

    def test_accepts_numpy_arrays(self):
        a = np.array([0.3, 0.4])
        assert cosine_similarity(a, a) == pytest.approx(1.0)

    def test_result_within_bounds(self):
        rng = np.random.default_rng(7)
        for _ in range(50):
            a = rng.normal(size=16).tolist()
            b = rng.normal(size=16).tolist()
            assert -1.0 <= cosine_similarity(a, b) <= 1.0


class TestDegenerateInputs:
    """Inputs that must degrade to 0 rather than fail."""

    def test_zero_vector(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0

    def test_both_zero(self):
        assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0

    def test_nan_component(self, log_messages):
        assert cosine_similarity([float("nan"), 1.0], [1.0, 1.0]) == 0.0
        assert any("non-finite" in m for m in log_messages)

    def test_infinite_component(self):
        assert cosine_similarity([math.inf, 1.0], [1.0, 1.0]) == 0.0

    def test_non_numeric_component(self, log_messages):
        assert cosine_similarity(["a", 1.0], [1.0, 1.0]) == 0.0
        assert any("non-numeric" in m for m in log_messages)

    def test_empty_vectors(self):
        assert cosine_similarity([], []) == 0.0

    def test_length_mismatch_raises(self):
        with pytest.raises(ShapeMismatchError) as exc:
            cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0])
        assert "3 != 2" in str(exc.value)

    def test_length_mismatch_is_value_error(self):
        with pytest.raises(ValueError):
            cosine_similarity([1.0], [1.0, 2.0])
