"""Unit tests for retrieval.vectors module."""

import numpy as np
import pytest

from askdocs.errors import DimensionMismatchError
from askdocs.retrieval.vectors import as_vector, distance, distances


@pytest.mark.unit
class TestDistance:
    """Tests for squared Euclidean distance."""

    def test_distance_to_self_is_zero(self):
        rng = np.random.default_rng(42)
        for _ in range(5):
            v = rng.random(16)
            assert distance(v, v) == 0.0

    def test_distance_is_symmetric(self):
        rng = np.random.default_rng(7)
        a, b = rng.random(8), rng.random(8)
        assert distance(a, b) == pytest.approx(distance(b, a))

    def test_distance_is_squared(self):
        assert distance([0.0, 0.0], [3.0, 4.0]) == pytest.approx(25.0)

    def test_distance_accepts_lists(self):
        assert distance([1, 0], [0, 1]) == pytest.approx(2.0)

    def test_distance_rejects_mismatched_lengths(self):
        with pytest.raises(DimensionMismatchError) as exc_info:
            distance([1.0, 2.0], [1.0, 2.0, 3.0])
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 3

    def test_as_vector_rejects_matrix(self):
        with pytest.raises(ValueError):
            as_vector([[1.0, 2.0]])


@pytest.mark.unit
class TestDistances:
    """Tests for the vectorised distances helper."""

    def test_matches_pairwise_distance(self):
        rng = np.random.default_rng(3)
        matrix = rng.random((6, 4))
        query = rng.random(4)

        result = distances(matrix, query)

        assert result.shape == (6,)
        for row, value in zip(matrix, result):
            assert value == pytest.approx(distance(row, query))

    def test_empty_matrix(self):
        assert distances(np.empty((0, 0)), [1.0, 2.0]).shape == (0,)

    def test_dimension_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            distances(np.ones((2, 3)), [1.0, 2.0])
