"""
Embedding vectors and the squared Euclidean distance used for ranking.

Squared distance preserves the ordering of Euclidean distance without the
square root, which is all ranking needs.
"""

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from askdocs.errors import DimensionMismatchError

Vector = NDArray[np.float64]


def as_vector(values: Sequence[float] | NDArray) -> Vector:
    """Convert a sequence of numbers to a one-dimensional float64 vector."""
    vector = np.asarray(values, dtype=np.float64)
    if vector.ndim != 1:
        raise ValueError(f"Expected a 1-D vector, got shape {vector.shape}")
    return vector


def distance(a: Sequence[float] | NDArray, b: Sequence[float] | NDArray) -> float:
    """
    Squared Euclidean distance between two vectors.

    Raises:
        DimensionMismatchError: If the vectors have different lengths
    """
    va = as_vector(a)
    vb = as_vector(b)
    if va.shape[0] != vb.shape[0]:
        raise DimensionMismatchError(va.shape[0], vb.shape[0])
    diff = va - vb
    return float(np.dot(diff, diff))


def distances(matrix: NDArray[np.float64], query: Sequence[float] | NDArray) -> NDArray[np.float64]:
    """
    Squared Euclidean distance from every row of ``matrix`` to ``query``.

    Args:
        matrix: Array of shape (n, dimension)
        query: Vector of shape (dimension,)

    Returns:
        Array of shape (n,)

    Raises:
        DimensionMismatchError: If the query length differs from the row length
    """
    q = as_vector(query)
    if matrix.shape[0] == 0:
        return np.empty(0, dtype=np.float64)
    if matrix.shape[1] != q.shape[0]:
        raise DimensionMismatchError(matrix.shape[1], q.shape[0])
    diff = matrix - q
    return np.einsum("ij,ij->i", diff, diff)
