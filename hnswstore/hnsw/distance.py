"""
Similarity metrics for vector comparisons.

The HNSW engine ranks nodes by a similarity score (higher means closer). Two
metrics are available and one is selected when an index is constructed:

- cosine: dot(a, b) / (|a| * |b|), ranging from -1 to 1.
- euclidean: 1 / (1 + euclidean_distance(a, b)), ranging over (0, 1] and
  decreasing monotonically as the distance grows.

Both functions assume len(a) == len(b). The engine guarantees this through its
fixed-dimension invariant, so the metrics themselves do not check.
"""

from enum import Enum
from typing import Callable

import numpy as np
import numpy.typing as npt

Vector = npt.NDArray[np.float32]
SimilarityFunction = Callable[[Vector, Vector], float]


class SimilarityMetric(str, Enum):
    COSINE = "cosine"
    EUCLIDEAN = "euclidean"


def cosine_similarity(v1: Vector, v2: Vector) -> float:
    """
    Compute cosine similarity between two vectors.

    Args:
        v1: First vector (1D numpy array)
        v2: Second vector (1D numpy array)

    Returns:
        Similarity score between -1 and 1 (higher means more similar).
        If either vector is all zeros the angle is undefined and 0.0 is
        returned, which keeps such nodes out of query results.

    Example:
        >>> cosine_similarity(np.array([1.0, 0.0]), np.array([1.0, 0.0]))
        1.0
    """
    a = np.asarray(v1, dtype=np.float64)
    b = np.asarray(v2, dtype=np.float64)

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


def cosine_distance(v1: Vector, v2: Vector) -> float:
    """Cosine distance, 1 - cosine_similarity (0 = same direction, 2 = opposite)."""
    return 1.0 - cosine_similarity(v1, v2)


def euclidean_distance(v1: Vector, v2: Vector) -> float:
    """Straight-line (L2) distance between two vectors."""
    a = np.asarray(v1, dtype=np.float64)
    b = np.asarray(v2, dtype=np.float64)
    return float(np.linalg.norm(a - b))


def euclidean_similarity(v1: Vector, v2: Vector) -> float:
    """
    Convert euclidean distance to a similarity score.

    Identical vectors score 1.0; the score approaches 0 as the vectors move
    apart but never reaches it.

    Example:
        >>> euclidean_similarity(np.array([0.0, 0.0]), np.array([3.0, 4.0]))
        0.16666666666666666
    """
    return 1.0 / (1.0 + euclidean_distance(v1, v2))


def get_similarity_function(metric) -> SimilarityFunction:
    """
    Resolve a metric name (or SimilarityMetric) to its scoring function.

    Raises:
        ValueError: If the metric is not recognised
    """
    metric = SimilarityMetric(metric)

    if metric == SimilarityMetric.COSINE:
        return cosine_similarity
    return euclidean_similarity
