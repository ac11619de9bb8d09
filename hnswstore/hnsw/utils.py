"""
Utility functions for HNSW graph construction.

This module provides helper functions used while building the index:
- Level table: geometric probability of a node landing on each layer
- Level sampling: draws a layer for a new node from that table
- Neighbor selection: decides which links survive when a list overflows

Most nodes land on layer 0; each higher layer is roughly M times sparser.
The table is built once per index, and its last index is the index's levelMax.
"""

import math
from typing import List, Protocol

# Layers whose probability falls below this are left out of the table
MIN_LEVEL_PROBABILITY = 1e-9


class RandomSource(Protocol):
    """Anything exposing random() -> float in [0, 1), e.g. numpy.random.Generator."""

    def random(self) -> float:
        ...


def build_level_probabilities(M: int) -> List[float]:
    """
    Build the per-layer probability table for a given M.

    Formula:
        level_mult = 1 / ln(M)
        prob(level) = exp(-level / level_mult) * (1 - exp(-1 / level_mult))

    Layers are appended until prob(level) drops below 1e-9.

    Args:
        M: Maximum neighbors per node per layer (must be >= 2)

    Returns:
        List of probabilities, index = layer number

    Example:
        >>> probs = build_level_probabilities(16)
        >>> len(probs) - 1  # levelMax
        7
        >>> round(probs[0], 4)
        0.9375
    """
    if M < 2:
        raise ValueError(f"M must be >= 2 to build a level table, got {M}")

    level_mult = 1.0 / math.log(M)

    probabilities = []
    level = 0
    while True:
        prob = math.exp(-level / level_mult) * (1.0 - math.exp(-1.0 / level_mult))
        if prob < MIN_LEVEL_PROBABILITY:
            break
        probabilities.append(prob)
        level += 1

    return probabilities


def sample_level(probabilities: List[float], rng: RandomSource) -> int:
    """
    Pick a layer for a new node by walking the probability table.

    A uniform draw r is consumed layer by layer: the first layer whose
    probability exceeds the remaining r is chosen. If the walk runs off the
    end of the table, the top layer is returned.

    Args:
        probabilities: Table produced by build_level_probabilities
        rng: Random source for the uniform draw

    Returns:
        Layer number (0 = base layer)
    """
    r = rng.random()

    for level, prob in enumerate(probabilities):
        if r < prob:
            return level
        r -= prob

    return len(probabilities) - 1


def select_neighbors_by_similarity(
    candidates: List[int], similarities: List[float], M: int
) -> List[int]:
    """
    Keep the M most similar candidates.

    Candidates with equal similarity keep their original relative order, and
    the result preserves the original list order of the survivors so that an
    adjacency list is only trimmed, never reshuffled.

    Args:
        candidates: Node IDs
        similarities: Similarity of each candidate to the list owner (parallel)
        M: Maximum number of candidates to keep

    Returns:
        Surviving node IDs, in their original order

    Example:
        >>> select_neighbors_by_similarity([10, 20, 30], [0.5, 0.9, 0.7], M=2)
        [20, 30]
    """
    if len(candidates) <= M:
        return list(candidates)

    ranked = sorted(range(len(candidates)), key=lambda i: -similarities[i])
    keep = set(ranked[:M])

    return [node_id for i, node_id in enumerate(candidates) if i in keep]
