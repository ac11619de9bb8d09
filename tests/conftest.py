"""
Pytest configuration and shared fixtures for HNSWStore tests
"""

import pytest
import numpy as np
from typing import List


class FixedRandom:
    """Random source that replays a fixed sequence of draws (cycling)."""

    def __init__(self, values: List[float]) -> None:
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


# A draw this close to 1.0 walks past every layer of the level table, so the
# node lands on the top layer
TOP_LAYER_DRAW = 1.0 - 1e-12


@pytest.fixture
def top_layer_random() -> FixedRandom:
    """Random source that places every node on the top layer."""
    return FixedRandom([TOP_LAYER_DRAW])


@pytest.fixture
def sample_vectors() -> np.ndarray:
    """Generate sample vectors for testing."""
    rng = np.random.default_rng(42)
    return rng.random((50, 8)).astype(np.float32)


@pytest.fixture
def sequence_data() -> List[dict]:
    """Five 5-dimensional vectors on a line, with string payloads."""
    return [
        {"id": 1, "content": "foo", "embedding": [1, 2, 3, 4, 5]},
        {"id": 2, "content": "bar", "embedding": [2, 3, 4, 5, 6]},
        {"id": 3, "content": "sho", "embedding": [3, 4, 5, 6, 7]},
        {"id": 4, "content": "que", "embedding": [4, 5, 6, 7, 8]},
        {"id": 5, "content": "wee", "embedding": [5, 6, 7, 8, 9]},
    ]


@pytest.fixture
def dimension() -> int:
    """Standard vector dimension for testing."""
    return 8
