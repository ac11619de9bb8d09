"""
Ranked frontier used by the best-first query walk.

Items are kept ordered by a caller-supplied score (highest first). Ties are
broken by insertion order, so two items with equal scores come out in the
order they were pushed. The frontier has no capacity bound and accepts
duplicate items; callers deduplicate at consumption time with a visited set.
"""

import heapq
import itertools
from typing import Callable, Generic, List, Tuple, TypeVar

T = TypeVar("T")


class RankedFrontier(Generic[T]):
    """Priority work-list ordered by descending score, stable on ties."""

    def __init__(self, score: Callable[[T], float]) -> None:
        """
        Args:
            score: Function returning the rank of an item (higher pops first)
        """
        self._score = score
        self._heap: List[Tuple[float, int, T]] = []
        self._counter = itertools.count()

    def push(self, item: T) -> None:
        # heapq is a min-heap: negate the score, then fall back to arrival order
        heapq.heappush(self._heap, (-self._score(item), next(self._counter), item))

    def pop(self) -> T:
        """
        Remove and return the best-ranked item.

        Raises:
            IndexError: If the frontier is empty
        """
        if not self._heap:
            raise IndexError("pop from an empty frontier")
        _, _, item = heapq.heappop(self._heap)
        return item

    def is_empty(self) -> bool:
        return not self._heap

    def __len__(self) -> int:
        return len(self._heap)

    def __repr__(self) -> str:
        return f"RankedFrontier(size={len(self._heap)})"
