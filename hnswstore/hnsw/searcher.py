"""
HNSW search algorithm.

This module handles querying the HNSW graph for approximate nearest neighbors.
The search is a single best-first expansion that starts at the entry point:
1. The frontier is seeded with the entry point
2. The best-ranked node is popped, scored and (if its score is positive) kept
3. Nodes above layer 0 push their neighbors from the current layer pointer
   down to layer 0; the pointer only ever moves down
4. The walk ends once k results are collected or the frontier runs dry

Results come back in discovery order, not re-sorted by score. That is the
approximate-search trade-off of this walk: it stops as soon as it has k hits.
"""

from dataclasses import dataclass
from typing import Any, List, Set
import numpy as np
import numpy.typing as npt

from hnswstore.hnsw.frontier import RankedFrontier
from hnswstore.hnsw.graph import HNSWGraph

Vector = npt.NDArray[np.float32]


@dataclass
class QueryResult:
    """A single hit returned by a query."""

    id: int
    content: Any
    embedding: Vector
    score: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "embedding": self.embedding.tolist(),
            "score": self.score,
        }


class HNSWSearcher:
    """
    Handles search queries on the HNSW graph.

    This class provides the search functionality to find k approximate
    nearest neighbors for a given target vector.
    """

    def __init__(self, graph: HNSWGraph) -> None:
        """
        Initialize searcher with a graph.

        Args:
            graph: The HNSWGraph to search in
        """
        self.graph = graph

    def search(self, target: Vector, k: int) -> List[QueryResult]:
        """
        Search for up to k approximate nearest neighbors of the target.

        Args:
            target: Query vector (same dimension as the graph)
            k: Maximum number of results

        Returns:
            List of QueryResult in discovery order (at most k)
        """
        entry = self.graph.get_entry_point()
        if entry is None:
            return []

        similarity = self.graph.similarity
        scores = {}

        def score_of(node_id: int) -> float:
            # Each node is scored once per query; the frontier ranks by it
            if node_id not in scores:
                scores[node_id] = similarity(target, self.graph.nodes[node_id].embedding)
            return scores[node_id]

        candidates: RankedFrontier[int] = RankedFrontier(score_of)
        candidates.push(entry.id)

        visited: Set[int] = set()
        results: List[QueryResult] = []
        layer_pointer = entry.level

        while not candidates.is_empty() and len(results) < k:
            current_id = candidates.pop()
            if current_id in visited:
                continue
            visited.add(current_id)

            current = self.graph.nodes[current_id]
            current_score = score_of(current_id)
            if current_score > 0:
                results.append(
                    QueryResult(
                        id=current.id,
                        content=current.content,
                        embedding=current.embedding.copy(),
                        score=current_score,
                    )
                )

            # Base-layer nodes don't expand the search
            if current.level == 0:
                continue

            layer_pointer = min(layer_pointer, current.level - 1)
            for layer in range(layer_pointer, -1, -1):
                for neighbor_id in current.get_neighbors(layer):
                    if neighbor_id in visited or neighbor_id not in self.graph.nodes:
                        continue
                    candidates.push(neighbor_id)

        return results[:k]
