"""
HNSW graph construction and insertion logic.

This module handles adding new nodes to the HNSW graph. The insertion algorithm:
1. Samples a layer for the new node from the graph's level table
2. Registers the node (the very first node simply becomes the entry point)
3. Walks greedily from the entry point towards the new vector, moving to the
   most similar neighbor on each layer for as long as that improves
4. Links the new node and the closest node found on every layer they share
5. Trims any neighbor list that grew past M, dropping the least similar entry
6. Promotes the new node to entry point if it sits above the current top layer

The descent is a single cheap walk across layers, not a full beam search per
layer; ef_construction is stored with the graph but does not widen it.
"""

import logging
from typing import Any, Optional
import numpy as np
import numpy.typing as npt

from hnswstore.errors import DuplicateIdError
from hnswstore.hnsw.graph import HNSWGraph, HNSWNode
from hnswstore.hnsw.utils import RandomSource, sample_level, select_neighbors_by_similarity

Vector = npt.NDArray[np.float32]

logger = logging.getLogger(__name__)


class HNSWBuilder:
    """
    Handles insertion of nodes into the HNSW graph.

    This class encapsulates the logic for adding new vectors to the index,
    including the greedy descent, symmetric linking and neighbor eviction.
    """

    def __init__(self, graph: HNSWGraph, rng: Optional[RandomSource] = None) -> None:
        """
        Initialize builder with a graph to operate on.

        Args:
            graph: The HNSWGraph to insert nodes into
            rng: Random source for level sampling (default: unseeded numpy Generator)
        """
        self.graph = graph
        self.rng = rng if rng is not None else np.random.default_rng()

    def insert(
        self,
        node_id: int,
        embedding: Vector,
        content: Any = None,
        level: Optional[int] = None,
    ) -> HNSWNode:
        """
        Insert a new node into the graph.

        Args:
            node_id: Caller-supplied unique ID
            embedding: Vector data for the new node
            content: Opaque payload stored with the node
            level: Explicit layer for the node (sampled from the level table if None)

        Returns:
            The inserted node

        Raises:
            DimensionMismatchError: If the vector length differs from the graph's
            DuplicateIdError: If node_id is already present
        """
        # A rejected insert must not consume a random draw
        self.graph.check_dimension(embedding)
        if node_id in self.graph.nodes:
            raise DuplicateIdError(node_id)

        if level is None:
            level = sample_level(self.graph.level_probabilities, self.rng)

        node = HNSWNode(node_id, embedding, level, content)

        # Entry point as it was before this node is registered
        entry = self.graph.get_entry_point()
        self.graph.add_node(node)

        if entry is None:
            logger.debug("Node %s (level %d) is the first node and entry point", node_id, level)
            return node

        closest = self._greedy_descent(entry, node.embedding)
        self._link(node, closest)

        if node.level > entry.level:
            self.graph.entry_point_id = node.id
            logger.debug(
                "Entry point promoted from %s to %s (level %d)", entry.id, node.id, node.level
            )

        return node

    def _greedy_descent(self, entry: HNSWNode, target: Vector) -> HNSWNode:
        """
        Walk from the entry point towards the target, one hop per layer.

        At each layer (from the entry point's level down to 0) only the
        immediate neighbors of the current node are examined. The walk moves to
        the best of them if it beats the current node and stops for good the
        first time a layer offers no improvement. Layers where the current node
        has no neighbors are passed over.

        Returns:
            The closest node reached
        """
        similarity = self.graph.similarity
        closest = entry
        closest_sim = similarity(target, closest.embedding)

        for layer in range(entry.level, -1, -1):
            best_node = None
            best_sim = -np.inf

            for neighbor_id in closest.get_neighbors(layer):
                neighbor = self.graph.get_node(neighbor_id)
                if neighbor is None:
                    continue
                sim = similarity(target, neighbor.embedding)
                if sim > best_sim:
                    best_sim = sim
                    best_node = neighbor

            if best_node is None:
                continue

            if best_sim > closest_sim:
                closest = best_node
                closest_sim = best_sim
            else:
                break

        return closest

    def _link(self, node: HNSWNode, closest: HNSWNode) -> None:
        """Connect node and closest on every layer both of them occupy."""
        common_level = min(node.level, closest.level)

        for layer in range(common_level + 1):
            self.graph.add_edge(node.id, closest.id, layer)
            self._prune_neighbors(closest, layer)
            self._prune_neighbors(node, layer)

    def _prune_neighbors(self, node: HNSWNode, layer: int) -> None:
        """
        Trim a node's neighbor list back to M entries.

        The least similar neighbors (relative to the list owner) are dropped.
        IDs that no longer resolve are dropped first.
        """
        neighbors = node.neighbors[layer]

        if len(neighbors) <= self.graph.M:
            return

        similarity = self.graph.similarity
        candidates = []
        similarities = []
        for neighbor_id in neighbors:
            neighbor = self.graph.get_node(neighbor_id)
            if neighbor is None:
                continue
            candidates.append(neighbor_id)
            similarities.append(similarity(node.embedding, neighbor.embedding))

        kept = select_neighbors_by_similarity(candidates, similarities, self.graph.M)
        evicted = [neighbor_id for neighbor_id in neighbors if neighbor_id not in kept]
        node.neighbors[layer] = kept

        logger.debug(
            "Evicted %s from node %s at layer %d", evicted, node.id, layer
        )
