"""
HNSW graph data structures.

This module defines the core data structures for storing the HNSW graph:
- HNSWNode: A single vector with its content payload and per-layer neighbor lists
- HNSWGraph: The node arena plus the entry point, level table and parameters

The graph is hierarchical: every node lives on layer 0, while higher layers
contain progressively fewer nodes for faster coarse-grained navigation.
Adjacency lists hold node IDs only. A referenced ID that no longer resolves is
treated as absent rather than as an error.
"""

from typing import Any, List, Optional
import numpy as np
import numpy.typing as npt

from hnswstore.errors import DimensionMismatchError, DuplicateIdError
from hnswstore.hnsw.distance import SimilarityMetric, get_similarity_function
from hnswstore.hnsw.utils import build_level_probabilities

Vector = npt.NDArray[np.float32]

# Entry point value for a graph that has no nodes yet
NO_ENTRY_POINT = -1


class HNSWNode:
    """
    Represents a single node in the HNSW graph.

    The node appears in layers 0 through its assigned 'level'. Its level,
    embedding and content are fixed at creation; only the neighbor lists
    change afterwards.
    """

    def __init__(
        self, node_id: int, embedding: Vector, level: int, content: Any = None
    ) -> None:
        """
        Create a new HNSW node.

        Args:
            node_id: Caller-supplied unique identifier
            embedding: The vector data (copied into a float32 array)
            level: Maximum layer this node appears in (0 = base layer only)
            content: Opaque payload returned alongside query results
        """
        if level < 0:
            raise ValueError(f"Node level must be non-negative, got {level}")

        self.id = node_id
        self.embedding = np.array(embedding, dtype=np.float32)
        self.level = level
        self.content = content

        # One adjacency list per layer: neighbors[layer] = [neighbor_id, ...]
        self.neighbors: List[List[int]] = [[] for _ in range(level + 1)]

    def add_neighbor(self, neighbor_id: int, layer: int) -> bool:
        """
        Add a connection to another node at a specific layer.

        Self-references and duplicates are ignored.

        Returns:
            True if the neighbor list changed
        """
        if layer > self.level:
            raise ValueError(
                f"Cannot add neighbor at layer {layer} (node max level is {self.level})"
            )

        if neighbor_id == self.id or neighbor_id in self.neighbors[layer]:
            return False

        self.neighbors[layer].append(neighbor_id)
        return True

    def get_neighbors(self, layer: int) -> List[int]:
        """Neighbor IDs at a layer, or an empty list above this node's level."""
        if layer > self.level or layer < 0:
            return []

        return self.neighbors[layer]

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"HNSWNode(id={self.id}, level={self.level}, dim={len(self.embedding)})"


class HNSWGraph:
    """
    Container for the entire HNSW graph structure.

    Owns every node (keyed by ID), tracks the entry point for searches and
    insertions, and holds the construction parameters and the level table.
    """

    def __init__(
        self,
        M: int = 16,
        ef_construction: int = 200,
        dimension: Optional[int] = None,
        metric=SimilarityMetric.COSINE,
    ) -> None:
        """
        Initialize an empty HNSW graph.

        Args:
            M: Maximum number of neighbors per node per layer
            ef_construction: Construction-time search width, kept with the index
            dimension: Vector dimension; if None it is fixed by the first insertion
            metric: Similarity metric used to rank nodes
        """
        self.M = M
        self.ef_construction = ef_construction
        self.dimension = dimension
        self.metric = SimilarityMetric(metric)
        self.similarity = get_similarity_function(self.metric)

        # Per-layer probabilities; the last index is the configured top layer
        self.level_probabilities = build_level_probabilities(M)
        self.level_max = len(self.level_probabilities) - 1

        self.nodes: dict = {}
        self.entry_point_id: int = NO_ENTRY_POINT

    def check_dimension(self, vector: Vector) -> None:
        """
        Raise DimensionMismatchError if the vector doesn't match the graph.

        A graph without a fixed dimension accepts any length.
        """
        if self.dimension is not None and len(vector) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(vector))

    def add_node(self, node: HNSWNode) -> None:
        """
        Register a node in the arena (without connecting it).

        The first node fixes the graph dimension and becomes the entry point.

        Raises:
            DimensionMismatchError: If the embedding length is wrong
            DuplicateIdError: If the ID is already present
        """
        self.check_dimension(node.embedding)
        if node.id in self.nodes:
            raise DuplicateIdError(node.id)

        if self.dimension is None:
            self.dimension = len(node.embedding)

        self.nodes[node.id] = node

        if self.entry_point_id == NO_ENTRY_POINT:
            self.entry_point_id = node.id

    def get_node(self, node_id: int) -> Optional[HNSWNode]:
        """Retrieve a node by its ID, or None if it doesn't resolve."""
        return self.nodes.get(node_id)

    def get_entry_point(self) -> Optional[HNSWNode]:
        """The entry point node, or None for an empty graph."""
        if self.entry_point_id == NO_ENTRY_POINT:
            return None
        return self.nodes.get(self.entry_point_id)

    def add_edge(self, node1_id: int, node2_id: int, layer: int) -> None:
        """
        Create a bidirectional connection between two nodes at a specific layer.

        Neighbor-count bounds are enforced by the builder, not here.
        """
        node1 = self.nodes.get(node1_id)
        node2 = self.nodes.get(node2_id)

        if node1 is None or node2 is None:
            raise ValueError(f"Node not found: {node1_id} or {node2_id}")

        node1.add_neighbor(node2_id, layer)
        node2.add_neighbor(node1_id, layer)

    def get_max_level(self) -> int:
        """
        Highest layer actually populated (level of the entry point).

        Returns:
            Maximum layer number, or -1 if graph is empty
        """
        entry = self.get_entry_point()
        if entry is None:
            return -1

        return entry.level

    def reset(self) -> None:
        """Drop every node; parameters and dimension are kept."""
        self.nodes = {}
        self.entry_point_id = NO_ENTRY_POINT

    def size(self) -> int:
        """Total number of nodes in the graph."""
        return len(self.nodes)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"HNSWGraph(nodes={self.size()}, max_level={self.get_max_level()}, "
            f"M={self.M}, dim={self.dimension}, metric={self.metric.value})"
        )
