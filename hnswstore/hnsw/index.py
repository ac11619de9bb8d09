"""
HNSWIndex: the graph engine facade.

Ties the graph, builder and searcher together behind the operations the rest
of the package uses: add_vector, build_index, query, serialize, deserialize.

All operations take a single re-entrant lock. Insertions read and rewrite
shared neighbor lists and the entry point, so two of them must never
interleave; queries take the same lock so they never see a half-linked node.
"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional
import numpy as np
import numpy.typing as npt

from hnswstore.errors import DeserializationError, DimensionMismatchError
from hnswstore.hnsw.builder import HNSWBuilder
from hnswstore.hnsw.distance import SimilarityMetric
from hnswstore.hnsw.graph import NO_ENTRY_POINT, HNSWGraph, HNSWNode
from hnswstore.hnsw.searcher import HNSWSearcher, QueryResult
from hnswstore.hnsw.utils import RandomSource
from hnswstore.validation import validate_snapshot

Vector = npt.NDArray[np.float32]

logger = logging.getLogger(__name__)


class HNSWIndex:
    """
    In-memory HNSW approximate nearest-neighbor index.

    Example:
        >>> index = HNSWIndex(M=16, ef_construction=200)
        >>> node = index.add_vector(1, [1.0, 2.0, 3.0], content="foo")
        >>> node = index.add_vector(2, [2.0, 3.0, 4.0], content="bar")
        >>> [hit.id for hit in index.query([1.0, 2.0, 3.0], k=1)]
        [1]
    """

    def __init__(
        self,
        M: int = 16,
        ef_construction: int = 200,
        dimension: Optional[int] = None,
        metric=SimilarityMetric.COSINE,
        seed: Optional[int] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        """
        Create an empty index.

        Args:
            M: Maximum neighbors per node per layer (>= 2)
            ef_construction: Construction search width, persisted with the index
            dimension: Fixed vector dimension (None = set by the first insertion)
            metric: "cosine" or "euclidean"
            seed: Seed for level sampling; ignored when rng is given
            rng: Explicit random source with a random() method
        """
        self._graph = HNSWGraph(
            M=M, ef_construction=ef_construction, dimension=dimension, metric=metric
        )
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._builder = HNSWBuilder(self._graph, rng=self._rng)
        self._searcher = HNSWSearcher(self._graph)
        self._lock = threading.RLock()

    # Read-only views of the engine state

    @property
    def graph(self) -> HNSWGraph:
        return self._graph

    @property
    def M(self) -> int:
        return self._graph.M

    @property
    def ef_construction(self) -> int:
        return self._graph.ef_construction

    @property
    def dimension(self) -> Optional[int]:
        return self._graph.dimension

    @property
    def metric(self) -> SimilarityMetric:
        return self._graph.metric

    @property
    def level_max(self) -> int:
        return self._graph.level_max

    @property
    def entry_point_id(self) -> int:
        return self._graph.entry_point_id

    @property
    def nodes(self) -> Dict[int, HNSWNode]:
        return self._graph.nodes

    def size(self) -> int:
        return self._graph.size()

    def __len__(self) -> int:
        return self._graph.size()

    def __contains__(self, node_id: int) -> bool:
        return node_id in self._graph.nodes

    def add_vector(self, node_id: int, embedding, content: Any = None) -> HNSWNode:
        """
        Insert one vector and link it into the graph.

        Args:
            node_id: Caller-supplied unique ID
            embedding: Sequence of floats (list or numpy array)
            content: Opaque payload returned with query results

        Returns:
            The inserted node

        Raises:
            DimensionMismatchError: If the length differs from the index dimension
            DuplicateIdError: If node_id is already indexed
        """
        vector = np.asarray(embedding, dtype=np.float32)

        with self._lock:
            node = self._builder.insert(node_id, vector, content)

        logger.debug("Inserted node %s at level %d", node_id, node.level)
        return node

    def build_index(self, items: Iterable[Mapping[str, Any]]) -> None:
        """
        Reset the graph and insert every item, strictly one after another.

        Each item is a mapping with "id", "embedding" and optional "content".
        The dimension (if already fixed) and all parameters are kept. If an
        item fails, the error propagates and the items before it stay indexed.
        """
        with self._lock:
            self._graph.reset()
            count = 0
            for item in items:
                self.add_vector(item["id"], item["embedding"], item.get("content"))
                count += 1

        logger.info(
            "Built index with %d nodes (max level %d)", count, self._graph.get_max_level()
        )

    def query(self, target, k: int = 3) -> List[QueryResult]:
        """
        Approximate k-nearest-neighbor search.

        Args:
            target: Query vector
            k: Maximum number of results

        Returns:
            Up to k QueryResult objects in discovery order; [] for an empty index

        Raises:
            ValueError: If k < 1
            DimensionMismatchError: If the target length differs from the index dimension
        """
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")

        vector = np.asarray(target, dtype=np.float32)

        with self._lock:
            if self._graph.size() == 0:
                return []
            if self._graph.dimension is not None and len(vector) != self._graph.dimension:
                raise DimensionMismatchError(self._graph.dimension, len(vector))
            return self._searcher.search(vector, k)

    def serialize(self) -> Dict[str, Any]:
        """
        Snapshot the whole graph as plain (JSON-ready) Python data.

        Format:
            {
                "M": 16,
                "efConstruction": 200,
                "levelMax": 7,
                "entryPointId": 1,
                "metric": "cosine",
                "dimension": 3,
                "nodes": [
                    [1, {"id": 1, "content": "foo", "level": 2,
                         "embedding": [0.5, 0.3, 0.8],
                         "neighbors": [[2, 3], [2], []]}],
                    ...
                ]
            }
        """
        with self._lock:
            nodes = [
                [
                    node_id,
                    {
                        "id": node.id,
                        "content": node.content,
                        "level": node.level,
                        "embedding": node.embedding.tolist(),
                        "neighbors": [list(layer) for layer in node.neighbors],
                    },
                ]
                for node_id, node in self._graph.nodes.items()
            ]

            return {
                "M": self._graph.M,
                "efConstruction": self._graph.ef_construction,
                "levelMax": self._graph.level_max,
                "entryPointId": self._graph.entry_point_id,
                "metric": self._graph.metric.value,
                "dimension": self._graph.dimension,
                "nodes": nodes,
            }

    @classmethod
    def deserialize(
        cls,
        data: Mapping[str, Any],
        seed: Optional[int] = None,
        rng: Optional[RandomSource] = None,
    ) -> "HNSWIndex":
        """
        Rebuild an index from a snapshot produced by serialize().

        Snapshots without a "metric" key load as cosine.

        Raises:
            DeserializationError: If the document is malformed, embeddings
                disagree in length, or the entry point doesn't resolve
        """
        ok, result = validate_snapshot(data)
        if not ok:
            raise result
        snapshot = result

        dimension = snapshot.dimension
        for _, record in snapshot.nodes:
            if dimension is None:
                dimension = len(record.embedding)
            elif len(record.embedding) != dimension:
                raise DeserializationError(
                    f"Node {record.id} has embedding length {len(record.embedding)}, "
                    f"expected {dimension}"
                )

        index = cls(
            M=snapshot.M,
            ef_construction=snapshot.ef_construction,
            dimension=dimension,
            metric=snapshot.metric,
            seed=seed,
            rng=rng,
        )
        graph = index._graph
        graph.level_max = snapshot.level_max

        for node_id, record in snapshot.nodes:
            node = HNSWNode(node_id, record.embedding, record.level, record.content)
            node.neighbors = [list(layer) for layer in record.neighbors]
            graph.nodes[node_id] = node

        if graph.nodes:
            if snapshot.entry_point_id not in graph.nodes:
                raise DeserializationError(
                    f"Entry point {snapshot.entry_point_id} does not resolve to a node"
                )
            graph.entry_point_id = snapshot.entry_point_id
        else:
            graph.entry_point_id = NO_ENTRY_POINT

        logger.info("Deserialized index with %d nodes", graph.size())
        return index

    def get_statistics(self) -> Dict[str, Any]:
        """Summary of the graph shape."""
        with self._lock:
            level_counts: Dict[int, int] = {}
            for node in self._graph.nodes.values():
                level_counts[node.level] = level_counts.get(node.level, 0) + 1

            return {
                "total_vectors": self._graph.size(),
                "dimension": self._graph.dimension,
                "metric": self._graph.metric.value,
                "M": self._graph.M,
                "ef_construction": self._graph.ef_construction,
                "level_max": self._graph.level_max,
                "max_level": self._graph.get_max_level(),
                "entry_point_id": self._graph.entry_point_id,
                "nodes_per_level": dict(sorted(level_counts.items())),
            }

    def __repr__(self) -> str:
        return f"HNSWIndex({self._graph!r})"
