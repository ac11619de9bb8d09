"""
HNSW (Hierarchical Navigable Small World) engine.

This module contains the graph-based approximate nearest neighbor engine:
vectors are inserted into a multi-layer proximity graph and queries are
answered by a best-first walk instead of brute-force comparison.

Components:
- distance: Similarity metrics (cosine, euclidean-derived)
- frontier: Ranked work-list used by the query walk
- utils: Level table, level sampling, neighbor selection
- graph: Node and graph data structures
- builder: Insertion (greedy descent + linking)
- searcher: Best-first query expansion
- index: HNSWIndex facade (insert, build, query, serialize)
"""

from hnswstore.hnsw.distance import (
    SimilarityMetric,
    cosine_similarity,
    euclidean_similarity,
)
from hnswstore.hnsw.frontier import RankedFrontier
from hnswstore.hnsw.graph import HNSWNode, HNSWGraph
from hnswstore.hnsw.builder import HNSWBuilder
from hnswstore.hnsw.searcher import HNSWSearcher, QueryResult
from hnswstore.hnsw.index import HNSWIndex

__all__ = [
    "SimilarityMetric",
    "cosine_similarity",
    "euclidean_similarity",
    "RankedFrontier",
    "HNSWNode",
    "HNSWGraph",
    "HNSWBuilder",
    "HNSWSearcher",
    "QueryResult",
    "HNSWIndex",
]
