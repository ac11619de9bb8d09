"""
HNSWStore - Embeddable HNSW Vector Index

An in-process approximate nearest-neighbor index over fixed-dimension vectors
using Hierarchical Navigable Small World graphs, with a SQLite-backed vector
store and an LRU result cache around it.
"""

__version__ = "0.1.0"

from hnswstore.config import (
    HNSWStoreConfig,
    get_default_config,
    get_euclidean_config,
)
from hnswstore.hnsw import HNSWIndex, QueryResult, SimilarityMetric
from hnswstore.cache import QueryCache
from hnswstore.storage import SQLiteCollection
from hnswstore.vector_store import VectorStore
from hnswstore.errors import (
    HNSWStoreError,
    DimensionMismatchError,
    DuplicateIdError,
    DeserializationError,
    VectorStoreUninitializedError,
    IndexMissingError,
    IndexPurgeFailedError,
)

__all__ = [
    "HNSWIndex",
    "QueryResult",
    "SimilarityMetric",
    "QueryCache",
    "SQLiteCollection",
    "VectorStore",
    "HNSWStoreConfig",
    "get_default_config",
    "get_euclidean_config",
    "HNSWStoreError",
    "DimensionMismatchError",
    "DuplicateIdError",
    "DeserializationError",
    "VectorStoreUninitializedError",
    "IndexMissingError",
    "IndexPurgeFailedError",
]
