"""
Persistent vector store built around an HNSWIndex.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from hnswstore.cache import QueryCache
from hnswstore.config import HNSWStoreConfig, get_default_config
from hnswstore.errors import (
    IndexMissingError,
    IndexPurgeFailedError,
    VectorStoreUninitializedError,
)
from hnswstore.hnsw.index import HNSWIndex
from hnswstore.hnsw.searcher import QueryResult
from hnswstore.storage import PathLike, SQLiteCollection

logger = logging.getLogger(__name__)

# Keys under which the store keeps its data inside the collection
INDEX_KEY = "hnsw"
META_KEY = "meta"


class VectorStore:
    """
    HNSW index plus a durable collection and an optional result cache.

    The store owns one HNSWIndex and delegates inserts and queries to it. The
    collection holds the serialized index; loading replaces the owned index
    with a freshly deserialized one.

    Example:
        >>> store = VectorStore.create("articles", directory="/tmp/stores")
        >>> store.add(1, [0.1, 0.9, 0.3], content="first article")
        >>> store.save_index()
        >>> restored = VectorStore.create("articles", directory="/tmp/stores")
        >>> restored.load_index()
        >>> restored.query([0.1, 0.9, 0.3], k=1)[0].content
        'first article'
    """

    def __init__(
        self,
        collection_name: str,
        M: Optional[int] = None,
        ef_construction: Optional[int] = None,
        metric: Optional[str] = None,
        config: Optional[HNSWStoreConfig] = None,
        cache: Optional[QueryCache] = None,
        directory: Optional[PathLike] = None,
    ) -> None:
        """
        Build a store whose collection is not opened yet (see create()/init()).

        Args:
            collection_name: Name of the durable collection
            M: Max neighbors per node per layer (default from config)
            ef_construction: Construction search width (default from config)
            metric: "cosine" or "euclidean" (default from config)
            config: HNSWStoreConfig; explicit arguments take precedence
            cache: Result cache; if None and config.enable_cache, one is built
            directory: Folder holding the collection file (default: cwd)
        """
        if config is None:
            config = get_default_config()
        self.config = config

        if M is None:
            M = config.default_M
        if ef_construction is None:
            ef_construction = config.default_ef_construction
        if metric is None:
            metric = config.metric

        self.collection_name = collection_name
        self.directory = directory
        self.collection: Optional[SQLiteCollection] = None

        if cache is None and config.enable_cache:
            cache = QueryCache(
                max_entries=config.cache_max_entries, max_age=config.cache_max_age
            )
        self.cache = cache

        self._index = HNSWIndex(
            M=M, ef_construction=ef_construction, metric=metric, seed=config.seed
        )

    @classmethod
    def create(cls, collection_name: str, **kwargs) -> "VectorStore":
        """Construct a store and open its collection."""
        store = cls(collection_name, **kwargs)
        store.init()
        return store

    def init(self) -> None:
        """Open (creating on first use) the backing collection."""
        self.collection = SQLiteCollection.open(self.collection_name, self.directory)

    @property
    def index(self) -> HNSWIndex:
        return self._index

    def _require_collection(self) -> SQLiteCollection:
        if self.collection is None or not self.collection.is_open:
            raise VectorStoreUninitializedError()
        return self.collection

    def _invalidate_cache(self) -> None:
        if self.cache is not None:
            self.cache.clear()

    def add(self, node_id: int, embedding, content: Any = None) -> None:
        """Insert one vector into the owned index."""
        self._index.add_vector(node_id, embedding, content)
        self._invalidate_cache()

    def build_index(self, items: Iterable[Mapping[str, Any]]) -> None:
        """Rebuild the owned index from items (see HNSWIndex.build_index)."""
        try:
            self._index.build_index(items)
        finally:
            self._invalidate_cache()

    def query(self, embedding, k: Optional[int] = None) -> List[QueryResult]:
        """
        Approximate k-NN search, served from the cache when possible.
        """
        if k is None:
            k = self.config.default_k

        if self.cache is not None:
            cached = self.cache.get(embedding, k)
            if cached is not None:
                return cached

        results = self._index.query(embedding, k)

        if self.cache is not None:
            self.cache.set(embedding, k, results)

        return results

    def save_index(self) -> None:
        """
        Write the index snapshot and its metadata to the collection.

        Raises:
            VectorStoreUninitializedError: If the collection isn't open
        """
        collection = self._require_collection()

        collection.put(INDEX_KEY, self._index.serialize())
        collection.put(META_KEY, self._metadata())

        logger.info(
            "Saved index with %d nodes to '%s'", self._index.size(), self.collection_name
        )

    def load_index(self) -> None:
        """
        Replace the owned index with the one saved in the collection.

        Raises:
            VectorStoreUninitializedError: If the collection isn't open
            IndexMissingError: If nothing has been saved yet
            DeserializationError: If the saved snapshot is invalid
        """
        collection = self._require_collection()

        snapshot = collection.get(INDEX_KEY)
        if snapshot is None:
            raise IndexMissingError(self.collection_name)

        self._index = HNSWIndex.deserialize(snapshot, seed=self.config.seed)
        self._invalidate_cache()

        logger.info(
            "Loaded index with %d nodes from '%s'", self._index.size(), self.collection_name
        )

    def delete_index(self) -> None:
        """
        Delete the collection, reopen it empty and reset the owned index.

        Raises:
            VectorStoreUninitializedError: If the collection isn't open
            IndexPurgeFailedError: If the collection can't be removed
        """
        collection = self._require_collection()
        collection.close()

        try:
            SQLiteCollection.delete(self.collection_name, self.directory)
        except IndexPurgeFailedError:
            logger.error("Failed to delete collection '%s'", self.collection_name)
            raise
        finally:
            self.init()

        self._index = HNSWIndex(
            M=self._index.M,
            ef_construction=self._index.ef_construction,
            metric=self._index.metric,
            seed=self.config.seed,
        )
        self._invalidate_cache()

    def close(self) -> None:
        if self.collection is not None:
            self.collection.close()

    def _metadata(self) -> Dict[str, Any]:
        return {
            "dimension": self._index.dimension,
            "metric": self._index.metric.value,
            "entryPointId": self._index.entry_point_id,
            "M": self._index.M,
            "efConstruction": self._index.ef_construction,
            "count": self._index.size(),
        }

    def get_statistics(self) -> Dict[str, Any]:
        """Index shape plus cache counters."""
        stats = self._index.get_statistics()
        stats["collection"] = self.collection_name
        stats["initialized"] = self.collection is not None and self.collection.is_open

        if self.cache is not None:
            stats["cache_entries"] = len(self.cache)
            stats["cache_hits"] = self.cache.stats.hits
            stats["cache_misses"] = self.cache.stats.misses
            stats["cache_hit_rate"] = self.cache.stats.hit_rate

        return stats

    def size(self) -> int:
        return self._index.size()

    def __enter__(self) -> "VectorStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
