"""
Exception hierarchy for HNSWStore.

The graph engine only raises DimensionMismatchError, DuplicateIdError and
DeserializationError. The remaining errors belong to the persistence layer
(VectorStore / SQLiteCollection) and are surfaced to callers of the store.
"""

from typing import Optional


class HNSWStoreError(Exception):
    """Base class for every error raised by this package."""


class DimensionMismatchError(HNSWStoreError, ValueError):
    """A vector's length differs from the index's established dimension."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid vector dimension: expected {expected}, got {actual}"
        )


class DuplicateIdError(HNSWStoreError, ValueError):
    """A node with the same id already exists in the graph."""

    def __init__(self, node_id: int) -> None:
        self.node_id = node_id
        super().__init__(f"Node id {node_id} already exists in the index")


class DeserializationError(HNSWStoreError, ValueError):
    """A snapshot failed structural validation or is internally inconsistent."""

    def __init__(self, message: str, details: Optional[list] = None) -> None:
        self.details = details or []
        super().__init__(message)


class VectorStoreUninitializedError(HNSWStoreError):
    """Persistence was requested before the store opened its collection."""

    def __init__(self) -> None:
        super().__init__("Vector Store is uninitialized.")


class IndexMissingError(HNSWStoreError):
    """No saved index exists in the collection."""

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name
        super().__init__(f"Vector Store Index is missing from '{collection_name}'.")


class IndexPurgeFailedError(HNSWStoreError):
    """The collection backing an index could not be deleted."""

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name
        super().__init__(f"Vector Store Index '{collection_name}' can't be deleted.")
