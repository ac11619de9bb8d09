"""
Snapshot validation schema.

Checks a raw snapshot document (as produced by HNSWIndex.serialize() and read
back from a collection) before it is deserialized. Structural problems such as
missing keys, wrong types, negative levels or a neighbor table that doesn't
match the node's level are reported as a DeserializationError instead of
surfacing as KeyErrors deep inside graph reconstruction.

Unknown keys are ignored so that newer snapshots still load.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from hnswstore.errors import DeserializationError
from hnswstore.hnsw.distance import SimilarityMetric

logger = logging.getLogger(__name__)


class NodeRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    content: Any = None
    level: int = Field(ge=0)
    embedding: List[float]
    neighbors: List[List[int]]

    @model_validator(mode="after")
    def neighbors_match_level(self) -> "NodeRecord":
        if len(self.neighbors) != self.level + 1:
            raise ValueError(
                f"node {self.id} has level {self.level} but "
                f"{len(self.neighbors)} neighbor lists"
            )
        for layer, layer_neighbors in enumerate(self.neighbors):
            if self.id in layer_neighbors:
                raise ValueError(f"node {self.id} lists itself as a neighbor at layer {layer}")
            if len(set(layer_neighbors)) != len(layer_neighbors):
                raise ValueError(f"node {self.id} has repeated neighbors at layer {layer}")
        return self


class IndexSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    M: int = Field(ge=2)
    ef_construction: int = Field(alias="efConstruction", ge=1)
    level_max: int = Field(alias="levelMax", ge=0)
    entry_point_id: int = Field(alias="entryPointId")
    metric: SimilarityMetric = SimilarityMetric.COSINE
    dimension: Optional[int] = Field(default=None, ge=1)
    nodes: List[Tuple[int, NodeRecord]]

    @model_validator(mode="after")
    def keys_match_records(self) -> "IndexSnapshot":
        seen = set()
        for key, record in self.nodes:
            if key != record.id:
                raise ValueError(f"node key {key} does not match record id {record.id}")
            if key in seen:
                raise ValueError(f"node key {key} appears more than once")
            seen.add(key)

            for layer, layer_neighbors in enumerate(record.neighbors):
                if len(layer_neighbors) > self.M:
                    raise ValueError(
                        f"node {key} has {len(layer_neighbors)} neighbors at layer "
                        f"{layer}, more than M={self.M}"
                    )
        return self


def validate_snapshot(
    data: Any,
) -> Tuple[bool, Union[IndexSnapshot, DeserializationError]]:
    """
    Validate a raw snapshot document.

    Args:
        data: Decoded snapshot (usually a dict loaded from JSON)

    Returns:
        (True, IndexSnapshot) when the document is well formed, otherwise
        (False, DeserializationError) describing every problem found
    """
    try:
        snapshot = IndexSnapshot.model_validate(data)
    except ValidationError as exc:
        errors = exc.errors()
        logger.warning("Rejected index snapshot: %d validation error(s)", len(errors))
        return False, DeserializationError(
            f"Invalid index snapshot: {exc.error_count()} validation error(s)",
            details=errors,
        )

    return True, snapshot
