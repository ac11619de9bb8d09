"""Configuration for HNSWStore indexes and stores.

Usage:
    from hnswstore import VectorStore, HNSWStoreConfig

    # Default config
    store = VectorStore.create("my-collection")

    # Custom config
    config = HNSWStoreConfig(metric="euclidean", cache_max_entries=500)
    store = VectorStore.create("my-collection", config=config)

    # From file
    config = HNSWStoreConfig.from_json("my_config.json")
"""

from typing import Dict, Any, Optional
import json
from dataclasses import dataclass, asdict

from hnswstore.hnsw.distance import SimilarityMetric


@dataclass
class HNSWStoreConfig:
    """Configuration for HNSWStore.

    HNSW defaults:
        default_M: Maximum neighbors per node per layer
        default_ef_construction: Construction-time search width (stored with the index)
        default_k: Number of results returned when a query omits k
        metric: "cosine" or "euclidean"
        seed: Seed for the level-sampling random source (None = nondeterministic)

    Result cache:
        enable_cache: Attach a QueryCache to stores built from this config
        cache_max_entries: Maximum cached query results
        cache_max_age: Seconds before a cached result expires
    """

    # HNSW defaults
    default_M: int = 16
    default_ef_construction: int = 200
    default_k: int = 3
    metric: str = SimilarityMetric.COSINE.value
    seed: Optional[int] = None

    # Result cache
    enable_cache: bool = True
    cache_max_entries: int = 100
    cache_max_age: float = 100.0

    # Metadata
    config_name: str = "default"

    def __post_init__(self):
        """Validate configuration."""
        if self.default_M < 2:
            raise ValueError("default_M must be >= 2")

        if self.default_ef_construction < 1:
            raise ValueError("default_ef_construction must be >= 1")

        if self.default_k < 1:
            raise ValueError("default_k must be >= 1")

        valid_metrics = [m.value for m in SimilarityMetric]
        if self.metric not in valid_metrics:
            raise ValueError(f"metric must be one of {valid_metrics}")

        if self.cache_max_entries < 1:
            raise ValueError("cache_max_entries must be >= 1")

        if self.cache_max_age <= 0.0:
            raise ValueError("cache_max_age must be positive")

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    def to_json(self, filepath: str) -> None:
        """Save configuration to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'HNSWStoreConfig':
        """Load configuration from dictionary."""
        return cls(**config_dict)

    @classmethod
    def from_json(cls, filepath: str) -> 'HNSWStoreConfig':
        """Load configuration from JSON file."""
        with open(filepath, 'r') as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)

    def __repr__(self) -> str:
        """String representation."""
        cache_str = (
            f"cache={self.cache_max_entries}/{self.cache_max_age}s"
            if self.enable_cache
            else "cache=off"
        )
        return (
            f"HNSWStoreConfig("
            f"{self.config_name}, "
            f"M={self.default_M}, "
            f"metric={self.metric}, "
            f"{cache_str})"
        )


# Preset configurations

def get_default_config() -> HNSWStoreConfig:
    """Default configuration (cosine similarity, cache enabled)."""
    return HNSWStoreConfig(config_name="default")


def get_euclidean_config() -> HNSWStoreConfig:
    """Configuration scoring with 1 / (1 + euclidean distance)."""
    return HNSWStoreConfig(
        config_name="euclidean",
        metric=SimilarityMetric.EUCLIDEAN.value,
    )
