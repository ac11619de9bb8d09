"""Build and query timings for HNSWIndex over a grid of dataset shapes.

For every combination of dataset size, dimension, k and metric this script
builds an index from random vectors, times the build and a single query, and
optionally writes the serialized index to disk for inspection.

Usage:
    python examples/benchmark.py
    python examples/benchmark.py --dump-dir ./snapshots
"""

import argparse
import json
import time
from itertools import product
from pathlib import Path
from typing import List, Optional

import numpy as np

from hnswstore import HNSWIndex


def generate_items(n_vectors: int, dim: int, rng: np.random.Generator) -> List[dict]:
    """Random items with ids starting at 1."""
    vectors = rng.random((n_vectors, dim)).astype(np.float32)
    return [{"id": i + 1, "embedding": vectors[i]} for i in range(n_vectors)]


def run_benchmarks(
    data_sizes: List[int],
    dimensions: List[int],
    k_values: List[int],
    metrics: List[str],
    dump_dir: Optional[Path] = None,
    seed: int = 42,
) -> None:
    rng = np.random.default_rng(seed)

    for n_vectors, dim, k, metric in product(data_sizes, dimensions, k_values, metrics):
        print(f"\nsize={n_vectors}, dimension={dim}, k={k}, metric={metric}")

        items = generate_items(n_vectors, dim, rng)
        index = HNSWIndex(metric=metric, seed=seed)

        start = time.perf_counter()
        index.build_index(items)
        build_ms = (time.perf_counter() - start) * 1000

        if dump_dir is not None:
            dump_dir.mkdir(parents=True, exist_ok=True)
            path = dump_dir / f"hnsw_index_{n_vectors}_{dim}_{k}_{metric}.json"
            path.write_text(json.dumps(index.serialize(), indent=2))
            print(f"  Snapshot written to {path}")

        query = rng.random(dim).astype(np.float32)

        start = time.perf_counter()
        results = index.query(query, k)
        query_ms = (time.perf_counter() - start) * 1000

        stats = index.get_statistics()
        print(f"  Build: {build_ms:.1f} ms  Query: {query_ms:.3f} ms")
        print(f"  Max level: {stats['max_level']}  Nodes per level: {stats['nodes_per_level']}")
        for rank, hit in enumerate(results, 1):
            print(f"    {rank}. id={hit.id} score={hit.score:.4f}")


def main():
    parser = argparse.ArgumentParser(description="HNSWIndex build/query timings")
    parser.add_argument("--sizes", type=int, nargs="+", default=[100, 1000])
    parser.add_argument("--dims", type=int, nargs="+", default=[32, 128])
    parser.add_argument("--k", type=int, nargs="+", default=[5, 10])
    parser.add_argument("--metrics", nargs="+", default=["cosine", "euclidean"])
    parser.add_argument("--dump-dir", type=Path, default=None)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    print("=" * 60)
    print("HNSWIndex benchmark")
    print("=" * 60)

    run_benchmarks(args.sizes, args.dims, args.k, args.metrics, args.dump_dir, args.seed)


if __name__ == "__main__":
    main()
