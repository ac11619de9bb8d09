"""
Tests for HNSW insertion algorithm.

These tests verify that the builder correctly inserts nodes into the graph:
- First node insertion (special case)
- Greedy descent and symmetric linking
- Neighbor eviction when a list exceeds M
- Entry point promotion
"""

import numpy as np
import pytest
from hnswstore.errors import DimensionMismatchError, DuplicateIdError
from hnswstore.hnsw.graph import HNSWGraph
from hnswstore.hnsw.builder import HNSWBuilder
from conftest import FixedRandom


def unit(degrees: float) -> np.ndarray:
    """2D unit vector at the given angle."""
    radians = np.deg2rad(degrees)
    return np.array([np.cos(radians), np.sin(radians)], dtype=np.float32)


def test_insert_first_node():
    """Insert the first node into an empty graph"""
    graph = HNSWGraph(M=4)
    builder = HNSWBuilder(graph)

    builder.insert(0, np.array([1.0, 0.0, 0.0], dtype=np.float32), level=2)

    assert graph.size() == 1
    assert graph.entry_point_id == 0
    assert graph.get_max_level() == 2

    # First node has no neighbors
    node = graph.get_node(0)
    assert node.neighbors == [[], [], []]


def test_insert_two_nodes():
    """Insert two nodes and verify they connect on every shared layer"""
    graph = HNSWGraph(M=4)
    builder = HNSWBuilder(graph)

    builder.insert(0, np.array([1.0, 0.0], dtype=np.float32), level=1)
    builder.insert(1, np.array([0.9, 0.1], dtype=np.float32), level=1)

    node0 = graph.get_node(0)
    node1 = graph.get_node(1)

    assert node0.get_neighbors(0) == [1]
    assert node1.get_neighbors(0) == [0]
    assert node0.get_neighbors(1) == [1]
    assert node1.get_neighbors(1) == [0]


def test_link_only_up_to_common_level():
    """A level-0 node links to a level-2 node only on layer 0"""
    graph = HNSWGraph(M=4)
    builder = HNSWBuilder(graph)

    builder.insert(0, unit(0), level=2)
    builder.insert(1, unit(10), level=0)

    node0 = graph.get_node(0)
    assert node0.get_neighbors(0) == [1]
    assert node0.get_neighbors(1) == []
    assert node0.get_neighbors(2) == []
    assert graph.get_node(1).neighbors == [[0]]


def test_greedy_descent_moves_towards_target():
    """The new node links to the closest node reachable by the walk"""
    graph = HNSWGraph(M=4)
    builder = HNSWBuilder(graph)

    builder.insert(0, unit(0), level=0)
    builder.insert(1, unit(40), level=0)
    # Node 1 is closer to 45 degrees than the entry point, so the walk moves there
    builder.insert(2, unit(45), level=0)

    assert graph.get_node(2).get_neighbors(0) == [1]
    assert graph.get_node(1).get_neighbors(0) == [0, 2]
    assert graph.get_node(0).get_neighbors(0) == [1]


def test_greedy_descent_stops_without_improvement():
    """If no neighbor beats the entry point, the entry point is linked"""
    graph = HNSWGraph(M=4)
    builder = HNSWBuilder(graph)

    builder.insert(0, unit(0), level=0)
    builder.insert(1, unit(40), level=0)
    builder.insert(2, unit(-5), level=0)

    assert graph.get_node(2).get_neighbors(0) == [0]
    assert graph.get_node(0).get_neighbors(0) == [1, 2]


def test_eviction_drops_least_similar_neighbor():
    """An overflowing list loses the neighbor least similar to its owner"""
    graph = HNSWGraph(M=2)
    builder = HNSWBuilder(graph)

    builder.insert(0, unit(0), level=0)
    builder.insert(1, unit(10), level=0)
    builder.insert(2, unit(-20), level=0)
    builder.insert(3, unit(-3), level=0)

    hub = graph.get_node(0)
    assert hub.get_neighbors(0) == [1, 3], "Node 2 (20 degrees away) should be evicted"
    # The evicted node keeps its own link; only the overflowing list is trimmed
    assert graph.get_node(2).get_neighbors(0) == [0]


def test_neighbor_count_bound(sample_vectors):
    """After many insertions no list exceeds M"""
    M = 4
    graph = HNSWGraph(M=M)
    builder = HNSWBuilder(graph, rng=np.random.default_rng(3))

    for i, vec in enumerate(sample_vectors):
        builder.insert(i, vec)

    for node in graph.nodes.values():
        assert len(node.neighbors) == node.level + 1
        for layer_neighbors in node.neighbors:
            assert len(layer_neighbors) <= M
            assert node.id not in layer_neighbors
            assert len(set(layer_neighbors)) == len(layer_neighbors)


def test_entry_point_promoted_to_higher_level():
    """A node above the current top layer becomes the entry point"""
    graph = HNSWGraph(M=4)
    builder = HNSWBuilder(graph)

    builder.insert(0, unit(0), level=0)
    builder.insert(1, unit(30), level=0)
    assert graph.entry_point_id == 0

    builder.insert(2, unit(60), level=3)
    assert graph.entry_point_id == 2
    assert graph.get_max_level() == 3

    # Equal level doesn't promote
    builder.insert(3, unit(90), level=3)
    assert graph.entry_point_id == 2


def test_insert_samples_level_from_rng():
    """Without an explicit level, the random source decides"""
    graph = HNSWGraph(M=16)
    builder = HNSWBuilder(graph, rng=FixedRandom([0.95]))

    node = builder.insert(0, unit(0))

    assert node.level == 1


def test_insert_dimension_mismatch_leaves_graph_unchanged():
    graph = HNSWGraph(M=4)
    rng = FixedRandom([0.5])
    builder = HNSWBuilder(graph, rng=rng)
    builder.insert(0, np.array([1.0, 2.0, 3.0], dtype=np.float32))

    with pytest.raises(DimensionMismatchError):
        builder.insert(1, np.array([1.0, 2.0], dtype=np.float32))

    assert graph.size() == 1
    assert graph.get_node(0).neighbors == [[]]
    assert rng.calls == 1, "A rejected vector shouldn't consume a random draw"


def test_insert_duplicate_id():
    """A duplicate ID is rejected without touching the graph or the random source"""
    graph = HNSWGraph(M=4)
    rng = FixedRandom([0.5])
    builder = HNSWBuilder(graph, rng=rng)
    builder.insert(0, unit(0))
    assert rng.calls == 1

    with pytest.raises(DuplicateIdError):
        builder.insert(0, unit(10))

    assert rng.calls == 1, "A rejected duplicate shouldn't consume a random draw"

    assert graph.size() == 1
    assert graph.get_node(0).neighbors == [[]]
