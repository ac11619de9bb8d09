"""
Tests for HNSW graph data structures.

These tests verify the graph container and node structures work correctly:
- Node creation and neighbor management
- Graph initialization and node registration
- Edge creation and bidirectional connections
- Entry point and dimension tracking
"""

import numpy as np
import pytest
from hnswstore.errors import DimensionMismatchError, DuplicateIdError
from hnswstore.hnsw.distance import SimilarityMetric, euclidean_similarity
from hnswstore.hnsw.graph import HNSWNode, HNSWGraph, NO_ENTRY_POINT


def test_create_node():
    """Create a basic HNSW node"""
    vector = [1.0, 2.0, 3.0]
    node = HNSWNode(node_id=42, embedding=vector, level=2, content="hello")

    assert node.id == 42
    assert node.embedding.dtype == np.float32
    assert np.allclose(node.embedding, vector)
    assert node.level == 2
    assert node.content == "hello"
    # One empty neighbor list per layer 0..2
    assert node.neighbors == [[], [], []]


def test_node_owns_a_copy_of_the_embedding():
    """Mutating the caller's array doesn't change the node"""
    vector = np.array([1.0, 2.0], dtype=np.float32)
    node = HNSWNode(node_id=1, embedding=vector, level=0)

    vector[0] = 99.0

    assert node.embedding[0] == 1.0


def test_add_neighbor_to_node():
    """Add neighbors to a node at different layers"""
    node = HNSWNode(node_id=1, embedding=[1.0, 2.0], level=2)

    node.add_neighbor(neighbor_id=10, layer=0)
    node.add_neighbor(neighbor_id=20, layer=0)
    node.add_neighbor(neighbor_id=30, layer=1)

    assert node.get_neighbors(layer=0) == [10, 20]
    assert node.get_neighbors(layer=1) == [30]
    assert node.get_neighbors(layer=2) == []


def test_node_prevents_duplicates_and_self_links():
    """Duplicate and self references are ignored"""
    node = HNSWNode(node_id=1, embedding=[1.0], level=1)

    assert node.add_neighbor(neighbor_id=10, layer=0)
    assert not node.add_neighbor(neighbor_id=10, layer=0)
    assert not node.add_neighbor(neighbor_id=1, layer=0)

    assert node.get_neighbors(layer=0) == [10]


def test_node_invalid_layer():
    """Adding neighbor at layer higher than node level should fail"""
    node = HNSWNode(node_id=1, embedding=[1.0], level=1)

    with pytest.raises(ValueError):
        node.add_neighbor(neighbor_id=10, layer=5)


def test_node_negative_level():
    with pytest.raises(ValueError):
        HNSWNode(node_id=1, embedding=[1.0], level=-1)


def test_get_neighbors_above_level():
    """Getting neighbors at layer > node level should return empty list"""
    node = HNSWNode(node_id=1, embedding=[1.0], level=1)

    assert node.get_neighbors(layer=5) == []


def test_create_empty_graph():
    """Initialize an empty HNSW graph"""
    graph = HNSWGraph(M=16, ef_construction=200)

    assert graph.M == 16
    assert graph.ef_construction == 200
    assert graph.dimension is None
    assert graph.metric == SimilarityMetric.COSINE
    assert graph.level_max == 7
    assert graph.size() == 0
    assert graph.entry_point_id == NO_ENTRY_POINT
    assert graph.get_entry_point() is None
    assert graph.get_max_level() == -1


def test_graph_metric_selects_similarity():
    graph = HNSWGraph(M=4, metric="euclidean")

    assert graph.metric == SimilarityMetric.EUCLIDEAN
    assert graph.similarity is euclidean_similarity


def test_add_node_sets_dimension_and_entry_point():
    """The first node fixes the dimension and becomes the entry point"""
    graph = HNSWGraph(M=4)
    node = HNSWNode(node_id=5, embedding=[1.0, 2.0, 3.0], level=2)

    graph.add_node(node)

    assert graph.dimension == 3
    assert graph.entry_point_id == 5
    assert graph.get_max_level() == 2
    assert graph.get_node(5) is node


def test_entry_point_not_moved_by_add_node():
    """Registering more nodes leaves the entry point alone"""
    graph = HNSWGraph(M=4)

    graph.add_node(HNSWNode(1, [1.0, 0.0], level=0))
    graph.add_node(HNSWNode(2, [0.0, 1.0], level=3))

    assert graph.entry_point_id == 1


def test_dimension_validation():
    """Adding vector with wrong dimension should fail and leave the graph unchanged"""
    graph = HNSWGraph(M=4, dimension=3)

    with pytest.raises(DimensionMismatchError) as exc_info:
        graph.add_node(HNSWNode(1, [1.0, 2.0], level=0))

    assert exc_info.value.expected == 3
    assert exc_info.value.actual == 2
    assert graph.size() == 0


def test_duplicate_id_rejected():
    graph = HNSWGraph(M=4)
    graph.add_node(HNSWNode(1, [1.0, 2.0], level=0))

    with pytest.raises(DuplicateIdError):
        graph.add_node(HNSWNode(1, [3.0, 4.0], level=0))

    assert np.allclose(graph.get_node(1).embedding, [1.0, 2.0])


def test_add_edge_bidirectional():
    """Adding an edge should create bidirectional connection"""
    graph = HNSWGraph(M=4)
    graph.add_node(HNSWNode(1, [1.0, 0.0], level=1))
    graph.add_node(HNSWNode(2, [0.0, 1.0], level=1))

    graph.add_edge(1, 2, layer=0)

    assert 2 in graph.get_node(1).get_neighbors(0)
    assert 1 in graph.get_node(2).get_neighbors(0)
    assert graph.get_node(1).get_neighbors(1) == []


def test_add_edge_invalid_node():
    """Adding edge with non-existent node should raise error"""
    graph = HNSWGraph(M=4)
    graph.add_node(HNSWNode(1, [1.0, 0.0], level=1))

    with pytest.raises(ValueError):
        graph.add_edge(1, 999, layer=0)


def test_get_nonexistent_node():
    """Getting a node that doesn't exist should return None"""
    graph = HNSWGraph(M=4)

    assert graph.get_node(999) is None


def test_reset_keeps_parameters():
    """reset() drops nodes but keeps M and the fixed dimension"""
    graph = HNSWGraph(M=4)
    graph.add_node(HNSWNode(1, [1.0, 0.0], level=0))

    graph.reset()

    assert graph.size() == 0
    assert graph.entry_point_id == NO_ENTRY_POINT
    assert graph.dimension == 2
    assert graph.M == 4
