"""
Tests for the ranked frontier used during query expansion.
"""

import pytest
from hnswstore.hnsw.frontier import RankedFrontier


def test_pops_highest_score_first():
    """Items come out in descending score order"""
    scores = {"a": 0.1, "b": 0.9, "c": 0.5}
    frontier = RankedFrontier(scores.get)

    for item in ["a", "b", "c"]:
        frontier.push(item)

    assert [frontier.pop(), frontier.pop(), frontier.pop()] == ["b", "c", "a"]
    assert frontier.is_empty()


def test_ties_keep_insertion_order():
    """Equal scores pop in the order they were pushed"""
    frontier = RankedFrontier(lambda item: 1.0)

    for item in [3, 1, 2]:
        frontier.push(item)

    assert [frontier.pop(), frontier.pop(), frontier.pop()] == [3, 1, 2]


def test_duplicates_are_kept():
    """The frontier doesn't deduplicate"""
    frontier = RankedFrontier(lambda item: float(item))

    frontier.push(7)
    frontier.push(7)

    assert len(frontier) == 2
    assert frontier.pop() == 7
    assert frontier.pop() == 7


def test_pop_empty_raises():
    """Popping an empty frontier signals empty with IndexError"""
    frontier = RankedFrontier(lambda item: 0.0)

    assert frontier.is_empty()
    with pytest.raises(IndexError):
        frontier.pop()
