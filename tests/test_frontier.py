import numpy as np
import pytest

from Frontier import Frontier
from State import State


def makeState(bound, depth=0):
    return State(np.zeros((2, 2)), bound=bound, depth=depth)


def test_extracts_lowest_bound_first():
    frontier = Frontier()
    for bound in [5.0, 1.0, 3.0, 2.0]:
        frontier.insert(makeState(bound))
    assert frontier.size() == 4
    assert frontier.peekMin().bound == 1.0
    assert [frontier.extractMin().bound for _ in range(4)] == [1.0, 2.0, 3.0, 5.0]
    assert frontier.isEmpty()


def test_equal_bounds_leave_in_insertion_order():
    frontier = Frontier()
    states = [makeState(4.0, depth=d) for d in range(5)]
    for state in states:
        frontier.insert(state)
    assert [frontier.extractMin() for _ in range(5)] == states


def test_peek_does_not_remove():
    frontier = Frontier()
    state = makeState(1.0)
    frontier.insert(state)
    assert frontier.peekMin() is state
    assert len(frontier) == 1


def test_empty_frontier_raises():
    frontier = Frontier()
    with pytest.raises(IndexError):
        frontier.peekMin()
    with pytest.raises(IndexError):
        frontier.extractMin()


def test_drain_counts_and_empties():
    frontier = Frontier()
    for bound in range(3):
        frontier.insert(makeState(float(bound)))
    assert frontier.drain() == 3
    assert frontier.isEmpty()
    assert frontier.drain() == 0
