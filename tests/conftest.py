import itertools
import math

import numpy as np
import pytest

from TSPClasses import City, Scenario


def bruteForceOptimum(matrix):
    """Cheapest closed tour over an explicit matrix (None or inf means no edge)."""
    costs = np.array([[math.inf if v is None else v for v in row] for row in matrix], dtype=float)
    ncities = costs.shape[0]
    best = math.inf
    for perm in itertools.permutations(range(1, ncities)):
        tour = (0,) + perm
        cost = sum(costs[tour[k], tour[(k + 1) % ncities]] for k in range(ncities))
        best = min(best, cost)
    return best


def randomMatrix(ncities, seed, missing=0.0):
    rng = np.random.default_rng(seed)
    matrix = rng.integers(1, 50, size=(ncities, ncities)).astype(float).tolist()
    for i in range(ncities):
        for j in range(ncities):
            if i == j or rng.random() < missing:
                matrix[i][j] = None
    return matrix


@pytest.fixture
def unitSquare():
    return Scenario([City(0, 0), City(0, 1), City(1, 1), City(1, 0)])


@pytest.fixture
def threeCities():
    # optimum 0 -> 2 -> 1 -> 0 costs 1 + 6 + 2 = 9
    return Scenario.fromCostMatrix([
        [None, 3, 1],
        [2, None, 4],
        [5, 6, None],
    ])


@pytest.fixture
def noWayIntoTwo():
    return Scenario.fromCostMatrix([
        [None, 1, None, 3],
        [2, None, None, 4],
        [5, 1, None, 2],
        [1, 6, None, None],
    ])
