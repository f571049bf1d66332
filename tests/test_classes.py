import math

import numpy as np
import pytest

from TSPClasses import City, InvalidProblem, NoFeasibleSolution, Scenario, TSPError, TSPSolution


def test_euclidean_costs(unitSquare):
    cities = unitSquare.getCities()
    assert cities[0].costTo(cities[1]) == 1.0
    assert cities[0].costTo(cities[2]) == pytest.approx(math.sqrt(2))
    assert cities[0].costTo(cities[0]) == math.inf


def test_cities_are_indexed_in_order(unitSquare):
    assert [city._index for city in unitSquare.getCities()] == [0, 1, 2, 3]


def test_elevation_penalty_is_directed_and_clamped():
    scenario = Scenario([City(0, 0, 0.0), City(3, 4, 2.0), City(1, 0, 5.0)], elevation_penalty=True)
    assert scenario.cost(0, 1) == pytest.approx(7.0)
    assert scenario.cost(1, 0) == pytest.approx(3.0)
    assert scenario.cost(2, 0) == 0.0


def test_scale():
    scenario = Scenario([City(0, 0), City(0, 2)], scale=1000.0)
    assert scenario.cost(0, 1) == 2000.0


def test_edge_mask_and_remove_edge():
    mask = np.ones((3, 3), dtype=bool)
    mask[0, 2] = False
    scenario = Scenario([City(0, 0), City(0, 1), City(1, 1)], edge_exists=mask)
    assert scenario.cost(0, 2) == math.inf
    assert scenario.cost(2, 0) < math.inf

    scenario.removeEdge(2, 0)
    assert not scenario.edgeExists(2, 0)
    assert scenario.cost(2, 0) == math.inf


def test_from_cost_matrix(threeCities):
    assert threeCities.size() == 3
    assert threeCities.cost(0, 1) == 3.0
    assert threeCities.cost(1, 0) == 2.0
    assert threeCities.cost(1, 1) == math.inf

    threeCities.removeEdge(0, 1)
    assert threeCities.cost(0, 1) == math.inf


def test_from_cost_matrix_ignores_diagonal():
    scenario = Scenario.fromCostMatrix([[7, 1], [1, 7]])
    assert scenario.cost(0, 0) == math.inf


@pytest.mark.parametrize('matrix', [
    [[None, 1, 2], [1, None, 2]],
    [[None, -1], [1, None]],
    [[None, float('nan')], [1, None]],
    [[None, 1], [1]],
    [[None, 'a'], [1, None]],
])
def test_bad_matrices(matrix):
    with pytest.raises(InvalidProblem):
        Scenario.fromCostMatrix(matrix)


@pytest.mark.parametrize('ncities', [0, 1])
def test_too_few_cities(ncities):
    with pytest.raises(InvalidProblem):
        Scenario([City(i, i) for i in range(ncities)])


def test_bad_edge_mask_shape():
    with pytest.raises(InvalidProblem):
        Scenario([City(0, 0), City(1, 1)], edge_exists=np.ones((3, 3), dtype=bool))


def test_errors_share_a_base():
    assert issubclass(InvalidProblem, TSPError)
    assert issubclass(NoFeasibleSolution, TSPError)


def test_solution_cost_and_edges(threeCities):
    cities = threeCities.getCities()
    solution = TSPSolution([cities[0], cities[2], cities[1]])
    assert solution.cost == 9.0
    assert solution.indices() == [0, 2, 1]
    assert [(a._index, b._index, c) for a, b, c in solution.enumerateEdges()] == [(0, 2, 1.0), (2, 1, 6.0), (1, 0, 2.0)]


def test_solution_with_missing_edge_costs_inf(noWayIntoTwo):
    cities = noWayIntoTwo.getCities()
    assert TSPSolution(cities).cost == math.inf


def test_cities_cannot_join_a_second_scenario():
    cities = [City(0, 0), City(0, 1), City(1, 1), City(1, 0)]
    first = Scenario(cities)
    tour = TSPSolution(first.getCities())
    with pytest.raises(InvalidProblem):
        Scenario(cities, scale=1000.0)
    assert TSPSolution(tour.route).cost == 4.0


def test_cost_to_rejects_non_cities(unitSquare):
    with pytest.raises(TypeError):
        unitSquare.getCities()[0].costTo(1)
