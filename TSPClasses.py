#!/usr/bin/python3

import math
import numpy as np
from typing import List


class TSPError(Exception):
    pass


class InvalidProblem(TSPError):
    pass


class NoFeasibleSolution(TSPError):
    pass


class TSPSolution:
    def __init__(self, listOfCities):
        self.route = listOfCities
        self.cost = self._costOfRoute()

    # Time Complexity: O(n)
    #   - One costTo() lookup per edge of the tour, including the closing edge
    #
    # Space Complexity: O(1)
    def _costOfRoute(self):
        cost = 0
        last = self.route[0]
        for city in self.route[1:]:
            cost += last.costTo(city)
            last = city
        cost += self.route[-1].costTo(self.route[0])
        return cost

    def indices(self) -> List[int]:
        return [city._index for city in self.route]

    def enumerateEdges(self):
        elist = []
        c1 = self.route[0]
        for c2 in self.route[1:]:
            elist.append((c1, c2, c1.costTo(c2)))
            c1 = c2
        elist.append((self.route[-1], self.route[0], self.route[-1].costTo(self.route[0])))
        return elist

    def __repr__(self):
        return 'TSPSolution(route={}, cost={})'.format(self.indices(), self.cost)


class City:
    def __init__(self, x, y, elevation=0.0):
        self._x = x
        self._y = y
        self._elevation = elevation
        self._scenario = None
        self._index = -1

    def setIndexAndScenario(self, index, scenario):
        self._index = index
        self._scenario = scenario

    ''' <summary>
        How much does it cost to get from this city to the destination?
        Returns math.inf when the scenario has no edge between the two cities.
        </summary>
    '''

    def costTo(self, other_city):
        if not isinstance(other_city, City):
            raise TypeError('costTo expects a City, got {}'.format(type(other_city).__name__))
        return self._scenario.cost(self._index, other_city._index)

    def __repr__(self):
        return 'City({}, x={}, y={})'.format(self._index, self._x, self._y)


class Scenario:
    """A read-only cost model over a fixed list of cities.

    Costs come either from the city positions (Euclidean distance, optionally
    penalizing climbs in elevation) or from an explicit matrix. Missing edges
    cost ``math.inf``; the diagonal is always ``math.inf``.
    """

    def __init__(self, cities: List[City], edge_exists=None, elevation_penalty=False, scale=1.0):
        if len(cities) < 2:
            raise InvalidProblem('a tour needs at least 2 cities, got {}'.format(len(cities)))

        self._cities = list(cities)
        self._elevation_penalty = elevation_penalty
        self._scale = scale
        self._costs = None

        ncities = len(self._cities)
        if edge_exists is None:
            self._edge_exists = np.ones((ncities, ncities), dtype=bool)
        else:
            self._edge_exists = np.array(edge_exists, dtype=bool)
            if self._edge_exists.shape != (ncities, ncities):
                raise InvalidProblem('edge mask has shape {}, expected {}'.format(
                    self._edge_exists.shape, (ncities, ncities)))
        np.fill_diagonal(self._edge_exists, False)

        for city in self._cities:
            if city._scenario is not None:
                raise InvalidProblem('{!r} already belongs to another scenario'.format(city))
        for index, city in enumerate(self._cities):
            city.setIndexAndScenario(index, self)

    @classmethod
    def fromCostMatrix(cls, matrix, cities: List[City] = None):
        """Build a scenario from an explicit (possibly asymmetric) cost matrix.

        ``None`` and ``inf`` entries mean there is no edge. Diagonal entries are
        ignored. Cities are placed at the origin unless given.
        """
        rows = [[math.inf if value is None else value for value in row] for row in matrix]
        try:
            costs = np.array(rows, dtype=float)
        except ValueError as e:
            raise InvalidProblem('cost matrix is not numeric or not rectangular: {}'.format(e)) from e

        if costs.ndim != 2 or costs.shape[0] != costs.shape[1]:
            raise InvalidProblem('cost matrix must be square, got shape {}'.format(costs.shape))

        ncities = costs.shape[0]
        np.fill_diagonal(costs, math.inf)
        if np.isnan(costs).any():
            raise InvalidProblem('cost matrix contains NaN')
        if (costs < 0).any():
            raise InvalidProblem('cost matrix contains negative costs')

        if cities is None:
            cities = [City(0.0, 0.0) for _ in range(ncities)]
        elif len(cities) != ncities:
            raise InvalidProblem('{} cities given for a {}x{} matrix'.format(len(cities), ncities, ncities))

        scenario = cls(cities, edge_exists=np.isfinite(costs))
        scenario._costs = costs
        return scenario

    def getCities(self) -> List[City]:
        return self._cities

    def size(self):
        return len(self._cities)

    def removeEdge(self, i, j):
        self._edge_exists[i, j] = False
        if self._costs is not None:
            self._costs[i, j] = math.inf

    def edgeExists(self, i, j):
        return bool(self._edge_exists[i, j])

    def cost(self, i, j):
        if not self._edge_exists[i, j]:
            return math.inf
        if self._costs is not None:
            return float(self._costs[i, j])

        src = self._cities[i]
        dest = self._cities[j]
        cost = math.sqrt((dest._x - src._x) ** 2 + (dest._y - src._y) ** 2)
        if self._elevation_penalty:
            cost += (dest._elevation - src._elevation)
            if cost < 0.0:
                cost = 0.0
        return cost * self._scale
