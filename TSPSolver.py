#!/usr/bin/python3

import logging
import math
import time
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
from TSPClasses import *
from State import *
from Frontier import Frontier

logger = logging.getLogger(__name__)

DEFAULT_TIME_ALLOWANCE = 60.0
MAX_RANDOM_ATTEMPTS = 100000


class SearchStatus(Enum):
    RUNNING = 'running'
    TIME_EXPIRED = 'time expired'
    FRONTIER_EMPTY = 'frontier empty'
    BOUND_EXCEEDS_BSSF = 'bound exceeds bssf'


def _deadline(startTime, time_allowance):
    if time_allowance is None:
        return math.inf
    return startTime + time_allowance


# Time Complexity: O(n^2)
#   - n-1 steps, each an O(n) scan of one row of the cost matrix
#
# Space Complexity: O(n)
#   - The route and the visited mask
def nearestNeighborTour(costs: np.ndarray, start=0) -> List[int]:
    ncities = costs.shape[0]
    route = [start]
    visited = np.zeros(ncities, dtype=bool)
    visited[start] = True
    src = start

    for _ in range(ncities - 1):
        candidates = np.where(visited, math.inf, costs[src])
        dest = int(np.argmin(candidates))  # first minimum, so ties go to the lowest index
        if candidates[dest] == math.inf:
            raise NoFeasibleSolution('no unvisited city is reachable from city {} (visited {} of {})'.format(
                src, len(route), ncities))
        visited[dest] = True
        route.append(dest)
        src = dest

    if costs[src, start] == math.inf:
        raise NoFeasibleSolution('no edge back from city {} to city {}'.format(src, start))
    return route


''' <summary>
    Rebuild a tour from the exitedTo array of a complete state. The chain of fixed
    edges does not have to begin at city 0, so every city is tried as the head of the
    chain until one of them reaches all n cities. The result is rotated to begin at
    city 0; the edge from the last city back to the first is implicit.
    </summary>
'''


# Time Complexity: O(n^2)
#   - Up to n candidate heads, each followed for up to n steps
#
# Space Complexity: O(n)
def routeFromExitedTo(exitedTo) -> List[int]:
    ncities = len(exitedTo)
    for first in range(ncities):
        route = [first]
        nxt = exitedTo[first]
        while nxt != NO_CITY and len(route) <= ncities:
            route.append(int(nxt))
            nxt = exitedTo[nxt]
        if len(route) == ncities:
            zero = route.index(0)
            return route[zero:] + route[:zero]
    raise ValueError('exitedTo does not chain all {} cities: {}'.format(ncities, list(exitedTo)))


class TSPSolver:
    def __init__(self, scenario: Optional[Scenario] = None):
        self._scenario = None
        if scenario is not None:
            self.setupWithScenario(scenario)

    def setupWithScenario(self, scenario):
        if scenario is None:
            raise InvalidProblem('no scenario given')
        if scenario.size() < 2:
            raise InvalidProblem('a tour needs at least 2 cities')
        self._scenario = scenario

    def _getCities(self) -> List[City]:
        if self._scenario is None:
            raise InvalidProblem('no scenario has been set up')
        return self._scenario.getCities()

    ''' <summary>
        This is the entry point for the default solver
        which just finds a valid random tour.  Note this could be used to find your
        initial BSSF.
        </summary>
        <returns>results dictionary that contains three ints: cost of solution,
        time spent to find solution, number of permutations tried during search, the
        solution found, and three null values for fields not used for this
        algorithm</returns>
    '''

    def defaultRandomTour(self, time_allowance=DEFAULT_TIME_ALLOWANCE, seed=None, max_attempts=None):
        results = {}
        cities = self._getCities()
        ncities = len(cities)
        rng = np.random.default_rng(seed)
        foundTour = False
        count = 0
        bssf = None
        start_time = time.time()
        deadline = _deadline(start_time, time_allowance)
        if max_attempts is None and deadline == math.inf:
            # no deadline: cap the attempts
            max_attempts = min(math.factorial(ncities - 1), MAX_RANDOM_ATTEMPTS)
        while not foundTour and (count == 0 or time.time() < deadline):
            if max_attempts is not None and count >= max_attempts:
                break
            # create a random permutation
            perm = rng.permutation(ncities)
            route = [cities[i] for i in perm]
            bssf = TSPSolution(route)
            count += 1
            if bssf.cost < math.inf:
                # Found a valid route
                foundTour = True
        end_time = time.time()
        results['cost'] = bssf.cost if foundTour else math.inf
        results['time'] = end_time - start_time
        results['count'] = count
        results['soln'] = bssf if foundTour else None
        results['max'] = None
        results['total'] = None
        results['pruned'] = None
        return results

    ''' <summary>
        This is the entry point for the greedy solver. It builds the initial BSSF for
        branch and bound: start at city 0, always travel to the nearest unvisited city,
        and close the tour back to city 0. With multistart every city is tried as the
        start and the cheapest tour is kept.
        </summary>
        <returns>results dictionary that contains three ints: cost of best solution,
        time spent to find best solution, total number of solutions found, the best
        solution found, and three null values for fields not used for this
        algorithm</returns>
        <exception>NoFeasibleSolution when no start city yields a complete tour</exception>
    '''

    # Time Complexity: O(n^2), or O(n^3) with multistart
    #   - createCostMatrix() is O(n^2)
    #   - nearestNeighborTour() is O(n^2) per start city
    #
    # Space Complexity: O(n^2)
    #   - The cost matrix; routes are O(n)
    def greedy(self, time_allowance=DEFAULT_TIME_ALLOWANCE, multistart=False):
        cities = self._getCities()
        results = {}
        count = 0
        bssf = None
        failure = None

        startTime = time.time()
        deadline = _deadline(startTime, time_allowance)
        costs = self.createCostMatrix()

        starts = range(len(cities)) if multistart else [0]
        for start in starts:
            try:
                route = nearestNeighborTour(costs, start)
            except NoFeasibleSolution as e:
                failure = e
                logger.debug('Greedy tour from city %d failed: %s', start, e)
            else:
                count += 1
                solution = TSPSolution([cities[i] for i in route])
                if bssf is None or solution.cost < bssf.cost:
                    bssf = solution
            if time.time() >= deadline:
                break

        if bssf is None:
            raise NoFeasibleSolution('greedy search found no tour: {}'.format(failure))

        endTime = time.time()

        results['cost'] = bssf.cost
        results['time'] = endTime - startTime
        results['count'] = count
        results['soln'] = bssf
        results['max'] = None
        results['total'] = None
        results['pruned'] = None
        return results

    ''' <summary>
        Farthest insertion: begin with city 0 and the city farthest from it, then keep
        picking the outside city whose nearest tour city is farthest away and insert it
        into the tour edge (a, b) that minimizes c(a, k) + c(k, b) - c(a, b). Costs are
        directed, so the tour is never tried backwards.
        </summary>
        <returns>results dictionary laid out like greedy()</returns>
        <exception>NoFeasibleSolution when the finished tour uses a missing edge</exception>
    '''

    # Time Complexity: O(n^3)
    #   - n insertions, each scanning O(n^2) tour/outside pairs
    #
    # Space Complexity: O(n^2)
    def farthestInsertion(self, time_allowance=DEFAULT_TIME_ALLOWANCE):
        cities = self._getCities()
        ncities = len(cities)
        results = {}
        startTime = time.time()
        deadline = _deadline(startTime, time_allowance)
        costs = self.createCostMatrix()

        tour = [0]
        finite = np.where(np.isfinite(costs[0]), costs[0], -1.0)
        finite[0] = -math.inf
        tour.append(int(np.argmax(finite)))

        timedOut = False
        while len(tour) < ncities:
            if time.time() >= deadline:
                timedOut = True
                break
            outside = [k for k in range(ncities) if k not in tour]
            nearest = costs[np.ix_(tour, outside)].min(axis=0)
            k = outside[int(np.argmax(nearest))]

            following = tour[1:] + tour[:1]
            into = costs[tour, k]
            out = costs[k, following]
            replaced = costs[tour, following]
            with np.errstate(invalid='ignore'):
                growth = np.where(np.isinf(into) | np.isinf(out), math.inf, into + out - replaced)
            position = int(np.argmin(growth))
            tour.insert(position + 1, k)

        endTime = time.time()
        results['time'] = endTime - startTime
        results['count'] = 0
        results['max'] = None
        results['total'] = None
        results['pruned'] = None

        if timedOut:
            results['cost'] = math.inf
            results['soln'] = None
            return results

        solution = TSPSolution([cities[i] for i in tour])
        if solution.cost == math.inf:
            raise NoFeasibleSolution('farthest insertion tour {} uses a missing edge'.format(tour))
        results['cost'] = solution.cost
        results['count'] = 1
        results['soln'] = solution
        return results

    # Time Complexity: O(n^2)
    #   - 2 nested for loops (each O(n)) to populate cost matrix
    #   - All other operations (memory allocation, array access, etc.) are O(1)
    #
    # Space Complexity: O(n^2)
    #   - Creates an n x n cost matrix
    def createCostMatrix(self):
        cities = self._getCities()
        costs = np.empty((len(cities), len(cities)))

        for src in cities:
            for dest in cities:
                if src._index == dest._index:
                    costs[src._index, dest._index] = math.inf
                else:
                    costs[src._index, dest._index] = src.costTo(dest)

        return costs

    # Time Complexity: O(n^2)
    #   - createCostMatrix() and State.reduce() are both O(n^2)
    #
    # Space Complexity: O(n^2)
    def createInitialState(self) -> State:
        state = State(self.createCostMatrix())
        state.reduce()
        return state

    ''' <summary>
        If edge (i, j) was just added, delete the edges that would close the chain
        containing it into a cycle that misses some cities. The chain is followed
        forward from j to its end and backward from i to its start; the return edge
        from the end (and from j) to the start is removed unless the chain already
        holds n-1 edges and only needs closing.
        </summary>
    '''

    # Time Complexity: O(n)
    #   - Each walk follows at most n fixed edges
    #
    # Space Complexity: O(1)
    def preventPrematureCycles(self, state: State, i, j):
        end = j
        while state.exitedTo[end] != NO_CITY:
            end = state.exitedTo[end]

        start = i
        while state.enteredBy[start] != NO_CITY:
            start = state.enteredBy[start]

        if state.depth < state.size() - 1:
            state.costs[end, start] = math.inf
            state.costs[j, start] = math.inf

    # Time Complexity: O(n^2)
    #   - Two O(n^2) matrix copies and two O(n^2) reductions
    #
    # Space Complexity: O(n^2)
    def split(self, state: State, i, j) -> Tuple[State, State]:
        exclude = state.copy()
        exclude.costs[i, j] = math.inf
        exclude.reduce()

        include = state.copy()
        include.costs[i, :] = math.inf
        include.costs[:, j] = math.inf
        include.enteredBy[j] = i
        include.exitedTo[i] = j
        include.depth += 1
        self.preventPrematureCycles(include, i, j)
        include.reduce()

        return include, exclude

    ''' <summary>
        Choose the edge to branch on. Only the zero cells of the reduced matrix are
        candidates (usually about one per row). The edge that maximizes
        bound(exclude) - bound(include) wins; the first one found wins a tie.
        </summary>
        <returns>(include, exclude) children of the chosen edge, or None when the
        matrix has no zero cell and the state is a dead end</returns>
    '''

    # Time Complexity: O(n^3)
    #   - About n zero cells, each costing an O(n^2) split()
    #
    # Space Complexity: O(n^2)
    #   - Only the best pair of children is kept
    def expand(self, state: State) -> Optional[Tuple[State, State]]:
        best = None
        bestScore = -math.inf

        for i, j in np.argwhere(state.costs == 0):
            include, exclude = self.split(state, int(i), int(j))
            score = exclude.bound - include.bound
            if score > bestScore:
                best = (include, exclude)
                bestScore = score

        return best

    def _checkExit(self, frontier: Frontier, deadline, bssfCost):
        if frontier.isEmpty():
            return SearchStatus.FRONTIER_EMPTY
        if time.time() >= deadline:
            return SearchStatus.TIME_EXPIRED
        if frontier.peekMin().bound > bssfCost:
            return SearchStatus.BOUND_EXCEEDS_BSSF
        return SearchStatus.RUNNING

    ''' <summary>
        This is the entry point for the branch-and-bound algorithm. The greedy tour is
        the initial BSSF; states come off the frontier lowest bound first and are split
        on a single edge into an include child and an exclude child. Children whose
        bound cannot beat the BSSF are pruned without ever being queued. The search
        stops when the frontier is empty, the time allowance is spent, or the lowest
        bound left exceeds the BSSF.
        </summary>
        <returns>results dictionary that contains: cost of best solution, time spent,
        number of BSSF updates (count and updates), the best solution found, max queue
        size, total number of states created, number of pruned states, the status the
        search ended with, and the lowest bound left unresolved</returns>
    '''

    # Time Complexity: Worst case O(n^3 * 2^(n^2)), average case O(n^3 * b^n)
    #   - Let b be the average number of children queued per expansion (b <= 2)
    #   - Each expansion is O(n^3) (see expand())
    #   - Frontier operations are O(log n)
    #
    # Space Complexity: O(n^2 * b^n)
    #   - Every queued State holds an n x n matrix
    def branchAndBound(self, time_allowance=DEFAULT_TIME_ALLOWANCE):
        cities = self._getCities()
        ncities = len(cities)
        numSolutions = 0
        maxQueueSize = 1
        numStates = 1
        numPrunedStates = 0

        startTime = time.time()
        deadline = _deadline(startTime, time_allowance)
        logger.info('Branch and bound over %d cities, time allowance %s s', ncities, time_allowance)

        try:
            remaining = None if time_allowance is None else max(0.0, deadline - time.time())
            greedyResults = self.greedy(remaining)
            bssf = greedyResults['soln']
            bssfCost = greedyResults['cost']
            logger.info('Greedy BSSF cost %s', bssfCost)
        except NoFeasibleSolution as e:
            logger.warning('No greedy tour to start from (%s); searching without a BSSF', e)
            bssf = None
            bssfCost = math.inf

        frontier = Frontier()
        frontier.insert(self.createInitialState())

        status = SearchStatus.RUNNING
        while True:
            status = self._checkExit(frontier, deadline, bssfCost)
            if status is not SearchStatus.RUNNING:
                break

            state: State = frontier.extractMin()

            if state.isComplete():
                # a missing closing edge never made it into the bound
                solution = TSPSolution([cities[i] for i in routeFromExitedTo(state.exitedTo)])
                if solution.cost < bssfCost:
                    numSolutions += 1
                    bssf = solution
                    bssfCost = solution.cost
                    logger.info('New BSSF cost %s after %d states', bssfCost, numStates)
                else:
                    numPrunedStates += 1
                continue

            children = self.expand(state)
            if children is None:
                logger.debug('Dead end at depth %d, bound %s', state.depth, state.bound)
                numPrunedStates += 1
                continue

            numStates += len(children)
            for child in children:
                if child.bound < bssfCost:
                    frontier.insert(child)
                else:
                    numPrunedStates += 1

            if frontier.size() > maxQueueSize:
                maxQueueSize = frontier.size()

        if status is SearchStatus.TIME_EXPIRED:
            lowestBound = min(frontier.peekMin().bound, bssfCost)
        else:
            lowestBound = bssfCost
        numPrunedStates += frontier.drain()

        endTime = time.time()
        logger.info('Branch and bound finished (%s): cost %s, %d states, %d pruned, max queue %d, %d BSSF updates',
                    status.value, bssfCost, numStates, numPrunedStates, maxQueueSize, numSolutions)

        results = {}
        results['cost'] = bssfCost
        results['time'] = endTime - startTime
        results['count'] = numSolutions
        results['soln'] = bssf
        results['max'] = maxQueueSize
        results['total'] = numStates
        results['pruned'] = numPrunedStates
        results['status'] = status
        results['bound'] = lowestBound
        results['updates'] = numSolutions
        return results

    def solve(self, time_allowance=DEFAULT_TIME_ALLOWANCE):
        results = self.branchAndBound(time_allowance)
        if results['soln'] is None:
            raise NoFeasibleSolution('branch and bound ended ({}) without a tour'.format(results['status'].value))
        return results
