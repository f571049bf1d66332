import math
import numpy as np

NO_CITY = -1


# Time Complexity: O(n^2)
#   - costs.min(axis=1) visits every cell once
#   - Subtracting a row minimum is O(n) per row
#
# Space Complexity: O(n)
#   - One array of n row minimums
def reduceRows(state):
  rowMins = state.costs.min(axis=1)
  rowMins[rowMins == math.inf] = 0  # rows with no finite cell contribute nothing
  state.costs -= rowMins[:, np.newaxis]
  delta = float(rowMins.sum())
  state.bound += delta
  return delta


# Time Complexity: O(n^2)
# Space Complexity: O(n)
def reduceCols(state):
  colMins = state.costs.min(axis=0)
  colMins[colMins == math.inf] = 0
  state.costs -= colMins[np.newaxis, :]
  delta = float(colMins.sum())
  state.bound += delta
  return delta


# Space Complexity: O(n^2)
#   - Contains an n x n reduced cost matrix - O(n^2)
#   - Contains the enteredBy and exitedTo arrays of n city indices - O(n)
#   - Contains a bound and a depth (numbers) - O(1)
class State:
  def __init__(self, costs: np.ndarray, bound=0.0, enteredBy: np.ndarray = None, exitedTo: np.ndarray = None, depth=0):
    ncities = costs.shape[0]
    self.costs = costs
    self.bound = bound
    self.enteredBy = np.full(ncities, NO_CITY, dtype=int) if enteredBy is None else enteredBy
    self.exitedTo = np.full(ncities, NO_CITY, dtype=int) if exitedTo is None else exitedTo
    self.depth = depth

  # Time Complexity: O(n^2) to copy the cost matrix
  # Space Complexity: O(n^2)
  def copy(self):
    return State(self.costs.copy(), self.bound, self.enteredBy.copy(), self.exitedTo.copy(), self.depth)

  # Rows first, then columns. Returns the amount added to the bound.
  def reduce(self):
    return reduceRows(self) + reduceCols(self)

  def size(self):
    return self.costs.shape[0]

  def isComplete(self):
    return self.depth == self.size() - 1

  def fixedEdges(self):
    return [(i, int(j)) for i, j in enumerate(self.exitedTo) if j != NO_CITY]

  def __repr__(self):
    return 'State(bound={}, depth={}, edges={})'.format(self.bound, self.depth, self.fixedEdges())
