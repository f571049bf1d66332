import heapq
import itertools
from State import *


# Min-priority queue of live states keyed on (bound, insertion sequence).
# Equal bounds come out in the order they went in.
#
# Time Complexity: insert() and extractMin() are O(log n), everything else O(1)
# Space Complexity: O(n) entries, each holding one O(n^2) State
class Frontier:
    def __init__(self):
        self._heap = []
        self._sequence = itertools.count()

    def insert(self, state: State):
        heapq.heappush(self._heap, (state.bound, next(self._sequence), state))

    def peekMin(self) -> State:
        if not self._heap:
            raise IndexError('peek at an empty frontier')
        return self._heap[0][2]

    def extractMin(self) -> State:
        if not self._heap:
            raise IndexError('extract from an empty frontier')
        return heapq.heappop(self._heap)[2]

    def isEmpty(self):
        return not self._heap

    def size(self):
        return len(self._heap)

    def drain(self):
        count = len(self._heap)
        self._heap.clear()
        return count

    def __len__(self):
        return len(self._heap)
