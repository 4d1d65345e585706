import operator
from typing import Any, Callable, Optional

import numpy as np

from array_ import Array
from errors import (
    CapacityExhaustionError,
    ConfigurationError,
    EmptyContainerError,
    IdSpaceExhaustionError,
)

DEFAULT_INITIAL_CAPACITY = 30
DEFAULT_STEP_SIZE = 10
# Ids are assigned in order of insertion and used to break priority ties.
MAX_ID = int(np.iinfo(np.uint64).max)
MIN_PRIORITY = int(np.iinfo(np.int64).min)
MAX_PRIORITY = int(np.iinfo(np.int64).max)


class PriorityQueue:
    """
    A dynamically resized max-priority queue.

    Nodes live in three parallel arrays (items, priorities, insertion ids)
    laid out as a binary heap. The highest priority wins; among equal
    priorities the earliest insertion wins.

    Capacity grows by `step_size` when an insert finds the queue full, and
    shrinks by `step_size` after a removal once the queue is more than two
    steps below capacity, never under `initial_capacity`.

    Removal is two calls, as with the standard library heap wrappers:

        if not queue.empty():
            item = queue.top()
            queue.pop()
    """

    def __init__(self, initial_capacity=DEFAULT_INITIAL_CAPACITY, step_size=DEFAULT_STEP_SIZE, *,
                 max_id: int = MAX_ID, debug_hook: Optional[Callable[[str], Any]] = None):
        try:
            initial_capacity = operator.index(initial_capacity)
            step_size = operator.index(step_size)
            max_id = operator.index(max_id)
        except TypeError as e:
            raise ConfigurationError(f"PriorityQueue parameters must be integers: {e}") from e

        if not 0 < max_id <= MAX_ID:
            raise ConfigurationError(f"max_id must be in (0, {MAX_ID}], got {max_id}")
        if initial_capacity < 0:
            raise ConfigurationError(f"initial_capacity must be >= 0, got {initial_capacity}")
        # A zero step never grows; a huge one overflows the id space on the first resize.
        if step_size <= 0 or step_size > max_id - initial_capacity:
            raise ConfigurationError(f"Invalid step_size {step_size} for initial_capacity {initial_capacity}")

        self._initial_capacity = initial_capacity
        self._step_size = step_size
        self._step_size_2x = 2 * step_size
        self._max_id = max_id
        self._debug_hook = debug_hook

        try:
            self._items = Array(initial_capacity, dtype=object)
            self._priorities = Array(initial_capacity, dtype=np.int64)
            self._ids = Array(initial_capacity, dtype=np.uint64)
        except (MemoryError, ValueError, OverflowError) as e:
            raise CapacityExhaustionError(f"Cannot allocate {initial_capacity} slots") from e

        self._capacity = initial_capacity
        self._size = 0
        self._next_id = 0
        self._num_resizes = 0

        self._debug(f"PriorityQueue created with capacity {initial_capacity} and stepSize {step_size}")

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def insert(self, item, priority) -> None:
        """
        Insert `item` with integer `priority`.

        Grows the backing arrays by `step_size` first if the queue is full.
        Raises TypeError for a non-integral priority and OverflowError for one
        outside the signed 64-bit range; the queue is unchanged in both cases.
        """
        priority = operator.index(priority)
        if not MIN_PRIORITY <= priority <= MAX_PRIORITY:
            raise OverflowError(f"priority {priority} does not fit in a signed 64-bit integer")

        self._check_id_overflow()

        if self._size == self._capacity:
            self._resize(self._capacity + self._step_size)

        i = self._size
        self._create_node(i, item, priority, self._next_id)
        self._next_id += 1
        self._size += 1
        self._sift_up(i)

    def top(self):
        """Return the item with the highest priority without removing it."""
        if self._size == 0:
            raise EmptyContainerError("top() called on an empty PriorityQueue")
        return self._items.get(0)

    def top_priority(self) -> int:
        """Return the priority of `top()`. Raises EmptyContainerError when empty, as `top` does."""
        if self._size == 0:
            raise EmptyContainerError("top_priority() called on an empty PriorityQueue")
        return int(self._priorities.get(0))

    def pop(self) -> None:
        """
        Remove the item with the highest priority. Does nothing when empty.

        Read it with `top()` first if you need it.
        """
        if self._size == 0:
            return

        # Swap the root with the last node so removal never shifts the array.
        last = self._size - 1
        self._swap_nodes(0, last)
        self._destroy_node(last)
        self._size -= 1

        self._check_capacity()
        self._sift_down(0)

    def empty(self) -> bool:
        return self._size == 0

    def size(self) -> int:
        return self._size

    def capacity(self) -> int:
        return self._capacity

    def num_resizes(self) -> int:
        return self._num_resizes

    def clear(self) -> None:
        """Remove all items and shrink back to `initial_capacity`.

        Insertion ids keep counting, so FIFO ordering holds across a clear.
        """
        self._destroy_all_nodes()
        self._size = 0
        self._resize(self._initial_capacity)

    def clone(self) -> "PriorityQueue":
        """Return an independent queue with the same configuration and contents."""
        clone = PriorityQueue.__new__(PriorityQueue)
        clone.__dict__.update(self.__dict__)
        clone._items = self._items.copy()
        clone._priorities = self._priorities.copy()
        clone._ids = self._ids.copy()
        return clone

    __copy__ = clone

    def is_heap(self) -> bool:
        for i in range(1, self._size):
            if self._greater_priority(i, self._parent_index(i)):
                return False
        return True

    def print_contents(self) -> None:
        self._debug("Array contents:")
        for i in range(self._size):
            self._debug(f"\t #{i}: {self._items.get(i)}/{self._priorities.get(i)}")

    def __len__(self):
        return self._size

    def __bool__(self):
        return self._size != 0

    def __repr__(self):
        return (f"PriorityQueue(size={self._size}, capacity={self._capacity}, "
                f"step_size={self._step_size}, num_resizes={self._num_resizes})")

    # ------------------------------------------------------------------
    # Node storage
    # ------------------------------------------------------------------

    def _buffers(self):
        return self._items, self._priorities, self._ids

    def _create_node(self, i, item, priority, id_):
        self._items.set(i, item)
        self._priorities.set(i, priority)
        self._ids.set(i, id_)

    def _destroy_node(self, i):
        for buffer in self._buffers():
            buffer.release(i)

    def _destroy_all_nodes(self):
        for buffer in self._buffers():
            buffer.release(0, self._size)

    def _swap_nodes(self, a, b):
        for buffer in self._buffers():
            buffer.swap(a, b)

    # ------------------------------------------------------------------
    # Resize policy
    # ------------------------------------------------------------------

    def _check_capacity(self):
        if self._capacity >= self._step_size_2x and self._size < self._capacity - self._step_size_2x:
            new_capacity = self._capacity - self._step_size
            if new_capacity >= self._initial_capacity:
                self._resize(new_capacity)

    def _resize(self, new_capacity):
        self._debug(f"RESIZING from {self._capacity} to {new_capacity} with {self._size} items.")

        # Allocate every new buffer before adopting any of them.
        try:
            new_buffers = [buffer.reallocate(new_capacity, self._size) for buffer in self._buffers()]
        except (MemoryError, ValueError, OverflowError) as e:
            raise CapacityExhaustionError(
                f"Cannot resize PriorityQueue from {self._capacity} to {new_capacity} slots") from e

        for buffer, elements in zip(self._buffers(), new_buffers):
            buffer.adopt(elements)
        self._capacity = new_capacity
        self._num_resizes += 1

    # ------------------------------------------------------------------
    # Insertion ids
    # ------------------------------------------------------------------

    def _check_id_overflow(self):
        # `next_id` only grows, but there are never more than `max_id` live
        # nodes, so live ids can be packed back into [0, size).
        if self._next_id < self._max_id:
            return
        if self._size >= self._max_id:
            raise IdSpaceExhaustionError(f"All {self._max_id} insertion ids are held by live nodes")
        self._consolidate_ids()

    def _consolidate_ids(self):
        """Renumber live ids to [0, size), keeping their relative order."""
        ids = self._ids.view(self._size)
        order = np.argsort(ids, kind="stable")
        new_ids = np.empty(self._size, dtype=np.uint64)
        new_ids[order] = np.arange(self._size, dtype=np.uint64)
        ids[:] = new_ids
        self._debug(f"Consolidated {self._size} ids; next id {self._size} (was {self._next_id})")
        self._next_id = self._size

    # ------------------------------------------------------------------
    # Heap order
    # ------------------------------------------------------------------

    def _greater_priority(self, a, b) -> bool:
        """True if node `a` comes before node `b`: higher priority, or equal and older."""
        pa = self._priorities.get(a)
        pb = self._priorities.get(b)
        return pa > pb or (pa == pb and self._ids.get(a) < self._ids.get(b))

    def _sift_up(self, i):
        parent = self._parent_index(i)
        while parent != i and self._greater_priority(i, parent):
            self._swap_nodes(parent, i)
            i = parent
            parent = self._parent_index(i)

    def _sift_down(self, i):
        while True:
            # Nodes without a child report their own index for it.
            left = self._left_index(i)
            right = self._right_index(i)

            # Assume `i` is correctly placed unless a child is strictly greater.
            dest = i
            if self._greater_priority(right, left):
                dest = right
            elif self._greater_priority(left, right):
                dest = left
            if dest != i and not self._greater_priority(dest, i):
                dest = i

            if dest == i:
                return
            self._swap_nodes(dest, i)
            i = dest

    @staticmethod
    def _parent_index(i):
        return (i - 1) // 2 if i > 0 else i

    def _left_index(self, i):
        idx = 2 * i + 1
        return idx if idx < self._size else i

    def _right_index(self, i):
        idx = 2 * i + 2
        return idx if idx < self._size else i

    def _debug(self, message):
        if self._debug_hook is not None:
            self._debug_hook(message)
