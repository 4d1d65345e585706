import numpy as np


class Array:
    """Fixed-capacity buffer backed by a numpy array.

    The array never resizes itself. Callers decide when to resize and do it in
    two steps: `reallocate` builds the new storage without touching this
    array, `adopt` swaps it in. This lets several arrays be resized together
    with nothing committed until every allocation has succeeded.
    """

    def __init__(self, size, dtype=object):
        self.dtype = np.dtype(dtype)
        self.elements = self._allocate(size)
        self.size = size

    def _allocate(self, size):
        if self.dtype == object:
            # np.empty on object dtype fills with None
            return np.empty(size, dtype=object)
        return np.zeros(size, dtype=self.dtype)

    def get(self, i):
        return self.elements[i]

    def set(self, i, data):
        self.elements[i] = data

    def swap(self, a, b):
        self.elements[a], self.elements[b] = self.elements[b], self.elements[a]

    def release(self, start, stop=None):
        """Drop whatever is held in slots [start, stop)."""
        if stop is None:
            stop = start + 1
        if self.dtype == object:
            self.elements[start:stop] = None
        else:
            self.elements[start:stop] = 0

    def reallocate(self, new_size, n_live):
        """Return new storage of `new_size` slots holding the first `n_live` elements."""
        new_elements = self._allocate(new_size)
        new_elements[:n_live] = self.elements[:n_live]
        return new_elements

    def adopt(self, elements):
        self.elements = elements
        self.size = len(elements)

    def copy(self):
        clone = Array.__new__(Array)
        clone.dtype = self.dtype
        clone.elements = self.elements.copy()
        clone.size = self.size
        return clone

    def view(self, n_live):
        return self.elements[:n_live]
