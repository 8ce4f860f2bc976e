"""Minimal coordinate tuple used by the correspondence search."""

import numpy as np

from .errors import ShapeMismatchError


class Point:
    """A fixed-length point with elementwise subtraction and Euclidean distance."""

    def __init__(self, *coords):
        """
        Initialize a point.

        Args:
            *coords: Coordinates of the point. Usually 2 or 3 values; pass none
                     and call prepare() before writing values by position.
        """
        self.coords = [float(c) for c in coords]

    @classmethod
    def from_array(cls, row):
        """Build a point from a 1D array or sequence."""
        return cls(*np.asarray(row, dtype=float).ravel())

    def prepare(self, size):
        """
        Pre-fill the point with zeros so positional writes are valid.

        Args:
            size: Number of zeros to append
        """
        self.coords.extend([0.0] * int(size))

    def set_value(self, value, pos):
        if pos < 0 or pos >= len(self.coords):
            raise IndexError(f"Position {pos} out of range for point of size {len(self.coords)}")
        self.coords[pos] = float(value)

    def set_points(self, values, size=None):
        """
        Append values to this point.

        Args:
            values: Sequence of new coordinates
            size: Number of values to take from the front of ``values``
                  (default: all of them)
        """
        if size is None:
            size = len(values)
        for i in range(size):
            self.coords.append(float(values[i]))

    def size(self):
        return len(self.coords)

    def to_array(self):
        return np.array(self.coords)

    def distance_to(self, other):
        """Euclidean distance from this point to ``other``."""
        diff = self - other
        return float(np.sqrt(sum(d * d for d in diff.coords)))

    def __sub__(self, other):
        # Result takes the size of the subtrahend
        if self.size() < other.size():
            raise ShapeMismatchError(
                f"Cannot subtract a {other.size()}D point from a {self.size()}D point")
        result = Point()
        result.prepare(other.size())
        for i in range(other.size()):
            result[i] = self.coords[i] - other[i]
        return result

    def __getitem__(self, i):
        return self.coords[i]

    def __setitem__(self, i, value):
        self.set_value(value, i)

    def __len__(self):
        return len(self.coords)

    def __eq__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return self.coords == other.coords

    def __repr__(self):
        return f"Point({', '.join(repr(c) for c in self.coords)})"
