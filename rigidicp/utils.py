"""General utility functions."""

import numpy as np

from .point import Point


def nearest_neighbor_search(query_point, candidates):
    """
    Brute-force nearest neighbor search.

    Scans every candidate in order; on equal distances the first one wins.

    Args:
        query_point: Point to find the nearest neighbor for
        candidates: Sequence of Point objects to search

    Returns:
        Tuple of (nearest_point, index, distance)
    """
    best = (None, -1, np.inf)

    for idx, candidate in enumerate(candidates):
        dist = query_point.distance_to(candidate)
        if dist < best[2]:
            best = (candidate, idx, dist)

    return best


def points_from_matrix(matrix):
    """Convert each row of a (N, D) matrix into a Point."""
    rows, cols = matrix.shape
    points = []
    for r in range(rows):
        p = Point()
        p.prepare(cols)
        for c in range(cols):
            p.set_value(matrix[r, c], c)
        points.append(p)
    return points
