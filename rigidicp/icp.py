"""Iterative Closest Point (ICP) algorithm implementation."""

import time

import numpy as np
from joblib import Parallel, delayed

from .errors import DegenerateInputError, InvalidConfigurationError, ShapeMismatchError
from .matcher import (apply_transformation, rmse, solve_for_optimal_rotation,
                      solve_for_optimal_translation)
from .utils import nearest_neighbor_search, points_from_matrix

POINT_TYPES = {'2d': 2, '3d': 3}
COMPOSITIONS = ('angle', 'matrix')


class ICPSettings:
    """Parameters for an ICP run."""

    def __init__(self, point_type='2d', max_iterations=10, composition='matrix',
                 n_jobs=1, verbose=False):
        """
        Args:
            point_type: '2d' or '3d'
            max_iterations: Number of rounds to run (there is no early exit)
            composition: How rotations are accumulated across rounds:
                         'matrix' (default) multiplies the full rotation matrices
                         and composes the translations, so the pair converges.
                         'angle' sums the in-plane angle of each round and
                         re-applies the accumulated pair to the already moved
                         points; it reproduces the legacy update, which
                         amplifies any translation offset every round.
            n_jobs: Worker processes for the correspondence search (1 = no workers)
            verbose: Print the error of every round
        """
        if not isinstance(point_type, str) or point_type.lower() not in POINT_TYPES:
            raise InvalidConfigurationError(f"Unknown point type: {point_type!r}")
        if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)) \
                or max_iterations <= 0:
            raise InvalidConfigurationError(
                f"max_iterations must be a positive integer, got {max_iterations!r}")
        if composition not in COMPOSITIONS:
            raise InvalidConfigurationError(f"Unknown composition: {composition!r}")
        if isinstance(n_jobs, bool) or not isinstance(n_jobs, (int, np.integer)) or n_jobs == 0:
            raise InvalidConfigurationError(f"n_jobs must be a non-zero integer, got {n_jobs!r}")

        self.point_type = point_type.lower()
        self.max_iterations = int(max_iterations)
        self.n_jobs = int(n_jobs)
        self.verbose = verbose
        self.composition = composition

    @property
    def dimension(self):
        return POINT_TYPES[self.point_type]

    def __repr__(self):
        return (f"ICPSettings(point_type={self.point_type!r}, max_iterations={self.max_iterations}, "
                f"composition={self.composition!r}, n_jobs={self.n_jobs}, verbose={self.verbose})")


def rotation_to_degrees(rotation):
    """In-plane angle of a rotation, read from its [1, 0] entry."""
    return np.arcsin(np.clip(rotation[1, 0], -1.0, 1.0)) * 180.0 / np.pi


def degrees_to_rotation(angle, size):
    """
    Build a rotation by ``angle`` degrees in the plane of the first two axes.

    For size 3 the remaining entries come from the identity, i.e. a rotation
    about the third axis.
    """
    theta = angle * np.pi / 180.0
    rot = np.eye(size)
    rot[0, 0] = np.cos(theta)
    rot[0, 1] = -np.sin(theta)
    rot[1, 0] = np.sin(theta)
    rot[1, 1] = np.cos(theta)
    return rot


class ICP:
    """
    Rigid registration of a reference point set onto a target point set.

    Both sets hold one point per row and must have the same number of points.
    After solve(), ``apply_transformation(reference, translation, rotation)``
    gives the aligned reference (default 'matrix' composition).
    """

    def __init__(self, reference, target, settings=None):
        """
        Initialize ICP registration.

        Args:
            reference: Points to move, array (N, D)
            target: Points to align onto, array (N, D)
            settings: ICPSettings (default: 2D, 10 iterations)
        """
        if settings is None:
            settings = ICPSettings()

        reference = np.array(reference, dtype=float)
        target = np.array(target, dtype=float)
        for name, points in (('reference', reference), ('target', target)):
            if points.ndim != 2:
                raise DegenerateInputError(
                    f"{name} must be a 2D array (one point per row), got shape {points.shape}")
            if points.shape[0] == 0:
                raise DegenerateInputError(f"{name} has no points")
            if not np.all(np.isfinite(points)):
                raise DegenerateInputError(f"{name} contains NaN or infinite coordinates")
        if reference.shape[0] != target.shape[0]:
            raise ShapeMismatchError(
                f"reference has {reference.shape[0]} points but target has {target.shape[0]}")
        if reference.shape[1] != target.shape[1]:
            raise ShapeMismatchError(
                f"reference is {reference.shape[1]}D but target is {target.shape[1]}D")
        if reference.shape[1] != settings.dimension:
            raise InvalidConfigurationError(
                f"Settings expect {settings.dimension}D points, data has {reference.shape[1]} columns")

        reference.setflags(write=False)
        target.setflags(write=False)
        self.reference = reference
        self.target = target
        self.settings = settings

        dim = settings.dimension
        self.current_reference = reference.copy()
        self.rotation = np.eye(dim)
        self.translation = np.zeros((dim, 1))
        self.correspondences = []
        self.errors = []
        self.history = []

    def solve(self):
        """
        Run all ICP rounds.

        Every call starts over from the original reference.

        Returns:
            Tuple of (rotation, translation, errors)
        """
        dim = self.settings.dimension
        verbose = self.settings.verbose

        self.current_reference = self.reference.copy()
        self.rotation = np.eye(dim)
        self.translation = np.zeros((dim, 1))
        self.errors = []
        self.history = []

        if verbose:
            print(f"\n{'='*70}")
            print(f"ICP - {self.settings.point_type.upper()}, {self.reference.shape[0]} points, "
                  f"{self.settings.max_iterations} iterations, {self.settings.composition} composition")
            print(f"{'─'*70}")

        total_start = time.time()
        for i in range(self.settings.max_iterations):
            iter_start = time.time()

            closest = self.match()

            new_rotation = solve_for_optimal_rotation(closest, self.target)
            new_translation = solve_for_optimal_translation(closest, self.target, new_rotation)

            if self.settings.composition == 'angle':
                angle = rotation_to_degrees(self.rotation) + rotation_to_degrees(new_rotation)
                self.rotation = degrees_to_rotation(angle, dim)
                self.translation = new_translation
                self.current_reference = apply_transformation(
                    self.current_reference, self.translation, self.rotation)
            else:
                self.current_reference = apply_transformation(
                    self.current_reference, -new_translation, new_rotation)
                self.translation = self.translation - self.rotation @ new_translation
                self.rotation = self.rotation @ new_rotation

            error = rmse(self.target, self.current_reference)
            self.errors.append(error)
            self.history.append((self.rotation.copy(), self.translation.copy()))

            if verbose:
                print(f"Iter {i:3d}: error={error:.6f} | total={time.time() - iter_start:.3f}s")

        if verbose:
            print(f"{'─'*70}")
            print(f"Total runtime:  {time.time() - total_start:.3f}s")
            print(f"Final error:    {self.errors[-1]:.6f}")
            print(f"{'='*70}\n")

        return self.rotation, self.translation, self.errors

    def match(self):
        """
        Pair every target point with its nearest point in the current reference.

        Returns:
            Matrix shaped like the target whose i-th row is the reference point
            closest to target row i
        """
        ref_points = points_from_matrix(self.current_reference)
        tar_points = points_from_matrix(self.target)

        results = self._find_correspondences(tar_points, ref_points)

        self.correspondences = [idx for _, idx, _ in results]
        return np.array([best.to_array() for best, _, _ in results])

    def get_best_rotation(self):
        """Accumulated rotation after solve()."""
        return self.rotation

    def get_best_translation(self):
        """Accumulated translation after solve(), a (D, 1) column vector."""
        return self.translation

    def aligned(self):
        """Current working copy of the reference."""
        return self.current_reference

    def _find_correspondences(self, tar_points, ref_points):
        """Find nearest neighbor correspondences, optionally in worker processes."""
        if self.settings.n_jobs == 1:
            return [nearest_neighbor_search(p, ref_points) for p in tar_points]

        return Parallel(n_jobs=self.settings.n_jobs, backend='loky')(
            delayed(nearest_neighbor_search)(p, ref_points)
            for p in tar_points
        )
