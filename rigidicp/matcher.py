"""Closed-form rigid fitting (Kabsch method) between corresponding point sets.

All functions take point sets as 2D arrays with one point per row.
"""

import numpy as np

from .errors import DegenerateInputError, ShapeMismatchError


def _as_points(points, name="points"):
    points = np.asarray(points, dtype=float)
    if points.ndim != 2:
        raise DegenerateInputError(f"{name} must be a 2D array (one point per row), got shape {points.shape}")
    if points.shape[0] == 0:
        raise DegenerateInputError(f"{name} has no points")
    return points


def _check_pair(ref, target):
    ref = _as_points(ref, "ref")
    target = _as_points(target, "target")
    if ref.shape != target.shape:
        raise ShapeMismatchError(f"Point sets differ in shape: {ref.shape} vs {target.shape}")
    return ref, target


def get_centroid(points):
    """
    Compute the centroid of a point set.

    Args:
        points: Array of shape (N, D)

    Returns:
        Column vector of shape (D, 1) holding the mean of each column
    """
    points = _as_points(points)
    return np.mean(points, axis=0).reshape(-1, 1)


def solve_for_optimal_rotation(ref, target):
    """
    Solve for the rotation that maps ``ref`` onto the orientation of ``target``.

    Both sets are centered on their centroids and the rotation is read off the
    singular value decomposition of the covariance ``target_c.T @ ref_c``.
    Right-multiplying the centered reference by the result lines it up with
    the centered target.

    Args:
        ref: Reference points (N, D)
        target: Corresponding target points (N, D)

    Returns:
        Rotation matrix (D, D) with determinant +1
    """
    ref, target = _check_pair(ref, target)

    # Center the points
    ref_centered = ref - get_centroid(ref).T
    target_centered = target - get_centroid(target).T

    H = target_centered.T @ ref_centered
    U, S, Vt = np.linalg.svd(H)

    R = Vt.T @ U.T

    # Handle reflection case
    if np.linalg.det(R) < 0:
        R[-1, :] *= -1

    return R


def solve_for_optimal_translation(ref, target, rotation):
    """
    Solve for the translation that goes with ``rotation``.

    Args:
        ref: Reference points (N, D)
        target: Corresponding target points (N, D)
        rotation: Rotation from solve_for_optimal_rotation (D, D)

    Returns:
        Column vector (D, 1): centroid(ref) - rotation @ centroid(target)
    """
    ref, target = _check_pair(ref, target)
    rotation = np.asarray(rotation, dtype=float)
    dim = ref.shape[1]
    if rotation.shape != (dim, dim):
        raise ShapeMismatchError(f"Rotation must be {dim}x{dim}, got {rotation.shape}")

    return -rotation @ get_centroid(target) + get_centroid(ref)


def rmse(data_one, data_two):
    """
    Registration error between two point sets.

    Note this is the sum of the per-row Euclidean residual norms, not a
    root-mean-square.

    Raises:
        ShapeMismatchError: if the two sets differ in size or shape
    """
    data_one = np.asarray(data_one, dtype=float)
    data_two = np.asarray(data_two, dtype=float)
    if data_one.size != data_two.size:
        raise ShapeMismatchError(
            f"Matrix size mismatch: {data_one.size} vs {data_two.size} elements")
    if data_one.shape != data_two.shape:
        raise ShapeMismatchError(f"Matrix shape mismatch: {data_one.shape} vs {data_two.shape}")

    squares = (data_one - data_two) ** 2
    if squares.ndim < 2:
        squares = squares.reshape(1, -1)
    return float(np.sum(np.sqrt(np.sum(squares, axis=1))))


def _broadcast_translation(translation, shape):
    rows, cols = shape
    if translation.shape == shape:
        return translation
    if translation.ndim not in (1, 2):
        raise ShapeMismatchError(f"Cannot broadcast translation of shape {translation.shape} over {shape}")
    if translation.ndim == 1 or translation.shape[0] == 1:
        # row vector
        values = translation.ravel()
    elif translation.shape[1] == 1:
        # column vector
        values = translation[:, 0]
    else:
        raise ShapeMismatchError(f"Cannot broadcast translation of shape {translation.shape} over {shape}")

    if values.shape[0] != cols:
        raise ShapeMismatchError(
            f"Translation has {values.shape[0]} values but points have {cols} coordinates")
    return np.tile(values, (rows, 1))


def apply_transformation(data, translation, rotation):
    """
    Translate then rotate a point set: ``(data + translation) @ rotation``.

    Args:
        data: Points (N, D)
        translation: Column vector (D, 1), row vector (1, D), flat (D,), or a
                     full (N, D) offset matrix
        rotation: Rotation matrix (D, D)

    Returns:
        Transformed points (N, D)
    """
    data = _as_points(data, "data")
    translation = np.asarray(translation, dtype=float)
    rotation = np.asarray(rotation, dtype=float)
    cols = data.shape[1]
    if rotation.shape != (cols, cols):
        raise ShapeMismatchError(f"Rotation must be {cols}x{cols}, got {rotation.shape}")

    return (data + _broadcast_translation(translation, data.shape)) @ rotation
