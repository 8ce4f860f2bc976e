# test_matcher.py
import numpy as np
import pytest

from rigidicp import (DegenerateInputError, ShapeMismatchError, apply_transformation,
                      get_centroid, rmse, solve_for_optimal_rotation,
                      solve_for_optimal_translation)


# -----------------------
# Helpers
# -----------------------
def set_seed(seed=0):
    np.random.seed(seed)


def random_rotation(seed=None, dim=3):
    """Generate a random proper rotation (det=+1)."""
    if seed is not None:
        set_seed(seed)
    A = np.random.randn(dim, dim)
    Q, _ = np.linalg.qr(A)
    if np.linalg.det(Q) < 0:
        Q[:, -1] *= -1
    return Q


# -----------------------
# get_centroid() tests
# -----------------------
@pytest.mark.parametrize("seed", [0, 1, 2])
def test_centroid_is_column_mean(seed):
    set_seed(seed)
    P = np.random.randn(50, 3) * 10
    c = get_centroid(P)
    assert c.shape == (3, 1)
    assert np.allclose(c[:, 0], P.mean(axis=0))


def test_centroid_2d_square():
    square = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)
    assert np.allclose(get_centroid(square), [[0.5], [0.5]])


def test_centroid_empty_raises():
    with pytest.raises(DegenerateInputError):
        get_centroid(np.zeros((0, 2)))
    with pytest.raises(DegenerateInputError):
        get_centroid(np.array([1.0, 2.0]))


# -----------------------
# solve_for_optimal_rotation() tests
# -----------------------
@pytest.mark.parametrize("seed", [3, 4, 5, 6])
def test_rotation_is_proper(seed):
    set_seed(seed)
    A = np.random.randn(20, 3)
    B = np.random.randn(20, 3)
    R = solve_for_optimal_rotation(A, B)
    assert R.shape == (3, 3)
    assert np.isclose(np.linalg.det(R), 1.0, atol=1e-7)
    assert np.allclose(R.T @ R, np.eye(3), atol=1e-7)


def test_rotation_is_proper_for_reflected_data():
    set_seed(7)
    A = np.random.randn(40, 3)
    B = A @ np.diag([-1.0, 1.0, 1.0])
    R = solve_for_optimal_rotation(A, B)
    assert np.isclose(np.linalg.det(R), 1.0, atol=1e-7)
    assert np.allclose(R.T @ R, np.eye(3), atol=1e-7)


def test_rotation_shape_mismatch_raises():
    with pytest.raises(ShapeMismatchError):
        solve_for_optimal_rotation(np.zeros((4, 2)), np.zeros((5, 2)))


# -----------------------
# exact recovery
# -----------------------
@pytest.mark.parametrize("dim", [2, 3])
def test_exact_recovery(dim):
    set_seed(8)
    target = np.random.randn(30, dim)
    R0 = random_rotation(seed=9, dim=dim)
    t0 = np.array([0.5, -1.2, 2.0])[:dim]
    reference = target @ R0.T + t0

    R = solve_for_optimal_rotation(reference, target)
    t = solve_for_optimal_translation(reference, target, R)

    assert np.allclose(R, R0, atol=1e-8)
    assert t.shape == (dim, 1)
    assert np.allclose(t[:, 0], t0, atol=1e-8)

    aligned = apply_transformation(reference, -t, R)
    assert np.allclose(aligned, target, atol=1e-8)
    assert rmse(target, aligned) < 1e-8


def test_translation_only():
    set_seed(10)
    target = np.random.randn(25, 3)
    reference = target + np.array([1.0, 2.0, -3.0])
    R = solve_for_optimal_rotation(reference, target)
    t = solve_for_optimal_translation(reference, target, R)
    assert np.allclose(R, np.eye(3), atol=1e-8)
    assert np.allclose(t, [[1.0], [2.0], [-3.0]], atol=1e-8)


def test_translation_rejects_bad_rotation_shape():
    with pytest.raises(ShapeMismatchError):
        solve_for_optimal_translation(np.ones((3, 2)), np.ones((3, 2)), np.eye(3))


# -----------------------
# rmse() tests
# -----------------------
def test_rmse_is_sum_of_row_norms():
    a = np.zeros((2, 2))
    b = np.array([[3.0, 4.0], [6.0, 8.0]])
    assert rmse(a, b) == pytest.approx(15.0)
    assert rmse(b, a) == pytest.approx(15.0)


def test_rmse_zero_for_identical():
    set_seed(11)
    P = np.random.randn(10, 3)
    assert rmse(P, P.copy()) == 0.0


def test_rmse_size_mismatch_raises():
    with pytest.raises(ShapeMismatchError):
        rmse(np.zeros((4, 2)), np.zeros((3, 2)))
    # still a ValueError for callers that catch the builtin
    with pytest.raises(ValueError):
        rmse(np.zeros((4, 3)), np.zeros((4, 2)))


# -----------------------
# apply_transformation() tests
# -----------------------
def test_translation_broadcast_forms_agree():
    set_seed(12)
    data = np.random.randn(7, 3)
    values = np.array([1.0, 2.0, 3.0])
    R = random_rotation(seed=13)

    as_column = apply_transformation(data, values.reshape(3, 1), R)
    as_row = apply_transformation(data, values.reshape(1, 3), R)
    as_flat = apply_transformation(data, values, R)

    assert np.allclose(as_column, as_row)
    assert np.allclose(as_column, as_flat)
    assert np.allclose(as_column, (data + values) @ R)


def test_full_translation_matrix_added_directly():
    set_seed(14)
    data = np.random.randn(5, 2)
    offsets = np.random.randn(5, 2)
    out = apply_transformation(data, offsets, np.eye(2))
    assert np.allclose(out, data + offsets)


@pytest.mark.parametrize("translation", [np.zeros((2, 2)), np.zeros((4, 1)), np.zeros((1, 2))])
def test_bad_translation_shape_raises(translation):
    with pytest.raises(ShapeMismatchError):
        apply_transformation(np.zeros((5, 3)), translation, np.eye(3))


def test_bad_rotation_shape_raises():
    with pytest.raises(ShapeMismatchError):
        apply_transformation(np.zeros((5, 3)), np.zeros(3), np.eye(2))
