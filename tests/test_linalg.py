"""Unit tests for the dense linear-algebra helpers."""

from __future__ import annotations

import numpy as np
import pytest

from domain.ratings.linalg import (
    multiply,
    multiply_vector,
    solve,
    solve_least_squares,
    solve_system,
    transpose,
)


def test_transpose_swaps_rows_and_columns() -> None:
    result = transpose([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    assert result.shape == (3, 2)
    assert result.tolist() == [[1.0, 4.0], [2.0, 5.0], [3.0, 6.0]]


def test_multiply_matches_hand_computed_product() -> None:
    result = multiply([[1.0, 2.0], [3.0, 4.0]], [[5.0, 6.0], [7.0, 8.0]])
    assert result.tolist() == [[19.0, 22.0], [43.0, 50.0]]


def test_multiply_rejects_incompatible_shapes() -> None:
    with pytest.raises(ValueError, match="cannot multiply"):
        multiply([[1.0, 2.0]], [[1.0, 2.0]])


def test_multiply_vector() -> None:
    result = multiply_vector([[1.0, 2.0], [3.0, 4.0]], [1.0, 1.0])
    assert result.tolist() == [3.0, 7.0]


def test_multiply_vector_rejects_length_mismatch() -> None:
    with pytest.raises(ValueError, match="cannot multiply"):
        multiply_vector([[1.0, 2.0]], [1.0, 2.0, 3.0])


def test_solve_two_by_two_system() -> None:
    x = solve([[2.0, 1.0], [1.0, 3.0]], [3.0, 5.0])
    assert x[0] == pytest.approx(0.8)
    assert x[1] == pytest.approx(1.4)


def test_solve_swaps_rows_when_leading_entry_is_zero() -> None:
    solution = solve_system([[0.0, 1.0], [1.0, 0.0]], [2.0, 3.0])
    assert solution.values.tolist() == pytest.approx([3.0, 2.0])
    assert solution.regularized_pivots == 0


def test_solve_matches_numpy_for_well_conditioned_system() -> None:
    rng = np.random.default_rng(7)
    matrix = rng.normal(size=(6, 6)) + 6.0 * np.eye(6)
    vector = rng.normal(size=6)

    x = solve(matrix, vector)

    assert x == pytest.approx(np.linalg.solve(matrix, vector), abs=1e-9)


def test_singular_system_is_regularized_instead_of_failing() -> None:
    solution = solve_system([[1.0, 1.0], [1.0, 1.0]], [2.0, 2.0])

    assert solution.pivot_count == 2
    assert solution.regularized_pivots == 1
    assert np.all(np.isfinite(solution.values))
    assert solution.values.sum() == pytest.approx(2.0)


def test_custom_regularization_threshold_is_respected() -> None:
    solution = solve_system([[1e-4, 0.0], [0.0, 1.0]], [1e-4, 1.0], pivot_tolerance=1e-3)
    assert solution.regularized_pivots == 1


def test_solve_rejects_empty_matrix() -> None:
    with pytest.raises(ValueError):
        solve([], [])
    with pytest.raises(ValueError, match="empty"):
        solve(np.zeros((0, 0)), np.zeros(0))


def test_solve_rejects_non_square_matrix() -> None:
    with pytest.raises(ValueError, match="square"):
        solve([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]], [1.0, 2.0])


def test_solve_rejects_vector_length_mismatch() -> None:
    with pytest.raises(ValueError, match="does not match"):
        solve([[1.0, 0.0], [0.0, 1.0]], [1.0, 2.0, 3.0])


def test_least_squares_agrees_with_numpy_lstsq() -> None:
    design = np.array(
        [
            [1.0, 1.0, 0.0],
            [0.0, 1.0, 1.0],
            [1.0, 0.0, 1.0],
            [1.0, 1.0, 1.0],
            [2.0, 0.0, 1.0],
        ]
    )
    observations = np.array([3.0, 5.0, 4.5, 6.2, 5.1])

    solution = solve_least_squares(design, observations)
    expected, *_ = np.linalg.lstsq(design, observations, rcond=None)

    assert solution.values == pytest.approx(expected, abs=1e-9)
    assert solution.regularized_pivots == 0


def test_least_squares_rejects_row_mismatch() -> None:
    with pytest.raises(ValueError, match="rows"):
        solve_least_squares([[1.0, 0.0], [0.0, 1.0]], [1.0, 2.0, 3.0])
