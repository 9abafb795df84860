"""Dense linear-algebra helpers used by least-squares rating estimators."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

PIVOT_TOLERANCE = 1e-10
REGULARIZATION = 1e-6

MatrixLike = np.ndarray | Sequence[Sequence[float]]
VectorLike = np.ndarray | Sequence[float]


@dataclass(frozen=True)
class LinearSolution:
    """Solution vector plus how many pivots needed regularization."""

    values: np.ndarray
    pivot_count: int
    regularized_pivots: int


def _as_matrix(matrix: MatrixLike, *, name: str = "matrix") -> np.ndarray:
    array = np.asarray(matrix, dtype=float)
    if array.ndim != 2:
        raise ValueError(f"{name} must be two-dimensional, got shape {array.shape}")
    return array


def _as_vector(vector: VectorLike, *, name: str = "vector") -> np.ndarray:
    array = np.asarray(vector, dtype=float)
    if array.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional, got shape {array.shape}")
    return array


def transpose(matrix: MatrixLike) -> np.ndarray:
    return _as_matrix(matrix).T.copy()


def multiply(left: MatrixLike, right: MatrixLike) -> np.ndarray:
    """Matrix product with an explicit shape check."""
    a = _as_matrix(left, name="left")
    b = _as_matrix(right, name="right")
    if a.shape[1] != b.shape[0]:
        raise ValueError(f"cannot multiply {a.shape[0]}x{a.shape[1]} by {b.shape[0]}x{b.shape[1]}")
    return a @ b


def multiply_vector(matrix: MatrixLike, vector: VectorLike) -> np.ndarray:
    a = _as_matrix(matrix)
    v = _as_vector(vector)
    if a.shape[1] != v.shape[0]:
        raise ValueError(f"cannot multiply {a.shape[0]}x{a.shape[1]} matrix by vector of length {v.shape[0]}")
    return a @ v


def solve_system(
    matrix: MatrixLike,
    vector: VectorLike,
    *,
    pivot_tolerance: float = PIVOT_TOLERANCE,
    regularization: float = REGULARIZATION,
) -> LinearSolution:
    """Solve a square system by Gaussian elimination with partial pivoting.

    A pivot smaller than ``pivot_tolerance`` in absolute value gets
    ``regularization`` added to its diagonal entry instead of failing, so a
    structurally singular system still yields a usable (biased) answer.
    Raises ``ValueError`` only for empty, non-square or mismatched input.
    """
    a = _as_matrix(matrix)
    b = _as_vector(vector)
    n = a.shape[0]
    if n == 0 or a.shape[1] == 0:
        raise ValueError("cannot solve an empty system")
    if a.shape[1] != n:
        raise ValueError(f"matrix must be square, got {a.shape[0]}x{a.shape[1]}")
    if b.shape[0] != n:
        raise ValueError(f"vector length {b.shape[0]} does not match matrix size {n}")

    augmented = np.hstack([a, b.reshape(-1, 1)])
    regularized = 0

    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(augmented[col:, col])))
        if pivot_row != col:
            augmented[[col, pivot_row]] = augmented[[pivot_row, col]]

        if abs(augmented[col, col]) < pivot_tolerance:
            augmented[col, col] += regularization
            regularized += 1

        factors = augmented[col + 1 :, col] / augmented[col, col]
        augmented[col + 1 :, col:] -= np.outer(factors, augmented[col, col:])

    solution = np.zeros(n)
    for row in range(n - 1, -1, -1):
        residual = augmented[row, n] - augmented[row, row + 1 : n] @ solution[row + 1 :]
        solution[row] = residual / augmented[row, row]

    return LinearSolution(values=solution, pivot_count=n, regularized_pivots=regularized)


def solve(
    matrix: MatrixLike,
    vector: VectorLike,
    *,
    pivot_tolerance: float = PIVOT_TOLERANCE,
    regularization: float = REGULARIZATION,
) -> np.ndarray:
    """Return ``x`` with ``matrix @ x ~= vector``; see ``solve_system``."""
    return solve_system(
        matrix,
        vector,
        pivot_tolerance=pivot_tolerance,
        regularization=regularization,
    ).values


def solve_least_squares(
    design: MatrixLike,
    observations: VectorLike,
    *,
    pivot_tolerance: float = PIVOT_TOLERANCE,
    regularization: float = REGULARIZATION,
) -> LinearSolution:
    """Least-squares fit of ``design @ x ~= observations`` via the normal equations."""
    a = _as_matrix(design, name="design")
    b = _as_vector(observations, name="observations")
    if a.shape[0] != b.shape[0]:
        raise ValueError(f"design has {a.shape[0]} rows but observations has {b.shape[0]} entries")
    a_t = transpose(a)
    return solve_system(
        multiply(a_t, a),
        multiply_vector(a_t, b),
        pivot_tolerance=pivot_tolerance,
        regularization=regularization,
    )


__all__ = [
    "LinearSolution",
    "PIVOT_TOLERANCE",
    "REGULARIZATION",
    "multiply",
    "multiply_vector",
    "solve",
    "solve_least_squares",
    "solve_system",
    "transpose",
]
