# phasorsense/algorithms/linear_system.py
"""Exact determinants and Cramer's rule for small square systems."""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

Matrix = List[List[float]]


def _as_rows(matrix) -> Matrix:
    rows = [[float(value) for value in row] for row in matrix]
    size = len(rows)
    if size == 0 or any(len(row) != size for row in rows):
        raise ValueError("Matrix must be square and non-empty.")
    return rows


def minor(matrix, row: int, column: int) -> Matrix:
    """Copy of ``matrix`` without the given row and column."""
    return [
        [value for j, value in enumerate(values) if j != column]
        for i, values in enumerate(matrix)
        if i != row
    ]


def _cofactor_expansion(rows: Matrix) -> float:
    if len(rows) == 1:
        return rows[0][0]
    result = 0.0
    sign = 1
    for j, value in enumerate(rows[0]):
        result += sign * value * _cofactor_expansion(minor(rows, 0, j))
        sign = -sign
    return result


def determinant(matrix) -> float:
    """
    Determinant by Laplace expansion along the first row.

    No pivoting is done, so the value is exactly the signed sum of products;
    the cost grows as ``n!`` and is only meant for the handful of components
    an unmixing system has.
    """
    return _cofactor_expansion(_as_rows(matrix))


def replace_column(matrix, column: int, values: Sequence[float]) -> Matrix:
    """Copy of ``matrix`` with ``column`` replaced by ``values``."""
    return [
        [values[i] if j == column else value for j, value in enumerate(row)]
        for i, row in enumerate(matrix)
    ]


def solve_cramer(matrix, rhs: Sequence[float]) -> Optional[np.ndarray]:
    """
    Solve ``matrix @ x = rhs`` with Cramer's rule.

    Returns:
        The solution vector, or None when the determinant is exactly zero.
    """
    rows = _as_rows(matrix)
    b = [float(value) for value in rhs]
    if len(b) != len(rows):
        raise ValueError("Right-hand side length must match the matrix size.")

    main_determinant = _cofactor_expansion(rows)
    if main_determinant == 0:
        return None

    solution = np.empty(len(rows), dtype=float)
    for i in range(len(rows)):
        solution[i] = _cofactor_expansion(replace_column(rows, i, b)) / main_determinant
    return solution


__all__ = [
    "minor",
    "determinant",
    "replace_column",
    "solve_cramer",
]
