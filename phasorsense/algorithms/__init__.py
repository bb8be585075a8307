"""Numeric building blocks: axis units, phasor transforms and exact linear solves."""

from .linear_system import determinant, minor, replace_column, solve_cramer
from .phasor import (
    is_finite_phasor,
    multispectral_phasor,
    phasor_to_polar,
    single_axis_phasor,
)
from .units import XUnit, convert_axis, convert_values, find_index_for

__all__ = [
    "XUnit",
    "convert_axis",
    "convert_values",
    "find_index_for",
    "multispectral_phasor",
    "single_axis_phasor",
    "phasor_to_polar",
    "is_finite_phasor",
    "determinant",
    "minor",
    "replace_column",
    "solve_cramer",
]
