# phasorsense/algorithms/phasor.py
"""
Phasor transforms for excitation-emission maps.

A phasor is the intensity-weighted average of unit-circle points, one point per
sample of the selected window. The angle of each point is ``2π`` times the
harmonic-weighted, normalized axis position of the sample.

All functions work on plain arrays so they can be reused outside of
``PhasorAssay``. Windows are given in axis units and resolved to indices with
the same nearest-value search the spectra use for their cross-sections.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np

from .units import find_index_for

Phasor = Tuple[float, float]


def _weighted_average(window: np.ndarray, angles: np.ndarray) -> Phasor:
    # total == 0 gives nan coordinates on purpose; callers check finiteness
    total = np.sum(window)
    real_part = np.sum(window * np.cos(angles))
    imaginary_part = np.sum(window * np.sin(angles))
    with np.errstate(divide="ignore", invalid="ignore"):
        g = np.float64(real_part) / np.float64(total)
        s = np.float64(imaginary_part) / np.float64(total)
    return float(g), float(s)


def _ordered_window(lower: float, upper: float, axis: np.ndarray) -> Tuple[int, int, int, int]:
    min_index = find_index_for(lower, axis)
    max_index = find_index_for(upper, axis)
    return min_index, max_index, min(min_index, max_index), max(min_index, max_index)


def multispectral_phasor(
    intensities,
    excitation_axis: Sequence[float],
    emission_axis: Sequence[float],
    excitation_bounds: Tuple[float, float],
    emission_bounds: Tuple[float, float],
    harmonic: Tuple[int, int],
) -> Phasor:
    """
    Two-dimensional phasor of an excitation-emission map.

    Args:
        intensities: ``[n_excitation, n_emission]`` intensity grid.
        excitation_axis: Excitation values, one per grid row.
        emission_axis: Emission values, one per grid column.
        excitation_bounds: ``(minimum, maximum)`` of the excitation window.
        emission_bounds: ``(minimum, maximum)`` of the emission window.
        harmonic: ``(n, m)`` multipliers for the excitation and emission axes.

    Returns:
        ``(G, S)``. Both axes share one normalization scale built from the
        combined extremes of the two windows. The upper index of each window is
        excluded.
    """
    grid = np.asarray(intensities, dtype=float)
    ex_axis = np.asarray(excitation_axis, dtype=float)
    em_axis = np.asarray(emission_axis, dtype=float)
    n, m = harmonic

    _, _, ex_from, ex_to = _ordered_window(excitation_bounds[0], excitation_bounds[1], ex_axis)
    _, _, em_from, em_to = _ordered_window(emission_bounds[0], emission_bounds[1], em_axis)

    global_min = min(excitation_bounds[0], emission_bounds[0])
    global_max = max(excitation_bounds[1], emission_bounds[1])
    with np.errstate(divide="ignore", invalid="ignore"):
        span = np.float64(global_max) - np.float64(global_min)
        lx = (ex_axis[ex_from:ex_to] - global_min) / span
        lm = (em_axis[em_from:em_to] - global_min) / span

    angles = 2 * np.pi * (lx[:, np.newaxis] * n + lm[np.newaxis, :] * m)
    window = grid[ex_from:ex_to, em_from:em_to]
    return _weighted_average(window, angles)


def single_axis_phasor(
    profile,
    axis: Sequence[float],
    bounds: Tuple[float, float],
    harmonic: int,
) -> Phasor:
    """
    One-dimensional phasor of a spectral profile.

    The window is normalized locally, from the sample nearest to the lower
    bound (0) to the sample nearest to the upper bound (1).
    """
    values = np.asarray(profile, dtype=float)
    x = np.asarray(axis, dtype=float)
    min_index, max_index, start, stop = _ordered_window(bounds[0], bounds[1], x)
    with np.errstate(divide="ignore", invalid="ignore"):
        span = x[max_index] - x[min_index]
        positions = (x[start:stop] - x[min_index]) / span
    angles = 2 * np.pi * positions * harmonic
    return _weighted_average(values[start:stop], angles)


def phasor_to_polar(g: float, s: float) -> Tuple[float, float]:
    """
    Modulus and angle of a phasor.

    The angle lies in ``[0, 2π)``; the origin (and any non-finite input) has
    an undefined angle, reported as nan.
    """
    rho = math.sqrt(g * g + s * s)
    if g > 0 and s >= 0:
        theta = math.atan(s / g)
    elif g == 0 and s > 0:
        theta = math.pi / 2
    elif g < 0:
        theta = math.atan(s / g) + math.pi
    elif g == 0 and s < 0:
        theta = 3 * math.pi / 2
    elif g > 0 and s < 0:
        theta = math.atan(s / g) + 2 * math.pi
    else:
        theta = math.nan
    return rho, theta


def is_finite_phasor(phasor: Optional[Sequence[float]]) -> bool:
    """True when a phasor exists and both coordinates are finite."""
    if phasor is None:
        return False
    return bool(np.all(np.isfinite(np.asarray(phasor, dtype=float))))


__all__ = [
    "Phasor",
    "multispectral_phasor",
    "single_axis_phasor",
    "phasor_to_polar",
    "is_finite_phasor",
]
