# phasorsense/algorithms/units.py
"""Spectral x-axis units and nearest-value lookups."""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, Sequence

import numpy as np


class XUnit(IntEnum):
    """The three axis unit systems a spectrum keeps in parallel."""

    WAVELENGTH_NM = 0
    WAVENUMBER_CM = 1
    WAVENUMBER_UM = 2

    @property
    def label(self) -> str:
        return X_UNIT_LABELS[self]

    @property
    def symbol(self) -> str:
        return "λ" if self is XUnit.WAVELENGTH_NM else "v"

    @property
    def suffix(self) -> str:
        return X_UNIT_SUFFIXES[self]

    @classmethod
    def parse(cls, value) -> "XUnit":
        """Accept an XUnit, its index, or a suffix such as ``"nm"`` / ``"1/cm"``."""
        if isinstance(value, XUnit):
            return value
        if isinstance(value, (int, np.integer)):
            return cls(int(value))
        text = str(value).strip().lower()
        for unit, suffix in X_UNIT_SUFFIXES.items():
            if text in (suffix.lower(), unit.name.lower()):
                return unit
        if text in ("1/um", "um-1"):
            return cls.WAVENUMBER_UM
        if text in ("cm-1",):
            return cls.WAVENUMBER_CM
        raise ValueError(f"Unknown x unit: {value!r}")


X_UNIT_LABELS = {
    XUnit.WAVELENGTH_NM: "λ (nm)",
    XUnit.WAVENUMBER_CM: "v (1/cm)",
    XUnit.WAVENUMBER_UM: "v (1/µm)",
}

X_UNIT_SUFFIXES = {
    XUnit.WAVELENGTH_NM: "nm",
    XUnit.WAVENUMBER_CM: "1/cm",
    XUnit.WAVENUMBER_UM: "1/µm",
}


def convert_values(values, source, target) -> np.ndarray:
    """
    Convert axis values between unit systems.

    Zero values are not trapped: they turn into ``inf`` (or ``nan``) in the
    reciprocal conversions and are returned as such.
    """
    source = XUnit.parse(source)
    target = XUnit.parse(target)
    data = np.asarray(values, dtype=float)
    if source is target:
        return data.copy()

    with np.errstate(divide="ignore", invalid="ignore"):
        if source is XUnit.WAVELENGTH_NM:
            if target is XUnit.WAVENUMBER_CM:
                return 1e7 / data
            return 1e3 / data
        if source is XUnit.WAVENUMBER_CM:
            if target is XUnit.WAVELENGTH_NM:
                return 1e7 / data
            return data / 1e4
        # source is 1/µm
        if target is XUnit.WAVELENGTH_NM:
            return 1e3 / data
        return data * 1e4


def convert_axis(values, source) -> Dict[XUnit, np.ndarray]:
    """Return the axis expressed in every unit system, keyed by XUnit."""
    source = XUnit.parse(source)
    return {unit: convert_values(values, source, unit) for unit in XUnit}


def find_index_for(value: float, data: Sequence[float]) -> int:
    """
    Index of the element of ``data`` closest to ``value``.

    Ties resolve to the lowest index. NaN entries never match, and an empty or
    all-NaN array yields 0.
    """
    arr = np.asarray(data, dtype=float)
    if arr.size == 0:
        return 0
    with np.errstate(invalid="ignore"):
        distance = np.abs(value - arr)
    if np.all(np.isnan(distance)):
        return 0
    return int(np.nanargmin(distance))


__all__ = [
    "XUnit",
    "X_UNIT_LABELS",
    "X_UNIT_SUFFIXES",
    "convert_values",
    "convert_axis",
    "find_index_for",
]
