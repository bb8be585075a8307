# phasorsense/core/equations.py
"""
Rows of an unmixing system.

A coordinate equation states that the G (or S) coordinate of a spectrum at one
harmonic is the fraction-weighted sum of the reference coordinates at that
harmonic. The unity equation states that the fractions add up to one.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Sequence, Tuple, Union

from .harmonics import HarmonicSlot


class CoordinateAxis(IntEnum):
    G = 0
    S = 1

    @property
    def label(self) -> str:
        return f"{self.name} coordinates"


class CoordinateEquation:
    """``Σ f_i · ref_i[axis] = phasor[axis]`` at the harmonic of ``slot``."""

    kind = "coordinate"

    def __init__(self, axis, slot, coefficients: Sequence[float]):
        self.axis = CoordinateAxis(axis)
        self.slot = HarmonicSlot(slot)
        self.coefficients: Tuple[float, ...] = tuple(float(c) for c in coefficients)

    @property
    def key(self):
        return self.kind, int(self.axis), int(self.slot)

    def display_name(self) -> str:
        return f"{self.axis.label} at {self.slot.label}"

    def __eq__(self, other):
        if not isinstance(other, CoordinateEquation):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

    def __repr__(self):
        return f"CoordinateEquation(axis={self.axis.name}, slot={self.slot.name}, coefficients={self.coefficients})"


class UnityEquation:
    """``Σ f_i = 1``."""

    kind = "unity"

    def __init__(self, component_count: int):
        self.coefficients: Tuple[float, ...] = (1.0,) * int(component_count)

    @property
    def key(self):
        return (self.kind,)

    def display_name(self) -> str:
        return "Sum of fractions"

    def __eq__(self, other):
        if not isinstance(other, UnityEquation):
            return NotImplemented
        return True

    def __hash__(self):
        return hash(self.key)

    def __repr__(self):
        return f"UnityEquation(components={len(self.coefficients)})"


LinearEquation = Union[CoordinateEquation, UnityEquation]


__all__ = ["CoordinateAxis", "CoordinateEquation", "UnityEquation", "LinearEquation"]
