# phasorsense/core/harmonics.py
"""Harmonic orders (n, m) and the eight canonical slots reference points are kept in."""

from __future__ import annotations

from enum import IntEnum
from typing import Tuple

Harmonic = Tuple[int, int]


class HarmonicSlot(IntEnum):
    """The eight canonical (n, m) harmonics; the value is the slot index."""

    H01 = 0
    H02 = 1
    H10 = 2
    H11 = 3
    H12 = 4
    H20 = 5
    H21 = 6
    H22 = 7

    @property
    def harmonic(self) -> Harmonic:
        return HARMONIC_OPTIONS[self.value]

    @property
    def label(self) -> str:
        n, m = self.harmonic
        return f"(n, m) = ({n}, {m})"

    @classmethod
    def for_harmonic(cls, harmonic) -> "HarmonicSlot":
        key = (int(harmonic[0]), int(harmonic[1]))
        try:
            return cls(HARMONIC_OPTIONS.index(key))
        except ValueError:
            raise ValueError(f"{key} is not one of the canonical harmonics") from None


HARMONIC_OPTIONS: Tuple[Harmonic, ...] = (
    (0, 1),
    (0, 2),
    (1, 0),
    (1, 1),
    (1, 2),
    (2, 0),
    (2, 1),
    (2, 2),
)

DEFAULT_SLOT = HarmonicSlot.H11


def validate_harmonic(harmonic) -> Harmonic:
    """Normalize ``harmonic`` to an int pair; both orders ≥ 0 and not both zero."""
    n, m = (int(value) for value in harmonic)
    if n < 0 or m < 0:
        raise ValueError(f"Harmonic orders must be non-negative, got {(n, m)}")
    if n == 0 and m == 0:
        raise ValueError("Harmonic (0, 0) has no phasor")
    return n, m


__all__ = [
    "Harmonic",
    "HarmonicSlot",
    "HARMONIC_OPTIONS",
    "DEFAULT_SLOT",
    "validate_harmonic",
]
