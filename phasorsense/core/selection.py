# phasorsense/core/selection.py
"""Immutable selection state shared by the spectra of an assay."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

ZOOM_LIMIT = 1.0


class AxisRange(NamedTuple):
    """``(minimum, selected, maximum)`` on one spectral axis, always non-decreasing."""

    minimum: float
    selected: float
    maximum: float

    @classmethod
    def from_values(cls, first: float, second: float, third: float) -> "AxisRange":
        low, middle, high = sorted((float(first), float(second), float(third)))
        return cls(low, middle, high)

    @classmethod
    def spanning(cls, lower: float, upper: float) -> "AxisRange":
        """Range between two bounds (in any order) with the midpoint selected."""
        low, high = min(lower, upper), max(lower, upper)
        return cls(float(low), (float(lower) + float(upper)) / 2, float(high))

    @property
    def bounds(self):
        return self.minimum, self.maximum

    def with_value(self, position: int, value: float) -> "AxisRange":
        """Replace one of the three entries and re-establish the ordering."""
        values = list(self)
        values[position] = float(value)
        return AxisRange.from_values(*values)

    def with_selected(self, value: float) -> "AxisRange":
        """Move the selected value, clamped into ``[minimum, maximum]``."""
        clamped = min(max(float(value), self.minimum), self.maximum)
        return self._replace(selected=clamped)

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum


MIN_VALUE = 0
SELECTED_VALUE = 1
MAX_VALUE = 2


def _clamp(value: float) -> float:
    return min(max(float(value), -ZOOM_LIMIT), ZOOM_LIMIT)


@dataclass(frozen=True)
class ZoomWindow:
    """Visible G/S window of a phasor plot, always inside ``[-1, 1]²``."""

    min_g: float = -ZOOM_LIMIT
    max_g: float = ZOOM_LIMIT
    min_s: float = -ZOOM_LIMIT
    max_s: float = ZOOM_LIMIT

    @classmethod
    def clamped(cls, min_g: float, max_g: float, min_s: float, max_s: float) -> "ZoomWindow":
        g_low, g_high = sorted((_clamp(min_g), _clamp(max_g)))
        s_low, s_high = sorted((_clamp(min_s), _clamp(max_s)))
        return cls(g_low, g_high, s_low, s_high)

    def contains(self, g: float, s: float) -> bool:
        return self.min_g <= g <= self.max_g and self.min_s <= s <= self.max_s


FULL_ZOOM = ZoomWindow()


__all__ = [
    "AxisRange",
    "ZoomWindow",
    "FULL_ZOOM",
    "MIN_VALUE",
    "SELECTED_VALUE",
    "MAX_VALUE",
]
