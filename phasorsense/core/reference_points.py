# phasorsense/core/reference_points.py
"""
Reference phasor coordinates used as pure-component anchors for unmixing.

Points are grouped per harmonic slot in a ``ReferencePointBook``. Two points
with the same (G, S) are the same point whatever their names, so a slot never
holds the same coordinates twice; the same coordinates may still appear under
different slots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

import numpy as np

from ..utils.formatting import format_rounded
from .harmonics import HarmonicSlot

logger = logging.getLogger(__name__)

DISPLAY_ERROR = 0.001
COORDINATE_LIMIT = 1.0


@dataclass(frozen=True)
class ReferencePoint:
    """Named (G, S) coordinate belonging to one harmonic slot."""

    slot: HarmonicSlot = field(compare=False)
    name: str = field(compare=False)
    g: float
    s: float

    def __post_init__(self):
        object.__setattr__(self, "slot", HarmonicSlot(self.slot))
        object.__setattr__(self, "g", float(self.g))
        object.__setattr__(self, "s", float(self.s))

    @property
    def coordinates(self):
        return self.g, self.s

    def display_name(self) -> str:
        g = format_rounded(self.g, DISPLAY_ERROR)
        s = format_rounded(self.s, DISPLAY_ERROR)
        return f"{self.name} ({g}; {s})"


class ReferencePointBook:
    """Ordered reference points for each of the eight harmonic slots."""

    def __init__(self):
        self._points: Dict[HarmonicSlot, List[ReferencePoint]] = {slot: [] for slot in HarmonicSlot}

    def points_at(self, slot) -> List[ReferencePoint]:
        """Stored points of ``slot`` in order. The returned list is a copy."""
        return list(self._points[HarmonicSlot(slot)])

    def __iter__(self) -> Iterator[ReferencePoint]:
        for slot in HarmonicSlot:
            yield from self._points[slot]

    def __len__(self) -> int:
        return sum(len(points) for points in self._points.values())

    def count(self, slot) -> int:
        return len(self._points[HarmonicSlot(slot)])

    def contains(self, point: ReferencePoint) -> bool:
        return point in self._points[point.slot]

    def default_point_name(self, slot) -> str:
        return f"ref{self.count(slot) + 1}"

    # --- insertion -------------------------------------------------------

    def add(self, point: ReferencePoint) -> bool:
        """Append ``point`` to its slot; returns False if the coordinates already exist there."""
        points = self._points[point.slot]
        if point in points:
            logger.debug("Reference point %s already exists at %s", point.display_name(), point.slot.label)
            return False
        points.append(point)
        return True

    def add_manual(self, slot, name: str, g: float, s: float) -> bool:
        """Add a typed-in point; both coordinates must lie in ``[-1, 1]``."""
        g, s = float(g), float(s)
        if not (-COORDINATE_LIMIT <= g <= COORDINATE_LIMIT and -COORDINATE_LIMIT <= s <= COORDINATE_LIMIT):
            raise ValueError(f"Reference coordinates must lie in [-1, 1], got ({g}, {s})")
        return self.add(ReferencePoint(HarmonicSlot(slot), name, g, s))

    def add_from_assay(self, assay, spectrum_index: int, name: str) -> List[HarmonicSlot]:
        """
        Add the phasor of one spectrum as a reference point in every slot.

        Returns the slots that actually received a new point; slots where the
        coordinates were already present are skipped.
        """
        added = []
        for slot in HarmonicSlot:
            phasor = assay.get_phasor(spectrum_index, slot.harmonic)
            if phasor is None:
                continue
            if self.add(ReferencePoint(slot, name, phasor[0], phasor[1])):
                added.append(slot)
        return added

    def merge(self, points: Iterable[ReferencePoint]) -> int:
        """Add loaded points, skipping the ones already present in their slot."""
        added = 0
        for point in points:
            if self.add(point):
                added += 1
        return added

    # --- removal and ordering -------------------------------------------

    def remove(self, slot, index: int) -> ReferencePoint:
        return self._points[HarmonicSlot(slot)].pop(index)

    def remove_many(self, slot, indices: Sequence[int]) -> List[ReferencePoint]:
        """Remove several points of one slot at once; indices refer to the order before removal."""
        points = self._points[HarmonicSlot(slot)]
        for index in indices:
            if not -len(points) <= index < len(points):
                raise IndexError(f"Reference point index {index} out of range")
        doomed = {index % len(points) for index in indices}
        removed = [points[i] for i in sorted(doomed)]
        self._points[HarmonicSlot(slot)] = [p for i, p in enumerate(points) if i not in doomed]
        return removed

    def move_up(self, slot, index: int) -> int:
        """Swap the point with its predecessor; returns the new index."""
        return self._move(slot, index, -1)

    def move_down(self, slot, index: int) -> int:
        """Swap the point with its successor; returns the new index."""
        return self._move(slot, index, 1)

    def _move(self, slot, index: int, step: int) -> int:
        points = self._points[HarmonicSlot(slot)]
        target = index + step
        if not (0 <= index < len(points) and 0 <= target < len(points)):
            raise IndexError(f"Cannot move reference point {index} to {target}")
        points[index], points[target] = points[target], points[index]
        return target

    def clear(self, slot=None) -> None:
        if slot is None:
            for points in self._points.values():
                points.clear()
        else:
            self._points[HarmonicSlot(slot)].clear()

    # --- derived points --------------------------------------------------

    def averaged(self, slot, name: str = "averaged") -> Optional[ReferencePoint]:
        """Single point at the mean G and S of the slot, None for an empty slot."""
        points = self._points[HarmonicSlot(slot)]
        if not points:
            return None
        coords = np.array([p.coordinates for p in points], dtype=float)
        g, s = coords.mean(axis=0)
        return ReferencePoint(HarmonicSlot(slot), name, float(g), float(s))

    def coefficients(self, slot, axis: int, count: int) -> List[float]:
        """Axis values (0 = G, 1 = S) of the first ``count`` points of ``slot``."""
        return [p.coordinates[axis] for p in self._points[HarmonicSlot(slot)][:count]]


__all__ = ["ReferencePoint", "ReferencePointBook", "DISPLAY_ERROR"]
