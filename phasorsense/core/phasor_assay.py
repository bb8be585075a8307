# phasorsense/core/phasor_assay.py
"""
A group of spectra analysed with one shared set of ranges and harmonic.

The assay is the object plotting and export layers pull phasor coordinates
from. It performs no caching; every ``get_phasor`` call recomputes from the
spectrum data and the current selection.
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from phasorsense.algorithms.phasor import Phasor, multispectral_phasor, single_axis_phasor
from phasorsense.algorithms.units import XUnit, find_index_for

from .harmonics import HARMONIC_OPTIONS, Harmonic, HarmonicSlot, validate_harmonic
from .selection import FULL_ZOOM, AxisRange, ZoomWindow
from .spectrum import Spectrum

logger = logging.getLogger(__name__)

DOT_SHAPES = ("rectangle", "circle", "triangle", "diamond", "cross")

_FLOAT_MAX = sys.float_info.max


def _intersect_extents(pairs: Iterable[Tuple[float, float]]) -> Tuple[float, float]:
    lower, upper = -_FLOAT_MAX, _FLOAT_MAX
    for first, last in pairs:
        if lower < first:
            lower = first
        if upper > last:
            upper = last
    return lower, upper


class PhasorAssay:
    """
    Ordered collection of spectra plus their selection state.

    Attributes:
        name: Assay label.
        spectra: Member spectra. The same Spectrum object may belong to more
            than one assay.
        harmonic: Default ``(n, m)`` used when ``get_phasor`` gets none.
        ex_range / em_range: Excitation and emission ``AxisRange`` in the
            current axis unit.
        zoom / is_zoomed: Phasor plot window.
        color_index / dot_shape: Presentation tags, carried but unused here.
    """

    def __init__(self, name: str = "", spectra: Optional[Sequence[Spectrum]] = None,
                 harmonic: Harmonic = (1, 1)):
        self.name = name
        self.spectra: List[Spectrum] = list(spectra or [])
        self._harmonic: Harmonic = validate_harmonic(harmonic)
        self.ex_range = AxisRange(0.0, 0.0, 0.0)
        self.em_range = AxisRange(0.0, 0.0, 0.0)
        self.zoom: ZoomWindow = FULL_ZOOM
        self.is_zoomed = False
        self.color_index = 0
        self.dot_shape = DOT_SHAPES[0]
        if self.spectra:
            self.reset_ranges()

    # --- identity --------------------------------------------------------

    def display_name(self) -> str:
        return self.name

    def __len__(self) -> int:
        return len(self.spectra)

    def __repr__(self) -> str:
        return f"PhasorAssay(name={self.name!r}, spectra={len(self.spectra)}, harmonic={self.harmonic})"

    # --- harmonic --------------------------------------------------------

    @property
    def harmonic(self) -> Harmonic:
        return self._harmonic

    @harmonic.setter
    def harmonic(self, value) -> None:
        self._harmonic = validate_harmonic(value)

    @property
    def harmonic_slot(self) -> Optional[HarmonicSlot]:
        if self._harmonic in HARMONIC_OPTIONS:
            return HarmonicSlot.for_harmonic(self._harmonic)
        return None

    # --- spectra and units ----------------------------------------------

    def add_spectra(self, spectra: Iterable[Spectrum], reset: bool = True) -> None:
        self.spectra.extend(spectra)
        if reset:
            self.reset_ranges()

    def remove_spectrum(self, index: int) -> Spectrum:
        return self.spectra.pop(index)

    @property
    def x_unit(self) -> XUnit:
        if not self.spectra:
            return XUnit.WAVELENGTH_NM
        return self.spectra[0].current_unit

    def set_x_units(self, unit, reset: bool = False) -> None:
        """
        Switch every member spectrum to ``unit``.

        The range values are left as they are, still expressed in the old
        unit, unless ``reset`` is given; callers switching units must
        re-derive the ranges.
        """
        unit = XUnit.parse(unit)
        for spectrum in self.spectra:
            spectrum.set_unit(unit)
        if reset:
            self.reset_ranges()

    # --- ranges ----------------------------------------------------------

    def available_extents(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Intersection of the member spectra extents on both axes, unsorted."""
        excitation = _intersect_extents(
            (s.min_excitation_value(), s.max_excitation_value()) for s in self.spectra
        )
        emission = _intersect_extents(
            (s.min_emission_value(), s.max_emission_value()) for s in self.spectra
        )
        return excitation, emission

    def reset_ranges(self) -> None:
        """Select the whole common extent of the spectra, midpoints selected."""
        excitation, emission = self.available_extents()
        self.ex_range = AxisRange.spanning(*excitation)
        self.em_range = AxisRange.spanning(*emission)
        logger.debug("Ranges of %r reset to ex=%s em=%s", self.name, self.ex_range, self.em_range)

    def set_ranges(self, ex_min: float, ex_max: float, em_min: float, em_max: float) -> None:
        """Set both windows; the selected values move to the window midpoints."""
        self.ex_range = AxisRange.spanning(ex_min, ex_max)
        self.em_range = AxisRange.spanning(em_min, em_max)

    def set_selected(self, excitation: Optional[float] = None,
                     emission: Optional[float] = None) -> None:
        if excitation is not None:
            self.ex_range = self.ex_range.with_selected(excitation)
        if emission is not None:
            self.em_range = self.em_range.with_selected(emission)

    def move_range_value(self, axis: str, position: int, value: float) -> None:
        """Drag one entry of a range triple; the triple is re-sorted afterwards."""
        if axis == "excitation":
            self.ex_range = self.ex_range.with_value(position, value)
        elif axis == "emission":
            self.em_range = self.em_range.with_value(position, value)
        else:
            raise ValueError(f"Unknown axis: {axis!r}")

    # --- zoom ------------------------------------------------------------

    def set_zoom(self, min_g: float, max_g: float, min_s: float, max_s: float) -> None:
        self.zoom = ZoomWindow.clamped(min_g, max_g, min_s, max_s)
        self.is_zoomed = True

    def reset_zoom(self) -> None:
        self.zoom = FULL_ZOOM
        self.is_zoomed = False

    # --- cross-sections --------------------------------------------------

    def emission_intensities_for(self, spectrum_index: int) -> np.ndarray:
        """Emission profile at the selected excitation value."""
        return self.spectra[spectrum_index].emission_spectrum_at(self.ex_range.selected)

    def excitation_intensities_for(self, spectrum_index: int) -> np.ndarray:
        """Excitation profile at the selected emission value."""
        return self.spectra[spectrum_index].excitation_spectrum_at(self.em_range.selected)

    # --- phasors ---------------------------------------------------------

    def get_phasor(self, spectrum_index: int, harmonic=None) -> Optional[Phasor]:
        """
        Phasor ``(G, S)`` of one member spectrum.

        ``harmonic`` defaults to the assay harmonic. ``(0, m)`` gives the
        emission phasor at the selected excitation, ``(n, 0)`` the excitation
        phasor at the selected emission, and any other pair the joint 2D
        phasor. Returns None for ``(0, 0)``; a window without intensity yields
        nan coordinates.
        """
        n, m = self._harmonic if harmonic is None else (harmonic[0], harmonic[1])
        if n == 0 and m == 0:
            return None

        spectrum = self.spectra[spectrum_index]
        ex_axis = spectrum.excitation_axis
        em_axis = spectrum.emission_axis

        if n == 0:
            fixed = find_index_for(self.ex_range.selected, ex_axis)
            return single_axis_phasor(
                spectrum.intensities[fixed, :], em_axis, self.em_range.bounds, m
            )
        if m == 0:
            fixed = find_index_for(self.em_range.selected, em_axis)
            return single_axis_phasor(
                spectrum.intensities[:, fixed], ex_axis, self.ex_range.bounds, n
            )
        return multispectral_phasor(
            spectrum.intensities,
            ex_axis,
            em_axis,
            self.ex_range.bounds,
            self.em_range.bounds,
            (n, m),
        )

    def phasors(self, harmonic=None) -> List[Optional[Phasor]]:
        """Phasor of every member spectrum, in order."""
        return [self.get_phasor(i, harmonic) for i in range(len(self.spectra))]


def common_extents(assays: Sequence[PhasorAssay]):
    """
    Bounds every assay in ``assays`` can accept for a shared range update.

    Returns ``((ex_low, ex_high), (em_low, em_high))`` built from the current
    range bounds of the assays, each pair sorted.
    """
    excitation = _intersect_extents((a.ex_range.minimum, a.ex_range.maximum) for a in assays)
    emission = _intersect_extents((a.em_range.minimum, a.em_range.maximum) for a in assays)
    return tuple(sorted(excitation)), tuple(sorted(emission))


__all__ = ["PhasorAssay", "DOT_SHAPES", "common_extents"]
