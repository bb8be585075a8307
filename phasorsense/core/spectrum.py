# phasorsense/core/spectrum.py
"""
Excitation-emission spectrum container.

A Spectrum is built once from a raw numeric grid and keeps its excitation and
emission axes in all three unit systems. Only ``current_unit`` changes after
construction, and it only selects which axis representation the accessors
return.
"""

from __future__ import annotations

from typing import Dict

import numpy as np

from phasorsense.algorithms.units import XUnit, convert_axis, find_index_for


class Spectrum:
    """
    Two-dimensional excitation-emission intensity map.

    Parameters
    ----------
    name : str
        Identifier shown in lists and used as the export row label.
    excitation : array_like
        Excitation axis values in ``unit``.
    emission : array_like
        Emission axis values in ``unit``.
    intensities : array_like
        ``[len(excitation), len(emission)]`` intensity grid.
    unit : XUnit
        Unit the axis values were measured in; also the initial current unit.
    """

    def __init__(self, name: str, excitation, emission, intensities, unit=XUnit.WAVELENGTH_NM):
        unit = XUnit.parse(unit)
        grid = np.array(intensities, dtype=float)
        ex = np.asarray(excitation, dtype=float)
        em = np.asarray(emission, dtype=float)
        if grid.ndim != 2 or grid.shape != (ex.size, em.size):
            raise ValueError(
                f"Intensity grid shape {grid.shape} does not match axes ({ex.size}, {em.size})."
            )
        grid.flags.writeable = False

        self.name = name
        self.source_unit = unit
        self.current_unit = unit
        self._excitation: Dict[XUnit, np.ndarray] = convert_axis(ex, unit)
        self._emission: Dict[XUnit, np.ndarray] = convert_axis(em, unit)
        for axis in (*self._excitation.values(), *self._emission.values()):
            axis.flags.writeable = False
        self._intensities = grid

    @classmethod
    def from_grid(cls, name: str, grid, unit=XUnit.WAVELENGTH_NM) -> "Spectrum":
        """
        Build a spectrum from a raw grid as it is laid out in data files.

        Row 0 holds the excitation values, column 0 the emission values and
        the remaining cells the intensities, one row per emission value. Cell
        ``[0][0]`` is ignored.
        """
        data = np.asarray(grid, dtype=float)
        if data.ndim != 2 or data.shape[0] < 2 or data.shape[1] < 2:
            raise ValueError("Raw grid needs at least two rows and two columns.")
        excitation = data[0, 1:]
        emission = data[1:, 0]
        intensities = data[1:, 1:].T
        return cls(name, excitation, emission, intensities, unit)

    # --- accessors -----------------------------------------------------

    @property
    def intensities(self) -> np.ndarray:
        return self._intensities

    @property
    def shape(self):
        return self._intensities.shape

    @property
    def excitation_axis(self) -> np.ndarray:
        return self._excitation[self.current_unit]

    @property
    def emission_axis(self) -> np.ndarray:
        return self._emission[self.current_unit]

    def axes_in(self, unit):
        """``(excitation, emission)`` axes expressed in ``unit``."""
        unit = XUnit.parse(unit)
        return self._excitation[unit], self._emission[unit]

    def set_unit(self, unit) -> None:
        self.current_unit = XUnit.parse(unit)

    def intensity_at(self, ex_index: int, em_index: int) -> float:
        return float(self._intensities[ex_index, em_index])

    def emission_spectrum_at(self, excitation_value: float) -> np.ndarray:
        """Emission profile (a grid row) at the excitation nearest to the value."""
        index = find_index_for(excitation_value, self.excitation_axis)
        return self._intensities[index, :]

    def excitation_spectrum_at(self, emission_value: float) -> np.ndarray:
        """Excitation profile (a grid column) at the emission nearest to the value."""
        index = find_index_for(emission_value, self.emission_axis)
        return self._intensities[:, index].copy()

    # First and last elements, not the numeric extremes: wavenumber axes run
    # in the opposite direction of the wavelengths they were converted from.
    def min_excitation_value(self) -> float:
        return float(self.excitation_axis[0])

    def max_excitation_value(self) -> float:
        return float(self.excitation_axis[-1])

    def min_emission_value(self) -> float:
        return float(self.emission_axis[0])

    def max_emission_value(self) -> float:
        return float(self.emission_axis[-1])

    def display_name(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return (
            f"Spectrum(name={self.name!r}, shape={self.shape}, "
            f"unit={self.current_unit.name})"
        )


__all__ = ["Spectrum"]
