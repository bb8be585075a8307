# phasorsense/utils/file_io.py
"""
Loading raw excitation-emission grids from delimited text files.

A grid file holds the excitation values in its first row, the emission values
in its first column and one row of intensities per emission value. The top-left
cell is a free label.
"""

import io
import logging
from pathlib import Path
from typing import Iterable, List, Tuple

import numpy as np
import pandas as pd

from phasorsense.algorithms.units import XUnit
from phasorsense.core.spectrum import Spectrum

logger = logging.getLogger(__name__)


class GridLoadError(RuntimeError):
    """Raised when a grid file cannot be read or holds non-numeric cells."""


def _read_lines(path: Path) -> List[str]:
    try:
        with open(path, 'r', encoding='utf-8-sig') as f:
            return [line for line in f if line.strip()]
    except (OSError, UnicodeDecodeError) as e:
        raise GridLoadError(f"Could not read {path}: {e}") from e


def load_grid(path, delimiter: str = ",") -> Tuple[str, np.ndarray]:
    """
    Read one grid file.

    :param path: Path of a delimited text file.
    :param delimiter: Field separator.
    :return: (name, grid) where name is the file name and grid a float array;
             short rows are padded with NaN to the widest row.
    """
    path = Path(path)
    lines = _read_lines(path)
    if not lines:
        raise GridLoadError(f"{path} is empty.")

    width = max(len(line.rstrip("\r\n").split(delimiter)) for line in lines)
    frame = pd.read_csv(
        io.StringIO("".join(lines)),
        header=None,
        sep=delimiter,
        names=range(width),
        dtype=str,
        skipinitialspace=True,
        engine="python",
    )
    numeric = frame.apply(pd.to_numeric, errors="coerce")

    # Only the corner cell may hold text
    invalid = numeric.isna() & frame.notna()
    invalid.iat[0, 0] = False
    if invalid.to_numpy().any():
        row, col = np.argwhere(invalid.to_numpy())[0]
        raise GridLoadError(
            f"{path}: non-numeric value {frame.iat[row, col]!r} at row {row + 1}, column {col + 1}."
        )

    grid = numeric.to_numpy(dtype=float)
    if grid.shape[0] < 2 or grid.shape[1] < 2:
        raise GridLoadError(f"{path}: a grid needs at least two rows and two columns.")
    logger.info("Loaded grid %s with shape %s", path.name, grid.shape)
    return path.name, grid


def load_spectra(paths: Iterable, unit=XUnit.WAVELENGTH_NM, delimiter: str = ",") -> List[Spectrum]:
    """Load every file in ``paths`` as a Spectrum measured in ``unit``."""
    spectra = []
    for path in paths:
        name, grid = load_grid(path, delimiter)
        spectra.append(Spectrum.from_grid(name, grid, unit))
    return spectra


def save_grid(spectrum: Spectrum, path, delimiter: str = ",", float_format: str = "%.8f") -> Path:
    """Write ``spectrum`` back in the grid layout ``load_grid`` reads, using its current unit."""
    path = Path(path)
    frame = pd.DataFrame(
        spectrum.intensities.T,
        index=spectrum.emission_axis,
        columns=spectrum.excitation_axis,
    )
    frame.index.name = spectrum.current_unit.suffix
    frame.to_csv(path, sep=delimiter, float_format=float_format)
    logger.info("Saved grid %s to %s", spectrum.name, path)
    return path


__all__ = ["GridLoadError", "load_grid", "load_spectra", "save_grid"]
