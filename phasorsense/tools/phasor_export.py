# phasorsense/tools/phasor_export.py
"""
Tabular export of phasor coordinates and unmixing fractions.

Tables are built as pandas DataFrames and written to Excel (one sheet per
assay, via openpyxl) or to CSV.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from phasorsense.algorithms.phasor import phasor_to_polar
from phasorsense.algorithms.units import XUnit
from phasorsense.core.harmonics import HarmonicSlot
from phasorsense.utils.formatting import format_rounded

logger = logging.getLogger(__name__)

EXCEL_SHEET_LIMIT = 31
_SHEET_FORBIDDEN = re.compile(r"[\[\]\*\?/\\:]")


def _axis_error(unit: XUnit) -> float:
    return 0.01 if unit is XUnit.WAVENUMBER_UM else 1.0


def describe_ranges(assay) -> List[str]:
    """Four text lines stating the excitation/emission windows and selected values."""
    unit = assay.x_unit
    error = _axis_error(unit)
    symbol, suffix = unit.symbol, unit.suffix

    def fmt(value):
        return f"{format_rounded(value, error)} {suffix}"

    ex, em = assay.ex_range, assay.em_range
    return [
        f"Excitation range: {symbol} = {fmt(ex.minimum)} - {fmt(ex.maximum)}",
        f"Emission range: {symbol} = {fmt(em.minimum)} - {fmt(em.maximum)}",
        f"Excitation selected: {symbol} = {fmt(ex.selected)}",
        f"Emission selected: {symbol} = {fmt(em.selected)}",
    ]


def build_phasor_table(assay) -> pd.DataFrame:
    """
    One row per spectrum with G, S, ρ and θ (rad) for each of the eight harmonics.

    Missing phasors are written as nan.
    """
    rows = []
    for index, spectrum in enumerate(assay.spectra):
        row = {"Spectrum": spectrum.name}
        for slot in HarmonicSlot:
            phasor = assay.get_phasor(index, slot.harmonic)
            g, s = phasor if phasor is not None else (np.nan, np.nan)
            rho, theta = phasor_to_polar(g, s)
            row[f"G {slot.label}"] = g
            row[f"S {slot.label}"] = s
            row[f"ρ {slot.label}"] = rho
            row[f"θ (rad) {slot.label}"] = theta
        rows.append(row)

    columns = ["Spectrum"]
    for slot in HarmonicSlot:
        columns += [f"G {slot.label}", f"S {slot.label}", f"ρ {slot.label}", f"θ (rad) {slot.label}"]
    return pd.DataFrame(rows, columns=columns)


def build_fraction_table(analysis, assay_index: int, slot,
                         reference_indices: Optional[Sequence[int]] = None) -> pd.DataFrame:
    """
    Fractions of every spectrum of one assay.

    Columns: the spectrum name (headed by the harmonic label), G and S at the
    assay harmonic, the names of the equations in the system, then one
    ``f(<reference>)`` column per selected reference point of ``slot``.
    Fractions are solved afresh rather than read from the analysis cache.
    """
    slot = HarmonicSlot(slot)
    assay = analysis.assays[assay_index]
    points = analysis.references.points_at(slot)
    if reference_indices is None:
        reference_indices = range(len(points))
    reference_indices = list(reference_indices)
    fraction_columns = [f"f({points[i].display_name()})" for i in reference_indices]

    equation_names = analysis.solver.equation_names()
    row_count = max(len(assay.spectra), len(equation_names))
    table: Dict[str, list] = {
        slot.label: [None] * row_count,
        "G": [np.nan] * row_count,
        "S": [np.nan] * row_count,
        "Equation system used": [None] * row_count,
    }
    for column in fraction_columns:
        table[column] = [np.nan] * row_count

    for i, spectrum in enumerate(assay.spectra):
        table[slot.label][i] = spectrum.name
        phasor = assay.get_phasor(i)
        if phasor is not None:
            table["G"][i], table["S"][i] = phasor
        fractions = analysis.solver.get_fractions(assay, i)
        if fractions is None:
            continue
        for column, reference_index in zip(fraction_columns, reference_indices):
            if reference_index < len(fractions):
                table[column][i] = float(fractions[reference_index])

    for i, name in enumerate(equation_names):
        table["Equation system used"][i] = name

    return pd.DataFrame(table)


def sheet_name(name: str, taken: Sequence[str] = ()) -> str:
    """Excel-safe, unique sheet name derived from ``name``."""
    base = _SHEET_FORBIDDEN.sub("_", name).strip("'") or "Sheet"
    base = base[:EXCEL_SHEET_LIMIT]
    candidate = base
    counter = 1
    while candidate in taken:
        counter += 1
        suffix = f" ({counter})"
        candidate = base[:EXCEL_SHEET_LIMIT - len(suffix)] + suffix
    return candidate


def write_tables(tables: Mapping[str, pd.DataFrame], path,
                 header_lines: Optional[Mapping[str, Sequence[str]]] = None,
                 float_format: str = "%.8f") -> Path:
    """
    Write named tables to ``path``.

    ``.xlsx`` files get one sheet per table; any other suffix is written as a
    single CSV table, so only one table is accepted there. ``header_lines``
    maps a table name to text lines placed above the table.
    """
    path = Path(path)
    header_lines = header_lines or {}

    if path.suffix.lower() == ".xlsx":
        taken: List[str] = []
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for name, frame in tables.items():
                sheet = sheet_name(name, taken)
                taken.append(sheet)
                lines = list(header_lines.get(name, ()))
                start_row = len(lines) + 1 if lines else 0
                frame.to_excel(writer, sheet_name=sheet, index=False,
                               startrow=start_row, float_format=float_format)
                worksheet = writer.sheets[sheet]
                for row, line in enumerate(lines, start=1):
                    worksheet.cell(row=row, column=1, value=line)
        logger.info("Exported %d table(s) to %s", len(tables), path)
        return path

    if len(tables) != 1:
        raise ValueError("CSV export takes exactly one table; use an .xlsx path for several.")
    name, frame = next(iter(tables.items()))
    with open(path, "w", encoding="utf-8", newline="") as f:
        for line in header_lines.get(name, ()):
            f.write(f"{line}\n")
        frame.to_csv(f, index=False, float_format=float_format)
    logger.info("Exported table %s to %s", name, path)
    return path


def export_phasors(assays, path, float_format: str = "%.8f") -> Path:
    """Phasor table of each assay, with its range description above it."""
    tables = {}
    headers = {}
    for assay in assays:
        key = assay.name
        while key in tables:
            key = f"{key}_"
        tables[key] = build_phasor_table(assay)
        headers[key] = describe_ranges(assay)
    return write_tables(tables, path, headers, float_format)


def export_fractions(analysis, slot, path, reference_indices: Optional[Sequence[int]] = None,
                     float_format: str = "%.8f") -> Path:
    """Fraction table of every assay in ``analysis``."""
    tables = {}
    for index, assay in enumerate(analysis.assays):
        key = assay.name
        while key in tables:
            key = f"{key}_"
        tables[key] = build_fraction_table(analysis, index, slot, reference_indices)
    return write_tables(tables, path, float_format=float_format)


__all__ = [
    "describe_ranges",
    "build_phasor_table",
    "build_fraction_table",
    "sheet_name",
    "write_tables",
    "export_phasors",
    "export_fractions",
]
