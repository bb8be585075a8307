import numpy as np
import openpyxl
import pandas as pd
import pytest

from phasorsense.core.equations import CoordinateAxis
from phasorsense.core.harmonics import HarmonicSlot
from phasorsense.core.phasor_assay import PhasorAssay
from phasorsense.core.spectrum import Spectrum
from phasorsense.core.unmixing import FractionAnalysis
from phasorsense.tools.phasor_export import (
    build_fraction_table,
    build_phasor_table,
    describe_ranges,
    sheet_name,
    write_tables,
)


def build_assay(count=2):
    ex = np.linspace(400.0, 500.0, 6)
    em = np.linspace(520.0, 620.0, 8)
    rng = np.random.default_rng(9)
    spectra = [Spectrum(f"s{i}", ex, em, rng.random((6, 8)) + 0.05) for i in range(count)]
    return PhasorAssay("plate", spectra)


def test_describe_ranges_lines():
    assay = build_assay()
    assay.set_ranges(410.0, 490.0, 530.0, 610.0)
    assert describe_ranges(assay) == [
        "Excitation range: λ = 410 nm - 490 nm",
        "Emission range: λ = 530 nm - 610 nm",
        "Excitation selected: λ = 450 nm",
        "Emission selected: λ = 570 nm",
    ]


def test_phasor_table_has_four_columns_per_harmonic():
    assay = build_assay()
    table = build_phasor_table(assay)
    assert len(table) == 2
    assert len(table.columns) == 1 + 4 * 8
    assert table["Spectrum"].tolist() == ["s0", "s1"]
    g, s = assay.get_phasor(1, (1, 1))
    assert table.loc[1, "G (n, m) = (1, 1)"] == pytest.approx(g)
    assert table.loc[1, "ρ (n, m) = (1, 1)"] == pytest.approx(np.hypot(g, s))


def test_fraction_table_layout():
    assay = build_assay(3)
    analysis = FractionAnalysis([assay])
    analysis.references.add_from_assay(assay, 0, "pure0")
    analysis.references.add_from_assay(assay, 1, "pure1")
    analysis.solver.define_system(2)
    analysis.solver.add_unity_equation()
    analysis.solver.add_coordinate_equation(CoordinateAxis.G, HarmonicSlot.H11)

    table = build_fraction_table(analysis, 0, HarmonicSlot.H11)
    assert list(table.columns[:4]) == ["(n, m) = (1, 1)", "G", "S", "Equation system used"]
    assert table.columns[4].startswith("f(pure0 (")
    assert table["(n, m) = (1, 1)"].tolist() == ["s0", "s1", "s2"]
    assert table["Equation system used"].tolist()[:2] == ["Sum of fractions", "G coordinates at (n, m) = (1, 1)"]
    assert table.iloc[0, 4] == pytest.approx(1.0)
    assert table.iloc[1, 5] == pytest.approx(1.0)

    only_second = build_fraction_table(analysis, 0, HarmonicSlot.H11, [1])
    assert len(only_second.columns) == 5


def test_write_tables_to_excel_with_header_lines(tmp_path):
    assay = build_assay()
    path = write_tables(
        {"plate": build_phasor_table(assay)},
        tmp_path / "phasors.xlsx",
        header_lines={"plate": describe_ranges(assay)},
    )
    sheet = openpyxl.load_workbook(path)["plate"]
    assert sheet["A1"].value.startswith("Excitation range")
    assert sheet["A4"].value.startswith("Emission selected")
    assert sheet["A6"].value == "Spectrum"
    assert sheet["A7"].value == "s0"
    assert sheet["B6"].value == "G (n, m) = (0, 1)"


def test_write_tables_to_csv(tmp_path):
    table = pd.DataFrame({"Spectrum": ["a"], "G": [0.25]})
    path = write_tables({"only": table}, tmp_path / "t.csv", header_lines={"only": ["note"]})
    assert path.read_text(encoding="utf-8").splitlines()[:2] == ["note", "Spectrum,G"]
    with pytest.raises(ValueError):
        write_tables({"a": table, "b": table}, tmp_path / "two.csv")


def test_sheet_name_is_excel_safe_and_unique():
    assert sheet_name("a/b:c") == "a_b_c"
    long_name = "x" * 40
    assert len(sheet_name(long_name)) == 31
    assert sheet_name("plate", ["plate"]) == "plate (2)"
