import numpy as np
import pytest

from phasorsense.core.equations import CoordinateAxis, CoordinateEquation
from phasorsense.core.harmonics import HarmonicSlot
from phasorsense.core.reference_points import ReferencePoint, ReferencePointBook
from phasorsense.core.unmixing import FractionAnalysis, SolveStatus, SystemState, UnmixingSolver


class FixedAssay:
    """Stand-in assay whose spectra all have preset phasors."""

    def __init__(self, phasors):
        self.phasors = list(phasors)
        self.spectra = [object() for _ in self.phasors]
        self.harmonic = (1, 1)

    def get_phasor(self, index, harmonic=None):
        return self.phasors[index]

    def add_phasor(self, phasor):
        self.phasors.append(phasor)
        self.spectra.append(object())

    def remove_spectrum(self, index):
        self.phasors.pop(index)
        return self.spectra.pop(index)


class NoPhasorAssay(FixedAssay):
    def get_phasor(self, index, harmonic=None):
        return None


def make_book(points, slot=HarmonicSlot.H11):
    book = ReferencePointBook()
    for i, (g, s) in enumerate(points):
        book.add(ReferencePoint(slot, f"ref{i + 1}", g, s))
    return book


def three_component_solver():
    solver = UnmixingSolver(make_book([(0.8, 0.1), (0.3, 0.4), (0.1, 0.9)]))
    solver.define_system(3)
    solver.add_coordinate_equation(CoordinateAxis.G, HarmonicSlot.H11)
    solver.add_coordinate_equation(CoordinateAxis.S, HarmonicSlot.H11)
    solver.add_unity_equation()
    return solver


def test_three_component_fractions_sum_to_one_and_reproduce_the_phasor():
    solver = three_component_solver()
    fractions = solver.get_fractions(FixedAssay([(0.4, 0.4)]), 0)
    assert fractions is not None
    assert fractions.sum() == pytest.approx(1.0, abs=1e-6)
    g = np.dot(fractions, [0.8, 0.3, 0.1])
    s = np.dot(fractions, [0.1, 0.4, 0.9])
    assert (g, s) == pytest.approx((0.4, 0.4))


def test_reference_phasor_unmixes_to_a_pure_component():
    solver = three_component_solver()
    fractions = solver.get_fractions(FixedAssay([(0.3, 0.4)]), 0)
    assert fractions.tolist() == pytest.approx([0.0, 1.0, 0.0], abs=1e-9)


def test_extra_equations_beyond_component_count_are_ignored():
    solver = UnmixingSolver(make_book([(0.9, 0.1), (0.1, 0.5)]))
    solver.define_system(2)
    solver.add_unity_equation()
    solver.add_coordinate_equation(CoordinateAxis.G, HarmonicSlot.H11)
    solver.add_coordinate_equation(CoordinateAxis.S, HarmonicSlot.H11)
    assert len(solver.equations) == 3

    # the S coordinate is inconsistent with G but the third equation is never read
    fractions = solver.get_fractions(FixedAssay([(0.5, 9.9)]), 0)
    assert fractions.tolist() == pytest.approx([0.5, 0.5])


def test_singular_system_has_no_result():
    solver = UnmixingSolver(make_book([(0.2, 0.2), (0.6, 0.6)]))
    solver.define_system(2)
    solver.add_coordinate_equation(CoordinateAxis.G, HarmonicSlot.H11)
    solver.add_coordinate_equation(CoordinateAxis.S, HarmonicSlot.H11)
    result = solver.solve(FixedAssay([(0.4, 0.4)]), 0)
    assert result.fractions is None
    assert result.status is SolveStatus.SINGULAR_SYSTEM


def test_solve_reports_why_there_is_no_result():
    solver = UnmixingSolver(make_book([(0.9, 0.1), (0.1, 0.5)]))
    assay = FixedAssay([(0.5, 0.3)])
    assert solver.solve(assay, 0).status is SolveStatus.EMPTY_SYSTEM

    solver.define_system(2)
    solver.add_coordinate_equation(CoordinateAxis.G, HarmonicSlot.H11)
    assert solver.solve(assay, 0).status is SolveStatus.INCOMPLETE_SYSTEM

    solver.add_equation(CoordinateEquation(CoordinateAxis.S, HarmonicSlot.H22, [0.1, 0.2, 0.3]))
    assert solver.solve(assay, 0).status is SolveStatus.DIMENSION_MISMATCH

    solver.remove_equation(1)
    solver.add_unity_equation()
    assert solver.solve(NoPhasorAssay([None]), 0).status is SolveStatus.INVALID_HARMONIC
    assert solver.solve(assay, 0).ok


def test_system_state_transitions():
    solver = UnmixingSolver(make_book([(0.9, 0.1), (0.1, 0.5)]))
    assert solver.state is SystemState.UNDEFINED
    solver.define_system(2)
    assert solver.state is SystemState.PARTIAL
    solver.add_unity_equation()
    assert not solver.is_correct()
    solver.add_coordinate_equation(CoordinateAxis.S, HarmonicSlot.H11)
    assert solver.state is SystemState.CORRECT
    assert solver.is_correct()

    solver.define_system(2)
    assert solver.equations == []
    assert solver.state is SystemState.PARTIAL


def test_define_system_validation():
    solver = UnmixingSolver(make_book([(0.9, 0.1), (0.1, 0.5)]))
    with pytest.raises(ValueError):
        solver.define_system(1)
    # two points per slot cannot support four components
    with pytest.raises(ValueError):
        solver.define_system(4)
    solver.define_system(4, check_references=False)
    assert solver.component_count == 4


def test_usable_slots_and_warnings():
    book = make_book([(0.9, 0.1), (0.1, 0.5)])
    book.add(ReferencePoint(HarmonicSlot.H22, "lonely", 0.3, 0.3))
    solver = UnmixingSolver(book)
    usable, unusable = solver.usable_slots(2)
    assert usable == [HarmonicSlot.H11]
    assert unusable == [HarmonicSlot.H22]
    assert solver.check_information(2) == [HarmonicSlot.H22]


def test_equation_additions_are_guarded():
    solver = UnmixingSolver(make_book([(0.9, 0.1), (0.1, 0.5)]))
    with pytest.raises(ValueError):
        solver.add_unity_equation()
    solver.define_system(2)
    assert solver.add_unity_equation()
    assert not solver.add_unity_equation()
    assert solver.add_coordinate_equation(CoordinateAxis.G, HarmonicSlot.H11)
    assert not solver.add_coordinate_equation(CoordinateAxis.G, HarmonicSlot.H11)
    with pytest.raises(ValueError):
        solver.add_coordinate_equation(CoordinateAxis.G, HarmonicSlot.H12)
    assert solver.equation_names() == ["Sum of fractions", "G coordinates at (n, m) = (1, 1)"]


def test_equation_availability_queries():
    solver = UnmixingSolver(make_book([(0.9, 0.1), (0.1, 0.5)]))
    assert not solver.can_add_coordinate_equation(HarmonicSlot.H11)
    assert not solver.has_unity_equation()

    solver.define_system(2)
    assert solver.can_add_coordinate_equation(HarmonicSlot.H11)
    assert not solver.can_add_coordinate_equation(HarmonicSlot.H12)
    solver.add_unity_equation()
    assert solver.has_unity_equation()
    solver.remove_equation(0)
    assert not solver.has_unity_equation()

    solver.define_system(3, check_references=False)
    assert not solver.can_add_coordinate_equation(HarmonicSlot.H11)


def test_fraction_analysis_cache_goes_stale_until_recalculated():
    analysis = FractionAnalysis([FixedAssay([(0.4, 0.4), (0.8, 0.1)])], three_component_solver())
    assert analysis.fractions_for(0, 0) is None

    analysis.recalculate()
    assert analysis.fractions_for(0, 1).tolist() == pytest.approx([1.0, 0.0, 0.0], abs=1e-9)
    assert analysis.fraction_for(0, 1, 0) == pytest.approx(1.0)

    analysis.solver.remove_equation(2)
    assert analysis.is_stale
    assert analysis.fractions_for(0, 0) is None

    analysis.solver.add_unity_equation()
    analysis.recalculate()
    assert analysis.fractions_for(0, 0) is not None

    analysis.add_assay(FixedAssay([(0.1, 0.9)]))
    assert analysis.fraction_for(0, 0, 0) is None
    analysis.recalculate()
    assert analysis.fractions_for(1, 0).tolist() == pytest.approx([0.0, 0.0, 1.0], abs=1e-9)


def test_fraction_cache_follows_spectrum_changes_inside_an_assay():
    assay = FixedAssay([(0.8, 0.1), (0.1, 0.9)])
    analysis = FractionAnalysis([assay], three_component_solver())
    analysis.recalculate()
    assert analysis.fractions_for(0, 0).tolist() == pytest.approx([1.0, 0.0, 0.0], abs=1e-9)

    assay.remove_spectrum(0)
    assert analysis.is_stale
    assert analysis.fractions_for(0, 0) is None
    analysis.recalculate()
    assert analysis.fractions_for(0, 0).tolist() == pytest.approx([0.0, 0.0, 1.0], abs=1e-9)

    assay.add_phasor((0.3, 0.4))
    assert analysis.fractions_for(0, 1) is None
    analysis.recalculate()
    assert analysis.fractions_for(0, 1).tolist() == pytest.approx([0.0, 1.0, 0.0], abs=1e-9)


def test_fraction_lookups_out_of_range_have_no_result():
    analysis = FractionAnalysis([FixedAssay([(0.4, 0.4)])], three_component_solver())
    analysis.recalculate()
    assert analysis.fractions_for(0, 1) is None
    assert analysis.fractions_for(1, 0) is None
    assert analysis.fractions_for(0, -1) is None
    assert analysis.fraction_for(2, 0, 0) is None


def test_recalculate_with_incomplete_system_stores_empty_results():
    solver = UnmixingSolver(make_book([(0.9, 0.1), (0.1, 0.5)]))
    solver.define_system(2)
    analysis = FractionAnalysis([FixedAssay([(0.5, 0.3)])], solver)
    analysis.recalculate()
    assert not analysis.is_stale
    assert analysis.fractions_for(0, 0) is None
