from phasorsense.core.equations import CoordinateAxis, CoordinateEquation, UnityEquation
from phasorsense.core.harmonics import HarmonicSlot


def test_coordinate_equations_compare_on_axis_and_slot():
    first = CoordinateEquation(CoordinateAxis.G, HarmonicSlot.H11, [0.1, 0.2])
    same_key = CoordinateEquation(CoordinateAxis.G, HarmonicSlot.H11, [0.9, 0.8, 0.7])
    other_axis = CoordinateEquation(CoordinateAxis.S, HarmonicSlot.H11, [0.1, 0.2])
    other_slot = CoordinateEquation(CoordinateAxis.G, HarmonicSlot.H12, [0.1, 0.2])
    assert first == same_key
    assert hash(first) == hash(same_key)
    assert first != other_axis
    assert first != other_slot
    assert first != UnityEquation(2)


def test_unity_equations_are_all_equal():
    assert UnityEquation(2) == UnityEquation(3)
    assert UnityEquation(3).coefficients == (1.0, 1.0, 1.0)


def test_display_names():
    assert UnityEquation(2).display_name() == "Sum of fractions"
    equation = CoordinateEquation(CoordinateAxis.G, HarmonicSlot.H11, [0.1, 0.2])
    assert equation.display_name() == "G coordinates at (n, m) = (1, 1)"
    equation = CoordinateEquation(1, 1, [0.1, 0.2])
    assert equation.display_name() == "S coordinates at (n, m) = (0, 2)"
