import math

import numpy as np
import pytest

from phasorsense.algorithms.phasor import (
    is_finite_phasor,
    multispectral_phasor,
    phasor_to_polar,
    single_axis_phasor,
)


def test_single_axis_phasor_of_a_delta_sits_on_the_unit_circle():
    axis = [0.0, 1.0, 2.0, 3.0, 4.0]
    profile = [0.0, 1.0, 0.0, 0.0, 0.0]
    g, s = single_axis_phasor(profile, axis, (0.0, 4.0), 1)
    assert g == pytest.approx(0.0, abs=1e-12)
    assert s == pytest.approx(1.0)


def test_single_axis_phasor_of_a_flat_profile_is_the_origin():
    g, s = single_axis_phasor([1.0] * 5, [0.0, 1.0, 2.0, 3.0, 4.0], (0.0, 4.0), 1)
    assert g == pytest.approx(0.0, abs=1e-12)
    assert s == pytest.approx(0.0, abs=1e-12)


def test_multispectral_phasor_of_a_delta_uses_joint_normalization():
    axis = [0.0, 1.0, 2.0, 3.0]
    grid = np.zeros((4, 4))
    grid[1, 1] = 7.0
    g, s = multispectral_phasor(grid, axis, axis, (0.0, 3.0), (0.0, 3.0), (1, 1))
    assert g == pytest.approx(math.cos(4 * math.pi / 3))
    assert s == pytest.approx(math.sin(4 * math.pi / 3))


def test_multispectral_phasor_excludes_the_upper_window_index():
    axis = [0.0, 1.0, 2.0, 3.0]
    grid = np.zeros((4, 4))
    grid[3, 3] = 1.0
    g, s = multispectral_phasor(grid, axis, axis, (0.0, 3.0), (0.0, 3.0), (1, 1))
    assert math.isnan(g) and math.isnan(s)
    assert not is_finite_phasor((g, s))


def test_phasors_of_non_negative_grids_stay_inside_the_unit_circle():
    rng = np.random.default_rng(7)
    ex_axis = np.linspace(300.0, 500.0, 12)
    em_axis = np.linspace(350.0, 650.0, 15)
    for harmonic in [(1, 1), (1, 2), (2, 1), (2, 2)]:
        grid = rng.random((12, 15))
        g, s = multispectral_phasor(grid, ex_axis, em_axis, (310.0, 480.0), (360.0, 640.0), harmonic)
        assert g * g + s * s <= 1.0 + 1e-12


def test_single_axis_phasors_of_non_negative_profiles_stay_inside_the_unit_circle():
    rng = np.random.default_rng(11)
    axis = np.linspace(350.0, 650.0, 31)
    for harmonic in [1, 2, 3]:
        for _ in range(5):
            profile = rng.random(31)
            g, s = single_axis_phasor(profile, axis, (380.0, 600.0), harmonic)
            assert g * g + s * s <= 1.0 + 1e-12


def test_phasor_to_polar_quadrants():
    assert phasor_to_polar(1.0, 0.0) == pytest.approx((1.0, 0.0))
    assert phasor_to_polar(0.0, 0.5)[1] == pytest.approx(math.pi / 2)
    assert phasor_to_polar(-1.0, 0.0)[1] == pytest.approx(math.pi)
    assert phasor_to_polar(0.0, -1.0)[1] == pytest.approx(3 * math.pi / 2)
    assert phasor_to_polar(1.0, -1.0)[1] == pytest.approx(7 * math.pi / 4)
    rho, theta = phasor_to_polar(0.0, 0.0)
    assert rho == 0.0
    assert math.isnan(theta)


def test_is_finite_phasor():
    assert is_finite_phasor((0.1, 0.2))
    assert not is_finite_phasor(None)
    assert not is_finite_phasor((math.inf, 0.0))
