from math import factorial

import numpy as np
import pytest

from spinsolve.errors import ConfigurationError
from spinsolve.numerics.time_evolution import (
    PhiSettings,
    phi_contour,
    phi_direct,
    phi_functions,
    phi_series,
)

ORDER = 4


@pytest.fixture
def overlap_points():
    """直接式と安定な経路の両方が使える中程度の ``|z|``"""
    radius = np.linspace(0.5, 0.95, 7)
    angle = np.linspace(0.0, 2 * np.pi, 11, endpoint=False)
    return (radius[:, np.newaxis] * np.exp(1j * angle[np.newaxis, :])).ravel()


def test_contour_agrees_with_direct_in_overlap(overlap_points):
    direct = phi_direct(overlap_points, ORDER)
    stable = phi_contour(overlap_points, ORDER)
    for k in range(ORDER + 1):
        np.testing.assert_allclose(stable[k], direct[k], rtol=1e-9)


def test_series_agrees_with_direct_in_overlap(overlap_points):
    direct = phi_direct(overlap_points, ORDER)
    stable = phi_series(overlap_points, ORDER)
    for k in range(ORDER + 1):
        np.testing.assert_allclose(stable[k], direct[k], rtol=1e-9)


def test_contour_with_small_radius_agrees_with_direct_for_larger_z():
    z = np.array([1.0, -2.0, 3.0j, -1.5 + 1.5j])
    direct = phi_direct(z, ORDER)
    stable = phi_contour(z, ORDER, points=64, radius=0.5)
    for k in range(ORDER + 1):
        np.testing.assert_allclose(stable[k], direct[k], rtol=1e-9)


def test_direct_formula_loses_accuracy_near_zero():
    z = np.array([1e-10])
    exact = 1.0 / factorial(3)
    naive = phi_direct(z, 3)[3]
    assert abs(naive[0] - exact) / exact > 1e-2

    for method in ("contour", "series"):
        phis = phi_functions(z, 3, PhiSettings(method=method))
        for k, phi in enumerate(phis):
            assert phi[0] == pytest.approx(1.0 / factorial(k), rel=1e-12)


def test_phi_functions_at_zero_is_finite():
    phis = phi_functions(np.zeros(3), ORDER)
    for k, phi in enumerate(phis):
        assert np.allclose(phi, 1.0 / factorial(k), rtol=1e-13)


def test_phi_functions_are_continuous_across_threshold():
    below = phi_functions(np.array([-0.999999]), ORDER)
    above = phi_functions(np.array([-1.000001]), ORDER)
    for lo, hi in zip(below, above):
        assert lo[0] == pytest.approx(hi[0], rel=1e-5)


def test_stiff_entries():
    z = np.array([-1e4, -50.0 + 20.0j])
    phis = phi_functions(z, 2)
    assert np.all(np.isfinite(np.concatenate(phis)))
    assert phis[1][0] == pytest.approx(1e-4, rel=1e-10)


def test_phi_functions_preserve_shape():
    z = np.linspace(-3, 0, 12).reshape(3, 4)
    phis = phi_functions(z, 2)
    assert all(phi.shape == (3, 4) for phi in phis)


def test_invalid_settings():
    with pytest.raises(ConfigurationError):
        PhiSettings(method="pade")
    with pytest.raises(ConfigurationError):
        PhiSettings(threshold=1.0, radius=0.5)
    with pytest.raises(ConfigurationError):
        PhiSettings(points=1)
    # 級数法では半径は使わない
    PhiSettings(method="series", threshold=1.0, radius=0.5)
