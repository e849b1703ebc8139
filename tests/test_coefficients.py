import numpy as np
import pytest

from spinsolve.errors import ConfigurationError
from spinsolve.numerics.time_evolution import (
    CoefficientCache,
    PhiSettings,
    compute_coefficients,
    get_scheme,
)


@pytest.fixture
def spectrum():
    """ゼロ固有値（非拡散成分）から非常に硬い固有値までを含むシンボル"""
    k = np.arange(-32, 32)
    return np.stack([-(k**2).astype(float), 1j * k**3 - k**4])


@pytest.mark.parametrize("name", ["etdrk4", "krogstad", "abnorsett4", "pecec433"])
def test_coefficients_are_finite(name, spectrum):
    coefficients = compute_coefficients(name, spectrum, 0.1)
    assert coefficients.is_finite()
    for array in coefficients.arrays.values():
        assert array.shape == spectrum.shape


def test_etdrk4_removable_singularity():
    """``z = 0`` では f1 = f2 = f3 = dt/6"""
    dt = 0.2
    coefficients = compute_coefficients("etdrk4", np.zeros((1, 4)), dt)
    for key in ("f1", "f2", "f3"):
        np.testing.assert_allclose(coefficients[key], dt / 6, rtol=1e-13)
    np.testing.assert_allclose(coefficients["E"], 1.0)


def test_stable_methods_give_same_coefficients(spectrum):
    contour = compute_coefficients("etdrk4", spectrum, 0.05, PhiSettings("contour"))
    series = compute_coefficients("etdrk4", spectrum, 0.05, PhiSettings("series"))
    for key in contour.arrays:
        np.testing.assert_allclose(contour[key], series[key], rtol=1e-10, atol=1e-14)


def test_coefficients_are_read_only(spectrum):
    coefficients = compute_coefficients("etdrk2", spectrum, 0.1)
    with pytest.raises(ValueError):
        coefficients["E"][0, 0] = 0.0


def test_multistep_coefficients_include_startup(spectrum):
    coefficients = compute_coefficients("abnorsett4", spectrum, 0.1)
    assert coefficients.startup is not None
    assert coefficients.startup.scheme == "etdrk4"
    assert "b3" in coefficients


@pytest.mark.parametrize("dt", [0.0, -0.1])
def test_non_positive_dt(dt, spectrum):
    with pytest.raises(ConfigurationError):
        compute_coefficients("etdrk4", spectrum, dt)


def test_cache_reuses_coefficients(spectrum):
    cache = CoefficientCache(maxsize=2)
    scheme = get_scheme("etdrk4")
    settings = PhiSettings()
    domain = (0.0, 2 * np.pi)

    first = cache.get(scheme, spectrum, 0.1, domain, settings)
    assert cache.get(scheme, spectrum, 0.1, domain, settings) is first
    assert cache.get_diagnostics() == {"entries": 1, "hits": 1, "misses": 1}

    second = cache.get(scheme, spectrum, 0.05, domain, settings)
    assert second is not first
    assert second.dt == 0.05

    cache.get(scheme, spectrum, 0.025, domain, settings)
    assert len(cache) == 2
    # 最も古いdt=0.1は追い出されている
    assert cache.get(scheme, spectrum, 0.1, domain, settings) is not first


def test_cache_key_includes_phi_settings(spectrum):
    cache = CoefficientCache()
    scheme = get_scheme("etdrk4")
    domain = (0.0, 1.0)
    a = cache.get(scheme, spectrum, 0.1, domain, PhiSettings("contour"))
    b = cache.get(scheme, spectrum, 0.1, domain, PhiSettings("series"))
    assert a is not b
    assert cache.misses == 2


def test_cache_key_includes_linear_symbol(spectrum):
    cache = CoefficientCache()
    scheme = get_scheme("etdrk4")
    settings = PhiSettings()
    domain = (0.0, 2 * np.pi)
    a = cache.get(scheme, spectrum, 0.1, domain, settings)
    b = cache.get(scheme, 2.0 * spectrum, 0.1, domain, settings)
    assert a is not b
    np.testing.assert_allclose(b["E"], np.exp(0.2 * spectrum))
    assert cache.get(scheme, spectrum.copy(), 0.1, domain, settings) is a
