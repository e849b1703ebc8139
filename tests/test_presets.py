import dataclasses

import numpy as np
import pytest

from spinsolve import solve
from spinsolve.core.grid import Domain, GridTransform
from spinsolve.core.grid.transform import wavenumbers
from spinsolve.errors import ConfigurationError
from spinsolve.presets import available_presets, get_preset, random_trig_field

# 次元ごとのテスト用の格子点数
SMALL_GRID = {1: 32, 2: 16, 3: 8}


def test_available_presets():
    assert available_presets() == sorted(
        ["ac", "burg", "ks", "nls", "gl", "gs", "gsspots", "schnak", "sh", "gl3", "sh3"]
    )


def test_unknown_preset():
    with pytest.raises(ConfigurationError, match="heat"):
        get_preset("heat")


def test_preset_name_is_case_insensitive():
    spec, n, dt, _ = get_preset("GS")
    assert spec.name == "gs"
    assert (n, dt) == (64, 6.0)


@pytest.mark.parametrize("name", available_presets())
def test_preset_runs_a_few_steps(name):
    spec, n, dt, preferences = get_preset(name, seed=0)
    ndim = spec.domain.ndim
    spec = dataclasses.replace(spec, tspan=[spec.t0, spec.t0 + 2 * dt])
    preferences = preferences.replace(output_resolution=None, incremental_output=False)

    u, times = solve(spec, SMALL_GRID[ndim], dt, preferences)
    assert u.shape[1:] == (SMALL_GRID[ndim],) * ndim
    assert np.all(np.isfinite(u))
    assert times[-1] == pytest.approx(spec.tf)


def test_gray_scott_is_a_two_component_system():
    spec, n, _, preferences = get_preset("gsspots")
    operator = spec.validate(GridTransform(spec.domain, 16))
    assert operator.ncomponents == 2
    assert operator.real
    assert preferences.clim_for(1) == (0.0, 0.6)


def test_random_initial_condition_is_reproducible():
    domain = Domain.cube(0.0, 10.0, 2)
    x, y = GridTransform(domain, 16).coordinates()
    a = random_trig_field(domain, seed=3)(x, y)
    b = random_trig_field(domain, seed=3)(x, y)
    c = random_trig_field(domain, seed=4)(x, y)
    np.testing.assert_array_equal(a, b)
    assert not np.allclose(a, c)
    assert np.max(np.abs(a)) == pytest.approx(1.0)


def test_random_initial_condition_is_band_limited():
    domain = Domain.cube(0.0, 2 * np.pi, 1)
    transform = GridTransform(domain, 32)
    u = random_trig_field(domain, modes=3, seed=0)(*transform.coordinates())
    coeffs = transform.forward(u[np.newaxis])
    kint = np.abs(wavenumbers(32))
    assert np.max(np.abs(coeffs[0, kint > 3])) < 1e-12


def test_seeded_presets_share_initial_condition():
    a, n, _, _ = get_preset("sh", seed=1)
    b, _, _, _ = get_preset("sh", seed=1)
    transform = GridTransform(a.domain, 16)
    np.testing.assert_array_equal(
        a.initial_field(transform), b.initial_field(transform)
    )
