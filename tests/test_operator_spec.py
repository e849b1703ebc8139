import numpy as np
import pytest

from spinsolve.core.grid import Domain, GridTransform
from spinsolve.core.operator import OperatorSpec
from spinsolve.errors import ConfigurationError


def make_transform(spec, n=16):
    return GridTransform(spec.domain, n)


def test_flat_and_paired_domain_are_equivalent():
    a = OperatorSpec([0, 1, 0, 2], [0, 1], linear=lambda k: k.laplacian, initial=0.0)
    b = OperatorSpec(
        [(0, 1), (0, 2)], [0, 1], linear=lambda k: k.laplacian, initial=0.0
    )
    assert a.domain == b.domain == Domain(((0.0, 1.0), (0.0, 2.0)))


@pytest.mark.parametrize("domain", [[0, 0], [1, 0], [0, 1, 2], [0, np.inf]])
def test_degenerate_domain(domain):
    with pytest.raises(ConfigurationError):
        OperatorSpec(domain, [0, 1], linear=lambda k: k.laplacian, initial=0.0)


@pytest.mark.parametrize("tspan", [[0], [1, 0], [0, 1, 1], [0, np.nan]])
def test_invalid_tspan(tspan):
    with pytest.raises(ConfigurationError):
        OperatorSpec([0, 1], tspan, linear=lambda k: k.laplacian, initial=0.0)


def test_missing_initial_condition():
    with pytest.raises(ConfigurationError):
        OperatorSpec([0, 1], [0, 1], linear=lambda k: k.laplacian)


def test_system_components():
    spec = OperatorSpec(
        domain=[0, 2 * np.pi],
        tspan=[0, 1],
        linear=lambda k: [k.laplacian, 0.5 * k.laplacian],
        nonlinear=lambda w: [w[0] * w[1], -w[0] * w[1]],
        initial=lambda x: [np.cos(x), np.sin(x)],
    )
    operator = spec.validate(make_transform(spec))
    assert operator.ncomponents == 2
    assert operator.linear.shape == (2, 16)
    assert operator.initial.shape == (2, 16)
    assert operator.real


def test_component_count_mismatch_in_initial_condition():
    spec = OperatorSpec(
        domain=[0, 2 * np.pi],
        tspan=[0, 1],
        linear=lambda k: [k.laplacian, k.laplacian],
        initial=lambda x: np.cos(x),
    )
    with pytest.raises(ConfigurationError):
        spec.validate(make_transform(spec))


def test_component_count_mismatch_in_nonlinear_term():
    spec = OperatorSpec(
        domain=[0, 2 * np.pi],
        tspan=[0, 1],
        linear=lambda k: [k.laplacian, k.laplacian],
        nonlinear=lambda w: [w[0] ** 2, w[1] ** 2, w[0] * w[1]],
        initial=lambda x: [np.cos(x), np.sin(x)],
    )
    with pytest.raises(ConfigurationError):
        spec.validate(make_transform(spec))


def test_sampled_initial_condition_shape():
    spec = OperatorSpec(
        domain=[0, 1],
        tspan=[0, 1],
        linear=lambda k: k.laplacian,
        initial=np.zeros(12),
    )
    with pytest.raises(ConfigurationError):
        spec.validate(make_transform(spec, 16))

    operator = spec.validate(make_transform(spec, 12))
    assert operator.initial.shape == (1, 12)


def test_non_finite_initial_condition():
    spec = OperatorSpec(
        domain=[0, 1],
        tspan=[0, 1],
        linear=lambda k: k.laplacian,
        initial=lambda x: 1.0 / x,
    )
    with pytest.raises(ConfigurationError):
        spec.validate(make_transform(spec))


def test_transform_domain_must_match():
    spec = OperatorSpec([0, 1], [0, 1], linear=lambda k: k.laplacian, initial=0.0)
    with pytest.raises(ConfigurationError):
        spec.validate(GridTransform(Domain(((0.0, 2.0),)), 8))


def test_real_valuedness_detection():
    def build(linear, nonlinear=None, initial=lambda x: np.cos(x)):
        spec = OperatorSpec(
            [0, 2 * np.pi], [0, 1], linear=linear, nonlinear=nonlinear, initial=initial
        )
        return spec.validate(make_transform(spec)).real

    # 分散項 i k^3 は共役対称なので実数値のまま
    assert build(lambda k: -k.ksq + k.diff(3))
    assert not build(lambda k: 1j * k.laplacian)
    assert not build(lambda k: k.laplacian, initial=lambda x: np.exp(1j * x))
    assert not build(lambda k: k.laplacian, nonlinear=lambda u: 1j * u)


def test_nonlinear_symbol_is_stacked():
    spec = OperatorSpec(
        domain=[0, 2 * np.pi],
        tspan=[0, 1],
        linear=lambda k: k.laplacian,
        nonlinear=lambda u: u**2,
        nonlinear_symbol=lambda k: -0.5 * k.dx,
        initial=lambda x: np.sin(x),
    )
    operator = spec.validate(make_transform(spec, 8))
    assert operator.multiplier.shape == (1, 8)
    assert operator.multiplier[0, 1] == pytest.approx(-0.5j)


def test_non_callable_linear_symbol():
    with pytest.raises(ConfigurationError):
        OperatorSpec([0, 1], [0, 1], linear=np.ones(4), initial=0.0)
