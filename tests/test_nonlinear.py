import numpy as np
import pytest

from spinsolve import OperatorSpec
from spinsolve.core.grid import GridTransform, wavenumbers
from spinsolve.numerics.time_evolution import NonlinearEvaluator

N = 16


def build(initial, nonlinear=lambda u: u**2, nonlinear_symbol=None, dealias="2/3"):
    spec = OperatorSpec(
        domain=[0, 2 * np.pi],
        tspan=[0, 1],
        linear=lambda k: k.laplacian,
        nonlinear=nonlinear,
        nonlinear_symbol=nonlinear_symbol,
        initial=initial,
    )
    transform = GridTransform(spec.domain, N)
    operator = spec.validate(transform)
    evaluator = NonlinearEvaluator(
        spec,
        transform,
        multiplier=operator.multiplier,
        dealias=dealias,
        real=operator.real,
    )
    return evaluator, transform, operator


def test_quadratic_term_is_dealiased():
    """``cos(5x)^2`` の ``k = ±10`` は ``∓6`` に折り返すが、2/3則で除去される"""
    evaluator, transform, operator = build(lambda x: np.cos(5 * x))
    n = evaluator(transform.forward(operator.initial))
    k = np.abs(wavenumbers(N))

    assert np.all(n[0, k > N / 3] == 0)
    assert n[0, 0] == pytest.approx(0.5)
    n[0, 0] = 0.0
    assert np.max(np.abs(n)) < 1e-14


def test_nyquist_rule_keeps_aliased_modes():
    evaluator, transform, operator = build(lambda x: np.cos(5 * x), dealias="nyquist")
    n = evaluator(transform.forward(operator.initial))
    # 折り返した cos(10x) が k = ±6 に現れる
    assert n[0, 6] == pytest.approx(0.25)
    assert n[0, -6] == pytest.approx(0.25)
    assert n[0, N // 2] == 0


def test_multiplier_is_combined_with_mask():
    evaluator, transform, operator = build(
        lambda x: np.cos(x) + 0.5 * np.cos(5 * x),
        nonlinear_symbol=lambda k: -0.5 * k.dx,
    )
    u_hat = transform.forward(operator.initial)
    n = evaluator(u_hat)

    mask = transform.dealias_mask("2/3")
    expected = transform.forward(operator.initial**2) * operator.multiplier * mask
    np.testing.assert_allclose(n, expected, atol=1e-14)
    k = np.abs(wavenumbers(N))
    assert np.all(n[0, k > N / 3] == 0)
    assert np.abs(n[0, 2]) > 0.1


def test_real_run_discards_imaginary_rounding():
    evaluator, transform, operator = build(lambda x: np.cos(x))
    assert operator.real
    physical = evaluator.to_physical(transform.forward(operator.initial))
    assert np.isrealobj(physical)


def test_complex_run_keeps_complex_field():
    evaluator, transform, operator = build(
        lambda x: np.exp(1j * x), nonlinear=lambda u: 1j * np.abs(u) ** 2 * u
    )
    assert not operator.real
    n = evaluator(transform.forward(operator.initial))
    # |exp(ix)|^2 = 1 なので N(u) = i exp(ix)
    assert n[0, 1] == pytest.approx(1j)


def test_zero_nonlinear_term_returns_exact_zeros():
    evaluator, transform, operator = build(lambda x: np.cos(x), nonlinear=None)
    assert evaluator.is_zero
    u_hat = transform.forward(operator.initial)
    n = evaluator(u_hat)
    assert n.shape == u_hat.shape
    assert np.all(n == 0)
    assert evaluator.evaluations == 1
