import numpy as np
import pytest

from spinsolve import OperatorSpec, Preferences
from spinsolve.logger import LogConfig


@pytest.fixture
def periodic_domain():
    return [0.0, 2 * np.pi]


@pytest.fixture
def heat_spec(periodic_domain):
    """``u_t = u_xx``、初期条件 ``exp(ix)``"""
    return OperatorSpec(
        domain=periodic_domain,
        tspan=[0, 1],
        linear=lambda k: -(k.k[0] ** 2),
        initial=lambda x: np.exp(1j * x),
        name="heat",
    )


@pytest.fixture
def logistic_spec():
    """``u' = -u + u^2``、``u(0) = 1/2``（厳密解 ``1 / (1 + e^t)``）"""

    def build(tspan=(0, 1)):
        return OperatorSpec(
            domain=[0.0, 2 * np.pi],
            tspan=list(tspan),
            linear=lambda k: -k.ones,
            nonlinear=lambda u: u**2,
            initial=0.5,
            name="logistic",
        )

    return build


@pytest.fixture
def allen_cahn_spec(periodic_domain):
    return OperatorSpec(
        domain=periodic_domain,
        tspan=[0, 1],
        linear=lambda k: 0.1 * k.laplacian,
        nonlinear=lambda u: u - u**3,
        initial=lambda x: 0.5 * np.cos(x) + 0.2 * np.sin(3 * x),
        name="allen-cahn",
    )


@pytest.fixture
def quiet_preferences(tmp_path):
    return Preferences(output_dir=str(tmp_path / "results"))


@pytest.fixture
def quiet_log_config(tmp_path):
    config = LogConfig(log_dir=tmp_path / "logs")
    config.console_logging["enabled"] = False
    return config
