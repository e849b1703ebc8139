"""指数積分による時間発展パッケージ

phi関数の安定な評価、スキームの定義表、係数の計算とキャッシュ、
1ステップの前進を提供します。
"""

from .coefficients import CoefficientCache, IntegratorCoefficients, compute_coefficients
from .nonlinear import NonlinearEvaluator
from .phi import (
    PHI_METHODS,
    PhiSettings,
    phi_contour,
    phi_direct,
    phi_functions,
    phi_series,
)
from .schemes import (
    DEFAULT_SCHEME,
    SCHEMES,
    SchemeDefinition,
    SchemeKind,
    exponential_quadrature,
    get_scheme,
)
from .stepper import DEFAULT_BLOWUP_FACTOR, Stepper

__all__ = [
    "PhiSettings",
    "PHI_METHODS",
    "phi_functions",
    "phi_direct",
    "phi_contour",
    "phi_series",
    "SchemeDefinition",
    "SchemeKind",
    "SCHEMES",
    "DEFAULT_SCHEME",
    "get_scheme",
    "exponential_quadrature",
    "IntegratorCoefficients",
    "compute_coefficients",
    "CoefficientCache",
    "NonlinearEvaluator",
    "Stepper",
    "DEFAULT_BLOWUP_FACTOR",
]
