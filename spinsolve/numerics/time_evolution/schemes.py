"""指数積分スキームの定義表を提供するモジュール

各スキームは、係数の生成規則（``z = dt * L`` の関数）と1ステップの
段の組み合わせ規則の組として表され、名前をキーとする表
:data:`SCHEMES` から選択されます。

段の規則は ``advance(u, c, evaluate, history)`` の形で呼ばれます。

- ``u``: 現在の変換空間の場
- ``c``: :class:`IntegratorCoefficients`
- ``evaluate``: 変換空間の場から非線形項（変換空間）を返す関数
- ``history``: 非線形項の履歴 ``[N_n, N_{n-1}, ...]``（新しい順）。
  1段法では ``[N_n]`` のみ

参考文献:
    Cox & Matthews (2002), Krogstad (2005), Kassam & Trefethen (2005),
    Nørsett (1969), Hochbruck & Ostermann (2010)
"""

from dataclasses import dataclass
from enum import Enum
from math import factorial
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ...errors import ConfigurationError
from .phi import PhiSettings, phi_functions

Evaluate = Callable[[np.ndarray], np.ndarray]
CoefficientBuilder = Callable[[np.ndarray, float, PhiSettings], Dict[str, np.ndarray]]
StageRule = Callable[..., np.ndarray]


class SchemeKind(Enum):
    """スキームの種類"""

    ONE_STEP = "one-step"
    MULTISTEP = "multistep"


@dataclass(frozen=True)
class SchemeDefinition:
    """指数積分スキームの定義

    Attributes:
        name: スキーム名
        kind: 1段法か多段法か
        order: 公称の精度の次数
        evaluations: 1ステップあたりの非線形項の評価回数
        history: 保持する非線形項の履歴の長さ（1段法では1）
        build: 係数の生成規則
        advance: 段の組み合わせ規則
        startup: 多段法で履歴がそろうまで使う1段法
        description: 説明
    """

    name: str
    kind: SchemeKind
    order: int
    evaluations: int
    history: int
    build: CoefficientBuilder
    advance: StageRule
    startup: Optional[str] = None
    description: str = ""

    @property
    def is_multistep(self) -> bool:
        return self.kind is SchemeKind.MULTISTEP


def _apply(coefficient: np.ndarray, v: np.ndarray) -> np.ndarray:
    """係数を掛ける（``v`` が厳密に0の成分は、係数が有限でなくても0）"""
    return np.where(v == 0, 0, coefficient * v)


# ---------------------------------------------------------------------------
# 1段法


def _eulerexp_coefficients(z, dt, settings):
    phi0, phi1 = phi_functions(z, 1, settings)
    return {"E": phi0, "f1": dt * phi1}


def _eulerexp_advance(u, c, evaluate, history):
    return _apply(c["E"], u) + _apply(c["f1"], history[0])


def _etdrk2_coefficients(z, dt, settings):
    phi0, phi1, phi2 = phi_functions(z, 2, settings)
    return {"E": phi0, "f1": dt * phi1, "f2": dt * phi2}


def _etdrk2_advance(u, c, evaluate, history):
    nu = history[0]
    a = _apply(c["E"], u) + _apply(c["f1"], nu)
    return a + _apply(c["f2"], evaluate(a) - nu)


def _etdrk4_coefficients(z, dt, settings):
    half = phi_functions(z / 2.0, 1, settings)
    phi0, phi1, phi2, phi3 = phi_functions(z, 3, settings)
    return {
        "E": phi0,
        "E2": half[0],
        "Q": 0.5 * dt * half[1],
        "f1": dt * (phi1 - 3.0 * phi2 + 4.0 * phi3),
        "f2": dt * (phi2 - 2.0 * phi3),
        "f3": dt * (4.0 * phi3 - phi2),
    }


def _etdrk4_advance(u, c, evaluate, history):
    nu = history[0]
    eu = _apply(c["E2"], u)
    a = eu + _apply(c["Q"], nu)
    na = evaluate(a)
    b = eu + _apply(c["Q"], na)
    nb = evaluate(b)
    cc = _apply(c["E2"], a) + _apply(c["Q"], 2.0 * nb - nu)
    nc = evaluate(cc)
    return (
        _apply(c["E"], u)
        + _apply(c["f1"], nu)
        + _apply(2.0 * c["f2"], na + nb)
        + _apply(c["f3"], nc)
    )


def _krogstad_coefficients(z, dt, settings):
    _, hphi1, hphi2 = phi_functions(z / 2.0, 2, settings)
    phi0, phi1, phi2, phi3 = phi_functions(z, 3, settings)
    return {
        "E": phi0,
        "E2": np.exp(z / 2.0),
        "a21": 0.5 * dt * hphi1,
        "a31": 0.5 * dt * (hphi1 - 2.0 * hphi2),
        "a32": dt * hphi2,
        "a41": dt * (phi1 - 2.0 * phi2),
        "a43": 2.0 * dt * phi2,
        "b1": dt * (phi1 - 3.0 * phi2 + 4.0 * phi3),
        "b23": dt * (2.0 * phi2 - 4.0 * phi3),
        "b4": dt * (4.0 * phi3 - phi2),
    }


def _krogstad_advance(u, c, evaluate, history):
    nu = history[0]
    eu2 = _apply(c["E2"], u)
    eu = _apply(c["E"], u)
    a = eu2 + _apply(c["a21"], nu)
    na = evaluate(a)
    b = eu2 + _apply(c["a31"], nu) + _apply(c["a32"], na)
    nb = evaluate(b)
    cc = eu + _apply(c["a41"], nu) + _apply(c["a43"], nb)
    nc = evaluate(cc)
    return eu + _apply(c["b1"], nu) + _apply(c["b23"], na + nb) + _apply(c["b4"], nc)


def _lawson4_coefficients(z, dt, settings):
    # 積分因子法なのでphi関数は不要
    return {"E": np.exp(z), "E2": np.exp(z / 2.0)}


def _lawson4_advance(u, c, evaluate, history):
    dt = c.dt
    nu = history[0]
    eu = _apply(c["E"], u)
    a = _apply(c["E2"], u + 0.5 * dt * nu)
    na = evaluate(a)
    b = _apply(c["E2"], u) + 0.5 * dt * na
    nb = evaluate(b)
    cc = eu + dt * _apply(c["E2"], nb)
    nc = evaluate(cc)
    return eu + (dt / 6.0) * (
        _apply(c["E"], nu) + 2.0 * _apply(c["E2"], na + nb) + nc
    )


# ---------------------------------------------------------------------------
# 多段法


def exponential_quadrature(
    z: np.ndarray, dt: float, nodes: Sequence[float], settings: PhiSettings
) -> List[np.ndarray]:
    """指数求積の重みを計算

    正規化時刻 ``s`` の節点 ``nodes`` で非線形項を多項式補間したときの
    ``dt * ∫_0^1 exp((1-s) z) p(s) ds`` の各節点の重みを返します。
    ``∫_0^1 exp((1-s) z) s^k ds = k! phi_{k+1}(z)`` を使います。

    Args:
        z: ``dt * L``
        dt: 時間刻み幅
        nodes: 補間節点（``0`` が現在時刻、``-1`` が1ステップ前、``1`` が次の時刻）
        settings: phi関数の評価設定

    Returns:
        各節点の重み（``nodes`` と同じ順）
    """
    nodes = np.asarray(nodes, dtype=float)
    q = len(nodes)
    vandermonde = nodes[:, np.newaxis] ** np.arange(q)[np.newaxis, :]
    inverse = np.linalg.inv(vandermonde)
    phis = phi_functions(z, q, settings)
    moments = [factorial(k) * phis[k + 1] for k in range(q)]
    return [
        dt * sum(inverse[k, j] * moments[k] for k in range(q)) for j in range(q)
    ]


_ABNORSETT4_NODES: Tuple[float, ...] = (0.0, -1.0, -2.0, -3.0)
_PECEC433_PREDICTOR: Tuple[float, ...] = (0.0, -1.0, -2.0)
_PECEC433_CORRECTOR: Tuple[float, ...] = (1.0, 0.0, -1.0, -2.0)


def _abnorsett4_coefficients(z, dt, settings):
    weights = exponential_quadrature(z, dt, _ABNORSETT4_NODES, settings)
    coeffs = {"E": np.exp(z)}
    coeffs.update({f"b{j}": w for j, w in enumerate(weights)})
    return coeffs


def _abnorsett4_advance(u, c, evaluate, history):
    out = _apply(c["E"], u)
    for j, n in enumerate(history):
        out = out + _apply(c[f"b{j}"], n)
    return out


def _pecec433_coefficients(z, dt, settings):
    predictor = exponential_quadrature(z, dt, _PECEC433_PREDICTOR, settings)
    corrector = exponential_quadrature(z, dt, _PECEC433_CORRECTOR, settings)
    coeffs = {"E": np.exp(z)}
    coeffs.update({f"p{j}": w for j, w in enumerate(predictor)})
    coeffs.update({f"c{j}": w for j, w in enumerate(corrector)})
    return coeffs


def _pecec433_advance(u, c, evaluate, history):
    n0, n1, n2 = history
    base = _apply(c["E"], u)
    # P: 指数Adams-Bashforth (3次)
    predicted = base + _apply(c["p0"], n0) + _apply(c["p1"], n1) + _apply(c["p2"], n2)
    # EC: 指数Adams-Moulton (4次)
    known = base + _apply(c["c1"], n0) + _apply(c["c2"], n1) + _apply(c["c3"], n2)
    corrected = known + _apply(c["c0"], evaluate(predicted))
    # EC
    return known + _apply(c["c0"], evaluate(corrected))


# ---------------------------------------------------------------------------

SCHEMES: Dict[str, SchemeDefinition] = {
    scheme.name: scheme
    for scheme in (
        SchemeDefinition(
            name="eulerexp",
            kind=SchemeKind.ONE_STEP,
            order=1,
            evaluations=1,
            history=1,
            build=_eulerexp_coefficients,
            advance=_eulerexp_advance,
            description="exponential Euler (ETD1)",
        ),
        SchemeDefinition(
            name="etdrk2",
            kind=SchemeKind.ONE_STEP,
            order=2,
            evaluations=2,
            history=1,
            build=_etdrk2_coefficients,
            advance=_etdrk2_advance,
            description="Cox-Matthews ETDRK2",
        ),
        SchemeDefinition(
            name="etdrk4",
            kind=SchemeKind.ONE_STEP,
            order=4,
            evaluations=4,
            history=1,
            build=_etdrk4_coefficients,
            advance=_etdrk4_advance,
            description="Cox-Matthews ETDRK4",
        ),
        SchemeDefinition(
            name="krogstad",
            kind=SchemeKind.ONE_STEP,
            order=4,
            evaluations=4,
            history=1,
            build=_krogstad_coefficients,
            advance=_krogstad_advance,
            description="Krogstad ETDRK4-B",
        ),
        SchemeDefinition(
            name="lawson4",
            kind=SchemeKind.ONE_STEP,
            order=4,
            evaluations=4,
            history=1,
            build=_lawson4_coefficients,
            advance=_lawson4_advance,
            description="Lawson integrating-factor RK4",
        ),
        SchemeDefinition(
            name="abnorsett4",
            kind=SchemeKind.MULTISTEP,
            order=4,
            evaluations=1,
            history=4,
            build=_abnorsett4_coefficients,
            advance=_abnorsett4_advance,
            startup="etdrk4",
            description="Norsett exponential Adams-Bashforth, 4 steps",
        ),
        SchemeDefinition(
            name="pecec433",
            kind=SchemeKind.MULTISTEP,
            order=4,
            evaluations=3,
            history=3,
            build=_pecec433_coefficients,
            advance=_pecec433_advance,
            startup="etdrk4",
            description="exponential AB3 predictor, AM4 corrector (PECEC)",
        ),
    )
}

DEFAULT_SCHEME = "etdrk4"


def get_scheme(name: str) -> SchemeDefinition:
    """名前からスキームを取得（大文字小文字を区別しない）

    Raises:
        ConfigurationError: 未知のスキーム名の場合
    """
    key = str(name).lower()
    if key not in SCHEMES:
        raise ConfigurationError(
            f"未対応のスキームです: {name} (有効: {sorted(SCHEMES)})"
        )
    return SCHEMES[key]
