"""指数積分子のphi関数を評価するモジュール

``phi_0(z) = exp(z)``, ``phi_{k+1}(z) = (phi_k(z) - 1/k!) / z`` で定義される
phi関数を要素ごとに評価します。

直接の漸化式は ``|z|`` が小さいと桁落ちで精度を失うため、
``|z| < threshold`` の要素は安定な別経路で評価します。

- ``"contour"``: ``z`` を中心とする半径 ``radius`` の円周上の等間隔点で
  直接式を評価し平均する（コーシーの平均値定理、Kassam & Trefethen 2005）。
  円周上の点は原点から ``radius - threshold`` 以上離れるため桁落ちしません。
- ``"series"``: テイラー級数 ``phi_k(z) = sum_m z^m / (m + k)!``。
"""

from dataclasses import dataclass
from math import factorial
from typing import List

import numpy as np

from ...errors import ConfigurationError

PHI_METHODS = ("contour", "series")

DEFAULT_THRESHOLD = 1.0
DEFAULT_CONTOUR_POINTS = 32
DEFAULT_CONTOUR_RADIUS = 2.0
SERIES_TERMS = 30


@dataclass(frozen=True)
class PhiSettings:
    """phi関数の評価設定

    Attributes:
        method: 小さい ``|z|`` での安定な評価法
        threshold: 直接式に切り替える ``|z|`` の閾値
        points: 周回積分の点数
        radius: 周回積分の円の半径
    """

    method: str = "contour"
    threshold: float = DEFAULT_THRESHOLD
    points: int = DEFAULT_CONTOUR_POINTS
    radius: float = DEFAULT_CONTOUR_RADIUS

    def __post_init__(self):
        if self.method not in PHI_METHODS:
            raise ConfigurationError(
                f"未対応のphi関数評価法です: {self.method} (有効: {PHI_METHODS})"
            )
        if self.threshold <= 0:
            raise ConfigurationError("phi関数の閾値は正の値である必要があります")
        if self.points < 2:
            raise ConfigurationError("周回積分の点数は2以上である必要があります")
        if self.method == "contour" and self.radius <= self.threshold:
            raise ConfigurationError(
                "周回積分の半径は閾値より大きい必要があります"
                f" (radius={self.radius}, threshold={self.threshold})"
            )


def phi_direct(z: np.ndarray, order: int) -> List[np.ndarray]:
    """漸化式で ``[phi_0, ..., phi_order]`` を評価

    ``z = 0`` を含む要素では0除算になるため、小さい ``|z|`` には使いません。
    """
    z = np.asarray(z, dtype=complex)
    phis = [np.exp(z)]
    with np.errstate(divide="ignore", invalid="ignore"):
        for k in range(order):
            phis.append((phis[-1] - 1.0 / factorial(k)) / z)
    return phis


def phi_contour(
    z: np.ndarray,
    order: int,
    points: int = DEFAULT_CONTOUR_POINTS,
    radius: float = DEFAULT_CONTOUR_RADIUS,
) -> List[np.ndarray]:
    """円周上の平均で ``[phi_0, ..., phi_order]`` を評価"""
    z = np.asarray(z, dtype=complex)
    theta = 2.0 * np.pi * (np.arange(points) + 0.5) / points
    w = z[..., np.newaxis] + radius * np.exp(1j * theta)
    return [phi.mean(axis=-1) for phi in phi_direct(w, order)]


def phi_series(z: np.ndarray, order: int, terms: int = SERIES_TERMS) -> List[np.ndarray]:
    """テイラー級数で ``[phi_0, ..., phi_order]`` を評価（``|z| <= 1`` 程度向け）"""
    z = np.asarray(z, dtype=complex)
    phis = []
    for k in range(order + 1):
        # ホーナー法: sum_m z^m / (m + k)!
        total = np.full(z.shape, 1.0 / factorial(terms - 1 + k), dtype=complex)
        for m in range(terms - 2, -1, -1):
            total = total * z + 1.0 / factorial(m + k)
        phis.append(total)
    return phis


def phi_functions(
    z: np.ndarray, order: int, settings: PhiSettings = PhiSettings()
) -> List[np.ndarray]:
    """``[phi_0(z), ..., phi_order(z)]`` を安定に評価

    ``|z| >= threshold`` では直接式、それ以外では ``settings.method`` の
    安定な経路を使います。

    Args:
        z: 複素数配列（``dt * 固有値``）
        order: 最大の次数
        settings: 評価設定

    Returns:
        ``z`` と同じ形状の配列のリスト
    """
    z = np.asarray(z, dtype=complex)
    small = np.abs(z) < settings.threshold
    phis = [np.empty(z.shape, dtype=complex) for _ in range(order + 1)]

    large = ~small
    if np.any(large):
        for out, value in zip(phis, phi_direct(z[large], order)):
            out[large] = value

    if np.any(small):
        if settings.method == "contour":
            values = phi_contour(z[small], order, settings.points, settings.radius)
        else:
            values = phi_series(z[small], order)
        for out, value in zip(phis, values):
            out[small] = value

    # phi_0 は常に直接評価で正確
    phis[0] = np.exp(z)
    return phis
