"""一様周期格子上のフーリエ変換を提供するモジュール

物理空間（格子点上の値）と変換空間（フーリエ係数）の間の変換、
波数の生成、乗算による微分、エイリアシング除去、スペクトル補間による
解像度変更を行います。

配列は常に ``(成分数, *格子形状)`` の形状を持ち、変換は空間軸のみに
適用されます。係数は ``norm="forward"`` で正規化されるため、振幅1の
モード ``exp(i k x)`` の係数は1になります。
"""

from typing import Optional, Sequence, Tuple, Union

import numpy as np
import scipy.fft

from ...errors import ConfigurationError
from .domain import Domain

DEALIAS_RULES = ("2/3", "nyquist")


def wavenumbers(n: int) -> np.ndarray:
    """FFTの並び（``0, 1, ..., -1``）の整数波数を取得

    偶数 ``n`` のナイキストモードは ``-n/2`` として表されます。
    """
    return np.rint(scipy.fft.fftfreq(n, d=1.0 / n)).astype(int)


def _normalize_shape(n: Union[int, Sequence[int]], ndim: int) -> Tuple[int, ...]:
    if np.isscalar(n):
        shape = (n,) * ndim
    else:
        shape = tuple(n)
    if len(shape) != ndim:
        raise ConfigurationError(
            f"グリッドサイズ {shape} の次元が領域の次元 {ndim} と一致しません"
        )
    for size in shape:
        if (
            isinstance(size, bool)
            or not isinstance(size, (int, np.integer, float))
            or int(size) != size
            or size < 2
        ):
            raise ConfigurationError(
                f"グリッドサイズは2以上の整数である必要があります: {n!r}"
            )
    return tuple(int(size) for size in shape)


class WavenumberGrid:
    """線形シンボルの評価に使う波数格子

    ``k`` は各次元のスケール済み波数 ``2πk/L`` の配列（``indexing="ij"``で
    格子形状に展開済み）です。
    """

    def __init__(self, domain: Domain, shape: Tuple[int, ...]):
        self.domain = domain
        self.shape = shape
        integer = [wavenumbers(n) for n in shape]
        scaled = [
            2.0 * np.pi * k / length for k, length in zip(integer, domain.lengths)
        ]
        self.integer = tuple(np.meshgrid(*integer, indexing="ij"))
        self.k = tuple(np.meshgrid(*scaled, indexing="ij"))

    @property
    def ndim(self) -> int:
        return len(self.shape)

    def diff(self, order: int = 1, axis: int = 0) -> np.ndarray:
        """``axis`` 方向の ``order`` 階微分のシンボル ``(i k)^order``

        奇数階では偶数格子のナイキストモードを0にします。
        """
        symbol = (1j * self.k[axis]) ** order
        n = self.shape[axis]
        if order % 2 == 1 and n % 2 == 0:
            symbol = np.where(self.integer[axis] == -n // 2, 0.0, symbol)
        return symbol

    @property
    def dx(self) -> np.ndarray:
        return self.diff(1, 0)

    @property
    def dy(self) -> np.ndarray:
        return self.diff(1, 1)

    @property
    def dz(self) -> np.ndarray:
        return self.diff(1, 2)

    @property
    def ksq(self) -> np.ndarray:
        """``|k|^2``"""
        return sum(k**2 for k in self.k)

    @property
    def laplacian(self) -> np.ndarray:
        return -self.ksq

    @property
    def biharmonic(self) -> np.ndarray:
        return self.ksq**2

    @property
    def ones(self) -> np.ndarray:
        return np.ones(self.shape)

    @property
    def zeros(self) -> np.ndarray:
        return np.zeros(self.shape)


class GridTransform:
    """一様周期格子上の順・逆フーリエ変換

    Attributes:
        domain: 計算領域
        shape: 各次元の格子点数
    """

    def __init__(self, domain: Domain, n: Union[int, Sequence[int]]):
        """
        Args:
            domain: 計算領域
            n: 格子点数（全次元共通の整数、または次元ごとの列）
        """
        self.domain = domain
        self.shape = _normalize_shape(n, domain.ndim)
        self._axes = tuple(range(-domain.ndim, 0))
        self._wavenumber_grid: Optional[WavenumberGrid] = None
        self._masks = {}

    @property
    def ndim(self) -> int:
        return self.domain.ndim

    def forward(self, physical: np.ndarray) -> np.ndarray:
        """物理空間から変換空間へ"""
        return scipy.fft.fftn(physical, axes=self._axes, norm="forward")

    def inverse(self, transform: np.ndarray) -> np.ndarray:
        """変換空間から物理空間へ"""
        return scipy.fft.ifftn(transform, axes=self._axes, norm="forward")

    def wavenumber_grid(self) -> WavenumberGrid:
        if self._wavenumber_grid is None:
            self._wavenumber_grid = WavenumberGrid(self.domain, self.shape)
        return self._wavenumber_grid

    def coordinates(self) -> Tuple[np.ndarray, ...]:
        return self.domain.coordinates(self.shape)

    def differentiate(self, coeffs: np.ndarray, orders: Sequence[int]) -> np.ndarray:
        """乗算による微分

        Args:
            coeffs: 変換空間の係数
            orders: 各次元の微分階数
        """
        if len(orders) != self.ndim:
            raise ConfigurationError(
                f"微分階数の数 {len(orders)} が次元 {self.ndim} と一致しません"
            )
        grid = self.wavenumber_grid()
        symbol = np.ones(self.shape, dtype=complex)
        for axis, order in enumerate(orders):
            if order:
                symbol = symbol * grid.diff(order, axis)
        return coeffs * symbol

    def dealias_mask(self, rule: str = "2/3") -> np.ndarray:
        """保持するモードを``True``とするマスクを取得

        - ``"2/3"``: いずれかの次元で ``|k| > n/3`` のモードを除去
        - ``"nyquist"``: いずれかの次元で ``|k| >= n/2`` のモードを除去
        """
        if rule not in DEALIAS_RULES:
            raise ConfigurationError(
                f"未対応のエイリアシング除去規則です: {rule} (有効: {DEALIAS_RULES})"
            )
        if rule not in self._masks:
            keep = np.ones(self.shape, dtype=bool)
            for axis, n in enumerate(self.shape):
                k = np.abs(wavenumbers(n))
                if rule == "2/3":
                    keep_axis = k <= n / 3.0
                else:
                    keep_axis = k < n / 2.0
                expand = [np.newaxis] * self.ndim
                expand[axis] = slice(None)
                keep = keep & keep_axis[tuple(expand)]
            self._masks[rule] = keep
        return self._masks[rule]

    def dealias(self, coeffs: np.ndarray, rule: str = "2/3") -> np.ndarray:
        return coeffs * self.dealias_mask(rule)

    def resample(self, coeffs: np.ndarray, shape: Sequence[int]) -> np.ndarray:
        """スペクトル補間（ゼロ詰め・切り捨て）で解像度を変更

        両方の解像度で曖昧さなく表現できる ``|k| <= (min(n, m) - 1) // 2``
        のモードのみを引き継ぎます。
        """
        shape = _normalize_shape(shape, self.ndim)
        out = coeffs
        for axis, m in zip(self._axes, shape):
            out = _resample_axis(out, axis, m)
        if out is coeffs:
            out = coeffs.copy()
        return out


def _resample_axis(coeffs: np.ndarray, axis: int, m: int) -> np.ndarray:
    n = coeffs.shape[axis]
    if n == m:
        return coeffs
    kmax = (min(n, m) - 1) // 2
    out_shape = list(coeffs.shape)
    out_shape[axis] = m
    out = np.zeros(out_shape, dtype=np.result_type(coeffs, complex))

    def index(s):
        idx = [slice(None)] * coeffs.ndim
        idx[axis] = s
        return tuple(idx)

    out[index(slice(0, kmax + 1))] = coeffs[index(slice(0, kmax + 1))]
    if kmax > 0:
        out[index(slice(m - kmax, m))] = coeffs[index(slice(n - kmax, n))]
    return out
