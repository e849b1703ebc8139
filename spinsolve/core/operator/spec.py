"""PDEの線形部分と非線形部分への分解を表現するモジュール

``u_t = L u + N(u)`` の形のPDEを、領域・時間区間・線形シンボル・
非線形項・初期条件の組として保持します。

- 線形シンボル ``linear(k)`` は :class:`WavenumberGrid` を受け取り、
  成分ごとの固有値配列（単一成分なら配列1つ、連立系ならそのリスト）を返します。
- 非線形項 ``nonlinear(u)`` は ``(成分数, *格子形状)`` の物理空間の場を受け取り、
  同じ形状の場を返します。
- ``nonlinear_symbol(k)`` を指定すると、非線形項の変換後に固定の乗数を
  掛けます（例: Burgers方程式の ``-0.5 d/dx``）。
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence, Tuple, Union

import numpy as np

from ...errors import ConfigurationError
from ..grid import Domain, GridTransform, WavenumberGrid

SymbolFunction = Callable[[WavenumberGrid], Any]
NonlinearFunction = Callable[[np.ndarray], Any]


def stack_components(
    value: Any, shape: Tuple[int, ...], what: str, ncomponents: Optional[int] = None
) -> np.ndarray:
    """値を ``(成分数, *shape)`` の配列に揃える

    Args:
        value: スカラー・配列・配列のリスト
        shape: 格子形状
        what: エラーメッセージ用の名前
        ncomponents: 期待する成分数（``None``なら検査しない）
    """
    try:
        if isinstance(value, (list, tuple)):
            parts = [np.broadcast_to(np.asarray(v), shape) for v in value]
            stacked = np.stack(parts) if parts else np.empty((0,) + shape)
        else:
            array = np.asarray(value)
            if array.ndim == len(shape) + 1 and array.shape[1:] == shape:
                stacked = array
            else:
                stacked = np.broadcast_to(array, shape)[np.newaxis]
    except ValueError as e:
        raise ConfigurationError(
            f"{what} の形状が格子 {shape} と整合しません: {e}"
        ) from e

    if stacked.shape[0] == 0:
        raise ConfigurationError(f"{what} に成分がありません")
    if ncomponents is not None and stacked.shape[0] != ncomponents:
        raise ConfigurationError(
            f"{what} の成分数 {stacked.shape[0]} が線形シンボルの成分数 "
            f"{ncomponents} と一致しません"
        )
    return np.array(stacked)


def _reflect(array: np.ndarray) -> np.ndarray:
    """空間軸について波数 ``k`` を ``-k`` に写す"""
    out = array
    for axis in range(1, array.ndim):
        n = array.shape[axis]
        out = np.take(out, (-np.arange(n)) % n, axis=axis)
    return out


def is_conjugate_symmetric(symbol: np.ndarray) -> bool:
    """シンボルが ``L(-k) = conj(L(k))`` を満たすか（実数値の場を保つか）"""
    scale = max(float(np.max(np.abs(symbol))), 1.0)
    return bool(
        np.allclose(symbol, np.conj(_reflect(symbol)), rtol=0.0, atol=1e-12 * scale)
    )


@dataclass
class DiscreteOperator:
    """格子上で評価済みの演算子

    Attributes:
        linear: 成分ごとの線形シンボル ``(成分数, *格子形状)``
        multiplier: 非線形項に掛ける乗数（なければ``None``）
        initial: 物理空間の初期条件
        real: 解が実数値のまま保たれるか
    """

    linear: np.ndarray
    multiplier: Optional[np.ndarray]
    initial: np.ndarray
    real: bool

    @property
    def ncomponents(self) -> int:
        return self.linear.shape[0]


@dataclass
class OperatorSpec:
    """周期領域上の硬いPDEの指定

    Attributes:
        domain: 計算領域（:class:`Domain`、区間の組、または平坦な端点列）
        tspan: 時間区間 ``[t0, ..., tf]``（中間の値は出力時刻）
        linear: 線形シンボル
        nonlinear: 非線形項（``None``なら0）
        initial: 初期条件（座標配列を受け取る関数、または格子上の値）
        nonlinear_symbol: 非線形項に掛ける変換空間の乗数
        name: 名前（ログ・出力用）
    """

    domain: Union[Domain, Sequence]
    tspan: Sequence[float]
    linear: SymbolFunction
    nonlinear: Optional[NonlinearFunction] = None
    initial: Any = None
    nonlinear_symbol: Optional[SymbolFunction] = None
    name: str = "custom"
    _ncomponents: Optional[int] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if not isinstance(self.domain, Domain):
            values = list(self.domain)
            if values and np.isscalar(values[0]):
                self.domain = Domain.from_flat(values)
            else:
                self.domain = Domain(tuple(tuple(pair) for pair in values))

        try:
            tspan = [float(t) for t in self.tspan]
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"時間区間が不正です: {self.tspan!r}") from e
        if len(tspan) < 2:
            raise ConfigurationError("時間区間には開始時刻と終了時刻が必要です")
        if not np.all(np.isfinite(tspan)) or np.any(np.diff(tspan) <= 0):
            raise ConfigurationError(
                f"時間区間は有限で狭義単調増加である必要があります: {tspan}"
            )
        self.tspan = tuple(tspan)

        if not callable(self.linear):
            raise ConfigurationError("線形シンボルは呼び出し可能である必要があります")
        if self.nonlinear is not None and not callable(self.nonlinear):
            raise ConfigurationError("非線形項は呼び出し可能である必要があります")
        if self.nonlinear_symbol is not None and not callable(self.nonlinear_symbol):
            raise ConfigurationError("非線形項の乗数は呼び出し可能である必要があります")
        if self.initial is None:
            raise ConfigurationError("初期条件が指定されていません")

    @property
    def t0(self) -> float:
        return self.tspan[0]

    @property
    def tf(self) -> float:
        return self.tspan[-1]

    @property
    def ncomponents(self) -> Optional[int]:
        """成分数（:meth:`linear_symbol` の評価後に確定）"""
        return self._ncomponents

    def linear_symbol(self, grid: WavenumberGrid) -> np.ndarray:
        """成分ごとの線形シンボル（固有値）を評価"""
        symbol = stack_components(self.linear(grid), grid.shape, "線形シンボル")
        self._ncomponents = symbol.shape[0]
        return symbol.astype(complex)

    def nonlinear_multiplier(self, grid: WavenumberGrid) -> Optional[np.ndarray]:
        if self.nonlinear_symbol is None:
            return None
        ncomp = self._ncomponents or len(self.linear_symbol(grid))
        symbol = stack_components(
            self.nonlinear_symbol(grid), grid.shape, "非線形項の乗数", ncomp
        )
        return symbol.astype(complex)

    def evaluate_nonlinear(self, u: np.ndarray) -> np.ndarray:
        """物理空間で非線形項を評価"""
        if self.nonlinear is None:
            return np.zeros_like(u)
        return stack_components(
            self.nonlinear(u), u.shape[1:], "非線形項", u.shape[0]
        )

    def initial_field(self, transform: GridTransform) -> np.ndarray:
        """格子上の初期条件 ``(成分数, *格子形状)`` を取得"""
        ncomp = self._ncomponents
        if ncomp is None:
            ncomp = len(self.linear_symbol(transform.wavenumber_grid()))
        if callable(self.initial):
            value = self.initial(*transform.coordinates())
        else:
            value = self.initial
            if isinstance(value, np.ndarray) and value.ndim > 0:
                sampled_shape = value.shape[-transform.ndim :]
            else:
                sampled_shape = transform.shape
            if sampled_shape != transform.shape:
                raise ConfigurationError(
                    f"初期条件のデータ形状 {value.shape} が格子 {transform.shape} "
                    "と一致しません"
                )
        u0 = stack_components(value, transform.shape, "初期条件", ncomp)
        if not np.all(np.isfinite(u0)):
            raise ConfigurationError("初期条件に有限でない値が含まれています")
        return u0

    def validate(self, transform: GridTransform) -> DiscreteOperator:
        """格子上で演算子を評価し、整合性を検証

        時間発展を始める前に、成分数や形状の不一致をすべて検出します。

        実数値の判定は初期条件での非線形項の評価1回に基づきます。非線形項は
        実数の場を実数の場に写すものと仮定しており、初期条件でだけ実数になる
        非線形項（例えば初期条件で0になるもの）では、以降の虚部が捨てられます。

        Raises:
            ConfigurationError: 領域・成分数・形状が整合しない場合
        """
        if transform.domain != self.domain:
            raise ConfigurationError(
                f"格子の領域 {transform.domain} が演算子の領域 {self.domain} と異なります"
            )
        grid = transform.wavenumber_grid()
        linear = self.linear_symbol(grid)
        multiplier = self.nonlinear_multiplier(grid)
        initial = self.initial_field(transform)
        response = self.evaluate_nonlinear(initial)
        if not np.all(np.isfinite(response)):
            raise ConfigurationError("初期条件での非線形項の値が有限ではありません")

        real = (
            np.isrealobj(initial) or not np.any(np.imag(initial))
        ) and not np.any(np.imag(response))
        real = real and is_conjugate_symmetric(linear)
        if multiplier is not None:
            real = real and is_conjugate_symmetric(multiplier)
        if real:
            initial = np.real(initial)

        return DiscreteOperator(
            linear=linear, multiplier=multiplier, initial=initial, real=bool(real)
        )
