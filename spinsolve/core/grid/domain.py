"""周期的な計算領域を表現するモジュール"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from ...errors import ConfigurationError


@dataclass(frozen=True)
class Domain:
    """全方向に周期的な直方体領域

    Attributes:
        bounds: 各次元の区間 ``((a1, b1), (a2, b2), ...)``
    """

    bounds: Tuple[Tuple[float, float], ...]

    def __post_init__(self):
        """初期化後の検証"""
        try:
            bounds = tuple((float(a), float(b)) for a, b in self.bounds)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"領域の指定が不正です: {self.bounds!r}") from e
        if not 1 <= len(bounds) <= 3:
            raise ConfigurationError(
                f"領域は1〜3次元である必要があります: {len(bounds)}次元"
            )
        for dim, (a, b) in enumerate(bounds):
            if not (np.isfinite(a) and np.isfinite(b)) or b - a <= 0:
                raise ConfigurationError(
                    f"次元{dim}の区間 [{a}, {b}] は正の長さを持つ必要があります"
                )
        object.__setattr__(self, "bounds", bounds)

    @classmethod
    def from_flat(cls, values: Sequence[float]) -> "Domain":
        """``[a1, b1, a2, b2, ...]`` 形式から領域を生成"""
        values = list(values)
        if len(values) % 2 != 0:
            raise ConfigurationError(
                f"領域の端点の数は偶数である必要があります: {values}"
            )
        return cls(tuple(zip(values[0::2], values[1::2])))

    @classmethod
    def cube(cls, a: float, b: float, ndim: int) -> "Domain":
        """各次元が同じ区間 ``[a, b]`` の領域を生成"""
        return cls(tuple((a, b) for _ in range(ndim)))

    @property
    def ndim(self) -> int:
        return len(self.bounds)

    @property
    def lengths(self) -> Tuple[float, ...]:
        """各次元の周期長"""
        return tuple(b - a for a, b in self.bounds)

    @property
    def lower(self) -> Tuple[float, ...]:
        return tuple(a for a, _ in self.bounds)

    def coordinates(self, shape: Sequence[int]) -> Tuple[np.ndarray, ...]:
        """一様格子の座標配列（``indexing="ij"``）を取得

        周期性により右端点は含みません: ``x_j = a + j * L / n``。
        """
        if len(shape) != self.ndim:
            raise ConfigurationError(
                f"格子の次元 {len(shape)} が領域の次元 {self.ndim} と一致しません"
            )
        axes = [
            a + (b - a) * np.arange(n) / n for (a, b), n in zip(self.bounds, shape)
        ]
        return tuple(np.meshgrid(*axes, indexing="ij"))

    def to_flat(self) -> Tuple[float, ...]:
        return tuple(v for pair in self.bounds for v in pair)
