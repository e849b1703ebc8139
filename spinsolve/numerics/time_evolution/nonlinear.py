"""変換空間で非線形項を評価するモジュール"""

from typing import Optional

import numpy as np

from ...core.grid import GridTransform
from ...core.operator import OperatorSpec


class NonlinearEvaluator:
    """変換空間の場に対する非線形項の評価

    逆変換 → 物理空間での非線形項 → 順変換 → 乗数 → エイリアシング除去
    の順に処理します。エイリアシング除去は毎回必ず適用されます。

    Attributes:
        evaluations: 評価回数
    """

    def __init__(
        self,
        spec: OperatorSpec,
        transform: GridTransform,
        multiplier: Optional[np.ndarray] = None,
        dealias: str = "2/3",
        real: bool = False,
    ):
        """
        Args:
            spec: 演算子の指定
            transform: フーリエ変換
            multiplier: 非線形項に掛ける変換空間の乗数
            dealias: エイリアシング除去の規則
            real: 物理空間の場を実数として扱うか
        """
        self.spec = spec
        self.transform = transform
        self.real = real
        self.dealias = dealias
        self._mask = transform.dealias_mask(dealias)
        self._multiplier = multiplier
        if multiplier is not None:
            self._multiplier = multiplier * self._mask
        self.evaluations = 0

    @property
    def is_zero(self) -> bool:
        return self.spec.nonlinear is None

    def to_physical(self, coeffs: np.ndarray) -> np.ndarray:
        u = self.transform.inverse(coeffs)
        return u.real if self.real else u

    def __call__(self, coeffs: np.ndarray) -> np.ndarray:
        self.evaluations += 1
        if self.is_zero:
            return np.zeros_like(coeffs)
        n = self.transform.forward(self.spec.evaluate_nonlinear(self.to_physical(coeffs)))
        if self._multiplier is not None:
            return n * self._multiplier
        return n * self._mask
