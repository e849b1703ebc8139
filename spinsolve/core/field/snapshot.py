"""スナップショット（時刻付きの不変な場）を提供するモジュール"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

import numpy as np


@dataclass(frozen=True, eq=False)
class Snapshot:
    """出力解像度での物理空間の場

    ``data`` は ``(成分数, *格子形状)`` の読み取り専用配列です。

    Attributes:
        time: 時刻
        step: 時間ステップ数
        data: 場のデータ
        metadata: 付加情報（スキーム名など）
    """

    time: float
    step: int
    data: np.ndarray
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        data = np.array(self.data, copy=True)
        data.setflags(write=False)
        object.__setattr__(self, "data", data)

    @property
    def ncomponents(self) -> int:
        return self.data.shape[0]

    @property
    def shape(self) -> Tuple[int, ...]:
        """格子形状（成分軸を除く）"""
        return self.data.shape[1:]

    def component(self, index: int) -> np.ndarray:
        return self.data[index]

    def display(self, mode: str = "real") -> np.ndarray:
        """表示用の実数値データを取得

        Args:
            mode: ``"real"``, ``"imag"``, ``"abs"`` のいずれか
        """
        if mode == "real":
            return np.real(self.data)
        if mode == "imag":
            return np.imag(self.data)
        if mode == "abs":
            return np.abs(self.data)
        raise ValueError(f"未対応の表示モードです: {mode}")

    def max_abs(self) -> np.ndarray:
        """成分ごとの最大絶対値"""
        return np.abs(self.data).reshape(self.ncomponents, -1).max(axis=1)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(time={self.time}, step={self.step}, "
            f"shape={self.data.shape})"
        )
