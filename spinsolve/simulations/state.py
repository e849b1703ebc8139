"""ソルバーの状態を管理するモジュール

変換空間の場と時刻・ステップ数・チャンク番号、および多段法の
非線形項の履歴を保持するデータクラスを提供します。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np


@dataclass
class SolverState:
    """時間発展の状態

    Attributes:
        coefficients: 変換空間の場 ``(成分数, *格子形状)``
        time: 現在の時刻
        step: 完了したステップ数
        chunk: 完了したチャンク数
        dt: 直前のチャンクの時間刻み幅
        history: 多段法の非線形項の履歴（新しい順）
        scheme: スキーム名
    """

    coefficients: np.ndarray
    time: float
    step: int = 0
    chunk: int = 0
    dt: Optional[float] = None
    history: List[np.ndarray] = field(default_factory=list)
    scheme: Optional[str] = None

    def validate(self) -> None:
        """状態の妥当性を検証"""
        if self.step < 0 or self.chunk < 0:
            raise ValueError("ステップ数とチャンク数は非負である必要があります")
        if not np.all(np.isfinite(self.coefficients)):
            raise ValueError("場に有限でない値が含まれています")
        for n in self.history:
            if n.shape != self.coefficients.shape:
                raise ValueError(
                    f"履歴の形状 {n.shape} が場の形状 {self.coefficients.shape} と一致しません"
                )

    def copy(self) -> "SolverState":
        """状態の深いコピーを作成"""
        return SolverState(
            coefficients=self.coefficients.copy(),
            time=self.time,
            step=self.step,
            chunk=self.chunk,
            dt=self.dt,
            history=[n.copy() for n in self.history],
            scheme=self.scheme,
        )

    def get_diagnostics(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "step": self.step,
            "chunk": self.chunk,
            "dt": self.dt,
            "max_coefficient": float(np.max(np.abs(self.coefficients))),
            "history": len(self.history),
        }
