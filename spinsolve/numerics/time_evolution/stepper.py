"""1時間ステップの前進を提供するモジュール

:class:`Stepper` は選択されたスキームの段の規則を、事前計算された係数と
非線形項の評価関数で実行します。多段法では非線形項の履歴を保持し、
ステップが受理されるたびに最も古いものを捨てて更新します。
"""

import logging
from collections import deque
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from ...errors import ConfigurationError, DivergenceError
from .coefficients import IntegratorCoefficients
from .schemes import SchemeDefinition, get_scheme

DEFAULT_BLOWUP_FACTOR = 1e10


class Stepper:
    """指数積分スキームによる1ステップの前進"""

    def __init__(
        self,
        scheme: SchemeDefinition,
        evaluate: Callable[[np.ndarray], np.ndarray],
        reference: float = 1.0,
        blowup_factor: float = DEFAULT_BLOWUP_FACTOR,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            scheme: スキームの定義
            evaluate: 変換空間の非線形項の評価関数
            reference: 発散判定の基準となる初期の係数の最大絶対値
            blowup_factor: 基準の何倍を超えたら発散とみなすか
            logger: ロガー
        """
        self.scheme = scheme
        self.evaluate = evaluate
        self.reference = max(float(reference), 1.0)
        self.blowup_factor = blowup_factor
        self.logger = logger or logging.getLogger(__name__)
        self._startup = get_scheme(scheme.startup) if scheme.startup else None
        self._coefficients: Optional[IntegratorCoefficients] = None
        self._history = deque(maxlen=scheme.history)

    @property
    def coefficients(self) -> Optional[IntegratorCoefficients]:
        return self._coefficients

    @property
    def history_length(self) -> int:
        return len(self._history)

    def set_coefficients(self, coefficients: IntegratorCoefficients) -> None:
        """係数を設定

        多段法で時間刻み幅が変わった場合、等間隔でなくなった履歴は破棄し、
        立ち上げからやり直します。
        """
        if coefficients.scheme != self.scheme.name:
            raise ConfigurationError(
                f"係数のスキーム {coefficients.scheme} が {self.scheme.name} と異なります"
            )
        previous = self._coefficients
        if (
            self.scheme.is_multistep
            and previous is not None
            and previous.dt != coefficients.dt
            and self._history
        ):
            self.logger.debug(
                "時間刻み幅の変更 (%.6e -> %.6e) により履歴を破棄",
                previous.dt,
                coefficients.dt,
            )
            self._history.clear()
        self._coefficients = coefficients

    def reset(self) -> None:
        self._history.clear()

    def step(self, u: np.ndarray, step: int, time: float) -> np.ndarray:
        """1ステップ前進

        Args:
            u: 現在の変換空間の場
            step: 前進後のステップ番号（発散の報告用）
            time: 前進後の時刻（発散の報告用）

        Returns:
            前進後の変換空間の場

        Raises:
            DivergenceError: 場が有限でない、または基準値の ``blowup_factor``
                倍を超えた場合
        """
        c = self._coefficients
        if c is None:
            raise RuntimeError("係数が設定されていません")

        with np.errstate(over="ignore", invalid="ignore"):
            n_u = self.evaluate(u)
            if self.scheme.is_multistep:
                self._history.appendleft(n_u)
                if len(self._history) < self.scheme.history:
                    new = self._startup.advance(u, c.startup, self.evaluate, [n_u])
                else:
                    new = self.scheme.advance(u, c, self.evaluate, list(self._history))
            else:
                new = self.scheme.advance(u, c, self.evaluate, [n_u])

        self.check(new, step, time)
        return new

    def check(self, u: np.ndarray, step: int, time: float) -> None:
        """発散の検出"""
        if not np.all(np.isfinite(u)):
            raise DivergenceError(
                f"解が発散しました（有限でない値）: step={step}, t={time:.6g}。"
                "時間刻み幅を小さくしてください",
                step=step,
                time=time,
            )
        peak = float(np.max(np.abs(u)))
        if peak > self.blowup_factor * self.reference:
            raise DivergenceError(
                f"解が発散しました（最大値 {peak:.3e} が初期値の "
                f"{self.blowup_factor:.1e} 倍を超過）: step={step}, t={time:.6g}",
                step=step,
                time=time,
            )

    def export_history(self) -> List[np.ndarray]:
        """チェックポイント用に履歴を取得（新しい順）"""
        return [np.array(n) for n in self._history]

    def restore_history(self, history: Sequence[np.ndarray]) -> None:
        """チェックポイントから履歴を復元"""
        self._history.clear()
        for n in history:
            self._history.append(np.array(n))

    def get_diagnostics(self) -> Dict[str, Any]:
        return {
            "scheme": self.scheme.name,
            "order": self.scheme.order,
            "evaluations_per_step": self.scheme.evaluations,
            "history": len(self._history),
            "dt": self._coefficients.dt if self._coefficients else None,
        }
