"""例外クラスを提供するモジュール

このモジュールは、ソルバー全体で使用される例外の階層を定義します。
設定の誤りは時間発展の開始前に、数値的な発散や出力先の失敗は
実行中に検出されます。
"""

from typing import Any, Optional


class SpinError(Exception):
    """ソルバーの例外の基底クラス"""


class ConfigurationError(SpinError, ValueError):
    """設定の誤り

    領域の退化、成分数の不一致、未知のプリセット名、不正なグリッドサイズや
    時間刻み幅など、時間発展を始める前に検出されるエラーです。
    """


class NumericalInstabilityError(SpinError, ArithmeticError):
    """数値解の発散

    Attributes:
        step: 発散を検出したステップ番号
        time: 発散を検出した時刻
        last_snapshot: 最後に得られた正常なスナップショット
    """

    def __init__(
        self,
        message: str,
        step: int,
        time: float,
        last_snapshot: Optional[Any] = None,
    ):
        super().__init__(message)
        self.step = step
        self.time = time
        self.last_snapshot = last_snapshot


DivergenceError = NumericalInstabilityError


class OutputSinkError(SpinError, RuntimeError):
    """出力先（コールバック）で発生したエラー

    元の例外は ``__cause__`` に保持されます。

    Attributes:
        time: エラー発生時のスナップショットの時刻
        last_snapshot: 最後に得られた正常なスナップショット
    """

    def __init__(
        self, message: str, time: float, last_snapshot: Optional[Any] = None
    ):
        super().__init__(message)
        self.time = time
        self.last_snapshot = last_snapshot
