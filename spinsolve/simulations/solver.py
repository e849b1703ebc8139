"""時間発展の簡易呼び出しを提供するモジュール"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..core.operator import OperatorSpec
from .config import Preferences
from .time_loop import CancelCallback, SnapshotCallback, TimeLoop


def solve(
    spec: OperatorSpec,
    n: Union[int, Sequence[int]],
    dt: float,
    preferences: Optional[Union[Preferences, Dict[str, Any]]] = None,
    sink: Optional[SnapshotCallback] = None,
    cancel: Optional[CancelCallback] = None,
    logger: Optional[logging.Logger] = None,
    **options,
) -> Tuple[np.ndarray, List[float]]:
    """PDEを時間発展させる

    Args:
        spec: 演算子の指定
        n: 格子点数
        dt: 時間刻み幅
        preferences: 設定（辞書も可）
        sink: スナップショットの出力先
        cancel: チャンクの間に呼び出される中断判定
        logger: ロガー
        **options: 設定項目の上書き（例: ``scheme="krogstad"``）

    Returns:
        (最終時刻の物理空間の場 ``(成分数, *格子形状)``, サンプリングした時刻のリスト)

    Raises:
        ConfigurationError: 設定が不正な場合（時間発展の開始前に検出）
        DivergenceError: 解が発散した場合
        OutputSinkError: 出力先で例外が発生した場合
    """
    if preferences is None or isinstance(preferences, dict):
        preferences = Preferences.from_dict(preferences)
    if options:
        preferences = preferences.replace(**options)

    loop = TimeLoop(
        spec, n, dt, preferences=preferences, sink=sink, cancel=cancel, logger=logger
    )
    result = loop.run()
    return result.final, result.times
