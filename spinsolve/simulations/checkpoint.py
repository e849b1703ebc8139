"""チェックポイント管理を提供するモジュール"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from .state import SolverState


class CheckpointManager:
    """チェックポイントの保存と読み込みを管理"""

    def __init__(
        self,
        directory: Union[str, Path],
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            directory: チェックポイントの保存先ディレクトリ
            logger: ロガー
        """
        self.checkpoint_dir = Path(directory)
        self.logger = logger or logging.getLogger(__name__)

    def save(self, state: SolverState, name: Optional[str] = None) -> Path:
        """チェックポイントを保存

        Args:
            state: ソルバーの状態
            name: チェックポイント名（省略時はステップ数を使用）

        Returns:
            保存したファイルのパス
        """
        self.checkpoint_dir.mkdir(parents=True, exist_ok=True)
        if name is None:
            name = f"checkpoint_{state.step:08d}"
        filepath = self.checkpoint_dir / f"{name}.npz"

        if state.history:
            history = np.stack(state.history)
        else:
            history = np.zeros((0,) + state.coefficients.shape, dtype=complex)

        np.savez(
            filepath,
            coefficients=state.coefficients,
            time=state.time,
            step=state.step,
            chunk=state.chunk,
            dt=np.nan if state.dt is None else state.dt,
            history=history,
            scheme=np.array(state.scheme or ""),
        )
        self.logger.debug("チェックポイントを保存: %s (t=%.6g)", filepath, state.time)
        return filepath

    def load(self, name: Optional[Union[str, Path]] = None) -> SolverState:
        """チェックポイントから読み込み

        Args:
            name: チェックポイント名またはファイルパス（省略時は最新）

        Raises:
            FileNotFoundError: チェックポイントが見つからない場合
        """
        if name is None:
            filepath = self.latest()
            if filepath is None:
                raise FileNotFoundError(
                    f"チェックポイントが見つかりません: {self.checkpoint_dir}"
                )
        else:
            filepath = Path(name)
            if not filepath.suffix:
                filepath = self.checkpoint_dir / f"{name}.npz"

        with np.load(filepath, allow_pickle=False) as data:
            dt = float(data["dt"])
            scheme = str(data["scheme"])
            state = SolverState(
                coefficients=np.array(data["coefficients"]),
                time=float(data["time"]),
                step=int(data["step"]),
                chunk=int(data["chunk"]),
                dt=None if np.isnan(dt) else dt,
                history=[np.array(n) for n in data["history"]],
                scheme=scheme or None,
            )

        state.validate()
        self.logger.info("チェックポイントを読み込み: %s (t=%.6g)", filepath, state.time)
        return state

    def list(self) -> List[Path]:
        """保存済みのチェックポイントをステップ順に取得"""
        if not self.checkpoint_dir.exists():
            return []
        checkpoints = [
            p
            for p in self.checkpoint_dir.glob("checkpoint_*.npz")
            if p.stem.split("_", 1)[1].isdigit()
        ]
        return sorted(checkpoints, key=lambda p: int(p.stem.split("_", 1)[1]))

    def latest(self) -> Optional[Path]:
        checkpoints = self.list()
        return checkpoints[-1] if checkpoints else None
