"""時間発展の進行状況を監視・記録するモジュール"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import matplotlib.pyplot as plt
import numpy as np

from ..core.field import Snapshot


class RunMonitor:
    """スナップショットごとの統計量を記録するクラス"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.statistics: Dict[str, List[Any]] = {}
        self.reset()

    def reset(self) -> None:
        """記録をすべて消去"""
        self.statistics = {
            "time_history": [],
            "step_history": [],
            "max_abs": [],
            "l2_norm": [],
        }

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.logger.debug("モニターを終了")
        return False

    def update(self, snapshot: Snapshot) -> None:
        """スナップショットの統計量を記録

        ``l2_norm`` は格子点平均の二乗平均平方根です。
        """
        flat = snapshot.data.reshape(snapshot.ncomponents, -1)
        self.statistics["time_history"].append(float(snapshot.time))
        self.statistics["step_history"].append(int(snapshot.step))
        self.statistics["max_abs"].append(snapshot.max_abs().tolist())
        self.statistics["l2_norm"].append(
            np.sqrt(np.mean(np.abs(flat) ** 2, axis=1)).tolist()
        )

    def plot_history(self, output_dir: Union[str, Path]) -> Optional[Path]:
        """成分ごとの最大絶対値の履歴をプロット

        Returns:
            保存した画像のパス（記録がなければ``None``）
        """
        if not self.statistics["time_history"]:
            return None
        plot_dir = Path(output_dir) / "plots"
        plot_dir.mkdir(parents=True, exist_ok=True)
        filepath = plot_dir / "max_abs.png"

        times = self.statistics["time_history"]
        values = np.array(self.statistics["max_abs"])
        fig, ax = plt.subplots(figsize=(10, 5))
        try:
            for i in range(values.shape[1]):
                ax.plot(times, values[:, i], label=f"u{i + 1}")
            ax.set_title("Maximum Modulus")
            ax.set_xlabel("Time")
            ax.set_ylabel("max |u|")
            ax.legend()
            fig.tight_layout()
            fig.savefig(filepath)
        finally:
            plt.close(fig)
        return filepath

    def generate_report(self, output_dir: Union[str, Path]) -> Path:
        """統計情報をJSONファイルに保存"""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        report_path = output_dir / "statistics.json"
        with open(report_path, "w") as f:
            json.dump(
                {"summary": self.get_summary(), **self.statistics}, f, indent=2
            )
        self.logger.info("統計情報を保存: %s", report_path)
        return report_path

    def get_summary(self) -> Dict[str, Any]:
        """実行の概要を取得"""
        times = self.statistics["time_history"]
        peaks = self.statistics["max_abs"]
        return {
            "samples": len(times),
            "final_time": times[-1] if times else None,
            "final_step": self.statistics["step_history"][-1] if times else None,
            "max_abs": np.max(peaks, axis=0).tolist() if peaks else None,
        }
