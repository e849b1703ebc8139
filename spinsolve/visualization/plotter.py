"""スナップショットの画像出力を提供するモジュール

1次元の場は折れ線、2次元の場はカラーマップ、3次元の場は中央断面の
カラーマップとしてPNGに保存します。描画はスナップショットのコピーのみを
参照し、ソルバーの状態には触れません。
"""

from pathlib import Path
from typing import List, Optional, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import Normalize

from ..core.field import Snapshot
from ..data_io import SnapshotSink
from ..simulations.config import Preferences


def prepare_2d_slice(data: np.ndarray, axis: int = 2, index: Optional[int] = None) -> np.ndarray:
    """3次元データから2次元断面を取得（2次元データはそのまま返す）"""
    if data.ndim == 2:
        return data
    if index is None:
        index = data.shape[axis] // 2
    return np.take(data, index, axis=axis)


class SnapshotPlotter(SnapshotSink):
    """スナップショットをPNG画像として保存する出力先"""

    def __init__(
        self,
        output_dir: Union[str, Path],
        preferences: Optional[Preferences] = None,
        prefix: str = "snapshot",
        dpi: int = 100,
    ):
        """
        Args:
            output_dir: 出力ディレクトリ
            preferences: 表示範囲・カラーマップ・表示する値の設定
            prefix: ファイル名の接頭辞
            dpi: 解像度
        """
        super().__init__()
        self.output_dir = Path(output_dir)
        self.preferences = preferences or Preferences()
        self.prefix = prefix
        self.dpi = dpi
        self.files: List[Path] = []

    def write(self, snapshot: Snapshot) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        prefs = self.preferences
        values = snapshot.display(prefs.dataplot)
        ncomp = snapshot.ncomponents

        fig, axes = plt.subplots(1, ncomp, figsize=(5 * ncomp, 4), squeeze=False)
        try:
            for i, ax in enumerate(axes[0]):
                self._draw(ax, values[i], prefs.clim_for(i), f"u{i + 1}")
            fig.suptitle(f"t = {snapshot.time:.4g} (step {snapshot.step})")
            fig.tight_layout()
            filepath = self.output_dir / f"{self.prefix}_{snapshot.step:08d}.png"
            fig.savefig(filepath, dpi=self.dpi)
        finally:
            plt.close(fig)
        self.files.append(filepath)

    def _draw(self, ax, data: np.ndarray, clim, label: str) -> None:
        if data.ndim == 1:
            ax.plot(np.arange(data.size) / data.size, data)
            if clim is not None:
                ax.set_ylim(*clim)
            ax.set_xlabel("x (normalized)")
            ax.set_ylabel(label)
            return

        data_2d = prepare_2d_slice(data)
        if clim is None:
            vmin, vmax = float(np.min(data_2d)), float(np.max(data_2d))
            if vmin == vmax:
                vmin, vmax = vmin - 0.5, vmax + 0.5
        else:
            vmin, vmax = clim
        im = ax.imshow(
            data_2d.T,
            origin="lower",
            cmap=self.preferences.colormap,
            norm=Normalize(vmin=vmin, vmax=vmax),
            interpolation="nearest",
        )
        ax.set_title(label)
        plt.colorbar(im, ax=ax)
