"""HDF5形式でスナップショットを逐次保存するモジュール"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import h5py
import numpy as np

from ..core.field import Snapshot
from .base import SnapshotSink


class HDF5SnapshotWriter(SnapshotSink):
    """スナップショットをHDF5ファイルに追記する出力先

    最初のスナップショットで形状と型を決めて拡張可能なデータセットを作成し、
    以降は1件ごとにデータセットを拡張して書き込みます。

    データセット:
        - ``time``: 時刻 ``(時刻数,)``
        - ``step``: ステップ数 ``(時刻数,)``
        - ``data``: 場 ``(時刻数, 成分数, *格子形状)``
    """

    def __init__(
        self, path: Union[str, Path], attrs: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            path: 出力ファイルのパス
            attrs: ファイルに付加する属性
        """
        super().__init__()
        self.path = Path(path)
        self.attrs = dict(attrs or {})
        self._file: Optional[h5py.File] = None

    @property
    def count(self) -> int:
        if self._file is None:
            return 0
        return self._file["time"].shape[0]

    def _open(self, snapshot: Snapshot) -> h5py.File:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        f = h5py.File(self.path, "w")
        dtype = complex if np.iscomplexobj(snapshot.data) else float
        f.create_dataset("time", shape=(0,), maxshape=(None,), dtype=float)
        f.create_dataset("step", shape=(0,), maxshape=(None,), dtype=np.int64)
        f.create_dataset(
            "data",
            shape=(0,) + snapshot.data.shape,
            maxshape=(None,) + snapshot.data.shape,
            chunks=(1,) + snapshot.data.shape,
            dtype=dtype,
        )
        for key, value in {**snapshot.metadata, **self.attrs}.items():
            f.attrs[key] = value
        f.attrs["created_at"] = datetime.now().isoformat()
        return f

    def write(self, snapshot: Snapshot) -> None:
        if self._file is None:
            self._file = self._open(snapshot)
        f = self._file
        if snapshot.data.shape != f["data"].shape[1:]:
            raise ValueError(
                f"スナップショットの形状 {snapshot.data.shape} が "
                f"{f['data'].shape[1:]} と一致しません"
            )
        index = f["time"].shape[0]
        for name in ("time", "step", "data"):
            f[name].resize(index + 1, axis=0)
        f["time"][index] = snapshot.time
        f["step"][index] = snapshot.step
        f["data"][index] = snapshot.data
        f.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None


def load_snapshots(path: Union[str, Path]) -> List[Snapshot]:
    """HDF5ファイルからスナップショットを読み込む"""
    with h5py.File(path, "r") as f:
        metadata = {
            key: value for key, value in f.attrs.items() if key != "created_at"
        }
        times = f["time"][:]
        steps = f["step"][:]
        data = f["data"][:]
    return [
        Snapshot(time=float(t), step=int(s), data=d, metadata=dict(metadata))
        for t, s, d in zip(times, steps, data)
    ]
