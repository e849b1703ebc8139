"""スナップショットの出力先の基底クラスを提供するモジュール"""

from abc import ABC, abstractmethod
from typing import List, Sequence

import numpy as np

from ..core.field import Snapshot


class SnapshotSink(ABC):
    """スナップショットの出力先の基底クラス

    時間発展のループから、時刻の狭義単調増加順に、サンプリング時刻ごとに
    1回だけ呼び出されます。出力先はスナップショットを変更してはいけません。
    """

    def __init__(self):
        self._last_time = None

    def __call__(self, snapshot: Snapshot) -> None:
        if self._last_time is not None and not snapshot.time > self._last_time:
            raise ValueError(
                f"スナップショットの時刻が増加していません: "
                f"{snapshot.time} <= {self._last_time}"
            )
        self.write(snapshot)
        self._last_time = snapshot.time

    @abstractmethod
    def write(self, snapshot: Snapshot) -> None:
        """スナップショットを出力"""
        pass

    def close(self) -> None:
        """出力先を閉じる"""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class SnapshotCollector(SnapshotSink):
    """スナップショットをメモリ上に保持する出力先"""

    def __init__(self):
        super().__init__()
        self.snapshots: List[Snapshot] = []

    def write(self, snapshot: Snapshot) -> None:
        self.snapshots.append(snapshot)

    @property
    def times(self) -> List[float]:
        return [s.time for s in self.snapshots]

    def stack(self) -> np.ndarray:
        """全スナップショットを ``(時刻数, 成分数, *格子形状)`` の配列にまとめる"""
        return np.stack([s.data for s in self.snapshots])

    def __len__(self) -> int:
        return len(self.snapshots)


class MultiSink(SnapshotSink):
    """複数の出力先へ順に渡す出力先"""

    def __init__(self, sinks: Sequence[SnapshotSink]):
        super().__init__()
        self.sinks = list(sinks)

    def write(self, snapshot: Snapshot) -> None:
        for sink in self.sinks:
            sink(snapshot)

    def close(self) -> None:
        for sink in self.sinks:
            sink.close()
