"""データ入出力パッケージ"""

from .base import MultiSink, SnapshotCollector, SnapshotSink
from .hdf5_writer import HDF5SnapshotWriter, load_snapshots

__all__ = [
    "SnapshotSink",
    "SnapshotCollector",
    "MultiSink",
    "HDF5SnapshotWriter",
    "load_snapshots",
]
