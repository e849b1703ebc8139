"""可視化パッケージ"""

from .plotter import SnapshotPlotter, prepare_2d_slice

__all__ = ["SnapshotPlotter", "prepare_2d_slice"]
