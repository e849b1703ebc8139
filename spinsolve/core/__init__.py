"""格子・場・演算子の基本パッケージ"""

from .field import Snapshot
from .grid import Domain, GridTransform, WavenumberGrid
from .operator import DiscreteOperator, OperatorSpec

__all__ = [
    "Domain",
    "GridTransform",
    "WavenumberGrid",
    "Snapshot",
    "OperatorSpec",
    "DiscreteOperator",
]
