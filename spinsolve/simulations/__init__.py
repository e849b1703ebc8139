"""時間発展の実行パッケージ"""

from .checkpoint import CheckpointManager
from .config import Preferences
from .monitor import RunMonitor
from .solver import solve
from .state import SolverState
from .time_loop import Chunk, LoopStatus, RunResult, TimeLoop, plan_chunks

__all__ = [
    "solve",
    "TimeLoop",
    "LoopStatus",
    "Chunk",
    "RunResult",
    "plan_chunks",
    "SolverState",
    "CheckpointManager",
    "RunMonitor",
    "Preferences",
]
