"""周期領域上の硬いPDEをフーリエスペクトル法と指数積分で解くパッケージ

``u_t = L u + N(u)`` の線形部分 ``L`` をフーリエ空間の対角シンボルとして、
非線形部分 ``N`` を物理空間の関数として与え、指数時間差分（ETD）スキームで
時間発展させます。

例::

    import numpy as np
    from spinsolve import OperatorSpec, solve

    spec = OperatorSpec(
        domain=[0, 2 * np.pi],
        tspan=[0, 1],
        linear=lambda k: k.laplacian,
        initial=lambda x: np.cos(x),
    )
    u, times = solve(spec, 64, 1e-2)
"""

from .core import Domain, GridTransform, OperatorSpec, Snapshot, WavenumberGrid
from .errors import (
    ConfigurationError,
    DivergenceError,
    NumericalInstabilityError,
    OutputSinkError,
    SpinError,
)
from .presets import get_preset
from .simulations import (
    CheckpointManager,
    LoopStatus,
    Preferences,
    RunResult,
    SolverState,
    TimeLoop,
    solve,
)

__version__ = "0.1.0"

__all__ = [
    "solve",
    "TimeLoop",
    "LoopStatus",
    "RunResult",
    "SolverState",
    "CheckpointManager",
    "Preferences",
    "OperatorSpec",
    "Domain",
    "GridTransform",
    "WavenumberGrid",
    "Snapshot",
    "get_preset",
    "SpinError",
    "ConfigurationError",
    "NumericalInstabilityError",
    "DivergenceError",
    "OutputSinkError",
]
