"""KdV方程式の2ソリトン解を時間発展させる例

    u_t = -u_xxx - (u^2 / 2)_x,  x in [-pi, pi]

線形部分 ``-d^3/dx^3`` はフーリエ空間で ``i k^3`` 、非線形項は ``u^2`` に
乗数 ``-0.5 d/dx`` を掛けて与えます。
"""

import numpy as np

from spinsolve import OperatorSpec, Preferences, TimeLoop
from spinsolve.data_io import HDF5SnapshotWriter, MultiSink
from spinsolve.logger import SolverLogger
from spinsolve.visualization import SnapshotPlotter


def soliton(x, a, x0):
    return 3 * a**2 / np.cosh(0.5 * a * (x - x0)) ** 2


def main():
    logger = SolverLogger("spinsolve.examples")
    spec = OperatorSpec(
        domain=[-np.pi, np.pi],
        tspan=[0, 0.006],
        linear=lambda k: -k.diff(3),
        nonlinear=lambda u: u**2,
        nonlinear_symbol=lambda k: -0.5 * k.dx,
        initial=lambda x: soliton(x, 25.0, -2.0) + soliton(x, 16.0, -1.0),
        name="kdv",
    )
    preferences = Preferences(
        scheme="krogstad",
        sample_every=100,
        clim=(-200.0, 2000.0),
        output_dir="results/kdv",
    )
    sink = MultiSink(
        [
            HDF5SnapshotWriter("results/kdv/kdv.h5"),
            SnapshotPlotter("results/kdv/images", preferences),
        ]
    )

    loop = TimeLoop(spec, 256, 4e-6, preferences, sink=sink, logger=logger)
    try:
        result = loop.run()
    finally:
        sink.close()
    logger.info(f"終了: t={result.times[-1]:.4g}, max|u|={np.max(np.abs(result.final)):.4g}")


if __name__ == "__main__":
    main()
