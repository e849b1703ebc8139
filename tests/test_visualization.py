import numpy as np
import pytest

from spinsolve import Preferences
from spinsolve.core.field import Snapshot
from spinsolve.visualization import SnapshotPlotter, prepare_2d_slice


@pytest.mark.parametrize("shape", [(2, 32), (1, 16, 16), (1, 8, 8, 8)])
def test_plotter_writes_one_image_per_snapshot(tmp_path, shape):
    plotter = SnapshotPlotter(tmp_path, Preferences(clim=(-1, 1)))
    rng = np.random.default_rng(0)
    for step in (0, 10):
        plotter(Snapshot(time=0.1 * step, step=step, data=rng.uniform(-1, 1, shape)))

    assert [p.name for p in plotter.files] == [
        "snapshot_00000000.png",
        "snapshot_00000010.png",
    ]
    assert all(p.exists() for p in plotter.files)


def test_plotter_handles_constant_complex_field(tmp_path):
    plotter = SnapshotPlotter(tmp_path, Preferences(dataplot="abs"), prefix="nls")
    plotter(Snapshot(time=0.0, step=0, data=np.full((1, 8, 8), 1j)))
    assert plotter.files[0].name == "nls_00000000.png"


def test_prepare_2d_slice():
    data = np.arange(27).reshape(3, 3, 3)
    np.testing.assert_array_equal(prepare_2d_slice(data), data[:, :, 1])
    np.testing.assert_array_equal(prepare_2d_slice(data[0]), data[0])
    np.testing.assert_array_equal(prepare_2d_slice(data, axis=0, index=2), data[2])
