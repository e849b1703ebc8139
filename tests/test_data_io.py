import numpy as np
import pytest

from spinsolve import solve
from spinsolve.core.field import Snapshot
from spinsolve.data_io import (
    HDF5SnapshotWriter,
    MultiSink,
    SnapshotCollector,
    load_snapshots,
)


def make_snapshot(time, step, shape=(1, 8), value=None):
    data = np.full(shape, time if value is None else value)
    return Snapshot(time=time, step=step, data=data, metadata={"scheme": "etdrk4"})


def test_collector_rejects_non_increasing_times():
    collector = SnapshotCollector()
    collector(make_snapshot(0.0, 0))
    collector(make_snapshot(0.5, 5))
    with pytest.raises(ValueError):
        collector(make_snapshot(0.5, 5))
    assert collector.times == [0.0, 0.5]
    assert collector.stack().shape == (2, 1, 8)


def test_multi_sink_forwards_to_each_sink():
    a, b = SnapshotCollector(), SnapshotCollector()
    sink = MultiSink([a, b])
    for step in range(3):
        sink(make_snapshot(0.1 * step, step))
    assert a.times == b.times
    assert len(a) == 3


def test_hdf5_writer_appends_snapshots(tmp_path):
    path = tmp_path / "out" / "run.h5"
    with HDF5SnapshotWriter(path, attrs={"dt": 0.1}) as writer:
        for step in range(4):
            writer(make_snapshot(0.1 * step, step, shape=(2, 4, 4)))
        assert writer.count == 4

    snapshots = load_snapshots(path)
    assert [s.step for s in snapshots] == [0, 1, 2, 3]
    assert snapshots[-1].time == pytest.approx(0.3)
    assert snapshots[-1].shape == (4, 4)
    np.testing.assert_allclose(snapshots[2].data, 0.2)
    assert snapshots[0].metadata["scheme"] == "etdrk4"
    assert snapshots[0].metadata["dt"] == pytest.approx(0.1)


def test_hdf5_writer_keeps_complex_data(tmp_path, heat_spec):
    path = tmp_path / "heat.h5"
    writer = HDF5SnapshotWriter(path)
    u, times = solve(heat_spec, 16, 0.1, sink=writer)
    writer.close()

    snapshots = load_snapshots(path)
    assert [s.time for s in snapshots] == pytest.approx(times)
    assert np.iscomplexobj(snapshots[-1].data)
    np.testing.assert_allclose(snapshots[-1].data, u)


def test_hdf5_writer_rejects_shape_change(tmp_path):
    writer = HDF5SnapshotWriter(tmp_path / "run.h5")
    writer(make_snapshot(0.0, 0))
    with pytest.raises(ValueError):
        writer(make_snapshot(1.0, 1, shape=(1, 16)))
    writer.close()
    assert writer.count == 0
