import json

import numpy as np
import pytest

from spinsolve.core.field import Snapshot
from spinsolve.simulations import CheckpointManager, RunMonitor, SolverState


@pytest.fixture
def state():
    rng = np.random.default_rng(0)
    coefficients = rng.standard_normal((2, 8)) + 1j * rng.standard_normal((2, 8))
    return SolverState(
        coefficients=coefficients,
        time=1.5,
        step=30,
        chunk=3,
        dt=0.05,
        history=[coefficients * 0.5, coefficients * 0.25],
        scheme="abnorsett4",
    )


def test_save_and_load(tmp_path, state):
    manager = CheckpointManager(tmp_path)
    path = manager.save(state)
    assert path.name == "checkpoint_00000030.npz"

    loaded = manager.load()
    np.testing.assert_array_equal(loaded.coefficients, state.coefficients)
    assert (loaded.time, loaded.step, loaded.chunk) == (1.5, 30, 3)
    assert loaded.dt == 0.05
    assert loaded.scheme == "abnorsett4"
    assert len(loaded.history) == 2
    np.testing.assert_array_equal(loaded.history[1], state.history[1])


def test_state_without_dt_or_history(tmp_path):
    manager = CheckpointManager(tmp_path)
    manager.save(SolverState(coefficients=np.ones((1, 4)), time=0.0), name="initial")
    loaded = manager.load("initial")
    assert loaded.dt is None
    assert loaded.history == []
    assert loaded.scheme is None
    # 名前付きのチェックポイントは一覧に含めない
    assert manager.list() == []


def test_list_is_sorted_by_step(tmp_path, state):
    manager = CheckpointManager(tmp_path)
    for step in (100, 5, 20):
        copy = state.copy()
        copy.step = step
        manager.save(copy)
    assert [p.name for p in manager.list()] == [
        "checkpoint_00000005.npz",
        "checkpoint_00000020.npz",
        "checkpoint_00000100.npz",
    ]
    assert manager.latest().name == "checkpoint_00000100.npz"


def test_load_without_checkpoints(tmp_path):
    with pytest.raises(FileNotFoundError):
        CheckpointManager(tmp_path / "missing").load()


def test_state_validation(state):
    state.validate()
    bad = state.copy()
    bad.history.append(np.zeros((2, 4)))
    with pytest.raises(ValueError):
        bad.validate()
    bad = state.copy()
    bad.coefficients[0, 0] = np.nan
    with pytest.raises(ValueError):
        bad.validate()


def test_copy_is_independent(state):
    copy = state.copy()
    copy.coefficients[0, 0] = 0.0
    copy.history[0][0, 0] = 0.0
    assert state.coefficients[0, 0] != 0.0
    assert state.history[0][0, 0] != 0.0


def test_monitor_records_statistics(tmp_path):
    monitor = RunMonitor()
    with monitor:
        for step in range(3):
            data = np.full((2, 4), float(step + 1))
            data[1] *= -2
            monitor.update(Snapshot(time=0.5 * step, step=step, data=data))

    summary = monitor.get_summary()
    assert summary["samples"] == 3
    assert summary["final_time"] == 1.0
    assert summary["max_abs"] == [3.0, 6.0]
    assert monitor.statistics["l2_norm"][0] == pytest.approx([1.0, 2.0])

    report = monitor.generate_report(tmp_path)
    with open(report) as f:
        saved = json.load(f)
    assert saved["summary"]["final_step"] == 2
    assert saved["time_history"] == [0.0, 0.5, 1.0]

    plot = monitor.plot_history(tmp_path)
    assert plot.exists()


def test_monitor_without_samples(tmp_path):
    monitor = RunMonitor()
    assert monitor.plot_history(tmp_path) is None
    assert monitor.get_summary()["final_time"] is None
