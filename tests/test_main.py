import yaml

from spinsolve.data_io import load_snapshots
from spinsolve.main import main


def write_config(path, output_dir, **extra):
    config = {
        "preset": "burg",
        "grid": {"n": 32, "dt": 0.01, "tspan": [0, 0.1]},
        "preferences": {"sample_every": 5, "output_dir": str(output_dir)},
        "logging": {"level": "warning", "console": {"enabled": False}},
        "output": {"hdf5": True, "images": True, "report": True},
    }
    config.update(extra)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f)
    return path


def test_main_runs_preset_from_config(tmp_path):
    output_dir = tmp_path / "results"
    config = write_config(tmp_path / "config.yml", output_dir)

    assert main(["--config", str(config)]) == 0

    snapshots = load_snapshots(output_dir / "burg.h5")
    assert [s.step for s in snapshots] == [0, 5, 10]
    assert (output_dir / "statistics.json").exists()
    assert (output_dir / "plots" / "max_abs.png").exists()
    assert len(list((output_dir / "images").glob("*.png"))) == 3
    assert (output_dir / "checkpoints" / "checkpoint_00000010.npz").exists()


def test_main_resumes_from_checkpoint(tmp_path):
    output_dir = tmp_path / "results"
    config = write_config(tmp_path / "config.yml", output_dir)
    assert main(["--config", str(config)]) == 0

    longer = write_config(
        tmp_path / "longer.yml",
        output_dir,
        grid={"n": 32, "dt": 0.01, "tspan": [0, 0.2]},
    )
    checkpoint = output_dir / "checkpoints" / "checkpoint_00000010.npz"
    assert main(["--config", str(longer), "--checkpoint", str(checkpoint)]) == 0

    snapshots = load_snapshots(output_dir / "burg.h5")
    assert [s.step for s in snapshots] == [15, 20]


def test_main_reports_configuration_error(tmp_path):
    config = write_config(
        tmp_path / "config.yml",
        tmp_path / "results",
        preferences={"scheme": "rk45"},
    )
    assert main(["--config", str(config)]) == 1
