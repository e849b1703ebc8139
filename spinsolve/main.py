"""コマンドラインからプリセットのPDEを解くエントリーポイント

設定ファイル（YAML）の例::

    preset: gs
    seed: 0
    grid:
      n: 64
      dt: 6
      tspan: [0, 600]
    preferences:
      scheme: etdrk4
      sample_every: 10
    logging:
      level: info
    output:
      hdf5: true
      images: false
      report: true
"""

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .data_io import HDF5SnapshotWriter, MultiSink, SnapshotSink
from .errors import SpinError
from .logger import LogConfig, SolverLogger
from .presets import available_presets, get_preset
from .simulations import CheckpointManager, RunMonitor, TimeLoop
from .visualization import SnapshotPlotter


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """コマンドライン引数をパース"""
    parser = argparse.ArgumentParser(
        prog="spinsolve", description="フーリエスペクトル法と指数積分による硬いPDEの求解"
    )
    parser.add_argument("--config", type=str, help="設定ファイルのパス")
    parser.add_argument(
        "--preset", type=str, help=f"プリセット名 ({', '.join(available_presets())})"
    )
    parser.add_argument("--checkpoint", type=str, help="再開するチェックポイントファイルのパス")
    parser.add_argument("--output-dir", type=str, help="出力ディレクトリ")
    parser.add_argument("--debug", action="store_true", help="デバッグモードを有効化")
    return parser.parse_args(argv)


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """設定ファイルを読み込み"""
    if config_path is None:
        return {}
    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def setup_logging(config: Dict[str, Any], debug: bool) -> SolverLogger:
    """ロギングを設定"""
    log_config = LogConfig.from_dict(config.get("logging", {}))
    if debug:
        log_config.level = "debug"
        log_config.console_logging["level"] = "debug"
    return SolverLogger("spinsolve", log_config)


def build_loop(
    config: Dict[str, Any], args: argparse.Namespace, logger: SolverLogger
) -> TimeLoop:
    """設定からプリセットを読み込み、時間発展のループを構築"""
    name = args.preset or config.get("preset")
    if name is None:
        raise SystemExit("プリセット名を --preset または設定ファイルで指定してください")
    spec, n, dt, preferences = get_preset(name, seed=config.get("seed"))

    grid = config.get("grid", {})
    n = grid.get("n", n)
    dt = grid.get("dt", dt)
    if "tspan" in grid:
        spec = dataclasses.replace(spec, tspan=grid["tspan"])

    overrides = dict(config.get("preferences", {}))
    if args.output_dir:
        overrides["output_dir"] = args.output_dir
    preferences = preferences.replace(**overrides)

    output_dir = Path(preferences.output_dir)
    output = config.get("output", {})
    sinks: List[SnapshotSink] = []
    if output.get("hdf5", True):
        sinks.append(
            HDF5SnapshotWriter(
                output_dir / f"{spec.name}.h5",
                attrs={"domain": list(spec.domain.to_flat()), "dt": float(dt)},
            )
        )
    if output.get("images", False):
        sinks.append(SnapshotPlotter(output_dir / "images", preferences))

    checkpoints = CheckpointManager(
        output.get("checkpoint", output_dir / "checkpoints"), logger=logger
    )
    return TimeLoop(
        spec,
        n,
        dt,
        preferences=preferences,
        sink=MultiSink(sinks) if sinks else None,
        logger=logger,
        checkpoints=checkpoints,
        monitor=RunMonitor(logger),
    )


def run(loop: TimeLoop, checkpoint: Optional[Path], report: bool, logger) -> int:
    """時間発展を実行し、終了処理を行う"""
    output_dir = Path(loop.preferences.output_dir)
    state = loop.checkpoints.load(checkpoint) if checkpoint else None
    if state is not None:
        logger.info(f"チェックポイントから再開: {checkpoint}")

    try:
        with loop.monitor:
            result = loop.run(state)
    finally:
        if loop.sink is not None:
            loop.sink.close()

    loop.checkpoints.save(result.state)
    if report:
        loop.monitor.generate_report(output_dir)
        loop.monitor.plot_history(output_dir)
    logger.log_simulation_state(result.state.get_diagnostics())
    logger.log_performance("time loop", result.diagnostics["elapsed"])
    logger.info(f"終了: status={result.status.name}, samples={len(result.times)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """メイン関数"""
    args = parse_args(argv)
    config = load_config(args.config)
    logger = setup_logging(config, args.debug)
    checkpoint = Path(args.checkpoint) if args.checkpoint else None

    try:
        loop = build_loop(config, args, logger)
        return run(loop, checkpoint, config.get("output", {}).get("report", True), logger)
    except SpinError as e:
        logger.log_error_with_context(
            "時間発展中にエラーが発生", e, {"config": args.config, "preset": args.preset}
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
