"""時間発展のループを提供するモジュール

時間区間をチャンク（サンプリング点で区切られた整数個のステップ）に分割し、
チャンクごとにステッパーを繰り返し呼び出して、スナップショットを
出力先と呼び出し元へ渡します。
"""

import logging
import math
import time as _time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Union

import numpy as np

from ..core.field import Snapshot
from ..core.grid import GridTransform
from ..core.operator import OperatorSpec
from ..errors import ConfigurationError, DivergenceError, OutputSinkError
from ..numerics.time_evolution import (
    CoefficientCache,
    NonlinearEvaluator,
    Stepper,
    get_scheme,
)
from .checkpoint import CheckpointManager
from .config import Preferences
from .monitor import RunMonitor
from .state import SolverState

SnapshotCallback = Callable[[Snapshot], Any]
CancelCallback = Callable[[], bool]


class LoopStatus(Enum):
    """ループの状態"""

    INITIALIZING = auto()
    STEPPING = auto()
    SAMPLING = auto()
    FINISHED = auto()
    FAILED = auto()
    CANCELLED = auto()


@dataclass(frozen=True)
class Chunk:
    """同じ時間刻み幅で進める連続したステップの組

    Attributes:
        index: チャンク番号
        interval: 属する時間区間の番号
        steps: ステップ数
        dt: 時間刻み幅
        start_time: 開始時刻
        end_time: 終了時刻（サンプリング点）
        output: 終了時刻が時間区間の指定時刻か
    """

    index: int
    interval: int
    steps: int
    dt: float
    start_time: float
    end_time: float
    output: bool


def plan_chunks(
    tspan: Sequence[float], dt: float, sample_every: int = 1
) -> List[Chunk]:
    """時間区間をチャンクに分割

    各区間 ``[t_i, t_{i+1}]`` は ``ceil(Δ/dt)`` 個の等しいステップに分割され、
    指定時刻にちょうど到達するよう時間刻み幅は必要に応じて小さくなります。
    ステップは ``sample_every`` 個ずつまとめられ、区間の最後のチャンクは
    それより短くなることがあります。
    """
    if isinstance(dt, bool) or not isinstance(dt, (int, float, np.floating)):
        raise ConfigurationError(f"時間刻み幅は数値である必要があります: {dt!r}")
    if not (math.isfinite(dt) and dt > 0):
        raise ConfigurationError(f"時間刻み幅は正の有限値である必要があります: {dt}")
    if sample_every < 1:
        raise ConfigurationError(f"sample_everyは1以上である必要があります: {sample_every}")

    chunks = []
    for interval, (t_start, t_end) in enumerate(zip(tspan[:-1], tspan[1:])):
        delta = t_end - t_start
        nsteps = max(1, math.ceil(delta / dt - 1e-8))
        h = delta / nsteps
        done = 0
        while done < nsteps:
            steps = min(sample_every, nsteps - done)
            last = done + steps == nsteps
            chunks.append(
                Chunk(
                    index=len(chunks),
                    interval=interval,
                    steps=steps,
                    dt=h,
                    start_time=t_start + done * h,
                    end_time=t_end if last else t_start + (done + steps) * h,
                    output=last,
                )
            )
            done += steps
    return chunks


@dataclass
class RunResult:
    """実行結果

    Attributes:
        final: 最終時刻の物理空間の場 ``(成分数, *格子形状)``
        outputs: 時間区間の各指定時刻での物理空間の場
        times: サンプリングした時刻
        status: 終了時のループの状態
        state: 最終状態
        last_snapshot: 最後のスナップショット
        diagnostics: 診断情報
    """

    final: np.ndarray
    outputs: List[np.ndarray]
    times: List[float]
    status: LoopStatus
    state: SolverState
    last_snapshot: Optional[Snapshot]
    diagnostics: Dict[str, Any] = field(default_factory=dict)


class TimeLoop:
    """チャンク単位で時間発展を進めるループ"""

    def __init__(
        self,
        spec: OperatorSpec,
        n: Union[int, Sequence[int]],
        dt: float,
        preferences: Optional[Preferences] = None,
        sink: Optional[SnapshotCallback] = None,
        cancel: Optional[CancelCallback] = None,
        logger: Optional[logging.Logger] = None,
        checkpoints: Optional[CheckpointManager] = None,
        monitor: Optional[RunMonitor] = None,
    ):
        """時間発展を開始する前にすべての設定を検証

        Args:
            spec: 演算子の指定
            n: 格子点数
            dt: 時間刻み幅（時間区間の指定時刻に合わせて小さくなることがあります）
            preferences: 設定
            sink: スナップショットの出力先（``incremental_output`` が有効な場合のみ呼び出し）
            cancel: チャンクの間に呼び出される中断判定
            logger: ロガー
            checkpoints: チェックポイントの保存先
            monitor: 統計量の記録

        Raises:
            ConfigurationError: 設定が不正な場合
        """
        self.status = LoopStatus.INITIALIZING
        self.spec = spec
        self.preferences = preferences or Preferences()
        self.sink = sink
        self.cancel = cancel
        self.logger = logger or logging.getLogger(__name__)
        self.monitor = monitor or RunMonitor(self.logger)

        prefs = self.preferences
        self.transform = GridTransform(spec.domain, n)
        self.output_transform = GridTransform(
            spec.domain, prefs.output_resolution or self.transform.shape
        )
        self.operator = spec.validate(self.transform)
        self.scheme = get_scheme(prefs.scheme)
        self.chunks = plan_chunks(spec.tspan, dt, prefs.sample_every)
        self.dt = float(dt)

        if checkpoints is None and prefs.checkpoint_every > 0:
            checkpoints = CheckpointManager(
                f"{prefs.output_dir}/checkpoints", logger=self.logger
            )
        self.checkpoints = checkpoints

        self.evaluate = NonlinearEvaluator(
            spec,
            self.transform,
            multiplier=self.operator.multiplier,
            dealias=prefs.dealias,
            real=self.operator.real,
        )
        self.cache = CoefficientCache(logger=self.logger)
        initial = self.transform.forward(self.operator.initial)
        self.stepper = Stepper(
            self.scheme,
            self.evaluate,
            reference=float(np.max(np.abs(initial))),
            blowup_factor=prefs.blowup_factor,
            logger=self.logger,
        )

        self.state: Optional[SolverState] = None
        self.times: List[float] = []
        self.outputs: List[np.ndarray] = []
        self.last_snapshot: Optional[Snapshot] = None
        self._elapsed = 0.0

    @property
    def ncomponents(self) -> int:
        return self.operator.ncomponents

    def initial_state(self) -> SolverState:
        return SolverState(
            coefficients=self.transform.forward(self.operator.initial),
            time=self.spec.t0,
            scheme=self.scheme.name,
        )

    def iterate(self, state: Optional[SolverState] = None) -> Iterator[Snapshot]:
        """スナップショットを順に生成

        Args:
            state: 再開する状態（省略時は初期条件から開始）

        Raises:
            DivergenceError: 解が発散した場合（最後のスナップショットを保持）
            OutputSinkError: 出力先で例外が発生した場合（同上）
        """
        self.status = LoopStatus.INITIALIZING
        resumed = state is not None
        self._restore(state.copy() if resumed else self.initial_state())
        # 同じループを再実行しても前回の記録は引き継がない
        self.times = []
        self.outputs = []
        self.last_snapshot = None
        self._elapsed = 0.0
        self.monitor.reset()
        self.logger.info(
            "時間発展を開始: %s, scheme=%s, grid=%s, components=%d, t=[%g, %g], chunks=%d",
            self.spec.name,
            self.scheme.name,
            self.transform.shape,
            self.ncomponents,
            self.state.time,
            self.spec.tf,
            len(self.chunks) - self.state.chunk,
        )

        if not resumed:
            self.outputs.append(self.physical(self.state.coefficients))
            yield self._sample()

        start = _time.perf_counter()
        try:
            for chunk in self.chunks[self.state.chunk :]:
                if self.cancel is not None and self.cancel():
                    self.status = LoopStatus.CANCELLED
                    self.logger.warning(
                        "時間発展を中断: t=%.6g, step=%d", self.state.time, self.state.step
                    )
                    return

                self._advance(chunk)
                if chunk.output:
                    self.outputs.append(self.physical(self.state.coefficients))
                yield self._sample()

                every = self.preferences.checkpoint_every
                if self.checkpoints is not None and every and (chunk.index + 1) % every == 0:
                    self.checkpoints.save(self.state)

            self.status = LoopStatus.FINISHED
            self.logger.info(
                "時間発展を完了: t=%.6g, steps=%d, samples=%d",
                self.state.time,
                self.state.step,
                len(self.times),
            )
        finally:
            self._elapsed += _time.perf_counter() - start

    def run(self, state: Optional[SolverState] = None) -> RunResult:
        """最後まで（または中断まで）実行して結果を返す"""
        for _ in self.iterate(state):
            pass
        return self.result()

    def result(self) -> RunResult:
        if self.state is None:
            raise RuntimeError("ループが実行されていません")
        return RunResult(
            final=self.physical(self.state.coefficients),
            outputs=list(self.outputs),
            times=list(self.times),
            status=self.status,
            state=self.state.copy(),
            last_snapshot=self.last_snapshot,
            diagnostics=self.get_diagnostics(),
        )

    def physical(self, coefficients: np.ndarray) -> np.ndarray:
        """計算解像度での物理空間の場"""
        u = self.transform.inverse(coefficients)
        return u.real if self.operator.real else u

    def _restore(self, state: SolverState) -> None:
        expected = (self.ncomponents,) + self.transform.shape
        if state.coefficients.shape != expected:
            raise ConfigurationError(
                f"状態の形状 {state.coefficients.shape} が {expected} と一致しません"
            )
        if state.scheme is not None and state.scheme != self.scheme.name:
            raise ConfigurationError(
                f"状態のスキーム {state.scheme} が {self.scheme.name} と異なります"
            )
        if state.chunk > len(self.chunks):
            raise ConfigurationError(
                f"状態のチャンク番号 {state.chunk} が計画 ({len(self.chunks)}) を超えています"
            )

        self.stepper.reset()
        if state.dt is not None:
            self.stepper.set_coefficients(self._coefficients(state.dt))
        self.stepper.restore_history(state.history)
        state.scheme = self.scheme.name
        self.state = state

    def _coefficients(self, dt: float):
        return self.cache.get(
            self.scheme,
            self.operator.linear,
            dt,
            self.spec.domain.to_flat(),
            self.preferences.phi_settings,
        )

    def _advance(self, chunk: Chunk) -> None:
        """1チャンク分のステップを進める"""
        self.status = LoopStatus.STEPPING
        state = self.state
        if state.dt != chunk.dt:
            self.logger.debug("時間刻み幅を設定: dt=%.6e", chunk.dt)
            self.stepper.set_coefficients(self._coefficients(chunk.dt))

        u = state.coefficients
        try:
            for j in range(chunk.steps):
                u = self.stepper.step(
                    u, state.step + j + 1, chunk.start_time + (j + 1) * chunk.dt
                )
        except DivergenceError as e:
            self.status = LoopStatus.FAILED
            e.last_snapshot = self.last_snapshot
            self.logger.error("%s", e)
            raise

        state.coefficients = u
        state.time = chunk.end_time
        state.step += chunk.steps
        state.chunk = chunk.index + 1
        state.dt = chunk.dt
        state.history = self.stepper.export_history()
        self.logger.debug(
            "チャンク %d/%d 完了: t=%.6g, step=%d",
            state.chunk,
            len(self.chunks),
            state.time,
            state.step,
        )

    def _sample(self) -> Snapshot:
        """現在の状態のスナップショットを作成し、記録と出力を行う"""
        self.status = LoopStatus.SAMPLING
        state = self.state
        coeffs = self.transform.resample(state.coefficients, self.output_transform.shape)
        data = self.output_transform.inverse(coeffs)
        if self.operator.real:
            data = data.real
        snapshot = Snapshot(
            time=state.time,
            step=state.step,
            data=data,
            metadata={"scheme": self.scheme.name, "name": self.spec.name},
        )

        self.monitor.update(snapshot)
        if self.sink is not None and self.preferences.incremental_output:
            try:
                self.sink(snapshot)
            except Exception as e:
                self.status = LoopStatus.FAILED
                self.logger.error("出力先でエラーが発生: t=%.6g: %s", snapshot.time, e)
                raise OutputSinkError(
                    f"出力先でエラーが発生しました (t={snapshot.time:.6g}): {e}",
                    time=snapshot.time,
                    last_snapshot=snapshot,
                ) from e

        self.times.append(snapshot.time)
        self.last_snapshot = snapshot
        return snapshot

    def get_diagnostics(self) -> Dict[str, Any]:
        return {
            "status": self.status.name,
            "elapsed": self._elapsed,
            "nonlinear_evaluations": self.evaluate.evaluations,
            "coefficient_cache": self.cache.get_diagnostics(),
            "stepper": self.stepper.get_diagnostics(),
            "state": self.state.get_diagnostics() if self.state else None,
            "monitor": self.monitor.get_summary(),
        }
