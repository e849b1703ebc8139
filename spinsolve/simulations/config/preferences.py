"""実行時の設定（プリファレンス）を管理するモジュール

認識されるすべての設定項目とその型を列挙し、生成時に一度だけ検証します。
未知のキーは受け付けません。
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np
import yaml

from ...core.grid import DEALIAS_RULES
from ...errors import ConfigurationError
from ...numerics.time_evolution import (
    DEFAULT_BLOWUP_FACTOR,
    DEFAULT_SCHEME,
    PHI_METHODS,
    PhiSettings,
    get_scheme,
)

DATAPLOT_MODES = ("real", "imag", "abs")


@dataclass
class Preferences:
    """ソルバーの設定

    Attributes:
        scheme: 時間積分スキーム名
        sample_every: 何ステップごとにスナップショットを取るか
        output_resolution: 出力解像度（``None``なら計算解像度）
        clim: 表示範囲 ``[min, max]``（連立系では成分ごとに続けて並べる）
        colormap: カラーマップ名
        dataplot: 表示する値（``real``, ``imag``, ``abs``）
        incremental_output: スナップショットを出力先へ逐次渡すか
        dealias: エイリアシング除去の規則（``2/3``, ``nyquist``）
        phi_method: 小さい ``|z|`` でのphi関数の評価法（``contour``, ``series``）
        phi_threshold: 直接式に切り替える ``|z|`` の閾値
        contour_points: 周回積分の点数
        contour_radius: 周回積分の半径
        blowup_factor: 発散とみなす初期値に対する倍率
        checkpoint_every: 何チャンクごとにチェックポイントを保存するか（0で無効）
        output_dir: 出力ディレクトリ
    """

    scheme: str = DEFAULT_SCHEME
    sample_every: int = 1
    output_resolution: Optional[Union[int, Tuple[int, ...]]] = None
    clim: Optional[Tuple[float, ...]] = None
    colormap: str = "viridis"
    dataplot: str = "real"
    incremental_output: bool = True
    dealias: str = "2/3"
    phi_method: str = "contour"
    phi_threshold: float = 1.0
    contour_points: int = 32
    contour_radius: float = 2.0
    blowup_factor: float = DEFAULT_BLOWUP_FACTOR
    checkpoint_every: int = 0
    output_dir: str = "results"

    def __post_init__(self):
        if isinstance(self.output_resolution, (list, tuple)):
            self.output_resolution = tuple(self.output_resolution)
        if isinstance(self.clim, (list, tuple, np.ndarray)):
            self.clim = tuple(float(v) for v in self.clim)
        if isinstance(self.output_dir, Path):
            self.output_dir = str(self.output_dir)
        self.validate()

    def validate(self) -> None:
        """設定値の妥当性を検証

        Raises:
            ConfigurationError: 無効な設定値が検出された場合
        """
        self.scheme = get_scheme(self.scheme).name

        _require_int(self.sample_every, "sample_every", minimum=1)
        _require_int(self.contour_points, "contour_points", minimum=2)
        _require_int(self.checkpoint_every, "checkpoint_every", minimum=0)

        if self.output_resolution is not None:
            sizes = (
                self.output_resolution
                if isinstance(self.output_resolution, tuple)
                else (self.output_resolution,)
            )
            for size in sizes:
                _require_int(size, "output_resolution", minimum=2)

        if self.clim is not None:
            if len(self.clim) == 0 or len(self.clim) % 2 != 0:
                raise ConfigurationError(
                    f"climは[min, max]の組の並びである必要があります: {self.clim}"
                )
            pairs = zip(self.clim[0::2], self.clim[1::2])
            if any(lo >= hi for lo, hi in pairs):
                raise ConfigurationError(f"climの各組はmin < maxである必要があります: {self.clim}")

        for name in ("colormap", "output_dir"):
            if not isinstance(getattr(self, name), str):
                raise ConfigurationError(f"{name}は文字列である必要があります")
        if self.dataplot not in DATAPLOT_MODES:
            raise ConfigurationError(
                f"未対応のdataplotです: {self.dataplot} (有効: {DATAPLOT_MODES})"
            )
        if self.dealias not in DEALIAS_RULES:
            raise ConfigurationError(
                f"未対応のdealiasです: {self.dealias} (有効: {DEALIAS_RULES})"
            )
        if self.phi_method not in PHI_METHODS:
            raise ConfigurationError(
                f"未対応のphi_methodです: {self.phi_method} (有効: {PHI_METHODS})"
            )
        if not isinstance(self.incremental_output, bool):
            raise ConfigurationError("incremental_outputは真偽値である必要があります")

        for name in ("phi_threshold", "contour_radius", "blowup_factor"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name}は数値である必要があります: {value!r}")
            if not value > 0:
                raise ConfigurationError(f"{name}は正の値である必要があります: {value}")
        if self.blowup_factor <= 1:
            raise ConfigurationError("blowup_factorは1より大きい必要があります")

        # phi関数の設定の組み合わせも検証する
        self.phi_settings

    @property
    def phi_settings(self) -> PhiSettings:
        return PhiSettings(
            method=self.phi_method,
            threshold=float(self.phi_threshold),
            points=self.contour_points,
            radius=float(self.contour_radius),
        )

    def clim_for(self, component: int) -> Optional[Tuple[float, float]]:
        """成分の表示範囲を取得（1組だけならすべての成分で共通）"""
        if self.clim is None:
            return None
        npairs = len(self.clim) // 2
        index = component if component < npairs else 0
        return self.clim[2 * index], self.clim[2 * index + 1]

    def to_dict(self) -> Dict[str, Any]:
        """設定を辞書形式にシリアライズ"""
        data = asdict(self)
        for key in ("output_resolution", "clim"):
            if isinstance(data[key], tuple):
                data[key] = list(data[key])
        return data

    @classmethod
    def from_dict(cls, config_dict: Optional[Dict[str, Any]]) -> "Preferences":
        """辞書から設定を生成

        Raises:
            ConfigurationError: 未知のキーや無効な値が含まれる場合
        """
        config_dict = dict(config_dict or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise ConfigurationError(f"未知の設定項目です: {unknown}")
        try:
            return cls(**config_dict)
        except TypeError as e:
            raise ConfigurationError(f"設定値の型が不正です: {e}") from e

    @classmethod
    def from_yaml(cls, filepath: Union[str, Path]) -> "Preferences":
        """YAMLファイルから設定を読み込む"""
        with open(filepath, "r", encoding="utf-8") as f:
            return cls.from_dict(yaml.safe_load(f) or {})

    def save(self, filepath: Union[str, Path]) -> None:
        """設定をYAMLファイルに保存"""
        with open(filepath, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def replace(self, **changes) -> "Preferences":
        """一部の項目を変更した新しい設定を生成"""
        merged = self.to_dict()
        unknown = sorted(set(changes) - set(merged))
        if unknown:
            raise ConfigurationError(f"未知の設定項目です: {unknown}")
        merged.update(changes)
        return Preferences.from_dict(merged)


def _require_int(value: Any, name: str, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ConfigurationError(f"{name}は整数である必要があります: {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name}は{minimum}以上である必要があります: {value}")
