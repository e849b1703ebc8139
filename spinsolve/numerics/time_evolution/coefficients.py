"""指数積分子の係数の計算とキャッシュを提供するモジュール"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Hashable, Mapping, Optional, Tuple, Union

import numpy as np

from ...errors import ConfigurationError
from .phi import PhiSettings
from .schemes import SchemeDefinition, get_scheme


@dataclass(frozen=True, eq=False)
class IntegratorCoefficients:
    """スキームの係数の組（実行中は不変）

    Attributes:
        scheme: スキーム名
        dt: 時間刻み幅
        arrays: 係数名から ``(成分数, *格子形状)`` の配列への対応
        startup: 多段法の立ち上げに使う1段法の係数
    """

    scheme: str
    dt: float
    arrays: Mapping[str, np.ndarray]
    startup: Optional["IntegratorCoefficients"] = None

    def __getitem__(self, key: str) -> np.ndarray:
        return self.arrays[key]

    def __contains__(self, key: str) -> bool:
        return key in self.arrays

    def is_finite(self) -> bool:
        return all(np.all(np.isfinite(a)) for a in self.arrays.values())


def compute_coefficients(
    scheme: Union[str, SchemeDefinition],
    linear: np.ndarray,
    dt: float,
    settings: PhiSettings = PhiSettings(),
) -> IntegratorCoefficients:
    """スキームの係数を ``z = dt * L`` から計算

    Args:
        scheme: スキーム名または定義
        linear: 成分ごとの線形シンボル
        dt: 時間刻み幅
        settings: phi関数の評価設定
    """
    if isinstance(scheme, str):
        scheme = get_scheme(scheme)
    if not dt > 0:
        raise ConfigurationError(f"時間刻み幅は正の値である必要があります: {dt}")

    z = dt * np.asarray(linear, dtype=complex)
    with np.errstate(over="ignore", invalid="ignore"):
        arrays = scheme.build(z, dt, settings)
    for array in arrays.values():
        array.setflags(write=False)

    startup = None
    if scheme.startup is not None:
        startup = compute_coefficients(scheme.startup, linear, dt, settings)
    return IntegratorCoefficients(
        scheme=scheme.name, dt=float(dt), arrays=arrays, startup=startup
    )


@dataclass
class CoefficientCache:
    """係数のキャッシュ

    キーは（スキーム, 線形シンボルの内容, 格子形状と成分数, dt, 領域,
    phi関数の評価設定）です。異なる演算子で同じキャッシュを共有しても
    係数が取り違えられることはありません。

    Attributes:
        maxsize: 保持する係数の組の最大数
    """

    maxsize: int = 8
    hits: int = 0
    misses: int = 0
    _entries: "OrderedDict[Hashable, IntegratorCoefficients]" = field(
        default_factory=OrderedDict, repr=False
    )
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger(__name__), repr=False
    )

    def get(
        self,
        scheme: SchemeDefinition,
        linear: np.ndarray,
        dt: float,
        domain: Tuple[float, ...],
        settings: PhiSettings,
    ) -> IntegratorCoefficients:
        """係数を取得（なければ計算して保持）"""
        key = (
            scheme.name,
            hash(np.ascontiguousarray(linear).tobytes()),
            linear.shape,
            float(dt),
            tuple(domain),
            settings,
        )
        if key in self._entries:
            self.hits += 1
            self._entries.move_to_end(key)
            return self._entries[key]

        self.misses += 1
        self.logger.debug(
            "係数を計算: scheme=%s, shape=%s, dt=%.6e", scheme.name, linear.shape, dt
        )
        coefficients = compute_coefficients(scheme, linear, dt, settings)
        if not coefficients.is_finite():
            self.logger.warning(
                "係数に有限でない値が含まれます (dt=%.3e): 線形シンボルの実部が大きすぎる可能性があります",
                dt,
            )
        self._entries[key] = coefficients
        while len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)
        return coefficients

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def get_diagnostics(self) -> Dict[str, int]:
        return {"entries": len(self), "hits": self.hits, "misses": self.misses}
