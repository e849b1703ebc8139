"""初期条件の生成を提供するモジュール"""

import itertools
from typing import Callable, Optional

import numpy as np

from ..core.grid import Domain


def random_trig_field(
    domain: Domain,
    modes: int = 4,
    seed: Optional[int] = None,
    normalize: bool = True,
) -> Callable[..., np.ndarray]:
    """滑らかなランダム三角多項式の初期条件を生成

    各次元で ``|k| <= modes`` の波数を持つ実数値の三角多項式です。
    係数は標準正規分布から ``seed`` で再現可能に生成されます。

    Args:
        domain: 計算領域
        modes: 各次元の最大波数
        seed: 乱数シード
        normalize: 格子上の最大絶対値を1に正規化するか

    Returns:
        座標配列を受け取り格子上の値を返す関数
    """
    if modes < 0:
        raise ValueError(f"modesは非負である必要があります: {modes}")
    rng = np.random.default_rng(seed)
    ks = np.array(
        list(itertools.product(range(-modes, modes + 1), repeat=domain.ndim)),
        dtype=float,
    )
    a = rng.standard_normal(len(ks))
    b = rng.standard_normal(len(ks))
    scale = [2.0 * np.pi / length for length in domain.lengths]

    def initial(*coords: np.ndarray) -> np.ndarray:
        shifted = [x - lower for x, lower in zip(coords, domain.lower)]
        u = np.zeros(np.shape(coords[0]))
        for k, ak, bk in zip(ks, a, b):
            theta = sum(kd * s * x for kd, s, x in zip(k, scale, shifted))
            u += ak * np.cos(theta) + bk * np.sin(theta)
        if normalize:
            peak = np.max(np.abs(u))
            if peak > 0:
                u /= peak
        return u

    return initial
