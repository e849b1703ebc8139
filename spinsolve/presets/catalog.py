"""代表的なPDEのプリセットを提供するモジュール

名前（大文字小文字を区別しない）から ``(OperatorSpec, 格子点数, 時間刻み幅,
Preferences)`` の組を生成します。

1次元:
    - ``ac``: Allen-Cahn方程式
    - ``burg``: Burgers方程式
    - ``ks``: 倉本-Sivashinsky方程式
    - ``nls``: 非線形Schrödinger方程式
2次元:
    - ``gl``: Ginzburg-Landau方程式（渦巻き）
    - ``gs``: Gray-Scott方程式（指紋状パターン）
    - ``gsspots``: Gray-Scott方程式（斑点パターン）
    - ``schnak``: Schnakenberg方程式
    - ``sh``: Swift-Hohenberg方程式
3次元:
    - ``gl3``: Ginzburg-Landau方程式
    - ``sh3``: Swift-Hohenberg方程式
"""

from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from ..core.grid import Domain
from ..core.operator import OperatorSpec
from ..errors import ConfigurationError
from ..simulations.config import Preferences
from .initial import random_trig_field

Preset = Tuple[OperatorSpec, int, float, Preferences]


def _allen_cahn(seed: Optional[int]) -> Preset:
    def initial(x):
        return (
            np.tanh(2 * np.sin(x))
            + 3 * np.exp(-27 * (x - 4.2) ** 2)
            - 3 * np.exp(-23.5 * (x - np.pi / 2) ** 2)
            + 3 * np.exp(-38 * (x - 5.4) ** 2)
        )

    spec = OperatorSpec(
        domain=Domain(((0.0, 2 * np.pi),)),
        tspan=[0, 300],
        linear=lambda k: 5e-3 * k.laplacian,
        nonlinear=lambda u: u - u**3,
        initial=initial,
        name="ac",
    )
    return spec, 256, 1e-1, Preferences(clim=(-1.5, 1.5), sample_every=20)


def _burgers(seed: Optional[int]) -> Preset:
    spec = OperatorSpec(
        domain=Domain(((-1.0, 1.0),)),
        tspan=[0, 30],
        linear=lambda k: 1e-3 * k.laplacian,
        nonlinear=lambda u: u**2,
        nonlinear_symbol=lambda k: -0.5 * k.dx,
        initial=lambda x: (1 - x**2) * np.exp(-30 * (x + 0.5) ** 2),
        name="burg",
    )
    return spec, 256, 1e-2, Preferences(clim=(-0.2, 1.2), sample_every=10)


def _kuramoto_sivashinsky(seed: Optional[int]) -> Preset:
    spec = OperatorSpec(
        domain=Domain(((0.0, 32 * np.pi),)),
        tspan=[0, 300],
        linear=lambda k: -k.laplacian - k.biharmonic,
        nonlinear=lambda u: u**2,
        nonlinear_symbol=lambda k: -0.5 * k.dx,
        initial=lambda x: np.cos(x / 16) * (1 + np.sin(x / 16)),
        name="ks",
    )
    return spec, 256, 1e-1, Preferences(clim=(-3.0, 3.0), sample_every=20)


def _schrodinger(seed: Optional[int]) -> Preset:
    a, b = 2.0, 1.0

    def initial(x):
        return a * (
            2 * b**2 / (2 - np.sqrt(2) * np.sqrt(2 - b**2) * np.cos(a * b * x)) - 1
        ) + 0j

    spec = OperatorSpec(
        domain=Domain(((-np.pi, np.pi),)),
        tspan=[0, 18],
        linear=lambda k: 1j * k.laplacian,
        nonlinear=lambda u: 1j * np.abs(u) ** 2 * u,
        initial=initial,
        name="nls",
    )
    return spec, 256, 5e-3, Preferences(dataplot="abs", sample_every=40)


def _ginzburg_landau(seed: Optional[int], ndim: int = 2) -> Preset:
    domain = Domain.cube(0.0, 100.0 if ndim == 2 else 50.0, ndim)
    spec = OperatorSpec(
        domain=domain,
        tspan=[0, 100],
        linear=lambda k: k.laplacian,
        nonlinear=lambda u: u - (1 + 1.5j) * u * np.abs(u) ** 2,
        initial=random_trig_field(domain, modes=4, seed=seed),
        name="gl" if ndim == 2 else "gl3",
    )
    if ndim == 2:
        return spec, 128, 1e-1, Preferences(
            clim=(-1.0, 1.0), sample_every=2, output_resolution=256
        )
    return spec, 32, 1e-1, Preferences(clim=(-1.0, 1.0), sample_every=10)


def _gray_scott(seed: Optional[int], spots: bool = False) -> Preset:
    g = 3.0
    diffusion_v = 0.5e-4 if spots else 1.5e-4

    def initial(x, y):
        u = 1 - np.exp(-100 * ((x - g / 2.05) ** 2 + (y - g / 2.05) ** 2))
        v = np.exp(-100 * ((x - g / 2) ** 2 + 2 * (y - g / 2) ** 2))
        return [u, v]

    def nonlinear(w):
        u, v = w
        return [3.5e-2 * (1 - u) - u * v**2, -9.5e-2 * v + u * v**2]

    spec = OperatorSpec(
        domain=Domain.cube(0.0, g, 2),
        tspan=[0, 6000],
        linear=lambda k: [3e-4 * k.laplacian, diffusion_v * k.laplacian],
        nonlinear=nonlinear,
        initial=initial,
        name="gsspots" if spots else "gs",
    )
    clim = (0.15, 0.5, 0.0, 0.6) if spots else (0.3, 0.9, 0.0, 0.35)
    return spec, 64, 6.0, Preferences(
        clim=clim, sample_every=5, output_resolution=128
    )


def _schnakenberg(seed: Optional[int]) -> Preset:
    g, a, b = 50.0, 0.1, 0.9

    def initial(x, y):
        u = (a + b) - np.exp(-2 * ((x - g / 2.15) ** 2 + (y - g / 2.15) ** 2))
        v = b / (a + b) ** 2 + np.exp(-2 * ((x - g / 2) ** 2 + 2 * (y - g / 2) ** 2))
        return [u, v]

    def nonlinear(w):
        u, v = w
        return [3 * (a - u + u**2 * v), 3 * (b - u**2 * v)]

    spec = OperatorSpec(
        domain=Domain.cube(0.0, g, 2),
        tspan=[0, 500],
        linear=lambda k: [k.laplacian, 10 * k.laplacian],
        nonlinear=nonlinear,
        initial=initial,
        name="schnak",
    )
    return spec, 64, 5e-1, Preferences(
        clim=(0.7, 1.7, 0.65, 1.05), sample_every=10, output_resolution=128
    )


def _swift_hohenberg(seed: Optional[int], ndim: int = 2) -> Preset:
    domain = Domain.cube(0.0, 50.0 if ndim == 2 else 20.0, ndim)
    noise = random_trig_field(domain, modes=8 if ndim == 2 else 4, seed=seed)
    spec = OperatorSpec(
        domain=domain,
        tspan=[0, 800 if ndim == 2 else 200],
        linear=lambda k: -2 * k.laplacian - k.biharmonic - 0.9,
        nonlinear=lambda u: -(u**3),
        initial=lambda *coords: 0.1 * noise(*coords),
        name="sh" if ndim == 2 else "sh3",
    )
    if ndim == 2:
        return spec, 128, 1.0, Preferences(
            clim=(-0.4, 0.5), sample_every=4, output_resolution=256
        )
    return spec, 32, 1.0, Preferences(clim=(-0.4, 0.5), sample_every=10)


PRESETS: Dict[str, Callable[[Optional[int]], Preset]] = {
    "ac": _allen_cahn,
    "burg": _burgers,
    "ks": _kuramoto_sivashinsky,
    "nls": _schrodinger,
    "gl": _ginzburg_landau,
    "gs": _gray_scott,
    "gsspots": lambda seed: _gray_scott(seed, spots=True),
    "schnak": _schnakenberg,
    "sh": _swift_hohenberg,
    "gl3": lambda seed: _ginzburg_landau(seed, ndim=3),
    "sh3": lambda seed: _swift_hohenberg(seed, ndim=3),
}


def available_presets() -> List[str]:
    return sorted(PRESETS)


def get_preset(name: str, seed: Optional[int] = None) -> Preset:
    """プリセットを取得

    Args:
        name: プリセット名（大文字小文字を区別しない）
        seed: ランダムな初期条件の乱数シード

    Returns:
        (演算子の指定, 格子点数, 時間刻み幅, 設定)

    Raises:
        ConfigurationError: 未知のプリセット名の場合
    """
    if not isinstance(name, str) or name.lower() not in PRESETS:
        raise ConfigurationError(
            f"未知のプリセットです: {name!r} (有効: {', '.join(available_presets())})"
        )
    return PRESETS[name.lower()](seed)
