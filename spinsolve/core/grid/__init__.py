"""計算領域とフーリエ変換のパッケージ"""

from .domain import Domain
from .transform import DEALIAS_RULES, GridTransform, WavenumberGrid, wavenumbers

__all__ = ["Domain", "GridTransform", "WavenumberGrid", "wavenumbers", "DEALIAS_RULES"]
