"""設定パッケージ"""

from .preferences import DATAPLOT_MODES, Preferences

__all__ = ["Preferences", "DATAPLOT_MODES"]
