"""PDEのプリセットパッケージ"""

from .catalog import PRESETS, available_presets, get_preset
from .initial import random_trig_field

__all__ = ["PRESETS", "get_preset", "available_presets", "random_trig_field"]
