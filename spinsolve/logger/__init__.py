"""ソルバー用ロギングパッケージ"""

from .config import LogConfig
from .formatters import ColoredFormatter, DefaultFormatter, DetailedFormatter
from .handlers import BufferedLogHandler, ConsoleLogHandler, FileLogHandler
from .logger import SolverLogger

__all__ = [
    "SolverLogger",
    "LogConfig",
    "FileLogHandler",
    "ConsoleLogHandler",
    "BufferedLogHandler",
    "DefaultFormatter",
    "DetailedFormatter",
    "ColoredFormatter",
]
