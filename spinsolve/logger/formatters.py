"""ログフォーマッタを提供するモジュール"""

import datetime
import logging
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DETAILED_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[%(filename)s:%(lineno)d] - %(message)s"
)


class DefaultFormatter(logging.Formatter):
    """標準的なログフォーマッタ"""

    def __init__(self, fmt: Optional[str] = None):
        super().__init__(fmt or DEFAULT_FORMAT)


class DetailedFormatter(logging.Formatter):
    """ファイル名と行番号を含む、ミリ秒精度のフォーマッタ"""

    def __init__(self, fmt: Optional[str] = None):
        super().__init__(fmt or DETAILED_FORMAT)

    def formatTime(
        self, record: logging.LogRecord, datefmt: Optional[str] = None
    ) -> str:
        ct = datetime.datetime.fromtimestamp(record.created)
        if datefmt:
            return ct.strftime(datefmt)
        return ct.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


class ColoredFormatter(logging.Formatter):
    """ログレベルごとに色を付けるフォーマッタ"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: Optional[str] = None, use_color: bool = True):
        super().__init__(fmt or DEFAULT_FORMAT)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        """ログレコードをフォーマット

        レコード自体は書き換えず、他のハンドラに色コードが漏れないようにします。
        """
        message = super().format(record)
        if not self.use_color:
            return message
        color = self.COLORS.get(record.levelname)
        if color is None:
            return message
        return message.replace(
            record.levelname, f"{color}{record.levelname}{self.RESET}", 1
        )
