"""ソルバー用ロガーを提供するモジュール

時間発展の進捗や重要なイベントを一貫した形式で記録します。
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import LogConfig
from .formatters import DetailedFormatter
from .handlers import BufferedLogHandler, ConsoleLogHandler, FileLogHandler


class SolverLogger:
    """ソルバー用ロガークラス

    標準の``logging.Logger``を包み、``logging.Logger``と同じメソッドで
    呼び出せるようにします。ソルバー内部のモジュールはどちらのロガーも
    受け付けます。
    """

    def __init__(
        self,
        name: str = "spinsolve",
        config: Optional[LogConfig] = None,
        parent: Optional["SolverLogger"] = None,
    ):
        """ロガーを初期化

        Args:
            name: ロガーの名前
            config: ロギング設定
            parent: 親ロガー（セクション用）
        """
        self.name = name
        self.config = config or LogConfig()
        self.parent = parent

        self.config.validate()
        self.config.create_directories()

        self._buffer = parent._buffer if parent else BufferedLogHandler()
        self.logger = self._create_logger()

    def _create_logger(self) -> logging.Logger:
        logger = logging.getLogger(self.name)
        logger.setLevel(getattr(logging, self.config.level.upper()))

        # セクションは親のハンドラへ伝播させる
        if self.parent is not None:
            logger.propagate = True
            return logger

        logger.handlers.clear()
        logger.propagate = False

        if self.config.file_logging["enabled"]:
            logger.addHandler(
                FileLogHandler(
                    filename=self.config.get_file_path(),
                    formatter=DetailedFormatter(),
                    max_bytes=self.config.file_logging["max_bytes"],
                    backup_count=self.config.file_logging["backup_count"],
                    level=self.config.file_logging["level"],
                )
            )

        if self.config.console_logging["enabled"]:
            logger.addHandler(
                ConsoleLogHandler(
                    level=self.config.console_logging["level"],
                    use_color=self.config.console_logging["color"],
                )
            )

        logger.addHandler(self._buffer)
        return logger

    def debug(self, msg: str, *args, **kwargs):
        self.logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self.logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self.logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs):
        self.logger.critical(msg, *args, **kwargs)

    def isEnabledFor(self, level: int) -> bool:
        return self.logger.isEnabledFor(level)

    def start_section(self, name: str) -> "SolverLogger":
        """子セクションのロガーを生成

        Args:
            name: セクション名

        Returns:
            ``<親の名前>.<name>``のロガー
        """
        return SolverLogger(f"{self.name}.{name}", self.config, self)

    def get_recent_logs(self, n: int = 100) -> List[str]:
        """最近のログメッセージを取得"""
        return self._buffer.get_logs()[-n:]

    def save_debug_info(self, path: Union[str, Path]) -> None:
        """バッファ内のログをファイルに保存"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            for line in self._buffer.get_logs():
                f.write(f"{line}\n")

    def log_error_with_context(
        self, msg: str, error: Exception, context: Optional[Dict[str, Any]] = None
    ) -> None:
        """例外の情報をコンテキスト付きで出力"""
        self.logger.error(
            "%s: %s(%s) context=%s",
            msg,
            type(error).__name__,
            error,
            context or {},
            exc_info=error,
        )

    def log_performance(self, section: str, elapsed: float) -> None:
        """処理時間を出力"""
        self.logger.info("Performance - %s: %.3f seconds", section, elapsed)

    def log_simulation_state(self, state: Dict[str, Any], level: str = "info"):
        """実行状態（時刻・ステップ数など）を出力"""
        getattr(self.logger, level.lower())("Solver state: %s", state)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.log_error_with_context(
                "Error in solver section", exc_val, {"section": self.name}
            )
        return False
