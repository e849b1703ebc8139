"""ロギング設定を管理するモジュール

ソルバーのログ出力先（コンソール・ファイル）とレベルを保持します。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..errors import ConfigurationError

VALID_LEVELS = ("debug", "info", "warning", "error", "critical")


@dataclass
class LogConfig:
    """ロギング設定

    Attributes:
        level: ロガー全体のログレベル
        log_dir: ログファイルの出力ディレクトリ
        file_logging: ファイル出力の設定
        console_logging: コンソール出力の設定
    """

    level: str = "info"
    log_dir: Union[str, Path] = Path("logs")
    file_logging: Dict[str, Any] = field(
        default_factory=lambda: {
            "enabled": False,
            "filename": "spinsolve.log",
            "level": "debug",
            "max_bytes": 10_000_000,
            "backup_count": 3,
        }
    )
    console_logging: Dict[str, Any] = field(
        default_factory=lambda: {"enabled": True, "level": "info", "color": True}
    )

    def __post_init__(self):
        if isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

    def validate(self) -> None:
        """設定の妥当性を検証

        Raises:
            ConfigurationError: 無効なログレベルが指定された場合
        """
        levels = [
            self.level,
            self.file_logging.get("level", "info"),
            self.console_logging.get("level", "info"),
        ]
        for level in levels:
            if str(level).lower() not in VALID_LEVELS:
                raise ConfigurationError(f"無効なログレベルです: {level}")

    def get_file_path(self, filename: Optional[str] = None) -> Path:
        """ログファイルのパスを取得"""
        return self.log_dir / (filename or self.file_logging["filename"])

    def create_directories(self) -> None:
        """ファイル出力が有効な場合のみディレクトリを作成"""
        if self.file_logging.get("enabled", False):
            self.log_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "LogConfig":
        """辞書（YAMLの``logging``セクション）から設定を生成

        ``file``/``console``キーは既定値にマージされます。
        """
        config = cls()
        unknown = set(config_dict) - {"level", "log_dir", "file", "console"}
        if unknown:
            raise ConfigurationError(f"未知のロギング設定です: {sorted(unknown)}")
        config.level = config_dict.get("level", config.level)
        config.log_dir = Path(config_dict.get("log_dir", config.log_dir))
        config.file_logging.update(config_dict.get("file", {}))
        config.console_logging.update(config_dict.get("console", {}))
        config.validate()
        return config
