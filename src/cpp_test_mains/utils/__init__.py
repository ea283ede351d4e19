"""统一日志模块."""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


console = Console(stderr=True)


class MainsLogger:
    """cpp-test-mains 日志管理器."""

    _instance: Optional["MainsLogger"] = None
    _logger: Optional[logging.Logger] = None

    def __new__(cls) -> "MainsLogger":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if self._logger is None:
            self._logger = self._create_logger()

    def _create_logger(self) -> logging.Logger:
        """创建日志器."""
        logger = logging.getLogger("cpp_test_mains")
        logger.setLevel(logging.DEBUG)

        logger.handlers.clear()

        console_handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console_handler)

        return logger

    def add_file_handler(self, log_file: str, level: int = logging.DEBUG) -> None:
        """添加文件日志处理器.

        Args:
            log_file: 日志文件路径
            level: 日志级别
        """
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        for handler in self.logger.handlers:
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == str(log_path.resolve()):
                return

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        self.logger.addHandler(file_handler)

    def set_level(self, level: int) -> None:
        """设置控制台日志级别.

        Args:
            level: 日志级别
        """
        for handler in self.logger.handlers:
            if isinstance(handler, RichHandler):
                handler.setLevel(level)

    @property
    def logger(self) -> logging.Logger:
        """获取日志器."""
        if self._logger is None:
            self._logger = self._create_logger()
        return self._logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """获取日志器.

    Args:
        name: 模块名称 (可选)

    Returns:
        logging.Logger: 日志器实例
    """
    mains_logger = MainsLogger()
    if name:
        return mains_logger.logger.getChild(name)
    return mains_logger.logger


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """设置日志配置.

    Args:
        level: 日志级别
        log_file: 日志文件路径 (可选)

    Returns:
        logging.Logger: 配置好的日志器
    """
    mains_logger = MainsLogger()
    mains_logger.set_level(level)

    if log_file:
        mains_logger.add_file_handler(log_file)

    return mains_logger.logger
