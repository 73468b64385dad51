"""
System Reporter - Centralized logging for Crieur services.

Wraps the standard logging module with a verbosity filter and a
context tag per message. Logs to stdout and, optionally, to a file.
"""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class SystemReporter:
    """
    Logger with verbose filtering.

    Verbose Levels:
        0 = Critical only (always visible)
        1 = Important messages (default)
        2 = Detailed information
        3 = Debug/verbose
    """

    def __init__(
        self,
        name: str = "system",
        log_dir: Optional[str] = None,
        level: int = logging.INFO,
        verbose: int = 1,
        log_file: Optional[str] = None,
    ) -> None:
        """
        Initialize SystemReporter.

        Args:
            name: Logger name (used for filename if log_dir provided)
            log_dir: Directory for log files. If None, logs to stdout only.
            level: Python logging level
            verbose: Verbosity filter (0-3)
            log_file: Explicit log file path (overrides log_dir)
        """
        self.name = name
        self.verbose = max(0, min(3, verbose))
        self.log_path = self._resolve_log_path(name, log_dir, log_file)
        self._init_logger(name, level)

    @staticmethod
    def _resolve_log_path(
        name: str, log_dir: Optional[str], log_file: Optional[str]
    ) -> Optional[str]:
        """Work out where file logs go, if anywhere."""
        if log_file:
            return os.path.abspath(log_file)
        if log_dir:
            return os.path.abspath(os.path.join(log_dir, f"{name}.log"))
        return None

    def _init_logger(self, name: str, level: int) -> None:
        """
        Initialize logger with console and optional file handlers.

        Args:
            name: Logger name
            level: Python logging level
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.handlers.clear()
        self.logger.propagate = False

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if self.log_path:
            os.makedirs(os.path.dirname(self.log_path), exist_ok=True)
            file_handler = logging.FileHandler(self.log_path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def set_verbose(self, level: int) -> None:
        """Update verbosity level."""
        self.verbose = max(0, min(3, level))
        self.info(
            f"Verbosity set to {self.verbose}",
            context="SystemReporter",
            verbose_level=0,
        )

    def _should_log(self, verbose_level: int) -> bool:
        """Check if message should be logged."""
        return self.verbose >= verbose_level

    def _emit(self, level: int, msg: str, context: str, verbose_level: int) -> None:
        if self._should_log(verbose_level):
            self.logger.log(level, f"[{context}] {msg}")

    # Core logging methods
    def debug(
        self, msg: str, context: str = "system", verbose_level: int = 3
    ) -> None:
        """Log debug message."""
        self._emit(logging.DEBUG, msg, context, verbose_level)

    def info(
        self, msg: str, context: str = "system", verbose_level: int = 1
    ) -> None:
        """Log info message."""
        self._emit(logging.INFO, msg, context, verbose_level)

    def warning(
        self, msg: str, context: str = "system", verbose_level: int = 1
    ) -> None:
        """Log warning message."""
        self._emit(logging.WARNING, msg, context, verbose_level)

    def error(
        self, msg: str, context: str = "system", verbose_level: int = 0
    ) -> None:
        """Log error message."""
        self._emit(logging.ERROR, msg, context, verbose_level)

    def critical(
        self, msg: str, context: str = "system", verbose_level: int = 0
    ) -> None:
        """Log critical message."""
        self._emit(logging.CRITICAL, msg, context, verbose_level)
