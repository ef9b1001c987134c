"""Logging service"""

import logging
from collections import deque
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

from ..config import settings

# One rotating file per type under LOGS_DIR
LOG_TYPES = ("error", "info", "llm")


class LogService:
    """Centralized logging service"""

    def __init__(self, log_dir: Path = None):
        self.log_dir = log_dir or settings.LOGS_DIR
        self.log_dir.mkdir(exist_ok=True, parents=True)

        self.error_logger = self._setup_logger("error", logging.ERROR)
        self.info_logger = self._setup_logger("info", logging.INFO)
        self.llm_logger = self._setup_logger("llm", logging.DEBUG)

    def _setup_logger(self, name: str, level: int) -> logging.Logger:
        """Setup a logger with rotating file handler"""
        logger = logging.getLogger(f"testplan.{name}")
        logger.setLevel(level)

        # Prevent duplicate handlers
        if logger.handlers:
            return logger

        # 10MB max, 3 backups
        handler = RotatingFileHandler(
            self.log_dir / f"{name}.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

        logger.addHandler(handler)
        return logger

    def error(self, message: str, **kwargs):
        """Log error message"""
        self.error_logger.error(message, extra=kwargs)

    def info(self, message: str, **kwargs):
        """Log info message"""
        self.info_logger.info(message, extra=kwargs)

    def llm(self, message: str, **kwargs):
        """Log provider traffic"""
        self.llm_logger.info(message, extra=kwargs)

    def generation(self, provider: str, model: str, tokens: int, elapsed_ms: int):
        """One completed generation call"""
        self.llm(
            f"{provider} generation: model={model} tokens={tokens} time={elapsed_ms}ms"
        )

    def get_logs(self, log_type: str = "error", limit: int = 100) -> List[str]:
        """Last ``limit`` lines of the current log file (rotated files ignored)"""
        if log_type not in LOG_TYPES:
            raise ValueError(f"Unknown log type: {log_type}")

        log_file = self.log_dir / f"{log_type}.log"
        if not log_file.exists():
            return []

        with open(log_file, "r", encoding="utf-8", errors="replace") as f:
            return [line.rstrip("\n") for line in deque(f, maxlen=limit)]


# Global log service instance
log_service = LogService()
