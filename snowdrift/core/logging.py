# snowdrift/core/logging.py

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional


class Logger:
    """
    Engine logging system.
    Console output always, file output when a log directory is given.
    """

    def __init__(self, name: str = "Snowdrift", log_dir: Optional[str] = None):
        self.name = name
        self.log_dir = Path(log_dir) if log_dir else None

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)

        self._setup_handlers()

    def _setup_handlers(self):
        """Setup console and file handlers, skipping any already attached."""
        kinds = {type(h) for h in self.logger.handlers}

        # Console handler (INFO and above)
        if logging.StreamHandler not in kinds:
            self._add_console_handler()

        if self.log_dir is not None and logging.FileHandler not in kinds:
            self._add_file_handler()

    def _add_console_handler(self):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_formatter = logging.Formatter(
            '%(levelname)-8s [%(name)s] %(message)s'
        )
        console_handler.setFormatter(console_formatter)
        self.logger.addHandler(console_handler)

    def _add_file_handler(self):
        # File handler (DEBUG and above)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = self.log_dir / f"snowdrift_{timestamp}.log"

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        self.logger.addHandler(file_handler)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def error(self, message: str, exc_info: bool = False):
        """Log error message."""
        self.logger.error(message, exc_info=exc_info)

    def critical(self, message: str, exc_info: bool = False):
        """Log critical message."""
        self.logger.critical(message, exc_info=exc_info)


# Global logger instance
_logger: Optional[Logger] = None


def get_logger() -> Logger:
    """Get global engine logger."""
    global _logger
    if _logger is None:
        _logger = Logger()
    return _logger


def init_logger(name: str = "Snowdrift", log_dir: Optional[str] = "logs") -> Logger:
    """Initialize global logger, writing a log file under log_dir."""
    global _logger
    _logger = Logger(name, log_dir)
    return _logger
