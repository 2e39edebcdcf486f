"""
Logging infrastructure for SeqHMM.

All package loggers hang off the 'seq_hmm' logger. The manager below owns one
console handler and at most one file handler on it; handlers attached by
anything else (test harnesses, host applications) are never touched.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from .config import get_config

ROOT_LOGGER_NAME = 'seq_hmm'
DEFAULT_LOG_FILE = 'seq_hmm.log'


def _parse_level(level: str) -> int:
    """Translate a level name such as 'debug' into its logging constant."""
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{level}'")
    return value


class SeqHMMLogger:
    """Owns the handlers of the 'seq_hmm' logger hierarchy."""

    def __init__(self):
        self._loggers = {}
        self._console_handler: Optional[logging.Handler] = None
        self._file_handler: Optional[logging.FileHandler] = None
        self._setup_root_logger()

    @property
    def root(self) -> logging.Logger:
        return logging.getLogger(ROOT_LOGGER_NAME)

    @property
    def log_file(self) -> Optional[Path]:
        """Path of the active log file, or None when file logging is off."""
        if self._file_handler is None:
            return None
        return Path(self._file_handler.baseFilename)

    def _setup_root_logger(self):
        """Attach the console handler and, if configured, the file handler."""
        level = _parse_level(get_config('logging', 'level') or 'INFO')
        self._formatter = logging.Formatter(get_config('logging', 'format'))

        root_logger = self.root
        root_logger.setLevel(level)

        self._console_handler = logging.StreamHandler(sys.stdout)
        self._console_handler.setLevel(level)
        self._console_handler.setFormatter(self._formatter)
        root_logger.addHandler(self._console_handler)

        if get_config('logging', 'file_logging'):
            self.enable_file_logging()

        # Package records are rendered here only
        root_logger.propagate = False

    def get_logger(self, name: str) -> logging.Logger:
        """Get or create a logger under the 'seq_hmm' namespace."""
        if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + '.'):
            full_name = name
        else:
            full_name = f'{ROOT_LOGGER_NAME}.{name}'

        if full_name not in self._loggers:
            self._loggers[full_name] = logging.getLogger(full_name)

        return self._loggers[full_name]

    def set_level(self, level: str):
        """
        Set the level of the package logger and of the handlers it owns.

        Raises:
            ValueError: If the level name is unknown
        """
        log_level = _parse_level(level)
        self.root.setLevel(log_level)
        for handler in (self._console_handler, self._file_handler):
            if handler is not None:
                handler.setLevel(log_level)

    def enable_file_logging(self, log_file: Optional[str] = None) -> Path:
        """
        Mirror package logs into a file.

        Calling it again with the same path is a no-op; a different path
        replaces the current file handler.

        Returns:
            Resolved path of the log file
        """
        if log_file is None:
            log_file = get_config('logging', 'log_file') or DEFAULT_LOG_FILE
        log_path = Path(log_file).resolve()

        if self._file_handler is not None:
            if self.log_file == log_path:
                return log_path
            self.disable_file_logging()

        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(self.root.level)
        file_handler.setFormatter(self._formatter)
        self.root.addHandler(file_handler)
        self._file_handler = file_handler

        return log_path

    def disable_file_logging(self):
        """Detach and close the file handler created by enable_file_logging()."""
        if self._file_handler is None:
            return
        self.root.removeHandler(self._file_handler)
        self._file_handler.close()
        self._file_handler = None


# Global logger manager instance
_logger_manager = SeqHMMLogger()


def get_logger(name: str = 'main') -> logging.Logger:
    """Get a logger instance for the specified module/component."""
    return _logger_manager.get_logger(name)


def set_log_level(level: str):
    """Set global logging level."""
    _logger_manager.set_level(level)


def enable_file_logging(log_file: Optional[str] = None) -> Path:
    """Enable file logging globally."""
    return _logger_manager.enable_file_logging(log_file)


def disable_file_logging():
    """Disable file logging globally."""
    _logger_manager.disable_file_logging()


def get_log_file() -> Optional[Path]:
    """Active log file path, if file logging is enabled."""
    return _logger_manager.log_file
