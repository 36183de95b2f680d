"""
Package logging: a stdout handler on every named logger, plus an optional log file shared by all of them
"""
import logging
import sys
from pathlib import Path
from typing import Optional

__all__ = ["get_logger", "set_log_level", "configure_logging", "LOG_FORMAT"]

LOG_FORMAT = '%(asctime)s [%(name)s] [%(levelname)s]: %(message)s'

_loggers: dict[str, logging.Logger] = {}
_level = logging.DEBUG
_file_handler: Optional[logging.FileHandler] = None


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a package logger (typically for __name__ of the calling module). Loggers created after
    configure_logging pick up its level and log file.
    """
    logger = logging.getLogger(name)
    if name in _loggers:
        return logger
    _loggers[name] = logger

    # Prevent adding duplicate handlers
    if not logger.handlers:
        console_handler = logging.StreamHandler(stream=sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)

    logger.setLevel(_level)
    if _file_handler is not None:
        logger.addHandler(_file_handler)
    return logger


def set_log_level(log_level: str) -> None:
    global _level
    _level = getattr(logging, log_level.upper())
    for logger in _loggers.values():
        logger.setLevel(_level)


def configure_logging(log_level: str, log_file: Optional[Path] = None) -> None:
    """
    Set the level on every package logger and copy their records to log_file. A later call replaces the previous
    log file; None detaches it.
    """
    global _file_handler
    set_log_level(log_level)

    if _file_handler is not None:
        for logger in _loggers.values():
            logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _file_handler = logging.FileHandler(log_file)
        _file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        for logger in _loggers.values():
            logger.addHandler(_file_handler)
