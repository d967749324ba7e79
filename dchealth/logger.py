#!/usr/bin/env python3
"""
DC Health Report - Logging System
One plain-text log per run, reset at startup, one line per event:

    2026-10-19 07:30:00: I-Main: Starting health check

The letter before the dash is the first character of the level name and
the word after it is the logging category (last part of the logger name).
"""

import logging
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = 'dc-health'

LOG_FORMAT = '%(asctime)s: %(levelcode)s-%(category)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class CategoryFilter(logging.Filter):
    """Adds the severity code and category fields used by LOG_FORMAT."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.levelcode = record.levelname[:1]
        record.category = record.name.rsplit('.', 1)[-1]
        return True


class HealthLogger:
    """Centralized logging for a single report run."""

    _loggers: dict = {}
    _log_file: Optional[Path] = None

    @classmethod
    def root(cls) -> logging.Logger:
        return logging.getLogger(ROOT_LOGGER_NAME)

    @classmethod
    def configure(cls, log_file: Path, level: int = logging.INFO) -> logging.Logger:
        """Attach the run log (truncated or created) and a console echo."""
        cls.shutdown()

        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        root = cls.root()
        root.setLevel(level)
        root.propagate = False

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        category_filter = CategoryFilter()

        # mode='w' resets an existing log and creates a missing one
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.addFilter(category_filter)
        file_handler.setFormatter(formatter)

        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.addFilter(category_filter)
        console_handler.setFormatter(formatter)

        root.addHandler(file_handler)
        root.addHandler(console_handler)

        cls._log_file = log_file
        return root

    @classmethod
    def shutdown(cls):
        """Flush and detach every handler installed by configure()."""
        root = cls.root()
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        cls._log_file = None

    @classmethod
    def get_logger(cls, category: str) -> logging.Logger:
        """Get or create a logger for a category (Main, Check, Mail, ...)."""
        if category in cls._loggers:
            return cls._loggers[category]

        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{category}")
        cls._loggers[category] = logger
        return logger

    @classmethod
    def log_file(cls) -> Optional[Path]:
        return cls._log_file


def configure_logging(log_file: Path, level: int = logging.INFO) -> logging.Logger:
    """Reset the run log and route every category into it."""
    return HealthLogger.configure(log_file, level)


def get_logger(category: str) -> logging.Logger:
    """Get a logger by category."""
    return HealthLogger.get_logger(category)

