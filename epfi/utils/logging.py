"""
EPFI Structured Logging
Centralized logging configuration using loguru.
"""
import sys
from typing import Any, Dict, Optional

from loguru import logger

from epfi.config import config

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}"


def _stderr_sink(message):
    # Resolve stderr per write so redirected streams are honored
    sys.stderr.write(message)


class StructuredLogger:
    """Structured logger for EPFI palette services."""

    def __init__(self, level: Optional[str] = None):
        self.level = (level or config.LOG_LEVEL).upper()
        logger.remove()
        logger.add(_stderr_sink, format=LOG_FORMAT, level=self.level, serialize=False)

    def _log(self, level: str, message: str, extra: Optional[Dict[str, Any]]):
        target = logger.bind(**extra) if extra else logger
        # depth=2 reports the caller of info()/warning(), not this helper
        target.opt(depth=2).log(level, message)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log("ERROR", message, extra)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log("DEBUG", message, extra)


_logger: Optional[StructuredLogger] = None


def get_logger(level: Optional[str] = None) -> StructuredLogger:
    """Get or create the global logger; an explicit level reconfigures the sink."""
    global _logger
    if _logger is None or level is not None:
        _logger = StructuredLogger(level)
    return _logger
