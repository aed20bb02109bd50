#!/usr/bin/env python3
"""Structured logging for minifyimg.

This module wraps the standard logging package with:
- Log levels as an IntEnum
- Key-value context appended to each message
- Nested context blocks (per asyncio task)
- Console and rotating file handlers

Example:
    >>> logger = Logger(level=LogLevel.DEBUG)
    >>> logger.info("Batch started", patterns=3)
    >>> with logger.add_context(source="src/a.png"):
    ...     logger.debug("Read file", size=1024)
"""

import logging
import logging.handlers
from contextlib import contextmanager
from contextvars import ContextVar
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Copied into each asyncio task and asyncio.to_thread() call on creation
_context_stack: ContextVar[Tuple[Dict[str, Any], ...]] = ContextVar(
    "minifyimg_log_context", default=()
)


class LogLevel(IntEnum):
    """Log levels matching Python's logging module."""

    DEBUG = logging.DEBUG  # 10
    INFO = logging.INFO  # 20
    WARNING = logging.WARNING  # 30
    ERROR = logging.ERROR  # 40
    CRITICAL = logging.CRITICAL  # 50


def _to_level(level: Union[LogLevel, str, int]) -> LogLevel:
    if isinstance(level, str):
        return LogLevel[level.upper()]
    return LogLevel(level)


class Logger:
    """Logger that renders keyword context as ``key=value`` pairs.

    Context pushed with :meth:`add_context` lives in a context variable, so
    concurrent file tasks of a batch do not see each other's context.
    """

    def __init__(
        self,
        name: str = "minifyimg",
        level: Union[LogLevel, str] = LogLevel.INFO,
        handlers: Optional[List[logging.Handler]] = None,
    ):
        """Initialize logger.

        Args:
            name: Logger name
            level: Minimum level to emit
            handlers: Handlers to attach (defaults to one console handler)
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.set_level(level)

        if handlers is None:
            handlers = [self._create_console_handler()]

        self.logger.handlers.clear()
        for handler in handlers:
            self.logger.addHandler(handler)

        self.logger.propagate = False

    def _create_console_handler(self) -> logging.StreamHandler:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT))
        return handler

    def create_file_handler(
        self,
        filename: Union[str, Path],
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
    ) -> logging.handlers.RotatingFileHandler:
        """Create a rotating file handler using the console format.

        Args:
            filename: Path to log file
            max_bytes: Maximum size before rotation
            backup_count: Number of rotated files to keep

        Returns:
            Configured handler (not yet attached)
        """
        handler = logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backup_count
        )
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT))
        return handler

    def add_handler(self, handler: logging.Handler) -> None:
        """Attach an output handler."""
        self.logger.addHandler(handler)

    def remove_handler(self, handler: logging.Handler) -> None:
        """Detach an output handler."""
        self.logger.removeHandler(handler)

    def set_level(self, level: Union[LogLevel, str]) -> None:
        """Set the minimum log level.

        Args:
            level: LogLevel or level name ("debug", "INFO", ...)
        """
        self.logger.setLevel(_to_level(level))

    def get_level(self) -> LogLevel:
        """Return the current minimum log level."""
        return LogLevel(self.logger.level)

    def _get_context(self) -> Dict[str, Any]:
        context: Dict[str, Any] = {}
        for frame in _context_stack.get():
            context.update(frame)
        return context

    def _format_message(self, msg: str, context: Dict[str, Any]) -> str:
        if context:
            ctx_str = " ".join(f"{k}={v}" for k, v in context.items())
            return f"{msg} | {ctx_str}"
        return msg

    @contextmanager
    def add_context(self, **kwargs):
        """Attach context to every message logged inside the block.

        Example:
            >>> with logger.add_context(source="a.png"):
            ...     logger.info("Writing")
        """
        token = _context_stack.set(_context_stack.get() + (kwargs,))
        try:
            yield
        finally:
            _context_stack.reset(token)

    def _log(self, level: LogLevel, msg: str, context: Dict[str, Any], **kwargs) -> None:
        if not self.logger.isEnabledFor(level):
            return
        combined = self._get_context()
        combined.update(context)
        self.logger.log(
            level, self._format_message(msg, combined), extra={"context": combined}, **kwargs
        )

    def debug(self, msg: str, **context) -> None:
        """Log a debug message."""
        self._log(LogLevel.DEBUG, msg, context)

    def info(self, msg: str, **context) -> None:
        """Log an info message."""
        self._log(LogLevel.INFO, msg, context)

    def warning(self, msg: str, **context) -> None:
        """Log a warning message."""
        self._log(LogLevel.WARNING, msg, context)

    def error(self, msg: str, **context) -> None:
        """Log an error message."""
        self._log(LogLevel.ERROR, msg, context)

    def exception(self, msg: str, exc: BaseException, **context) -> None:
        """Log an error message with the traceback of exc.

        Args:
            msg: Log message
            exc: Exception whose traceback is logged
            **context: Additional context key-value pairs
        """
        context["exception_type"] = type(exc).__name__
        context["exception_message"] = str(exc)
        self._log(LogLevel.ERROR, msg, context, exc_info=exc)

    def is_enabled_for(self, level: Union[LogLevel, str]) -> bool:
        """Check if a message at level would be emitted."""
        return self.logger.isEnabledFor(_to_level(level))


# Global logger instance
_global_logger: Optional[Logger] = None


def get_logger(name: str = "minifyimg") -> Logger:
    """Get or create the shared logger.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    global _global_logger
    if _global_logger is None or _global_logger.name != name:
        _global_logger = Logger(name=name)
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Replace the shared logger returned by get_logger()."""
    global _global_logger
    _global_logger = logger
