"""Core logging interfaces and data structures for shieldpool.

Structured log entries flow from ``PoolLogger`` through the ``LogManager`` to
every handler named in the active ``LogConfig``.
"""

import json
import os
import sys
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    """Log levels, lowest first."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]


_LEVEL_RANK = {level: i for i, level in enumerate(LogLevel)}


@dataclass
class LogContext:
    """Log context information."""

    component: Optional[str] = None
    operation: Optional[str] = None
    request_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.component,
            "operation": self.operation,
            "request_id": self.request_id,
            "metadata": self.metadata,
        }

    def merged_with(self, other: Optional["LogContext"]) -> "LogContext":
        """Return a context where fields of ``other`` override this one."""
        if other is None:
            return self
        return LogContext(
            component=other.component or self.component,
            operation=other.operation or self.operation,
            request_id=other.request_id or self.request_id,
            metadata={**self.metadata, **other.metadata},
        )


@dataclass
class LogEntry:
    """Log entry data structure."""

    timestamp: float
    level: LogLevel
    message: str
    logger_name: str
    context: LogContext
    exception: Optional[BaseException] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    thread_id: int = field(default_factory=threading.get_ident)
    process_id: int = field(default_factory=os.getpid)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "message": self.message,
            "logger_name": self.logger_name,
            "context": self.context.to_dict(),
            "exception": str(self.exception) if self.exception else None,
            "extra": self.extra,
            "thread_id": self.thread_id,
            "process_id": self.process_id,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class LogConfig:
    """Log configuration."""

    def __init__(
        self,
        name: str = "shieldpool",
        level: LogLevel = LogLevel.INFO,
        format_type: str = "json",
        handlers: Optional[List[str]] = None,
    ):
        self.name = name
        self.level = level
        self.format_type = format_type
        self.handlers = handlers or ["console"]


class LogFormatter(ABC):
    """Abstract log formatter."""

    @abstractmethod
    def format(self, entry: LogEntry) -> str:
        """Format log entry."""


class LogHandler(ABC):
    """Abstract log handler."""

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__
        self.formatter: Optional[LogFormatter] = None
        self.level: LogLevel = LogLevel.DEBUG
        self._lock = threading.RLock()

    def set_formatter(self, formatter: LogFormatter) -> None:
        with self._lock:
            self.formatter = formatter

    def set_level(self, level: LogLevel) -> None:
        with self._lock:
            self.level = level

    def should_handle(self, entry: LogEntry) -> bool:
        return entry.level.rank >= self.level.rank

    @abstractmethod
    def emit(self, entry: LogEntry) -> None:
        """Emit log entry."""

    def handle(self, entry: LogEntry) -> None:
        if self.should_handle(entry):
            self.emit(entry)

    def close(self) -> None:
        """Release handler resources."""


class LogManager:
    """Routes log entries from loggers to the configured handlers."""

    def __init__(self, config: Optional[LogConfig] = None):
        self.config = config or LogConfig()
        self.loggers: Dict[str, "PoolLogger"] = {}
        self.handlers: Dict[str, LogHandler] = {}
        self.formatters: Dict[str, LogFormatter] = {}
        self._lock = threading.RLock()
        self._context = LogContext()

        self._setup_defaults()

    def _setup_defaults(self) -> None:
        from .formatters import JSONFormatter, TextFormatter
        from .handlers import ConsoleHandler, MemoryHandler

        self.add_formatter("json", JSONFormatter())
        self.add_formatter("text", TextFormatter())

        formatter = self.formatters.get(self.config.format_type, self.formatters["json"])
        console = ConsoleHandler(stream=sys.stderr)
        console.set_formatter(formatter)
        self.add_handler("console", console)
        memory = MemoryHandler()
        memory.set_formatter(formatter)
        self.add_handler("memory", memory)

    def get_logger(self, name: str) -> "PoolLogger":
        with self._lock:
            if name not in self.loggers:
                self.loggers[name] = PoolLogger(name, self, self.config.level)
            return self.loggers[name]

    def add_handler(self, name: str, handler: LogHandler) -> None:
        with self._lock:
            self.handlers[name] = handler

    def remove_handler(self, name: str) -> None:
        with self._lock:
            handler = self.handlers.pop(name, None)
        if handler is not None:
            handler.close()

    def get_handler(self, name: str) -> Optional[LogHandler]:
        with self._lock:
            return self.handlers.get(name)

    def add_formatter(self, name: str, formatter: LogFormatter) -> None:
        with self._lock:
            self.formatters[name] = formatter

    def set_context(self, context: LogContext) -> None:
        with self._lock:
            self._context = context

    def get_context(self) -> LogContext:
        with self._lock:
            return self._context

    def log(
        self,
        level: LogLevel,
        message: str,
        logger_name: str = "root",
        context: Optional[LogContext] = None,
        exception: Optional[BaseException] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        with self._lock:
            entry = LogEntry(
                timestamp=time.time(),
                level=level,
                message=message,
                logger_name=logger_name,
                context=self._context.merged_with(context),
                exception=exception,
                extra=extra or {},
            )
            for handler_name in self.config.handlers:
                handler = self.handlers.get(handler_name)
                if handler is not None:
                    handler.handle(entry)

    def shutdown(self) -> None:
        with self._lock:
            for handler in self.handlers.values():
                handler.close()
            self.loggers.clear()
            self.handlers.clear()
            self.formatters.clear()


class PoolLogger:
    """Named logger bound to a ``LogManager``."""

    def __init__(self, name: str, manager: LogManager, level: LogLevel = LogLevel.INFO):
        self.name = name
        self.manager = manager
        self.level = level

    def set_level(self, level: LogLevel) -> None:
        self.level = level

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level.rank >= self.level.rank

    def log(
        self,
        level: LogLevel,
        message: str,
        context: Optional[LogContext] = None,
        exception: Optional[BaseException] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        if self.is_enabled_for(level):
            self.manager.log(
                level=level,
                message=message,
                logger_name=self.name,
                context=context,
                exception=exception,
                extra=extra,
            )

    def debug(self, message: str, **kwargs) -> None:
        self.log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self.log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self.log(LogLevel.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs) -> None:
        self.log(LogLevel.CRITICAL, message, **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Log at error level, attaching the exception being handled."""
        exc = sys.exc_info()[1]
        if exc is not None:
            kwargs.setdefault("exception", exc)
        self.log(LogLevel.ERROR, message, **kwargs)


# Global log manager instance
_global_manager: Optional[LogManager] = None
_global_lock = threading.Lock()


def get_logger(name: str = "shieldpool") -> PoolLogger:
    """Get logger instance from the global manager."""
    global _global_manager
    with _global_lock:
        if _global_manager is None:
            _global_manager = LogManager()
        manager = _global_manager
    return manager.get_logger(name)


def get_manager() -> LogManager:
    """Get the global manager, creating it with defaults if needed."""
    global _global_manager
    with _global_lock:
        if _global_manager is None:
            _global_manager = LogManager()
        return _global_manager


def setup_logging(config: LogConfig) -> LogManager:
    """Replace the global manager with one built from ``config``."""
    global _global_manager
    with _global_lock:
        if _global_manager is not None:
            _global_manager.shutdown()
        _global_manager = LogManager(config)
        return _global_manager


def shutdown_logging() -> None:
    """Shutdown logging."""
    global _global_manager
    with _global_lock:
        if _global_manager is not None:
            _global_manager.shutdown()
            _global_manager = None
