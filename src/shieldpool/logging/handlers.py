"""Log handlers for shieldpool."""

import sys
from collections import deque
from typing import Any, Dict, List

from .core import LogEntry, LogHandler


class ConsoleHandler(LogHandler):
    """Writes formatted entries to a text stream."""

    def __init__(self, stream: Any = None):
        super().__init__()
        self.stream = stream or sys.stdout

    def emit(self, entry: LogEntry) -> None:
        with self._lock:
            if self.stream is None:
                return
            if self.formatter:
                formatted = self.formatter.format(entry)
            else:
                formatted = f"{entry.timestamp} [{entry.level.value.upper()}] {entry.logger_name}: {entry.message}"
            self.stream.write(formatted + "\n")
            self.stream.flush()

    def close(self) -> None:
        # Process streams stay open; only detach from them.
        with self._lock:
            if self.stream is not None and self.stream not in (sys.stdout, sys.stderr):
                self.stream.close()
            self.stream = None


class MemoryHandler(LogHandler):
    """Keeps the most recent entries in a bounded buffer."""

    def __init__(self, max_size: int = 1000):
        super().__init__()
        self.max_size = max_size
        self.buffer: deque = deque(maxlen=max_size)

    def emit(self, entry: LogEntry) -> None:
        with self._lock:
            self.buffer.append(
                {
                    "timestamp": entry.timestamp,
                    "level": entry.level.value,
                    "message": entry.message,
                    "logger_name": entry.logger_name,
                    "context": entry.context.to_dict(),
                    "extra": dict(entry.extra),
                    "formatted": self.formatter.format(entry) if self.formatter else entry.message,
                }
            )

    def get_logs(self) -> List[Dict[str, Any]]:
        """Get all buffered entries, oldest first."""
        with self._lock:
            return list(self.buffer)

    def clear_logs(self) -> None:
        with self._lock:
            self.buffer.clear()

    def close(self) -> None:
        self.clear_logs()
