"""Log formatters for shieldpool.

JSON output for machine consumption and a single-line text format for
terminals.
"""

import json
import time
import traceback
from typing import Optional

from .core import LogContext, LogEntry, LogFormatter


class JSONFormatter(LogFormatter):
    """JSON log formatter."""

    def __init__(
        self,
        include_context: bool = True,
        include_extra: bool = True,
        include_thread: bool = False,
        timestamp_format: str = "iso",
        indent: Optional[int] = None,
    ):
        self.include_context = include_context
        self.include_extra = include_extra
        self.include_thread = include_thread
        self.timestamp_format = timestamp_format
        self.indent = indent

    def format(self, entry: LogEntry) -> str:
        """Format log entry as JSON."""
        data = {
            "timestamp": self._format_timestamp(entry.timestamp),
            "level": entry.level.value,
            "logger": entry.logger_name,
        }

        if self.include_context:
            data["context"] = entry.context.to_dict()

        if entry.exception is not None:
            data["exception"] = {
                "type": type(entry.exception).__name__,
                "message": str(entry.exception),
                "traceback": "".join(
                    traceback.format_exception(
                        type(entry.exception),
                        entry.exception,
                        entry.exception.__traceback__,
                    )
                ),
            }

        if self.include_extra and entry.extra:
            data["extra"] = entry.extra

        if self.include_thread:
            data["thread_id"] = entry.thread_id
            data["process_id"] = entry.process_id

        data["message"] = entry.message

        return json.dumps(data, indent=self.indent, default=str)

    def _format_timestamp(self, timestamp: float) -> str:
        if self.timestamp_format == "iso":
            return (
                time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(timestamp))
                + f".{int((timestamp % 1) * 1000000):06d}Z"
            )
        elif self.timestamp_format == "unix":
            return str(timestamp)
        return time.strftime(self.timestamp_format, time.gmtime(timestamp))


class TextFormatter(LogFormatter):
    """Single-line text formatter: ``time [LEVEL] logger: message | context``."""

    def __init__(self, timestamp_format: str = "%Y-%m-%d %H:%M:%S"):
        self.timestamp_format = timestamp_format

    def format(self, entry: LogEntry) -> str:
        line = "{} [{}] {}: {}".format(
            time.strftime(self.timestamp_format, time.gmtime(entry.timestamp)),
            entry.level.value.upper(),
            entry.logger_name,
            entry.message,
        )
        context = self._format_context(entry.context)
        if context:
            line += " | " + context
        if entry.extra:
            line += " " + " ".join(f"{k}={v}" for k, v in sorted(entry.extra.items()))
        if entry.exception is not None:
            line += f" ({type(entry.exception).__name__}: {entry.exception})"
        return line

    def _format_context(self, context: LogContext) -> str:
        parts = []
        if context.component:
            parts.append(f"component={context.component}")
        if context.operation:
            parts.append(f"operation={context.operation}")
        if context.request_id:
            parts.append(f"request={context.request_id}")
        return " ".join(parts)
