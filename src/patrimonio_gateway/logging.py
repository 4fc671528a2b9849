"""
Structured Logging for the patrimonio gateway.

This module provides:
- Structured JSON or text logging with consistent fields
- Ledger invocation and HTTP access log records
- Timing helpers for measuring remote calls
"""

from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

# =============================================================================
# Log Record Types
# =============================================================================


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class LogContext:
    """Context information attached to every log record."""

    service: str | None = None
    channel: str | None = None
    chaincode: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d = {k: v for k, v in asdict(self).items() if v is not None and k != "extra"}
        d.update(self.extra)
        return d

    def with_update(self, **kwargs) -> LogContext:
        """Create a new context with updated values."""
        return LogContext(
            service=kwargs.get("service", self.service),
            channel=kwargs.get("channel", self.channel),
            chaincode=kwargs.get("chaincode", self.chaincode),
            extra={**self.extra, **kwargs.get("extra", {})},
        )


@dataclass
class InvocationLog:
    """Log record for one contract transaction."""

    transaction: str
    kind: str  # "evaluate" or "submit"
    args: list[str] = field(default_factory=list)

    # Status
    success: bool = True
    error: str | None = None

    # Timing
    timestamp: str = field(default_factory=_now)
    duration_ms: float | None = None

    # Response details
    payload_bytes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class AccessLog:
    """Log record for one HTTP request."""

    request_id: str
    method: str
    path: str
    status_code: int

    timestamp: str = field(default_factory=_now)
    duration_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


# =============================================================================
# Structured Logger
# =============================================================================


class StructuredLogger:
    """
    Logger with structured output and a shared context.

    Example:
        ```python
        logger = StructuredLogger("patrimonio_gateway")
        logger.set_context(channel="mychannel", chaincode="patrimonio")
        logger.log_invocation(InvocationLog(transaction="GetAllAssets", kind="evaluate"))
        ```
    """

    def __init__(
        self,
        name: str = "patrimonio_gateway",
        level: str = "INFO",
        json_output: bool = False,
    ):
        self.name = name
        self.json_output = json_output

        self._logger = logging.getLogger(name)
        self._logger.setLevel(getattr(logging, level.upper()))
        self._context: LogContext = LogContext(service=name)

        formatter = JSONFormatter() if json_output else TextFormatter()
        owned = [h for h in self._logger.handlers if getattr(h, "_structured", False)]
        if owned:
            # Reconfiguring: keep the stream, swap the format.
            for handler in owned:
                handler.setFormatter(formatter)
        elif not self._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(formatter)
            handler._structured = True  # type: ignore[attr-defined]
            self._logger.addHandler(handler)

    @property
    def context(self) -> LogContext:
        return self._context

    def set_context(self, **kwargs) -> None:
        """Update the shared log context."""
        self._context = self._context.with_update(**kwargs)

    def _log(
        self,
        level: int,
        message: str,
        event_type: str | None = None,
        data: dict[str, Any] | None = None,
        exc_info: BaseException | None = None,
    ) -> None:
        record_data = {
            "message": message,
            **self._context.to_dict(),
        }

        if event_type:
            record_data["event_type"] = event_type

        if data:
            record_data.update(data)

        if self.json_output:
            self._logger.log(level, json.dumps(record_data, default=str), exc_info=exc_info)
        else:
            extras = " ".join(f"{k}={v}" for k, v in record_data.items() if k not in ("message", "service"))
            self._logger.log(level, f"{message} {extras}".rstrip(), exc_info=exc_info)

    def debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, data=kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, data=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, data=kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log(logging.ERROR, message, data=kwargs)

    # Typed logging methods

    def log_invocation(self, invocation: InvocationLog) -> None:
        """Log a contract transaction."""
        level = logging.INFO if invocation.success else logging.WARNING
        message = f"{invocation.kind} {invocation.transaction}"
        if invocation.duration_ms is not None:
            message += f" ({invocation.duration_ms:.0f}ms)"
        self._log(level, message, event_type="invocation", data=invocation.to_dict())

    def log_access(self, access: AccessLog) -> None:
        """Log a served HTTP request."""
        level = logging.INFO if access.status_code < 500 else logging.WARNING
        self._log(
            level,
            f"{access.method} {access.path} -> {access.status_code}",
            event_type="access",
            data=access.to_dict(),
        )

    def log_error(
        self,
        error: BaseException,
        message: str | None = None,
        *,
        with_traceback: bool = True,
        **kwargs,
    ) -> None:
        """Log an error with context; the traceback stays server-side."""
        error_data = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            **kwargs,
        }

        # Extract additional info from GatewayError
        if hasattr(error, "code"):
            error_data["error_code"] = str(error.code.value)
        if hasattr(error, "context") and error.context:
            error_data["error_context"] = {k: v for k, v in error.context.to_dict().items() if v is not None}
        if getattr(error, "cause", None) is not None:
            error_data["cause"] = repr(error.cause)

        self._log(
            logging.ERROR,
            message or f"Error: {error}",
            event_type="error",
            data=error_data,
            exc_info=error if with_traceback else None,
        )


# =============================================================================
# Formatters
# =============================================================================


class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": _now(),
            "level": record.levelname,
            "logger": record.name,
        }

        # Parse JSON message if present
        try:
            message_data = json.loads(record.getMessage())
            log_data.update(message_data)
        except (json.JSONDecodeError, TypeError):
            log_data["message"] = record.getMessage()

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%H:%M:%S.%f")[:-3]
        color = self.LEVEL_COLORS.get(record.levelname, "")
        reset = self.RESET if color else ""

        line = f"{timestamp} {color}{record.levelname:8}{reset} {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


# =============================================================================
# Utilities
# =============================================================================


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return f"req_{uuid.uuid4().hex[:12]}"


def truncate_for_log(text: str, max_length: int = 200) -> str:
    """Truncate text for logging."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + f"... ({len(text)} chars total)"


# =============================================================================
# Timing Utilities
# =============================================================================


@dataclass
class Timer:
    """Simple timer for measuring durations."""

    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None

    def stop(self) -> float:
        """Stop the timer and return duration in milliseconds."""
        self.end_time = time.perf_counter()
        return self.elapsed_ms

    @property
    def elapsed_ms(self) -> float:
        """Elapsed time in milliseconds."""
        end = self.end_time or time.perf_counter()
        return (end - self.start_time) * 1000


@contextmanager
def timed() -> Iterator[Timer]:
    """Context manager for timing operations."""
    timer = Timer()
    try:
        yield timer
    finally:
        timer.stop()


# =============================================================================
# Global Logger
# =============================================================================

_default_logger: StructuredLogger | None = None


def get_logger(name: str = "patrimonio_gateway") -> StructuredLogger:
    """Get or create a structured logger."""
    global _default_logger
    if _default_logger is None or _default_logger.name != name:
        _default_logger = StructuredLogger(name)
    return _default_logger


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    **kwargs: Any,
) -> StructuredLogger:
    """Configure the default logger."""
    global _default_logger
    _default_logger = StructuredLogger(
        level=level,
        json_output=json_output,
        **kwargs,
    )
    return _default_logger


__all__ = [
    # Context
    "LogContext",
    # Log records
    "InvocationLog",
    "AccessLog",
    # Logger
    "StructuredLogger",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    # Timing
    "Timer",
    "timed",
    # Utilities
    "generate_request_id",
    "truncate_for_log",
    # Global
    "get_logger",
    "configure_logging",
]
