"""Structured JSON logging configuration for the n8n workflow manager.

All log output goes to stderr: the MCP stdio transport owns stdout.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger


class MCPJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding standard fields to every record."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)

        # Stable top-level keys for whatever tails the MCP client's stderr;
        # source pins the call site since one operation spans several modules
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        log_record["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging on stderr.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(MCPJsonFormatter(
        fmt="%(timestamp)s %(level)s %(name)s %(message)s"
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers = [handler]

    # Quiet down noisy libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("mcp").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


class OperationLogger:
    """Helper for logging operation invocations with consistent structure.

    Every operation is logged with its name, duration and outcome.
    Command output is never logged: exported workflows can reference
    credentials.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._start_time: Optional[datetime] = None
        self._operation: Optional[str] = None
        self._context: Dict[str, Any] = {}

    def start(self, operation: str, **context) -> "OperationLogger":
        """Start timing an operation.

        Args:
            operation: Name of the operation being invoked
            **context: Additional context (workflow_id, container, etc.)

        Returns:
            Self for chaining
        """
        self._start_time = datetime.now(timezone.utc)
        self._operation = operation
        self._context = context

        self.logger.info(
            "Operation started",
            extra={
                "operation": operation,
                "event": "operation_start",
                **self._safe(context),
            }
        )
        return self

    def success(self, **result_info) -> None:
        """Log successful completion."""
        self.logger.info(
            "Operation succeeded",
            extra={
                "operation": self._operation,
                "event": "operation_success",
                "duration_ms": self._calculate_duration(),
                **self._safe(self._context),
                **self._safe(result_info),
            }
        )

    def failure(self, error: str, **result_info) -> None:
        """Log failed completion.

        Args:
            error: Error message
            **result_info: Additional non-output information (step, etc.)
        """
        self.logger.error(
            "Operation failed",
            extra={
                "operation": self._operation,
                "event": "operation_failure",
                "duration_ms": self._calculate_duration(),
                "error": error,
                **self._safe(self._context),
                **self._safe(result_info),
            }
        )

    def _calculate_duration(self) -> int:
        """Calculate duration in milliseconds."""
        if self._start_time is None:
            return 0
        delta = datetime.now(timezone.utc) - self._start_time
        return int(delta.total_seconds() * 1000)

    @classmethod
    def _safe(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in values.items() if not cls._is_output(k)}

    @staticmethod
    def _is_output(key: str) -> bool:
        """Check if a key carries raw command output or payloads."""
        output_patterns = [
            "stdout", "stderr", "output", "payload", "update_data",
        ]
        key_lower = key.lower()
        return any(pattern in key_lower for pattern in output_patterns)
